"""Configuration management for Ragdoll CLI."""

import logging
import os
import re
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.ragdoll/config.yml").expanduser()

_INT_PATTERN = re.compile(r"^\d+$")
_FLOAT_PATTERN = re.compile(r"^\d+\.\d+$")


def _default_database_config() -> dict[str, Any]:
    return {
        "adapter": "postgresql",
        "database": "ragdoll_development",
        "host": "localhost",
        "port": 5432,
        "username": os.environ.get("USER", "postgres"),
        "auto_migrate": True,
    }


def resolve_config_path(cli_config_path: Optional[str] = None) -> Path:
    """Resolve config file path with the following precedence:

    1. CLI --config option (if provided)
    2. RAGDOLL_CONFIG environment variable
    3. ~/.ragdoll/config.yml
    """
    if cli_config_path:
        return Path(cli_config_path).expanduser()
    env_path = os.environ.get("RAGDOLL_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def coerce_config_value(value: str) -> Any:
    """Coerce a `config set` value: integers, decimals and true/false; else the raw string."""
    if _INT_PATTERN.match(value):
        return int(value)
    if _FLOAT_PATTERN.match(value):
        return float(value)
    if value == "true":
        return True
    if value == "false":
        return False
    return value


class BackendConfig(BaseModel):
    """Where the CLI sends retrieval and document-store calls."""

    kind: Literal["http", "fake"] = Field(default="http")
    url: str = Field(default="http://localhost:4567/api/v1")
    timeout_seconds: float = Field(default=30.0, gt=0)
    api_key: Optional[str] = Field(default=None)


class RagdollConfig(BaseModel):
    """Configuration for the Ragdoll CLI, built once at startup."""

    llm_provider: str = Field(default="openai")
    embedding_model: str = Field(default="text-embedding-3-small")
    chunk_size: int = Field(default=1000)
    chunk_overlap: int = Field(default=200)
    search_similarity_threshold: float = Field(default=0.7)
    max_search_results: int = Field(default=10)
    database_config: dict[str, Any] = Field(default_factory=_default_database_config)
    log_level: str = Field(default="warn")
    log_file: Optional[str] = Field(default=None)
    api_keys: dict[str, Any] = Field(default_factory=dict)
    backend: BackendConfig = Field(default_factory=BackendConfig)

    model_config = {"frozen": False}

    @classmethod
    def from_mapping(cls, data: Optional[dict[str, Any]]) -> "RagdollConfig":
        """Build configuration from file data, then apply environment overrides.

        Raises:
            ValueError: If a value in the file has the wrong type
        """
        data = dict(data or {})
        backend_data = dict(data.get("backend") or {})

        if os.environ.get("RAGDOLL_BACKEND"):
            backend_data["kind"] = os.environ["RAGDOLL_BACKEND"]
        if os.environ.get("RAGDOLL_BACKEND_URL"):
            backend_data["url"] = os.environ["RAGDOLL_BACKEND_URL"]
        if os.environ.get("RAGDOLL_BACKEND_TIMEOUT"):
            backend_data["timeout_seconds"] = os.environ["RAGDOLL_BACKEND_TIMEOUT"]
        if os.environ.get("RAGDOLL_API_KEY"):
            backend_data["api_key"] = os.environ["RAGDOLL_API_KEY"]
        data["backend"] = backend_data

        if os.environ.get("RAGDOLL_LOG_LEVEL"):
            data["log_level"] = os.environ["RAGDOLL_LOG_LEVEL"]

        # YAML may carry explicit nulls for sections.
        if data.get("database_config") is None:
            data.pop("database_config", None)
        if data.get("api_keys") is None:
            data.pop("api_keys", None)

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e}") from e


class ConfigurationLoader:
    """Reads and writes the YAML configuration file."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else resolve_config_path()

    def config_exists(self) -> bool:
        return self.config_path.exists()

    def default_config_data(self) -> dict[str, Any]:
        return {
            "llm_provider": "openai",
            "embedding_model": "text-embedding-3-small",
            "chunk_size": 1000,
            "chunk_overlap": 200,
            "search_similarity_threshold": 0.7,
            "max_search_results": 10,
            "database_config": _default_database_config(),
            "log_level": "warn",
            "log_file": str(self.config_path.parent / "ragdoll.log"),
            "backend": {
                "kind": "http",
                "url": BackendConfig().url,
                "timeout_seconds": BackendConfig().timeout_seconds,
            },
        }

    def create_default_config(self) -> dict[str, Any]:
        """Write the default configuration file, creating its directory."""
        data = self.default_config_data()
        self.write_raw(data)
        logger.info(f"Created default configuration at {self.config_path}")
        return data

    def read_raw(self) -> dict[str, Any]:
        """Parse the config file as a mapping.

        Raises:
            FileNotFoundError: If the config file does not exist
            ValueError: If the file is not valid YAML or not a mapping
        """
        if not self.config_exists():
            raise FileNotFoundError(f"No configuration file found at {self.config_path}")
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Could not parse {self.config_path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration in {self.config_path} must be a mapping")
        return data

    def write_raw(self, data: dict[str, Any]) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(
            yaml.safe_dump(data, default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )

    def load(self) -> RagdollConfig:
        """Load configuration from the file, or defaults when there is none.

        A malformed file is reported and replaced by in-memory defaults; the
        file itself is left untouched. Only `config init` writes a new file.

        Raises:
            ValueError: If the file parses but holds values of the wrong type
        """
        if not self.config_exists():
            logger.debug(f"No config file at {self.config_path}; using defaults")
            data = self.default_config_data()
            data["log_file"] = None
        else:
            try:
                data = self.read_raw()
            except (OSError, ValueError) as e:
                logger.warning(f"Could not load config file {self.config_path}: {e}")
                logger.warning("Using default configuration.")
                data = self.default_config_data()
        return RagdollConfig.from_mapping(data)

    def get_value(self, key: str) -> Any:
        """Look up a dotted key (e.g. 'database_config.host'); None when missing."""
        value: Any = self.read_raw()
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return None
            value = value[part]
        return value

    def set_value(self, key: str, raw_value: str) -> Any:
        """Set a dotted key, creating intermediate sections. Returns the stored value.

        Raises:
            ValueError: If the resulting configuration would not load; the
                file is left unchanged
        """
        data = self.read_raw()
        value = coerce_config_value(raw_value)

        parts = key.split(".")
        current = data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

        RagdollConfig.from_mapping(data)
        self.write_raw(data)
        return value
