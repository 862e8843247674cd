"""Tests for configuration loading and editing."""

from pathlib import Path

import pytest
import yaml

from ragdoll_cli.config import (
    DEFAULT_CONFIG_PATH,
    ConfigurationLoader,
    RagdollConfig,
    coerce_config_value,
    resolve_config_path,
)


def test_resolve_config_path_precedence(monkeypatch, tmp_path):
    """Test CLI option > RAGDOLL_CONFIG > default."""
    assert resolve_config_path() == DEFAULT_CONFIG_PATH

    monkeypatch.setenv("RAGDOLL_CONFIG", str(tmp_path / "env.yml"))
    assert resolve_config_path() == tmp_path / "env.yml"
    assert resolve_config_path(str(tmp_path / "cli.yml")) == tmp_path / "cli.yml"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("42", 42),
        ("0.5", 0.5),
        ("true", True),
        ("false", False),
        ("openai", "openai"),
        ("-1", "-1"),
        ("1e3", "1e3"),
    ],
)
def test_coerce_config_value(raw, expected):
    assert coerce_config_value(raw) == expected


def test_load_without_file_uses_defaults_and_writes_nothing(loader, config_path):
    config = loader.load()

    assert isinstance(config, RagdollConfig)
    assert config.search_similarity_threshold == 0.7
    assert config.backend.kind == "http"
    assert config.log_file is None
    assert not config_path.exists()


def test_create_default_config(loader, config_path):
    loader.create_default_config()

    data = yaml.safe_load(config_path.read_text())
    assert data["llm_provider"] == "openai"
    assert data["backend"]["url"] == "http://localhost:4567/api/v1"
    assert data["log_file"] == str(config_path.parent / "ragdoll.log")


def test_load_reads_file(loader, config_path):
    config_path.parent.mkdir(parents=True)
    config_path.write_text("max_search_results: 25\nbackend:\n  kind: fake\n")

    config = loader.load()

    assert config.max_search_results == 25
    assert config.backend.kind == "fake"


def test_malformed_file_falls_back_without_overwriting(loader, config_path, caplog):
    """Test that a broken file is reported and left untouched."""
    config_path.parent.mkdir(parents=True)
    config_path.write_text("backend: [unclosed\n")

    config = loader.load()

    assert config.chunk_size == 1000
    assert config_path.read_text() == "backend: [unclosed\n"
    assert "Could not load config file" in caplog.text


def test_wrong_value_type_raises(loader, config_path):
    config_path.parent.mkdir(parents=True)
    config_path.write_text("chunk_size: lots\n")

    with pytest.raises(ValueError, match="Invalid configuration"):
        loader.load()


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("RAGDOLL_BACKEND", "fake")
    monkeypatch.setenv("RAGDOLL_BACKEND_URL", "http://ragdoll.internal:9000")
    monkeypatch.setenv("RAGDOLL_BACKEND_TIMEOUT", "5")
    monkeypatch.setenv("RAGDOLL_API_KEY", "secret")
    monkeypatch.setenv("RAGDOLL_LOG_LEVEL", "debug")

    config = RagdollConfig.from_mapping({"backend": {"kind": "http"}})

    assert config.backend.kind == "fake"
    assert config.backend.url == "http://ragdoll.internal:9000"
    assert config.backend.timeout_seconds == 5.0
    assert config.backend.api_key == "secret"
    assert config.log_level == "debug"


def test_invalid_timeout_rejected():
    with pytest.raises(ValueError):
        RagdollConfig.from_mapping({"backend": {"timeout_seconds": 0}})


def test_set_and_get_dotted_keys(loader, config_path):
    loader.create_default_config()

    assert loader.set_value("database_config.port", "6543") == 6543
    assert loader.set_value("new_section.enabled", "true") is True

    assert loader.get_value("database_config.port") == 6543
    assert loader.get_value("new_section.enabled") is True
    assert loader.get_value("database_config.missing") is None

    data = yaml.safe_load(Path(config_path).read_text())
    assert data["database_config"]["port"] == 6543


def test_read_raw_without_file(loader):
    with pytest.raises(FileNotFoundError):
        loader.read_raw()


def test_set_value_rejects_invalid_config(loader, config_path):
    """Test that a value the config model rejects is never written."""
    loader.create_default_config()
    before = config_path.read_text()

    with pytest.raises(ValueError, match="Invalid configuration"):
        loader.set_value("chunk_size", "big")

    assert config_path.read_text() == before
    assert loader.load().chunk_size == 1000
