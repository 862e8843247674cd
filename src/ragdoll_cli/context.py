"""Shared CLI state: consoles, logging setup and the per-invocation app context."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .backend import BackendClient, get_backend_client
from .config import ConfigurationLoader, RagdollConfig

logger = logging.getLogger(__name__)

console = Console()
error_console = Console(stderr=True)

OUTPUT_FORMATS = ("table", "json", "plain")

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
}


def configure_logging(config: RagdollConfig, verbose: bool = False) -> None:
    """Install handlers on the package logger.

    Console output goes to stderr through rich; a log file is added when
    configured. Safe to call more than once.
    """
    level = logging.DEBUG if verbose else _LOG_LEVELS.get(config.log_level.lower(), logging.WARNING)
    package_logger = logging.getLogger("ragdoll_cli")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(level)
    package_logger.addHandler(RichHandler(console=error_console, show_path=False, show_time=False))

    if config.log_file:
        log_path = Path(config.log_file).expanduser()
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
        except OSError as e:
            package_logger.warning(f"Could not open log file {log_path}: {e}")
        else:
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            )
            package_logger.addHandler(file_handler)


class AppContext:
    """Configuration and backend for one CLI invocation.

    Handed to commands through typer's context object instead of any
    process-wide state. The backend is built on first use so configuration
    commands work without one.
    """

    def __init__(
        self,
        config: RagdollConfig,
        loader: ConfigurationLoader,
        backend: Optional[BackendClient] = None,
    ):
        self.config = config
        self.loader = loader
        self._backend = backend

    @property
    def backend(self) -> BackendClient:
        if self._backend is None:
            self._backend = get_backend_client(self.config)
            logger.debug(f"Using {self._backend.backend_name} backend")
        return self._backend


def get_app_context(ctx: typer.Context) -> AppContext:
    app_context = ctx.find_object(AppContext)
    if app_context is None:
        raise RuntimeError("CLI context was not initialized by the root callback")
    return app_context


def fail(message: str, hint: Optional[str] = None) -> None:
    """Print an error (and optional hint) and exit with code 1."""
    console.print(f"[red]Error: {escape(message)}[/red]")
    if hint:
        console.print(f"[yellow]{escape(hint)}[/yellow]")
    raise typer.Exit(code=1)


def check_format(output_format: str, allowed: tuple[str, ...] = OUTPUT_FORMATS) -> str:
    if output_format not in allowed:
        fail(f"Invalid format '{output_format}'. Must be one of: {', '.join(allowed)}")
    return output_format
