"""Pytest fixtures for Ragdoll CLI tests."""

import pytest
from typer.testing import CliRunner

from ragdoll_cli.backend import FakeBackendClient
from ragdoll_cli.config import ConfigurationLoader, RagdollConfig
from ragdoll_cli.context import AppContext

_ENV_VARS = (
    "RAGDOLL_CONFIG",
    "RAGDOLL_BACKEND",
    "RAGDOLL_BACKEND_URL",
    "RAGDOLL_BACKEND_TIMEOUT",
    "RAGDOLL_API_KEY",
    "RAGDOLL_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's Ragdoll environment out of every test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_path(tmp_path):
    """Path for a config file inside a temporary directory.

    Returns:
        Path that does not exist yet
    """
    return tmp_path / "ragdoll" / "config.yml"


@pytest.fixture
def loader(config_path):
    return ConfigurationLoader(config_path)


@pytest.fixture
def fake_backend():
    """Fake backend seeded with a small corpus.

    Documents 1-3 carry keywords; document 3 is still processing.
    """
    backend = FakeBackendClient(similarity_threshold=0.7)
    backend.seed_document(
        title="Ruby on Rails guide",
        content="ruby rails web framework routing controllers",
        keywords=["ruby", "rails", "web"],
    )
    backend.seed_document(
        title="Python data tools",
        content="python pandas numpy data analysis",
        keywords=["python", "data"],
    )
    backend.seed_document(
        title="Ruby scripting",
        content="ruby scripting automation tasks",
        keywords=["ruby", "scripting"],
        status="pending",
    )
    return backend


@pytest.fixture
def app_context(loader, fake_backend):
    """AppContext wired to the fake backend, for CliRunner.invoke(obj=...)."""
    return AppContext(config=RagdollConfig(), loader=loader, backend=fake_backend)


@pytest.fixture
def runner():
    return CliRunner()
