"""Backend clients for Ragdoll CLI."""

from ..config import RagdollConfig
from .client import BackendClient, BackendError
from .fake import FakeBackendClient
from .http import HttpBackendClient


def get_backend_client(config: RagdollConfig) -> BackendClient:
    """Build the backend client selected by configuration.

    Raises:
        ValueError: If the configured backend kind is unknown
    """
    kind = config.backend.kind
    if kind == "http":
        return HttpBackendClient(config.backend)
    if kind == "fake":
        return FakeBackendClient(similarity_threshold=config.search_similarity_threshold)
    raise ValueError(f"Unknown backend kind: {kind}")


__all__ = [
    "BackendClient",
    "BackendError",
    "FakeBackendClient",
    "HttpBackendClient",
    "get_backend_client",
]
