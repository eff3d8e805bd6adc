"""Backend REST client module."""

from .client import BackendClient, IBackendClient

__all__ = ["BackendClient", "IBackendClient"]
