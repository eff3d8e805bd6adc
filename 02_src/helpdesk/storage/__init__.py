"""Storage module."""

from .storage import IKeyValueStore, KeyValueStore

__all__ = ["IKeyValueStore", "KeyValueStore"]
