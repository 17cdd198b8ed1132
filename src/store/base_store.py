# src/store/base_store.py - v1
"""Abstract durable key-value store interface.

String keys, string values. Every operation is async and may fail with
StoreError; callers decide whether a failure is fatal.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class StoreError(Exception):
    """Backend read/write failure (disk full, connection lost, corrupt row...)."""


class BaseKeyValueStore(ABC):
    """Unified interface for durable key-value backends."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value atomically."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key. Deleting an absent key is not an error."""

    @abstractmethod
    async def list_keys(self, prefix: str = "") -> list[str]:
        """List every key starting with prefix."""

    async def close(self) -> None:
        """Release backend resources. Default: nothing to release."""
