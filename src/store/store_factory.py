# src/store/store_factory.py - v1
"""Factory for key-value store instantiation."""

from __future__ import annotations

from pathlib import Path

from searchcache.config.settings import Settings
from searchcache.store.base_store import BaseKeyValueStore


def create_store(settings: Settings | None = None) -> BaseKeyValueStore:
    """Instantiate the configured store backend.

    Args:
        settings: Application settings. Defaults to the JSON backend
            under the default store root.

    Returns:
        Configured BaseKeyValueStore implementation.
    """
    backend = "json" if settings is None else settings.store_backend
    root = Path("~/.searchcache/store") if settings is None else settings.store_root

    if backend == "memory":
        from searchcache.store.memory_store import MemoryKeyValueStore
        return MemoryKeyValueStore()

    if backend == "json":
        from searchcache.store.json_store import JsonKeyValueStore
        return JsonKeyValueStore(root=root)

    if backend == "sqlite":
        from searchcache.store.sqlite_store import SqliteKeyValueStore
        return SqliteKeyValueStore(db_path=Path(root) / "searchcache.db")

    if backend == "redis":
        from searchcache.store.redis_store import RedisKeyValueStore
        if settings is None or not settings.store_redis_url:
            raise ValueError(
                "STORE_REDIS_URL must be set when STORE_BACKEND=redis"
            )
        return RedisKeyValueStore(
            redis_url=settings.store_redis_url,
            namespace=settings.store_redis_namespace,
        )

    raise ValueError(f"Unsupported store backend: {backend!r}")
