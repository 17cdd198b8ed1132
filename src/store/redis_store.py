# src/store/redis_store.py - v2
"""Redis-based key-value store (STORE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Keys are namespaced so the store can share a Redis database.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from searchcache.store.base_store import BaseKeyValueStore, StoreError

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class RedisKeyValueStore(BaseKeyValueStore):
    """Redis-backed key-value store using the asyncio client."""

    def __init__(self, redis_url: str, namespace: str = "searchcache:") -> None:
        try:
            import redis.asyncio as aioredis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client: Any = aioredis.from_url(redis_url, decode_responses=True)
        self._namespace = namespace

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(self._namespace + key)
        except Exception as e:
            raise StoreError(f"Redis GET {key!r} failed: {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self._client.set(self._namespace + key, value)
        except Exception as e:
            raise StoreError(f"Redis SET {key!r} failed: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(self._namespace + key)
        except Exception as e:
            raise StoreError(f"Redis DEL {key!r} failed: {e}") from e

    async def list_keys(self, prefix: str = "") -> list[str]:
        pattern = _GLOB_SPECIAL.sub(r"\\\1", self._namespace + prefix) + "*"
        keys: list[str] = []
        try:
            async for raw in self._client.scan_iter(match=pattern):
                keys.append(raw[len(self._namespace):])
        except Exception as e:
            raise StoreError(f"Redis SCAN failed: {e}") from e
        return sorted(keys)

    async def close(self) -> None:
        """Close the Redis connection."""
        await self._client.aclose()
