"""Redis storage medium: one key namespace per scope."""

from __future__ import annotations

from collections.abc import Iterator

import redis
import structlog

logger = structlog.get_logger(__name__)


class RedisStorage:
    """Storage medium over a synchronous Redis client.

    Keys are stored as ``campusbook:<scope>:<key>``. The client must be
    created with ``decode_responses=True`` so values come back as ``str``.
    """

    def __init__(self, client: redis.Redis, scope: str = "default") -> None:
        self.scope = scope
        self.client = client
        self._prefix = f"campusbook:{scope}:"

    @classmethod
    def from_url(cls, redis_url: str, scope: str = "default") -> "RedisStorage":
        client = redis.Redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5,
            retry_on_timeout=True,
        )
        logger.info(
            "Redis storage initialized",
            # Hide credentials
            url=redis_url.split("@")[-1] if "@" in redis_url else redis_url.split("//")[-1],
            scope=scope,
        )
        return cls(client, scope=scope)

    def _key(self, key: str) -> str:
        return self._prefix + key

    def get_item(self, key: str) -> str | None:
        return self.client.get(self._key(key))

    def set_item(self, key: str, value: str) -> None:
        self.client.set(self._key(key), value)

    def remove_item(self, key: str) -> None:
        self.client.delete(self._key(key))

    def keys(self) -> Iterator[str]:
        for full_key in self.client.scan_iter(match=self._prefix + "*"):
            yield full_key[len(self._prefix):]

    def clear(self) -> None:
        stale = list(self.client.scan_iter(match=self._prefix + "*"))
        if stale:
            self.client.delete(*stale)
