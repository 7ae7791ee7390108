"""Storage medium factory: creates the configured backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from campusbook.storage.protocol import StorageMedium

if TYPE_CHECKING:
    from campusbook.common.settings import Settings


def create_storage_medium(settings: "Settings | None" = None) -> StorageMedium:
    """Create the storage medium named by ``settings.storage_backend``.

    Args:
        settings: Application settings; if None, uses get_settings().

    Returns:
        MemoryStorage, FileStorage or RedisStorage bound to ``storage_scope``.

    Raises:
        ValueError: Unknown backend or missing required config.
    """
    from campusbook.common.settings import get_settings

    s = settings or get_settings()
    backend = s.storage_backend.lower()

    if backend == "memory":
        from campusbook.storage.memory_storage import MemoryStorage

        return MemoryStorage(scope=s.storage_scope)
    if backend == "file":
        from campusbook.storage.file_storage import FileStorage

        return FileStorage(s.storage_path, scope=s.storage_scope)
    if backend == "redis":
        if not s.redis_url:
            raise ValueError("CAMPUSBOOK_REDIS_URL required for redis backend")
        from campusbook.storage.redis_storage import RedisStorage

        return RedisStorage.from_url(s.redis_url, scope=s.storage_scope)
    raise ValueError(
        f"Unknown storage backend: {backend}. Supported: 'memory', 'file', 'redis'"
    )
