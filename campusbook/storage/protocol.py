"""Storage medium protocol. Implementations: MemoryStorage, FileStorage, RedisStorage."""

from collections.abc import Iterator
from typing import Protocol, runtime_checkable


@runtime_checkable
class StorageMedium(Protocol):
    """Synchronous string-keyed map bound to one scope.

    Values are whole serialized blobs; there is no partial update.
    """

    scope: str

    def get_item(self, key: str) -> str | None:
        """Return the stored text or None if the key is absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store text under key, replacing any previous value."""
        ...

    def remove_item(self, key: str) -> None:
        """Remove key. No-op if absent."""
        ...

    def keys(self) -> Iterator[str]:
        """Iterate over the keys present in this scope."""
        ...

    def clear(self) -> None:
        """Remove every key in this scope."""
        ...
