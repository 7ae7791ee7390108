"""Process-local storage medium backed by a dict."""

from __future__ import annotations

from collections.abc import Iterator


class MemoryStorage:
    """Dict-backed storage medium.

    Instances created with the same ``shared`` dict see each other's writes,
    which is how tests simulate a page reload against one storage scope.
    """

    def __init__(self, scope: str = "default", shared: dict[str, str] | None = None) -> None:
        self.scope = scope
        self._items: dict[str, str] = shared if shared is not None else {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Storage values must be str, got {type(value).__name__}")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._items))

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
