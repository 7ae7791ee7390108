"""Document store protocols.

The booking flows are written against these protocols only. The local
emulator in ``campusbook.docstore.local`` implements them over a storage
medium; a network-backed client can satisfy the same contract without
changes at the call sites, which is why every I/O method is a coroutine
even where the emulator completes synchronously.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Protocol


class DocumentSnapshot(Protocol):
    """Point-in-time read result of a single document."""

    id: str

    def exists(self) -> bool:
        """Return True if the document was present when read."""
        ...

    def data(self) -> dict[str, Any] | None:
        """Return a copy of the document fields, or None if absent."""
        ...


class QuerySnapshot(Protocol):
    """Result of a collection read or query."""

    docs: list[DocumentSnapshot]

    @property
    def empty(self) -> bool: ...

    def __iter__(self) -> Iterator[DocumentSnapshot]: ...

    def __len__(self) -> int: ...


class DocumentReference(Protocol):
    """Handle to one document path. Holds no data itself."""

    id: str
    path: str

    async def get(self) -> DocumentSnapshot:
        """Read the document. Absent documents yield a non-existent snapshot."""
        ...

    async def set(self, data: Mapping[str, Any]) -> None:
        """Replace the document wholesale; the ``id`` field is injected."""
        ...

    async def update(self, data: Mapping[str, Any]) -> None:
        """Shallow-merge into an existing document. Raises NotFoundError if absent."""
        ...

    async def delete(self) -> None:
        """Remove the document. No-op if absent."""
        ...


class Query(Protocol):
    """Chainable, immutable query over one collection."""

    def where(
        self,
        field_path: str | None = None,
        op_string: str | None = None,
        value: Any = None,
        *,
        filter: Any = None,
    ) -> "Query": ...

    def order_by(self, field_path: str, direction: str = "ASCENDING") -> "Query": ...

    def limit(self, count: int) -> "Query": ...

    async def get(self) -> QuerySnapshot: ...


class CollectionReference(Query, Protocol):
    """Handle to a named collection."""

    id: str
    path: str

    def doc(self, document_id: str | None = None) -> DocumentReference:
        """Return a handle for ``document_id``, generating a new id if omitted."""
        ...

    async def add(self, data: Mapping[str, Any]) -> DocumentReference:
        """Create a document under a generated id and return its handle."""
        ...


class DocumentStore(Protocol):
    """Entry point: the collection/document accessor surface."""

    def collection(self, path: str) -> CollectionReference: ...

    def doc(self, path: str) -> DocumentReference: ...
