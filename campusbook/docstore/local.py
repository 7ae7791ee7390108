"""Local document store emulator over a storage medium.

Each collection is one JSON object ``{document_id: document}`` stored under
``<key_prefix><collection path>``. Every read parses the whole blob and
every write serializes it back, so there is no state beyond the storage
medium itself: two stores bound to the same scope see the same data.

All I/O methods are coroutines that complete without suspending between
reading and writing a blob. On a single event loop no two operations
interleave mid-mutation; writers in other processes are last-write-wins.
"""

from __future__ import annotations

import copy
import json
import uuid
from collections.abc import Iterator, Mapping
from typing import Any

import structlog

from campusbook.common.exceptions import CorruptDataError, InvalidQueryError, NotFoundError
from campusbook.docstore.query import ASCENDING, FieldFilter, FieldOrder, apply_ordering
from campusbook.storage.protocol import StorageMedium

logger = structlog.get_logger(__name__)


def generate_document_id() -> str:
    """Return a new random document id (uuid4; collisions are last-write-wins)."""
    return str(uuid.uuid4())


def _split_path(path: str) -> list[str]:
    if not isinstance(path, str) or not path.strip("/"):
        raise InvalidQueryError(f"Invalid path: {path!r}")
    segments = path.strip("/").split("/")
    if any(not segment for segment in segments):
        raise InvalidQueryError(f"Path contains an empty segment: {path!r}")
    return segments


class DocumentSnapshot:
    """Read result of one document. ``data()`` returns a fresh copy every call."""

    def __init__(self, reference: "LocalDocumentReference", data: dict[str, Any] | None) -> None:
        self.reference = reference
        self.id = reference.id
        self._data = data

    def exists(self) -> bool:
        return self._data is not None

    def data(self) -> dict[str, Any] | None:
        if self._data is None:
            return None
        return copy.deepcopy(self._data)

    def get(self, field: str, default: Any = None) -> Any:
        """Return a single top-level field, or ``default``."""
        if self._data is None:
            return default
        return copy.deepcopy(self._data.get(field, default))

    def __repr__(self) -> str:
        return f"DocumentSnapshot(path={self.reference.path!r}, exists={self.exists()})"


class QuerySnapshot:
    """Result of a collection read or query."""

    def __init__(self, docs: list[DocumentSnapshot]) -> None:
        self.docs = docs

    @property
    def empty(self) -> bool:
        return not self.docs

    @property
    def size(self) -> int:
        return len(self.docs)

    def __iter__(self) -> Iterator[DocumentSnapshot]:
        return iter(self.docs)

    def __len__(self) -> int:
        return len(self.docs)


class LocalDocumentStore:
    """Document store emulator bound to one storage medium.

    Usage:
        store = LocalDocumentStore(MemoryStorage())
        ref = await store.collection("users").add({"name": "Ada"})
        snapshot = await ref.get()
        teachers = await store.collection("users").where("role", "==", "teacher").get()
    """

    def __init__(self, storage: StorageMedium, key_prefix: str = "mock_") -> None:
        self.storage = storage
        self.key_prefix = key_prefix

    def collection(self, path: str) -> "LocalCollectionReference":
        segments = _split_path(path)
        if len(segments) % 2 == 0:
            raise InvalidQueryError(f"Collection path must have an odd number of segments: {path!r}")
        return LocalCollectionReference(self, "/".join(segments))

    def doc(self, path: str) -> "LocalDocumentReference":
        segments = _split_path(path)
        if len(segments) % 2 != 0:
            raise InvalidQueryError(f"Document path must have an even number of segments: {path!r}")
        return LocalDocumentReference(self, "/".join(segments[:-1]), segments[-1])

    def collection_key(self, collection_path: str) -> str:
        return f"{self.key_prefix}{collection_path}"

    def collection_paths(self) -> list[str]:
        """Return the paths of every collection that has a blob in storage."""
        return sorted(
            key[len(self.key_prefix):]
            for key in self.storage.keys()
            if key.startswith(self.key_prefix)
        )

    # --- blob I/O ---------------------------------------------------------

    def _decode(self, key: str, raw: str) -> dict[str, dict[str, Any]]:
        try:
            documents = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptDataError(key, f"invalid JSON ({e.msg})") from e
        if not isinstance(documents, dict):
            raise CorruptDataError(key, f"expected an object, got {type(documents).__name__}")
        for document_id, document in documents.items():
            if not isinstance(document, dict):
                raise CorruptDataError(key, f"document {document_id!r} is not an object")
        return documents

    def read_collection(self, collection_path: str) -> dict[str, dict[str, Any]]:
        """Load a collection blob. Corrupt blobs are reset to empty and logged."""
        key = self.collection_key(collection_path)
        raw = self.storage.get_item(key)
        if raw is None:
            return {}
        try:
            return self._decode(key, raw)
        except CorruptDataError as e:
            logger.warning(
                "Corrupt collection blob discarded",
                key=key,
                collection=collection_path,
                error=e.message,
            )
            self.storage.set_item(key, "{}")
            return {}

    def write_collection(self, collection_path: str, documents: dict[str, dict[str, Any]]) -> None:
        # Serialize before touching storage so a bad value leaves the blob intact.
        text = json.dumps(documents, ensure_ascii=False, allow_nan=False)
        self.storage.set_item(self.collection_key(collection_path), text)


class LocalDocumentReference:
    """Handle to ``<collection path>/<id>`` in a LocalDocumentStore."""

    def __init__(self, store: LocalDocumentStore, collection_path: str, document_id: str) -> None:
        if not document_id or "/" in document_id:
            raise InvalidQueryError(f"Invalid document id: {document_id!r}")
        self.store = store
        self.collection_path = collection_path
        self.id = document_id
        self.path = f"{collection_path}/{document_id}"

    @property
    def parent(self) -> "LocalCollectionReference":
        return LocalCollectionReference(self.store, self.collection_path)

    async def get(self) -> DocumentSnapshot:
        documents = self.store.read_collection(self.collection_path)
        document = documents.get(self.id)
        if document is not None:
            document["id"] = self.id
        logger.debug("Document read", path=self.path, exists=document is not None)
        return DocumentSnapshot(self, document)

    async def set(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise TypeError(f"Document data must be a mapping, got {type(data).__name__}")
        documents = self.store.read_collection(self.collection_path)
        documents[self.id] = {**data, "id": self.id}
        self.store.write_collection(self.collection_path, documents)
        logger.debug("Document set", path=self.path)

    async def update(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise TypeError(f"Update data must be a mapping, got {type(data).__name__}")
        documents = self.store.read_collection(self.collection_path)
        if self.id not in documents:
            raise NotFoundError(self.path)
        documents[self.id] = {**documents[self.id], **data, "id": self.id}
        self.store.write_collection(self.collection_path, documents)
        logger.debug("Document updated", path=self.path, fields=sorted(data))

    async def delete(self) -> None:
        documents = self.store.read_collection(self.collection_path)
        if self.id in documents:
            del documents[self.id]
            self.store.write_collection(self.collection_path, documents)
            logger.debug("Document deleted", path=self.path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocalDocumentReference):
            return NotImplemented
        return self.store is other.store and self.path == other.path

    def __hash__(self) -> int:
        return hash((id(self.store), self.path))

    def __repr__(self) -> str:
        return f"LocalDocumentReference({self.path!r})"


class LocalQuery:
    """Immutable query: each builder call returns a new query."""

    def __init__(
        self,
        store: LocalDocumentStore,
        collection_path: str,
        filters: tuple[FieldFilter, ...] = (),
        orders: tuple[FieldOrder, ...] = (),
        limit_count: int | None = None,
    ) -> None:
        self.store = store
        self.collection_path = collection_path
        self.filters = filters
        self.orders = orders
        self.limit_count = limit_count

    def _copy(self, **changes: Any) -> "LocalQuery":
        params = {
            "filters": self.filters,
            "orders": self.orders,
            "limit_count": self.limit_count,
            **changes,
        }
        return LocalQuery(self.store, self.collection_path, **params)

    def where(
        self,
        field_path: str | None = None,
        op_string: str | None = None,
        value: Any = None,
        *,
        filter: FieldFilter | None = None,
    ) -> "LocalQuery":
        if filter is not None:
            if field_path is not None or op_string is not None:
                raise InvalidQueryError("Pass either positional arguments or filter=, not both")
            condition = filter
        else:
            condition = FieldFilter(field_path, op_string, value)
        return self._copy(filters=(*self.filters, condition))

    def order_by(self, field_path: str, direction: str = ASCENDING) -> "LocalQuery":
        return self._copy(orders=(*self.orders, FieldOrder(field_path, direction)))

    def limit(self, count: int) -> "LocalQuery":
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidQueryError(f"Limit must be a positive integer, got {count!r}")
        return self._copy(limit_count=count)

    async def get(self) -> QuerySnapshot:
        documents = self.store.read_collection(self.collection_path)
        rows = [
            (document_id, {**document, "id": document_id})
            for document_id, document in documents.items()
            if all(condition.matches(document) for condition in self.filters)
        ]
        if self.orders:
            rows = apply_ordering(rows, self.orders)
        if self.limit_count is not None:
            rows = rows[: self.limit_count]

        logger.debug(
            "Query evaluated",
            collection=self.collection_path,
            filters=len(self.filters),
            scanned=len(documents),
            matched=len(rows),
        )
        return QuerySnapshot([
            DocumentSnapshot(LocalDocumentReference(self.store, self.collection_path, document_id), document)
            for document_id, document in rows
        ])


class LocalCollectionReference(LocalQuery):
    """Handle to a collection; also the unfiltered query over it."""

    def __init__(self, store: LocalDocumentStore, collection_path: str) -> None:
        super().__init__(store, collection_path)
        self.path = collection_path
        self.id = collection_path.rsplit("/", 1)[-1]

    def doc(self, document_id: str | None = None) -> LocalDocumentReference:
        if document_id is None:
            document_id = generate_document_id()
        return LocalDocumentReference(self.store, self.collection_path, document_id)

    async def add(self, data: Mapping[str, Any]) -> LocalDocumentReference:
        ref = self.doc()
        await ref.set(data)
        logger.info("Document added", collection=self.collection_path, document_id=ref.id)
        return ref

    def __repr__(self) -> str:
        return f"LocalCollectionReference({self.path!r})"
