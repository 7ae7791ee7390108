"""
Document store for CampusBook.

Provides:
- Async document store protocols (collection / document / query surface)
- Local emulator persisting collections as JSON blobs in a storage medium
- Field filters with ==, !=, <, <=, >, >= and array-contains
"""

from campusbook.docstore.client import create_document_store
from campusbook.docstore.local import (
    DocumentSnapshot,
    LocalCollectionReference,
    LocalDocumentReference,
    LocalDocumentStore,
    LocalQuery,
    QuerySnapshot,
)
from campusbook.docstore.protocol import DocumentStore
from campusbook.docstore.query import ASCENDING, DESCENDING, FieldFilter

__all__ = [
    "ASCENDING",
    "DESCENDING",
    "DocumentSnapshot",
    "DocumentStore",
    "FieldFilter",
    "LocalCollectionReference",
    "LocalDocumentReference",
    "LocalDocumentStore",
    "LocalQuery",
    "QuerySnapshot",
    "create_document_store",
]
