from __future__ import annotations

import structlog

from campusbook.common.settings import Settings, get_settings
from campusbook.docstore.local import LocalDocumentStore
from campusbook.storage import StorageMedium, create_storage_medium

logger = structlog.get_logger(__name__)


def create_document_store(
    settings: Settings | None = None,
    storage: StorageMedium | None = None,
) -> LocalDocumentStore:
    """
    Returns a document store bound to the configured storage scope.

    A new instance is built on every call; callers pass it explicitly to
    the record functions instead of looking it up globally. Instances on
    the same scope share data through the storage medium.
    """
    settings = settings or get_settings()
    storage = storage if storage is not None else create_storage_medium(settings)
    logger.info(
        "Document store initialized",
        backend=type(storage).__name__,
        scope=storage.scope,
    )
    return LocalDocumentStore(storage, key_prefix=settings.collection_key_prefix)
