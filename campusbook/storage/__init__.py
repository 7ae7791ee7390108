"""Storage media: in-memory, JSON file and Redis backends.

A storage medium is a scoped string-keyed, string-valued persistent map,
the substrate the document store and the auth layer serialize into.
Backends are created from settings by ``create_storage_medium``; the Redis
backend only imports ``redis`` when selected.
"""

from campusbook.storage.factory import create_storage_medium
from campusbook.storage.memory_storage import MemoryStorage
from campusbook.storage.protocol import StorageMedium

__all__ = [
    "MemoryStorage",
    "StorageMedium",
    "create_storage_medium",
]
