"""Collection helpers (pagination and value-set queries)."""

from .service import CollectionService

__all__ = [
    "CollectionService",
]
