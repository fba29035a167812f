"""Repository layer for index data access."""

from mediaserver.repositories.index_store import IndexStore

__all__ = [
    "IndexStore",
]
