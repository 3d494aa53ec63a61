"""
Abstract interfaces for the alert evaluation engine.

These interfaces are the seams between the evaluation engine and its
collaborators: the search engine and the index rotation metadata.

Example:
    >>> from logalert.interfaces import SearchBackend
    >>> class InMemorySearchBackend(SearchBackend):
    ...     async def search(self, query, filter, time_range, limit, offset, sorting):
    ...         ...

Modules:
    search_backend: SearchBackend ABC
    index_set: IndexSet, IndexSetRegistry and IndexMetadataSource ABCs
"""

from logalert.interfaces.index_set import (
    IndexMetadataSource,
    IndexSet,
    IndexSetRegistry,
)
from logalert.interfaces.search_backend import SearchBackend

__all__: list[str] = [
    "IndexMetadataSource",
    "IndexSet",
    "IndexSetRegistry",
    "SearchBackend",
]
