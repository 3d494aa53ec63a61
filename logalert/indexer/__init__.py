"""
Index set resolution and search backend adapters.

Components:
    index_set: AliasIndexSet resolving the write alias from snapshots
    registry: Single-set and multi-set IndexSetRegistry implementations
    elasticsearch: aiohttp based SearchBackend and IndexMetadataSource

Example:
    >>> from logalert.indexer import AliasIndexSet, LegacyIndexSetRegistry
    >>> registry = LegacyIndexSetRegistry(AliasIndexSet(config))
    >>> registry.resolve_write_targets()
    {'graylog_7'}
"""

from logalert.indexer.elasticsearch import (
    ElasticsearchClient,
    build_search_body,
    format_timestamp,
    parse_search_response,
)
from logalert.indexer.index_set import AliasIndexSet
from logalert.indexer.registry import (
    LegacyIndexSetRegistry,
    MultiIndexSetRegistry,
    refresh_index_sets,
)

__all__ = [
    # Index sets
    "AliasIndexSet",
    # Registries
    "LegacyIndexSetRegistry",
    "MultiIndexSetRegistry",
    "refresh_index_sets",
    # Elasticsearch
    "ElasticsearchClient",
    "build_search_body",
    "format_timestamp",
    "parse_search_response",
]
