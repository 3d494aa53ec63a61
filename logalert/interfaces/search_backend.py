"""
Abstract base class for search backends.

The evaluation engine never talks to a search engine directly. It issues
exactly one call per check through this contract and interprets the
returned SearchResult.

The contract makes no promise that ``len(result.results)`` equals
``result.total_results``: the limit may truncate hits, and hits are only
ordered as requested by ``sorting``.
"""

from abc import ABC, abstractmethod

from logalert.models.search import SearchResult, Sorting
from logalert.models.timeranges import TimeRange


class SearchBackend(ABC):
    """
    Executes a scoped, time-bounded, sorted query.

    Implementations resolve the physical indices to search themselves
    (usually through an IndexSetRegistry) so callers never enumerate
    partitions.
    """

    @abstractmethod
    async def search(
        self,
        query: str,
        filter: str,
        time_range: TimeRange,
        limit: int,
        offset: int,
        sorting: Sorting,
    ) -> SearchResult:
        """
        Run a search.

        Args:
            query: Query string (e.g., ``level:"error"``).
            filter: Filter expression (e.g., ``streams:<id>``).
            time_range: Range of message timestamps to search.
            limit: Maximum number of hits to return.
            offset: Number of hits to skip.
            sorting: Sort order of the returned hits.

        Returns:
            SearchResult: Total match count and up to ``limit`` hits.

        Raises:
            ValueError: If limit or offset is negative.
            InvalidRangeFormatError: If the range cannot be rendered.
            SearchBackendError: If the backend is unavailable or rejects the request.
        """
        pass
