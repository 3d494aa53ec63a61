"""Shared fixtures for the alert evaluation engine tests."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from logalert.interfaces import IndexMetadataSource, SearchBackend
from logalert.models import (
    IndexRotationSnapshot,
    ResultMessage,
    SearchResult,
    Sorting,
    Stream,
    TimeRange,
)

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeSearchBackend(SearchBackend):
    """In-memory search backend recording every call."""

    def __init__(
        self,
        total_results: int = 0,
        results: Optional[List[ResultMessage]] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self.total_results = total_results
        self.results = results or []
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def search(
        self,
        query: str,
        filter: str,
        time_range: TimeRange,
        limit: int,
        offset: int,
        sorting: Sorting,
    ) -> SearchResult:
        self.calls.append(
            {
                "query": query,
                "filter": filter,
                "time_range": time_range,
                "limit": limit,
                "offset": offset,
                "sorting": sorting,
            }
        )
        if self.error is not None:
            raise self.error
        return SearchResult(
            query=query,
            total_results=self.total_results,
            results=self.results[:limit],
        )


class FakeMetadataSource(IndexMetadataSource):
    """Serves alias layouts keyed by wildcard."""

    def __init__(self, layouts: Optional[Dict[str, Dict[str, List[str]]]] = None) -> None:
        self.layouts = layouts or {}
        self.requested: List[str] = []

    async def get_index_aliases(self, index_wildcard: str) -> IndexRotationSnapshot:
        self.requested.append(index_wildcard)
        if index_wildcard not in self.layouts:
            from logalert.exceptions import SearchBackendError

            raise SearchBackendError(f"no such index [{index_wildcard}]", status=404)
        return IndexRotationSnapshot.from_mapping(self.layouts[index_wildcard])


def make_messages(count: int, index: str = "graylog_3") -> List[ResultMessage]:
    """Messages ordered newest first, one second apart."""
    return [
        ResultMessage(
            index=index,
            message={
                "_id": f"msg-{i}",
                "message": f"something failed {i}",
                "source": "app-01",
                "level": "error",
                "timestamp": (NOW - timedelta(seconds=i)).isoformat(),
                "streams": ["stream-1"],
            },
        )
        for i in range(count)
    ]


@pytest.fixture
def stream() -> Stream:
    return Stream(id="stream-1", title="Application errors")


@pytest.fixture
def created_at() -> datetime:
    return NOW
