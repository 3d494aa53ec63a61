"""
Elasticsearch client.

Implements the SearchBackend contract (alert searches) and the
IndexMetadataSource contract (write-alias layout for index set refreshes)
over the Elasticsearch HTTP API.

Searches are scoped to the write-index wildcards of the registry, so the
caller never enumerates partitions and rotation never invalidates a query.

Endpoints:
    Search: POST /<wildcard>[,<wildcard>...]/_search
    Aliases: GET /<wildcard>/_alias

Request Body (search):
    {
        "query": {"bool": {"must": ..., "filter": [...]}},
        "from": 0,
        "size": 1,
        "sort": [{"timestamp": {"order": "desc"}}]
    }
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp
import structlog

from logalert.exceptions import InvalidRangeFormatError, SearchBackendError
from logalert.interfaces.index_set import IndexMetadataSource, IndexSetRegistry
from logalert.interfaces.search_backend import SearchBackend
from logalert.models.indices import IndexRotationSnapshot
from logalert.models.search import (
    TIMESTAMP_FIELD,
    ResultMessage,
    SearchResult,
    Sorting,
)
from logalert.models.timeranges import TimeRange, utc_now

logger = structlog.get_logger(__name__)

# Date format of the timestamp field in message indices
ES_DATE_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def format_timestamp(value: datetime) -> str:
    """
    Render a datetime in the message index date format (UTC, milliseconds).

    Naive datetimes are taken as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(ES_DATE_FORMAT)[:-3]


def build_range_filter(time_range: TimeRange, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Build the timestamp range clause for a time range.

    Raises:
        InvalidRangeFormatError: If the boundaries cannot be computed or
            rendered, or the lower boundary lies after the upper one.
    """
    try:
        range_from = time_range.get_from(now)
        range_to = time_range.get_to(now)
        if range_from is not None and range_from > range_to:
            raise InvalidRangeFormatError(
                f"Range start {range_from.isoformat()} is after range end {range_to.isoformat()}"
            )
        bounds: Dict[str, str] = {"lte": format_timestamp(range_to)}
        if range_from is not None:
            bounds["gte"] = format_timestamp(range_from)
    except (OverflowError, ValueError, TypeError) as e:
        raise InvalidRangeFormatError(f"Cannot render time range {time_range!r}: {e}") from e

    return {"range": {TIMESTAMP_FIELD: bounds}}


def build_search_body(
    query: str,
    filter: Optional[str],
    time_range: TimeRange,
    limit: int,
    offset: int,
    sorting: Sorting,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the request body of a search.

    A query of ``*`` (or an empty query) matches all messages.
    """
    if not query or query.strip() == "*":
        must: Dict[str, Any] = {"match_all": {}}
    else:
        must = {"query_string": {"query": query, "allow_leading_wildcard": True}}

    filters: List[Dict[str, Any]] = [build_range_filter(time_range, now)]
    if filter and filter.strip() != "*":
        filters.append({"query_string": {"query": filter}})

    return {
        "query": {"bool": {"must": must, "filter": filters}},
        "from": offset,
        "size": limit,
        "sort": [{sorting.field: {"order": sorting.direction.value}}],
    }


def parse_search_response(query: str, data: Dict[str, Any]) -> SearchResult:
    """
    Convert a search response into a SearchResult.

    Raises:
        SearchBackendError: If the response body does not have the shape of a
            search response (missing or negative totals, non-mapping hits).
    """
    try:
        hits = data.get("hits", {})
        total = hits.get("total", 0)
        # Elasticsearch 7+ reports {"value": n, "relation": "eq"}
        if isinstance(total, dict):
            total = total.get("value", 0)

        results = []
        for hit in hits.get("hits", []):
            message = dict(hit.get("_source", {}))
            if "_id" in hit:
                message["_id"] = hit["_id"]
            results.append(ResultMessage(index=hit.get("_index", ""), message=message))

        return SearchResult(
            query=query,
            total_results=int(total),
            results=results,
            took_ms=int(data.get("took", 0)),
        )
    except (AttributeError, TypeError, ValueError) as e:
        logger.error("elasticsearch_malformed_response", query=query, error=str(e))
        raise SearchBackendError(f"Malformed search response: {e}") from e


class ElasticsearchClient(SearchBackend, IndexMetadataSource):
    """
    Async Elasticsearch HTTP client.

    Every request is bounded by ``timeout_seconds``; a request exceeding it
    fails with SearchBackendError instead of blocking the caller.

    Attributes:
        base_url: Elasticsearch base URL.
        registry: Index set registry used to scope searches.
        timeout_seconds: Per-request deadline.

    Example:
        >>> client = ElasticsearchClient("http://localhost:9200", registry)
        >>> result = await client.search(
        ...     'level:"error"', "streams:5a1f", RelativeRange.create(60),
        ...     limit=1, offset=0, sorting=Sorting.timestamp_desc(),
        ... )
        >>> await client.close()
    """

    def __init__(
        self,
        base_url: str,
        registry: IndexSetRegistry,
        timeout_seconds: int = 10,
    ):
        """
        Initialize the client.

        Args:
            base_url: Elasticsearch base URL.
            registry: Index set registry used to scope searches.
            timeout_seconds: Request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.registry = registry
        self.timeout_seconds = timeout_seconds

        self._session: Optional[aiohttp.ClientSession] = None

        logger.info(
            "elasticsearch_client_initialized",
            base_url=self.base_url,
            timeout_seconds=timeout_seconds,
        )

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session is created."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": "logalert/0.1"},
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.debug("elasticsearch_session_closed", base_url=self.base_url)

    async def __aenter__(self) -> "ElasticsearchClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Make an HTTP request and decode the JSON response.

        Raises:
            SearchBackendError: On transport failures, timeouts and HTTP errors.
        """
        session = await self._ensure_session()
        url = f"{self.base_url}{path}"

        try:
            async with session.request(method, url, params=params, json=body) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    logger.error(
                        "elasticsearch_request_failed",
                        url=url,
                        status=response.status,
                        error=error_text,
                    )
                    raise SearchBackendError(
                        f"Elasticsearch request failed with status {response.status}: {error_text}",
                        status=response.status,
                    )

                return await response.json()

        except aiohttp.ClientError as e:
            logger.error("elasticsearch_client_error", url=url, error=str(e))
            raise SearchBackendError(f"Elasticsearch request failed: {e}") from e
        except asyncio.TimeoutError as e:
            logger.error("elasticsearch_timeout", url=url, timeout=self.timeout_seconds)
            raise SearchBackendError(
                f"Elasticsearch request timeout after {self.timeout_seconds}s"
            ) from e

    async def search(
        self,
        query: str,
        filter: str,
        time_range: TimeRange,
        limit: int,
        offset: int,
        sorting: Sorting,
    ) -> SearchResult:
        if limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")
        if offset < 0:
            raise ValueError(f"offset must not be negative, got {offset}")

        wildcards = self.registry.get_write_index_wildcards()
        if not wildcards:
            raise SearchBackendError("No index sets registered, nothing to search")

        body = build_search_body(query, filter, time_range, limit, offset, sorting, utc_now())
        indices = ",".join(wildcards)

        data = await self._request(
            "POST",
            f"/{indices}/_search",
            params={"ignore_unavailable": "true", "allow_no_indices": "true"},
            body=body,
        )
        result = parse_search_response(query, data)

        logger.debug(
            "elasticsearch_search_completed",
            query=query,
            filter=filter,
            indices=indices,
            total_results=result.total_results,
            returned=len(result.results),
            took_ms=result.took_ms,
        )
        return result

    async def get_index_aliases(self, index_wildcard: str) -> IndexRotationSnapshot:
        data = await self._request("GET", f"/{index_wildcard}/_alias")
        return IndexRotationSnapshot.from_mapping(
            {
                index: (entry or {}).get("aliases", {}).keys()
                for index, entry in data.items()
            }
        )
