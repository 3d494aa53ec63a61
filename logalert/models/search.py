"""
Search request and result models.

Models:
    SortDirection: Sort order (asc, desc)
    Sorting: Sort field and direction
    ResultMessage: One raw hit returned by the search backend
    SearchResult: Total match count plus the (possibly truncated) hits
    MessageSummary: Read-only evidence item attached to a triggered verdict
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

TIMESTAMP_FIELD = "timestamp"


class SortDirection(str, Enum):
    """Sort order for search results."""

    ASC = "asc"
    DESC = "desc"


class Sorting(BaseModel):
    """
    Sort specification for a search.

    Example:
        >>> Sorting.timestamp_desc()
        Sorting(field='timestamp', direction=<SortDirection.DESC: 'desc'>)
    """

    model_config = {"frozen": True, "extra": "forbid"}

    field: str = Field(
        ...,
        description="Field to sort on",
        min_length=1,
    )
    direction: SortDirection = Field(
        default=SortDirection.DESC,
        description="Sort order",
    )

    @classmethod
    def timestamp_desc(cls) -> "Sorting":
        """Most recent messages first."""
        return cls(field=TIMESTAMP_FIELD, direction=SortDirection.DESC)


class ResultMessage(BaseModel):
    """
    One hit returned by the search backend.

    Attributes:
        index: Physical index (partition) the message was found in.
        message: The message fields.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    index: str = Field(
        ...,
        description="Physical index the message was found in",
    )
    message: Dict[str, Any] = Field(
        default_factory=dict,
        description="Message fields",
    )


class SearchResult(BaseModel):
    """
    Result of a backend search.

    ``total_results`` is the number of matches in the backend, which can be
    larger than ``len(results)`` when the request was limited.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    query: str = Field(
        default="",
        description="Query string that produced this result",
    )
    total_results: int = Field(
        ...,
        description="Total number of matches",
        ge=0,
    )
    results: List[ResultMessage] = Field(
        default_factory=list,
        description="Returned hits, at most the requested limit",
    )
    took_ms: int = Field(
        default=0,
        description="Backend execution time in milliseconds",
        ge=0,
    )


class MessageSummary(BaseModel):
    """
    Evidence item for a triggered alert.

    Represents one matched log record: the index it was found in plus its
    fields. Only built from search backend results.

    Example:
        >>> summary = MessageSummary.from_result_message(result_message)
        >>> summary.index
        'graylog_3'
    """

    model_config = {"frozen": True, "extra": "forbid"}

    index: str = Field(
        ...,
        description="Physical index the message was found in",
    )
    fields: Dict[str, Any] = Field(
        default_factory=dict,
        description="Message fields",
    )

    @classmethod
    def from_result_message(cls, result_message: ResultMessage) -> "MessageSummary":
        return cls(index=result_message.index, fields=dict(result_message.message))

    @property
    def id(self) -> Optional[str]:
        return self.fields.get("_id")

    @property
    def message(self) -> Optional[str]:
        return self.fields.get("message")

    @property
    def source(self) -> Optional[str]:
        return self.fields.get("source")

    @property
    def timestamp(self) -> Optional[datetime]:
        value = self.fields.get(TIMESTAMP_FIELD)
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return None
        return None

    @property
    def stream_ids(self) -> List[str]:
        return list(self.fields.get("streams", []))

    def has_field(self, field: str) -> bool:
        return field in self.fields
