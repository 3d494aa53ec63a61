"""
Shared Pydantic data models for the alert evaluation engine.

Modules:
    streams: Stream scoping
    timeranges: Relative and absolute search time ranges
    search: Sorting, raw search results and evidence summaries
    indices: Index set configuration and rotation metadata
    results: Alert check verdicts

Example:
    >>> from logalert.models import RelativeRange, Sorting, CheckResult
"""

from logalert.models.indices import (
    IndexRotationSnapshot,
    IndexSetConfig,
)
from logalert.models.results import (
    CheckResult,
    FailedCheckResult,
    NegativeCheckResult,
)
from logalert.models.search import (
    MessageSummary,
    ResultMessage,
    SearchResult,
    SortDirection,
    Sorting,
)
from logalert.models.streams import Stream
from logalert.models.timeranges import (
    AbsoluteRange,
    RelativeRange,
    TimeRange,
    utc_now,
)

__all__ = [
    # Streams
    "Stream",
    # Time ranges
    "AbsoluteRange",
    "RelativeRange",
    "TimeRange",
    "utc_now",
    # Search
    "SortDirection",
    "Sorting",
    "ResultMessage",
    "SearchResult",
    "MessageSummary",
    # Indices
    "IndexSetConfig",
    "IndexRotationSnapshot",
    # Verdicts
    "CheckResult",
    "NegativeCheckResult",
    "FailedCheckResult",
]
