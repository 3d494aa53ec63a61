"""
Stream model.

A stream is a logical routing bucket for ingested log records. Alert
conditions are always scoped to exactly one stream.
"""

from typing import Optional

from pydantic import BaseModel, Field


class Stream(BaseModel):
    """
    Logical routing bucket for log records.

    Attributes:
        id: Stream identifier, used in the ``streams:<id>`` search filter.
        title: Human-readable stream title.
        index_set_id: Index set the stream writes to, if known.

    Example:
        >>> stream = Stream(id="5a1f", title="Production errors")
        >>> stream.search_filter
        'streams:5a1f'
    """

    model_config = {"frozen": True, "extra": "forbid"}

    id: str = Field(
        ...,
        description="Stream identifier",
        min_length=1,
    )
    title: str = Field(
        default="",
        description="Human-readable stream title",
    )
    index_set_id: Optional[str] = Field(
        default=None,
        description="Index set this stream writes to",
    )

    @property
    def search_filter(self) -> str:
        """Filter expression restricting search results to this stream."""
        return f"streams:{self.id}"
