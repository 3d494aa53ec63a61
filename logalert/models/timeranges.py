"""
Time range models for alert searches.

Models:
    RelativeRange: Look back a number of seconds from "now"
    AbsoluteRange: Fixed from/to boundaries

Both ranges are built through ``create()`` which raises
InvalidRangeParametersError instead of a pydantic ValidationError, so
callers deal with a single error type for structurally invalid ranges.

Example:
    >>> time_range = RelativeRange.create(60)
    >>> time_range.get_from(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))
    datetime.datetime(2024, 1, 1, 11, 59, tzinfo=datetime.timezone.utc)
"""

from datetime import datetime, timedelta, timezone
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from logalert.exceptions import InvalidRangeParametersError


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class RelativeRange(BaseModel):
    """
    Range reaching back ``range_seconds`` from the evaluation time.

    A range of 0 means the search is not bounded from below.

    Attributes:
        range_seconds: Look-back window in seconds.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    type: Literal["relative"] = "relative"
    range_seconds: int = Field(
        ...,
        description="Look-back window in seconds (0 = unbounded)",
        ge=0,
    )

    @classmethod
    def create(cls, range_seconds: int) -> "RelativeRange":
        """
        Build a relative range.

        Args:
            range_seconds: Look-back window in seconds.

        Returns:
            RelativeRange: The validated range.

        Raises:
            InvalidRangeParametersError: If the range is negative or not an integer.
        """
        try:
            return cls(range_seconds=range_seconds)
        except ValidationError as e:
            raise InvalidRangeParametersError(
                f"Invalid relative range: {range_seconds!r}"
            ) from e

    @property
    def is_unbounded(self) -> bool:
        """Check if the range has no lower bound."""
        return self.range_seconds == 0

    def get_from(self, now: Optional[datetime] = None) -> Optional[datetime]:
        """Lower boundary, or None when unbounded."""
        if self.is_unbounded:
            return None
        return (now or utc_now()) - timedelta(seconds=self.range_seconds)

    def get_to(self, now: Optional[datetime] = None) -> datetime:
        """Upper boundary (the evaluation time)."""
        return now or utc_now()


class AbsoluteRange(BaseModel):
    """
    Range between two fixed instants.

    Attributes:
        from_: Inclusive lower boundary.
        to: Inclusive upper boundary.
    """

    model_config = {"frozen": True, "extra": "forbid", "populate_by_name": True}

    type: Literal["absolute"] = "absolute"
    from_: datetime = Field(
        ...,
        alias="from",
        description="Inclusive lower boundary",
    )
    to: datetime = Field(
        ...,
        description="Inclusive upper boundary",
    )

    @classmethod
    def create(cls, from_: datetime, to: datetime) -> "AbsoluteRange":
        """
        Build an absolute range.

        Raises:
            InvalidRangeParametersError: If ``from_`` is after ``to``.
        """
        if from_ > to:
            raise InvalidRangeParametersError(
                f"Range start {from_.isoformat()} is after range end {to.isoformat()}"
            )
        return cls(from_=from_, to=to)

    def get_from(self, now: Optional[datetime] = None) -> datetime:
        return self.from_

    def get_to(self, now: Optional[datetime] = None) -> datetime:
        return self.to


TimeRange = Union[RelativeRange, AbsoluteRange]
