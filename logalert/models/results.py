"""
Alert check verdicts.

A condition evaluation yields exactly one of:
    CheckResult: The condition triggered; carries description and evidence
    NegativeCheckResult: The condition did not trigger
    FailedCheckResult: The evaluation itself failed; never triggers

FailedCheckResult is a NegativeCheckResult, so code that only cares about
``triggered`` can treat failures as "nothing to notify".

Example:
    >>> result = await condition.check()
    >>> if result.triggered:
    ...     notify(result.result_description, result.matching_messages)
    >>> elif result.is_failed:
    ...     print(f"Check failed: {result.error}")
"""

from datetime import datetime
from typing import Any, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from logalert.models.search import MessageSummary


class CheckResult(BaseModel):
    """
    Triggered verdict of an alert condition.

    Attributes:
        triggered: Whether the condition was met.
        condition: The alert condition that produced this verdict.
        result_description: Human-readable summary of why it triggered.
        triggered_at: When the condition was found to be met.
        matching_messages: Evidence, most recent first. Empty unless the
            condition requested a backlog.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    triggered: bool = Field(
        default=True,
        description="Whether the condition was met",
    )
    condition: Any = Field(
        ...,
        description="Alert condition that produced this verdict",
    )
    result_description: Optional[str] = Field(
        default=None,
        description="Human-readable summary",
    )
    triggered_at: Optional[datetime] = Field(
        default=None,
        description="When the condition was found to be met",
    )
    matching_messages: Tuple[MessageSummary, ...] = Field(
        default=(),
        description="Evidence messages, most recent first",
    )

    @property
    def is_failed(self) -> bool:
        """Check if the evaluation itself failed."""
        return False

    @property
    def condition_id(self) -> Optional[str]:
        return getattr(self.condition, "id", None)


class NegativeCheckResult(CheckResult):
    """Verdict of a condition that was not met."""

    triggered: Literal[False] = False


class FailedCheckResult(NegativeCheckResult):
    """
    Verdict of an evaluation that could not complete.

    Replaces an absent verdict: callers always receive a result object and
    no notification fires for it.

    Attributes:
        error: Description of what went wrong.
    """

    error: str = Field(
        ...,
        description="Why the evaluation failed",
    )

    @property
    def is_failed(self) -> bool:
        return True
