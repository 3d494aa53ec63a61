"""
Message count alert condition.

Triggers when the number of messages a stream received in the last ``time``
minutes is strictly more (or strictly less) than ``threshold``.
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Mapping, Optional

import structlog

from logalert.alerts.base import (
    AbstractAlertCondition,
    AlertConditionType,
    require_int,
    require_string,
)
from logalert.exceptions import AlertConditionValidationError
from logalert.interfaces.search_backend import SearchBackend
from logalert.models.results import CheckResult, NegativeCheckResult
from logalert.models.search import MessageSummary, Sorting
from logalert.models.streams import Stream
from logalert.models.timeranges import RelativeRange

logger = structlog.get_logger(__name__)


class ThresholdType(str, Enum):
    """Direction of the count comparison."""

    MORE = "more"
    LESS = "less"

    def is_met(self, count: int, threshold: int) -> bool:
        if self == ThresholdType.MORE:
            return count > threshold
        return count < threshold


class MessageCountAlertCondition(AbstractAlertCondition):
    """
    Alerts on message volume.

    Parameters:
        time: Look-back window in minutes (required, at least 1).
        threshold: Message count to compare against (required, at least 0).
        threshold_type: "more" or "less" (case-insensitive).
        grace: Cool-down in minutes after a trigger.
        backlog: Number of recent messages to attach as evidence.
    """

    def __init__(
        self,
        search_backend: SearchBackend,
        alert_check_interval: int,
        stream: Stream,
        id: Optional[str],
        created_at: datetime,
        creator_user_id: str,
        parameters: Mapping[str, Any],
    ) -> None:
        super().__init__(
            search_backend=search_backend,
            alert_check_interval=alert_check_interval,
            stream=stream,
            id=id,
            type=AlertConditionType.MESSAGE_COUNT,
            created_at=created_at,
            creator_user_id=creator_user_id,
            parameters=parameters,
        )
        self.time = require_int(self.parameters, "time", minimum=1)
        self.threshold = require_int(self.parameters, "threshold", minimum=0)

        threshold_type = require_string(self.parameters, "threshold_type")
        try:
            self.threshold_type = ThresholdType(threshold_type.lower())
        except ValueError as e:
            raise AlertConditionValidationError(
                f'"threshold_type" must be one of more, less; got {threshold_type!r}.'
            ) from e

    @property
    def description(self) -> str:
        return (
            f"time: {self.time}, threshold_type: {self.threshold_type.value}, "
            f"threshold: {self.threshold}, grace: {self.grace}"
        )

    async def _run_check(self) -> CheckResult:
        result = await self.search_backend.search(
            query="*",
            filter=self.stream.search_filter,
            time_range=RelativeRange.create(self.time * 60),
            limit=self.search_limit,
            offset=0,
            sorting=Sorting.timestamp_desc(),
        )
        count = result.total_results

        if not self.threshold_type.is_met(count, self.threshold):
            logger.debug(
                "alert_check_threshold_not_met",
                condition_id=self.id,
                stream_id=self.stream.id,
                count=count,
                threshold=self.threshold,
                threshold_type=self.threshold_type.value,
            )
            return NegativeCheckResult(condition=self)

        summaries: List[MessageSummary] = []
        # A zero total means no evidence, whatever records came back
        if self.backlog_enabled and count > 0:
            summaries = [
                MessageSummary.from_result_message(message)
                for message in result.results[: self.search_limit]
            ]

        logger.debug(
            "alert_check_triggered",
            condition_id=self.id,
            stream_id=self.stream.id,
            count=count,
        )
        return CheckResult(
            condition=self,
            result_description=(
                f"Stream had {count} messages in the last {self.time} minutes "
                f"with trigger condition {self.threshold_type.value} than "
                f"{self.threshold} messages. (Current grace time: {self.grace} minutes)"
            ),
            triggered_at=self._triggered_at(),
            matching_messages=tuple(summaries),
        )
