"""
Field content value alert condition.

Triggers when the stream received at least one message in the last check
interval whose ``field`` contains the exact phrase ``value``.

Example:
    >>> condition = FieldContentValueAlertCondition(
    ...     search_backend=backend,
    ...     alert_check_interval=60,
    ...     stream=Stream(id="5a1f"),
    ...     id="c1",
    ...     created_at=utc_now(),
    ...     creator_user_id="admin",
    ...     parameters={"field": "level", "value": "error", "grace": 5},
    ... )
    >>> result = await condition.check()
"""

import re
from datetime import datetime
from typing import Any, List, Mapping, Optional

import structlog

from logalert.alerts.base import (
    AbstractAlertCondition,
    AlertConditionType,
    require_string,
)
from logalert.exceptions import AlertConditionValidationError
from logalert.interfaces.search_backend import SearchBackend
from logalert.models.results import CheckResult, NegativeCheckResult
from logalert.models.search import MessageSummary, Sorting
from logalert.models.streams import Stream
from logalert.models.timeranges import RelativeRange

logger = structlog.get_logger(__name__)

# Field names are put into the query unquoted
FIELD_NAME_PATTERN = re.compile(r"[A-Za-z0-9_@][A-Za-z0-9_.@-]*")


class FieldContentValueAlertCondition(AbstractAlertCondition):
    """
    Alerts on messages with an exact field value.

    Parameters:
        field: Message field to match (required; letters, digits, ``_``,
            ``.``, ``-`` and ``@`` only).
        value: Exact phrase the field must contain (required, non-empty).
        grace: Cool-down in minutes after a trigger.
        backlog: Number of matching messages to attach as evidence.
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
            type=AlertConditionType.FIELD_CONTENT_VALUE,
            created_at=created_at,
            creator_user_id=creator_user_id,
            parameters=parameters,
        )
        self.field = require_string(self.parameters, "field")
        if not FIELD_NAME_PATTERN.fullmatch(self.field):
            raise AlertConditionValidationError(
                f'"field" is not a valid message field name: {self.field!r}.'
            )
        self.value = require_string(self.parameters, "value")

    @property
    def query(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'{self.field}:"{escaped}"'

    @property
    def description(self) -> str:
        return f"field: {self.field}, value: {self.value}"

    async def _run_check(self) -> CheckResult:
        query = self.query
        result = await self.search_backend.search(
            query=query,
            filter=self.stream.search_filter,
            time_range=RelativeRange.create(self.alert_check_interval),
            limit=self.search_limit,
            offset=0,
            sorting=Sorting.timestamp_desc(),
        )

        summaries: List[MessageSummary] = []
        if self.backlog_enabled:
            summaries = [
                MessageSummary.from_result_message(message)
                for message in result.results[: self.search_limit]
            ]

        count = result.total_results
        if count > 0:
            logger.debug(
                "alert_check_triggered",
                condition_id=self.id,
                stream_id=self.stream.id,
                count=count,
            )
            return CheckResult(
                condition=self,
                result_description=(
                    f"Stream received messages matching <{query}> "
                    f"(Current grace time: {self.grace} minutes)"
                ),
                triggered_at=self._triggered_at(),
                matching_messages=tuple(summaries),
            )

        logger.debug(
            "alert_check_no_results",
            condition_id=self.id,
            stream_id=self.stream.id,
        )
        return NegativeCheckResult(condition=self)
