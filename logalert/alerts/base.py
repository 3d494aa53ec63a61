"""
Base class for alert conditions.

An alert condition owns its parameters, builds one backend query per check,
and turns the outcome into a verdict. Variants implement ``_run_check()``
and their own parameter validation; ``check()`` adds the error policy that
keeps a failing condition from aborting the evaluation of its siblings.

Adding a condition type only needs a new subclass registered with the
AlertConditionFactory.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

import structlog

from logalert.exceptions import (
    AlertConditionValidationError,
    InvalidRangeFormatError,
    InvalidRangeParametersError,
    SearchBackendError,
)
from logalert.interfaces.search_backend import SearchBackend
from logalert.models.results import CheckResult, FailedCheckResult
from logalert.models.streams import Stream
from logalert.models.timeranges import utc_now

logger = structlog.get_logger(__name__)


class AlertConditionType(str, Enum):
    """Type tags of the built-in alert conditions."""

    FIELD_CONTENT_VALUE = "field_content_value"
    MESSAGE_COUNT = "message_count"


def _optional_int(parameters: Mapping[str, Any], key: str) -> Optional[int]:
    value = parameters.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise AlertConditionValidationError(f'"{key}" must be an integer, got {value!r}.')
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise AlertConditionValidationError(
            f'"{key}" must be an integer, got {value!r}.'
        ) from e


def require_string(parameters: Mapping[str, Any], key: str) -> str:
    """
    Read a required, non-empty string parameter.

    Raises:
        AlertConditionValidationError: If the parameter is missing, empty or
            not a string.
    """
    value = parameters.get(key)
    if not isinstance(value, str) or not value:
        raise AlertConditionValidationError(f'"{key}" must not be empty.')
    return value


def require_int(parameters: Mapping[str, Any], key: str, minimum: int = 0) -> int:
    """
    Read a required integer parameter with a lower bound.

    Raises:
        AlertConditionValidationError: If missing, not an integer, or below minimum.
    """
    value = _optional_int(parameters, key)
    if value is None:
        raise AlertConditionValidationError(f'"{key}" must not be empty.')
    if value < minimum:
        raise AlertConditionValidationError(
            f'"{key}" must be at least {minimum}, got {value}.'
        )
    return value


class AbstractAlertCondition(ABC):
    """
    Common identity, knobs and error policy of all alert conditions.

    Attributes:
        id: Condition id, None until persisted.
        stream: Stream the condition is scoped to.
        type: Condition type tag.
        created_at: Creation time.
        creator_user_id: Who created the condition.
        parameters: Read-only copy of the persisted parameters.
        title: Optional display title.
        grace: Re-notification cool-down in minutes (enforced by the scanner).
        backlog: Number of evidence messages to attach, None if not requested.
        search_backend: Backend executing the condition's query.
        alert_check_interval: Seconds between checks; the look-back window.
    """

    def __init__(
        self,
        search_backend: SearchBackend,
        alert_check_interval: int,
        stream: Stream,
        id: Optional[str],
        type: Union[AlertConditionType, str],
        created_at: datetime,
        creator_user_id: str,
        parameters: Mapping[str, Any],
    ) -> None:
        if alert_check_interval <= 0:
            raise AlertConditionValidationError(
                f"alert_check_interval must be positive, got {alert_check_interval}"
            )

        self.search_backend = search_backend
        self.alert_check_interval = alert_check_interval
        self.stream = stream
        self.id = id
        self.type = type
        self.created_at = created_at
        self.creator_user_id = creator_user_id
        self.parameters: Mapping[str, Any] = MappingProxyType(dict(parameters or {}))

        title = self.parameters.get("title")
        self.title: Optional[str] = str(title) if title else None

        self.grace = _optional_int(self.parameters, "grace") or 0
        if self.grace < 0:
            raise AlertConditionValidationError(f'"grace" must not be negative, got {self.grace}.')

        backlog = _optional_int(self.parameters, "backlog")
        self.backlog: Optional[int] = backlog if backlog is not None and backlog > 0 else None

    @property
    def type_name(self) -> str:
        if isinstance(self.type, AlertConditionType):
            return self.type.value
        return str(self.type)

    @property
    def backlog_enabled(self) -> bool:
        return self.backlog is not None

    @property
    def search_limit(self) -> int:
        """Hits to request: the backlog as evidence, or 1 as an existence probe."""
        return self.backlog if self.backlog is not None else 1

    @property
    @abstractmethod
    def description(self) -> str:
        """Short description of the condition's parameters."""
        pass

    @abstractmethod
    async def _run_check(self) -> CheckResult:
        """Run the variant's query and interpret its result."""
        pass

    async def check(self) -> CheckResult:
        """
        Evaluate the condition once.

        Each call is self-contained: nothing from earlier checks is reused.
        Range errors and backend failures are logged and reported as a
        FailedCheckResult instead of being raised.

        Returns:
            CheckResult: Triggered, negative, or failed verdict.
        """
        try:
            return await self._run_check()
        except InvalidRangeParametersError as e:
            logger.error(
                "alert_check_invalid_timerange",
                condition_id=self.id,
                stream_id=self.stream.id,
                error=str(e),
            )
            return self._failed(f"Invalid timerange: {e}")
        except InvalidRangeFormatError as e:
            logger.error(
                "alert_check_invalid_timerange_format",
                condition_id=self.id,
                stream_id=self.stream.id,
                error=str(e),
            )
            return self._failed(f"Invalid timerange format: {e}")
        except SearchBackendError as e:
            logger.error(
                "alert_check_backend_unavailable",
                condition_id=self.id,
                stream_id=self.stream.id,
                error=str(e),
            )
            return self._failed(f"Search backend unavailable: {e}")
        except asyncio.TimeoutError:
            logger.error(
                "alert_check_backend_timeout",
                condition_id=self.id,
                stream_id=self.stream.id,
            )
            return self._failed("Search backend did not answer in time")

    def _failed(self, error: str) -> FailedCheckResult:
        return FailedCheckResult(condition=self, error=error)

    def _triggered_at(self) -> datetime:
        return utc_now()

    def to_dict(self) -> Dict[str, Any]:
        """Persisted representation of the condition."""
        return {
            "id": self.id,
            "type": self.type_name,
            "stream_id": self.stream.id,
            "creator_user_id": self.creator_user_id,
            "created_at": self.created_at.isoformat(),
            "parameters": dict(self.parameters),
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self.id!r}, stream_id={self.stream.id!r}, "
            f"{self.description})"
        )
