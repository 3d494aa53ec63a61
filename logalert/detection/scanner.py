"""
Alert scanner: the evaluation driver.

Runs one check per registered alert condition per cycle.

Key Features:
    - Conditions are checked concurrently within a cycle
    - A condition never has two checks in flight; an overlapping invocation
      is skipped, not queued
    - Every check is bounded by a deadline
    - A failing condition yields a FailedCheckResult and never affects
      its siblings
    - Grace periods: a condition that triggered is not checked again until
      its grace time has passed

Example:
    >>> scanner = AlertScanner(conditions, check_timeout_seconds=30, on_alert=notify)
    >>> results = await scanner.run_cycle()
    >>> triggered = [r for r in results.values() if r.triggered]
"""

import asyncio
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

import structlog

from logalert.alerts.base import AbstractAlertCondition
from logalert.models.results import CheckResult, FailedCheckResult
from logalert.models.timeranges import utc_now

logger = structlog.get_logger(__name__)

DEFAULT_CHECK_TIMEOUT_SECONDS = 30

AlertCallback = Callable[[CheckResult], Awaitable[None]]


def condition_key(condition: AbstractAlertCondition) -> str:
    """Key identifying a condition inside the scanner."""
    if condition.id is not None:
        return condition.id
    return f"unsaved-{id(condition)}"


class AlertScanner:
    """
    Drives alert condition checks.

    The scanner owns the only mutable evaluation state: the per-condition
    locks and last trigger times. Conditions themselves are never modified.

    Attributes:
        check_timeout_seconds: Deadline of a single check.
        on_alert: Coroutine receiving triggered verdicts outside grace.
    """

    def __init__(
        self,
        conditions: Optional[Iterable[AbstractAlertCondition]] = None,
        check_timeout_seconds: float = DEFAULT_CHECK_TIMEOUT_SECONDS,
        on_alert: Optional[AlertCallback] = None,
    ) -> None:
        self.check_timeout_seconds = check_timeout_seconds
        self.on_alert = on_alert

        self._conditions: Dict[str, AbstractAlertCondition] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._last_triggered: Dict[str, datetime] = {}

        for condition in conditions or ():
            self.add_condition(condition)

    @property
    def conditions(self) -> List[AbstractAlertCondition]:
        return list(self._conditions.values())

    def add_condition(self, condition: AbstractAlertCondition) -> None:
        """
        Register a condition.

        Raises:
            ValueError: If a condition with the same id is already registered.
        """
        key = condition_key(condition)
        if key in self._conditions:
            raise ValueError(f"Alert condition <{key}> is already registered")
        self._conditions[key] = condition
        self._locks[key] = asyncio.Lock()

    def remove_condition(self, condition_id: str) -> Optional[AbstractAlertCondition]:
        self._locks.pop(condition_id, None)
        self._last_triggered.pop(condition_id, None)
        return self._conditions.pop(condition_id, None)

    def last_triggered_at(self, condition: AbstractAlertCondition) -> Optional[datetime]:
        return self._last_triggered.get(condition_key(condition))

    def in_grace_period(
        self,
        condition: AbstractAlertCondition,
        now: Optional[datetime] = None,
    ) -> bool:
        """Check if the condition triggered less than ``grace`` minutes ago."""
        last = self._last_triggered.get(condition_key(condition))
        if last is None or condition.grace <= 0:
            return False
        return (now or utc_now()) < last + timedelta(minutes=condition.grace)

    async def check_condition(
        self,
        condition: AbstractAlertCondition,
        now: Optional[datetime] = None,
    ) -> Optional[CheckResult]:
        """
        Check a single condition.

        Returns:
            Optional[CheckResult]: The verdict, or None if the check was
            skipped because the condition is in its grace period or its
            previous check is still running.
        """
        key = condition_key(condition)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()

        if self.in_grace_period(condition, now):
            logger.debug(
                "alert_check_in_grace_period",
                condition_id=condition.id,
                grace=condition.grace,
            )
            return None

        if lock.locked():
            logger.warning(
                "alert_check_still_running",
                condition_id=condition.id,
                stream_id=condition.stream.id,
            )
            return None

        async with lock:
            result = await self._run_check(condition)

        if result.triggered:
            await self._handle_triggered(key, condition, result, now)
        return result

    async def _run_check(self, condition: AbstractAlertCondition) -> CheckResult:
        try:
            return await asyncio.wait_for(
                condition.check(),
                timeout=self.check_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                "alert_check_timeout",
                condition_id=condition.id,
                stream_id=condition.stream.id,
                timeout_seconds=self.check_timeout_seconds,
            )
            return FailedCheckResult(
                condition=condition,
                error=f"Check did not finish within {self.check_timeout_seconds}s",
            )
        except Exception as e:
            logger.exception(
                "alert_check_error",
                condition_id=condition.id,
                stream_id=condition.stream.id,
                error=str(e),
            )
            return FailedCheckResult(condition=condition, error=str(e))

    async def _handle_triggered(
        self,
        key: str,
        condition: AbstractAlertCondition,
        result: CheckResult,
        now: Optional[datetime],
    ) -> None:
        self._last_triggered[key] = now or result.triggered_at or utc_now()

        logger.info(
            "alert_condition_triggered",
            condition_id=condition.id,
            stream_id=condition.stream.id,
            description=result.result_description,
            evidence=len(result.matching_messages),
        )

        if self.on_alert is None:
            return

        try:
            await self.on_alert(result)
        except Exception as e:
            logger.error(
                "alert_callback_error",
                condition_id=condition.id,
                error=str(e),
            )

    async def run_cycle(self, now: Optional[datetime] = None) -> Dict[str, CheckResult]:
        """
        Check every registered condition once, concurrently.

        Returns:
            Dict[str, CheckResult]: Verdicts keyed by condition id, for the
            conditions that were actually checked in this cycle.
        """
        conditions = list(self._conditions.items())
        if not conditions:
            return {}

        outcomes = await asyncio.gather(
            *(self.check_condition(condition, now) for _, condition in conditions)
        )

        results: Dict[str, CheckResult] = {
            key: outcome
            for (key, _), outcome in zip(conditions, outcomes)
            if outcome is not None
        }

        logger.info(
            "alert_scan_completed",
            conditions=len(conditions),
            checked=len(results),
            triggered=sum(1 for r in results.values() if r.triggered),
            failed=sum(1 for r in results.values() if r.is_failed),
        )
        return results
