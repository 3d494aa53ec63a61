"""Tests for MessageCountAlertCondition."""

import pytest

from logalert.alerts import AlertConditionType, MessageCountAlertCondition, ThresholdType
from logalert.exceptions import AlertConditionValidationError, SearchBackendError
from logalert.models import FailedCheckResult, NegativeCheckResult, RelativeRange
from tests.conftest import FakeSearchBackend, make_messages


def build_condition(backend, stream, created_at, **parameters):
    params = {"time": 10, "threshold": 100, "threshold_type": "more"}
    params.update(parameters)
    return MessageCountAlertCondition(
        search_backend=backend,
        alert_check_interval=60,
        stream=stream,
        id="count-1",
        created_at=created_at,
        creator_user_id="admin",
        parameters=params,
    )


class TestConstruction:
    def test_valid_parameters(self, stream, created_at):
        condition = build_condition(FakeSearchBackend(), stream, created_at, threshold_type="LESS")

        assert condition.type == AlertConditionType.MESSAGE_COUNT
        assert condition.time == 10
        assert condition.threshold == 100
        assert condition.threshold_type == ThresholdType.LESS
        assert condition.description == "time: 10, threshold_type: less, threshold: 100, grace: 0"

    @pytest.mark.parametrize(
        "parameters",
        [
            {"time": 0},
            {"time": None},
            {"threshold": -1},
            {"threshold": "many"},
            {"threshold_type": "equal"},
            {"threshold_type": ""},
        ],
    )
    def test_invalid_parameters(self, stream, created_at, parameters):
        with pytest.raises(AlertConditionValidationError):
            build_condition(FakeSearchBackend(), stream, created_at, **parameters)


class TestCheck:
    @pytest.mark.asyncio
    async def test_searches_whole_stream_over_time_window(self, stream, created_at):
        backend = FakeSearchBackend(total_results=5)
        condition = build_condition(backend, stream, created_at)

        await condition.check()

        call = backend.calls[0]
        assert call["query"] == "*"
        assert call["filter"] == "streams:stream-1"
        assert call["time_range"] == RelativeRange(range_seconds=600)
        assert call["limit"] == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "threshold_type, count, triggered",
        [
            ("more", 101, True),
            ("more", 100, False),
            ("less", 99, True),
            ("less", 100, False),
            ("less", 0, True),
        ],
    )
    async def test_threshold_comparison(self, stream, created_at, threshold_type, count, triggered):
        backend = FakeSearchBackend(total_results=count)
        condition = build_condition(backend, stream, created_at, threshold_type=threshold_type)

        result = await condition.check()

        assert result.triggered is triggered

    @pytest.mark.asyncio
    async def test_zero_total_not_met_ignores_returned_records(self, stream, created_at):
        backend = FakeSearchBackend(total_results=0, results=make_messages(2))
        condition = build_condition(
            backend, stream, created_at, threshold_type="more", threshold=0, backlog=5
        )

        result = await condition.check()

        assert isinstance(result, NegativeCheckResult)
        assert result.matching_messages == ()

    @pytest.mark.asyncio
    async def test_zero_total_triggered_has_no_evidence(self, stream, created_at):
        backend = FakeSearchBackend(total_results=0, results=make_messages(2))
        condition = build_condition(
            backend, stream, created_at, threshold_type="less", threshold=1, backlog=5
        )

        result = await condition.check()

        assert result.triggered is True
        assert result.matching_messages == ()

    @pytest.mark.asyncio
    async def test_triggered_description_and_backlog(self, stream, created_at):
        backend = FakeSearchBackend(total_results=150, results=make_messages(20))
        condition = build_condition(backend, stream, created_at, backlog=3, grace=2)

        result = await condition.check()

        assert backend.calls[0]["limit"] == 3
        assert len(result.matching_messages) == 3
        assert result.result_description == (
            "Stream had 150 messages in the last 10 minutes with trigger condition "
            "more than 100 messages. (Current grace time: 2 minutes)"
        )

    @pytest.mark.asyncio
    async def test_backend_failure(self, stream, created_at):
        backend = FakeSearchBackend(error=SearchBackendError("unavailable", status=503))
        condition = build_condition(backend, stream, created_at)

        result = await condition.check()

        assert isinstance(result, FailedCheckResult)
