"""Tests for shared models: time ranges, evidence summaries and verdicts."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from logalert.exceptions import InvalidRangeParametersError
from logalert.models import (
    AbsoluteRange,
    CheckResult,
    FailedCheckResult,
    IndexRotationSnapshot,
    IndexSetConfig,
    MessageSummary,
    NegativeCheckResult,
    RelativeRange,
    ResultMessage,
    Stream,
)
from tests.conftest import NOW


class TestTimeRanges:
    def test_relative_range_boundaries(self):
        time_range = RelativeRange.create(300)

        assert time_range.get_from(NOW) == NOW - timedelta(minutes=5)
        assert time_range.get_to(NOW) == NOW
        assert not time_range.is_unbounded

    def test_zero_relative_range_is_unbounded(self):
        time_range = RelativeRange.create(0)

        assert time_range.is_unbounded
        assert time_range.get_from(NOW) is None

    def test_negative_relative_range_rejected(self):
        with pytest.raises(InvalidRangeParametersError):
            RelativeRange.create(-1)

    def test_non_integer_relative_range_rejected(self):
        with pytest.raises(InvalidRangeParametersError):
            RelativeRange.create("a minute")

    def test_absolute_range(self):
        time_range = AbsoluteRange.create(NOW - timedelta(hours=1), NOW)

        assert time_range.get_from() == NOW - timedelta(hours=1)
        assert time_range.get_to() == NOW

    def test_inverted_absolute_range_rejected(self):
        with pytest.raises(InvalidRangeParametersError):
            AbsoluteRange.create(NOW, NOW - timedelta(seconds=1))

    def test_ranges_are_immutable(self):
        time_range = RelativeRange.create(60)

        with pytest.raises(ValidationError):
            time_range.range_seconds = 120


class TestMessageSummary:
    def test_accessors(self):
        summary = MessageSummary.from_result_message(
            ResultMessage(
                index="graylog_3",
                message={
                    "_id": "a1",
                    "message": "disk full",
                    "source": "web-01",
                    "timestamp": "2024-03-01T11:59:58.000Z",
                    "streams": ["s1", "s2"],
                },
            )
        )

        assert summary.index == "graylog_3"
        assert summary.id == "a1"
        assert summary.message == "disk full"
        assert summary.source == "web-01"
        assert summary.timestamp == datetime(2024, 3, 1, 11, 59, 58, tzinfo=timezone.utc)
        assert summary.stream_ids == ["s1", "s2"]
        assert summary.has_field("source")
        assert not summary.has_field("level")

    def test_unparseable_timestamp(self):
        summary = MessageSummary(index="graylog_0", fields={"timestamp": "yesterday"})

        assert summary.timestamp is None
        assert summary.id is None


class TestVerdicts:
    def test_triggered_result(self):
        result = CheckResult(condition=None, result_description="matched", triggered_at=NOW)

        assert result.triggered
        assert not result.is_failed
        assert result.matching_messages == ()

    def test_negative_result_cannot_trigger(self):
        with pytest.raises(ValidationError):
            NegativeCheckResult(condition=None, triggered=True)

    def test_failed_result_is_negative(self):
        result = FailedCheckResult(condition=None, error="backend down")

        assert isinstance(result, NegativeCheckResult)
        assert not result.triggered
        assert result.is_failed
        assert result.error == "backend down"


class TestIndexModels:
    def test_stream_filter(self):
        assert Stream(id="s1").search_filter == "streams:s1"

    @pytest.mark.parametrize("prefix", ["Graylog", "_graylog", "gray log", ""])
    def test_invalid_index_prefix(self, prefix):
        with pytest.raises(ValidationError):
            IndexSetConfig(id="default", index_prefix=prefix)

    def test_snapshot_alias_lookup(self):
        snapshot = IndexRotationSnapshot.from_mapping(
            {
                "graylog_0": [],
                "graylog_1": ["graylog_deflector"],
                "graylog_2": None,
            }
        )

        assert snapshot.index_names == ["graylog_0", "graylog_1", "graylog_2"]
        assert snapshot.indices_for_alias("graylog_deflector") == ["graylog_1"]
        assert snapshot.indices_for_alias("missing") == []
