"""Tests for stage events, timing and local-date helpers."""

from datetime import date

import pytest
from loguru import logger

from rollingplan.core.dates import date_window, in_rolling_week, iso_week_parity, local_today, rolling_week
from rollingplan.core.observability import PlannerStage, log_stage_event, stage_timer


@pytest.fixture
def records():
    captured = []
    handler_id = logger.add(lambda message: captured.append(message.record), level="DEBUG")
    yield captured
    logger.remove(handler_id)


class TestStageEvents:
    def test_rejects_unknown_status(self):
        with pytest.raises(ValueError, match="Status must be one of"):
            log_stage_event(PlannerStage.SLOTS, "done")

    def test_stage_event_carries_stage_and_meta(self, records):
        log_stage_event(PlannerStage.SLOTS, "success", {"open_slots": 4})

        record = records[-1]
        assert record["message"] == "planner_stage"
        assert record["extra"]["stage"] == "slots"
        assert record["extra"]["status"] == "success"
        assert record["extra"]["open_slots"] == 4


class TestStageTimer:
    def test_success_emits_start_success_and_timing(self, records):
        with stage_timer(PlannerStage.PLACEMENT) as meta:
            meta["placed"] = 3

        statuses = [r["extra"].get("status") for r in records if r["message"] == "planner_stage"]
        assert statuses == ["start", "success"]
        success = [r for r in records if r["extra"].get("status") == "success"][0]
        assert success["extra"]["placed"] == 3
        timing = [r for r in records if r["message"] == "planner_timing"]
        assert len(timing) == 1
        assert timing[0]["extra"]["duration_seconds"] >= 0

    def test_failure_logs_error_type_and_reraises(self, records):
        with pytest.raises(KeyError):
            with stage_timer(PlannerStage.GUARDRAILS):
                raise KeyError("missing")

        fail = [r for r in records if r["extra"].get("status") == "fail"]
        assert len(fail) == 1
        assert fail[0]["extra"]["error"] == "KeyError"
        assert any(r["message"] == "planner_timing" for r in records)


class TestDates:
    def test_date_window_is_inclusive_of_start(self):
        assert date_window(date(2025, 6, 2), 3) == [date(2025, 6, 2), date(2025, 6, 3), date(2025, 6, 4)]

    def test_rolling_week_spans_seven_days(self):
        start, end = rolling_week(date(2025, 6, 8))

        assert start == date(2025, 6, 2)
        assert end == date(2025, 6, 8)
        assert in_rolling_week(date(2025, 6, 2), date(2025, 6, 8))
        assert not in_rolling_week(date(2025, 6, 1), date(2025, 6, 8))

    def test_rolling_week_custom_length(self):
        assert rolling_week(date(2025, 6, 8), days=3) == (date(2025, 6, 6), date(2025, 6, 8))
        assert not in_rolling_week(date(2025, 6, 5), date(2025, 6, 8), days=3)

    def test_iso_week_parity(self):
        # 2025-06-02 is in ISO week 23
        assert iso_week_parity(date(2025, 6, 2)) == 1
        assert iso_week_parity(date(2025, 6, 9)) == 0

    def test_local_today_uses_given_timezone(self):
        assert isinstance(local_today("UTC"), date)
