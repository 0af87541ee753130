"""Tests for slot resolution."""

from datetime import timedelta

import pytest

from rollingplan.domain import Hardness, StatusWindow, Weekday
from rollingplan.planning.slots import (
    REASON_COMPLETED,
    REASON_FIXED_APPOINTMENT,
    REASON_NOT_AVAILABLE,
    REASON_REST_DAY,
    REASON_STATUS_WINDOW,
    REASON_TERMINAL_SESSION,
    cap_slots,
    fixed_events_in_window,
    resolve_slots,
)


class TestResolveSlots:
    def test_rest_day_excluded(self, today, make_constraints):
        resolution = resolve_slots(make_constraints(), today)

        assert len(resolution.open_slots) == 6
        assert resolution.excluded == {today + timedelta(days=6): REASON_REST_DAY}

    def test_unavailable_days_excluded(self, today, make_constraints):
        constraints = make_constraints(daysAvailable=["mo", "we", "fr"])

        resolution = resolve_slots(constraints, today)

        assert [s.weekday for s in resolution.open_slots] == [Weekday.MO, Weekday.WE, Weekday.FR]
        assert len(resolution.excluded_for(REASON_NOT_AVAILABLE)) == 3

    def test_fixed_appointment_blocks_day(self, today, make_constraints):
        constraints = make_constraints(fixedAppointments=[{"name": "Volleyball", "dayOfWeek": "tu"}])

        resolution = resolve_slots(constraints, today)

        assert resolution.excluded_for(REASON_FIXED_APPOINTMENT) == [today + timedelta(days=1)]

    def test_status_window_blocks_covered_days(self, today, make_constraints):
        window = StatusWindow(kind="illness", since=today, until=today + timedelta(days=1))

        resolution = resolve_slots(make_constraints(), today, status_window=window)

        assert resolution.excluded_for(REASON_STATUS_WINDOW) == [today, today + timedelta(days=1)]
        assert resolution.open_slots[0].date == today + timedelta(days=2)

    def test_completed_and_terminal_days_excluded(self, today, make_constraints):
        resolution = resolve_slots(
            make_constraints(),
            today,
            completed_dates=[today],
            terminal_dates=[today + timedelta(days=2)],
        )

        assert resolution.excluded[today] == REASON_COMPLETED
        assert resolution.excluded[today + timedelta(days=2)] == REASON_TERMINAL_SESSION

    def test_first_failing_check_is_reported(self, today, make_constraints):
        """A rest day with a completed workout is reported as a rest day."""
        resolution = resolve_slots(make_constraints(), today, completed_dates=[today + timedelta(days=6)])

        assert resolution.excluded[today + timedelta(days=6)] == REASON_REST_DAY

    @pytest.mark.parametrize(
        ("available", "rest"),
        [
            (["mo", "tu", "we", "th", "fr", "sa"], ["su"]),
            (["tu", "th", "sa", "su"], ["mo", "fr"]),
            (["we"], ["mo", "tu", "th", "fr", "sa", "su"]),
        ],
    )
    def test_open_slots_respect_day_sets(self, today, make_constraints, available, rest):
        constraints = make_constraints(daysAvailable=available, preferredRestDays=rest)

        resolution = resolve_slots(constraints, today, 14)

        for slot in resolution.open_slots:
            assert slot.weekday in constraints.days_available
            assert slot.weekday not in constraints.preferred_rest_days

    def test_window_length(self, today, make_constraints):
        resolution = resolve_slots(make_constraints(), today, 14)

        assert len(resolution.open_slots) == 12
        assert resolution.open_slots[-1].date == today + timedelta(days=12)


class TestFixedEvents:
    def test_team_sport_is_hard(self, today, make_constraints):
        constraints = make_constraints(
            fixedAppointments=[
                {"name": "Volleyball", "dayOfWeek": "tu"},
                {"name": "Piano lesson", "dayOfWeek": "th"},
            ]
        )

        events = fixed_events_in_window(constraints, today)

        assert [(e.date, e.hardness) for e in events] == [
            (today + timedelta(days=1), Hardness.HARD),
            (today + timedelta(days=3), Hardness.NORMAL),
        ]

    def test_out_of_season_ignored(self, today, make_constraints):
        constraints = make_constraints(
            fixedAppointments=[{"name": "Soccer", "dayOfWeek": "tu", "seasonStart": str(today + timedelta(days=30))}]
        )

        assert fixed_events_in_window(constraints, today) == []


def test_cap_slots(today, make_constraints):
    slots = resolve_slots(make_constraints(), today).open_slots

    assert len(cap_slots(slots, 2)) == 2
    assert cap_slots(slots, 2)[0].date == today
    assert cap_slots(slots, -1) == []
    assert len(cap_slots(slots, None)) == 6
