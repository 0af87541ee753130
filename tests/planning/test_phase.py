"""Tests for planning mode, race lookup and marathon phase progression."""

from datetime import timedelta

import pytest

from rollingplan.domain import Baseline, Goal, MarathonPhaseName, Milestone, PlanMode
from rollingplan.planning.phase import (
    MarathonPhase,
    find_race,
    long_run_minutes,
    marathon_phase,
    resolve_mode,
    round_half_up,
)


class TestResolveMode:
    def test_endurance_and_strength_is_hybrid(self):
        goals = [Goal(id="a", kind="endurance"), Goal(id="b", kind="strength")]

        assert resolve_mode(goals, []) == PlanMode.HYBRID

    def test_milestone_alone_enables_endurance(self, today):
        milestones = [Milestone(id="m", kind="half", date_local=today + timedelta(days=60))]

        assert resolve_mode([], milestones) == PlanMode.ENDURANCE_ONLY

    @pytest.mark.parametrize("goals", [[], [Goal(id="s", kind="sleep")], [Goal(id="g", kind="general")]])
    def test_no_endurance_falls_back_to_strength(self, goals):
        assert resolve_mode(goals, []) == PlanMode.STRENGTH_ONLY


class TestFindRace:
    def test_nearest_upcoming_event_wins(self, today, make_intake):
        intake = make_intake(
            goals=[{"id": "m", "kind": "endurance", "subKind": "marathon", "dateLocal": str(today + timedelta(days=120))}],
            milestones=[{"id": "h", "kind": "half", "dateLocal": str(today + timedelta(days=40))}],
        )

        race = find_race(intake, today)

        assert race.kind == "half"
        assert not race.is_marathon

    def test_past_events_skipped_when_future_exists(self, today, make_intake):
        intake = make_intake(
            milestones=[
                {"id": "old", "kind": "marathon", "dateLocal": str(today - timedelta(days=3))},
                {"id": "new", "kind": "marathon", "dateLocal": str(today + timedelta(days=90))},
            ],
        )

        assert find_race(intake, today).race_date == today + timedelta(days=90)

    def test_no_race(self, today, make_intake):
        assert find_race(make_intake(), today) is None


class TestMarathonPhase:
    def test_far_race_is_base_week_one(self, today):
        phase = marathon_phase(today + timedelta(weeks=30), today)

        assert phase.name == MarathonPhaseName.BASE
        assert phase.weeks_to_race == 30
        assert phase.weeks_into_phase == 1
        assert phase.phase_weeks == 17

    def test_build(self, today):
        phase = marathon_phase(today + timedelta(weeks=6), today)

        assert phase.name == MarathonPhaseName.BUILD
        assert phase.weeks_into_phase == 1
        assert phase.phase_weeks == 2

    def test_peak_is_week_before_taper(self, today):
        assert marathon_phase(today + timedelta(weeks=4), today).name == MarathonPhaseName.PEAK

    def test_taper_weeks_count_up(self, today):
        phase = marathon_phase(today + timedelta(days=10), today)

        assert phase.name == MarathonPhaseName.TAPER
        assert phase.weeks_to_race == 2
        assert phase.weeks_into_phase == 2

    def test_race_passed(self, today):
        assert marathon_phase(today - timedelta(days=1), today).name == MarathonPhaseName.POST

    def test_training_start_anchors_base_progress(self, today):
        phase = marathon_phase(today + timedelta(weeks=30), today, training_start=today - timedelta(weeks=5))

        assert phase.name == MarathonPhaseName.BASE
        assert phase.weeks_into_phase == 6


class TestLongRunMinutes:
    def test_no_race_uses_anchor(self):
        assert long_run_minutes(Baseline(), None, 120) == 70

    def test_anchor_clamped_and_capped(self):
        baseline = Baseline(longest_recent_run_minutes=200)

        assert long_run_minutes(baseline, None, 120) == 120

    def test_peak_reaches_multiplied_anchor(self):
        phase = MarathonPhase(MarathonPhaseName.PEAK, 4)

        assert long_run_minutes(Baseline(), phase, 150) == 150

    @pytest.mark.parametrize(("week", "minutes"), [(1, 113), (2, 90), (3, 60)])
    def test_taper_cuts_volume(self, week, minutes):
        phase = MarathonPhase(MarathonPhaseName.TAPER, 4 - week, week, 3)

        assert long_run_minutes(Baseline(), phase, 150) == minutes

    def test_base_starts_at_anchor_and_grows(self):
        first = MarathonPhase(MarathonPhaseName.BASE, 30, 1, 17)
        last = MarathonPhase(MarathonPhaseName.BASE, 14, 17, 17)

        assert long_run_minutes(Baseline(), first, 150) == 70
        assert long_run_minutes(Baseline(), last, 150) == 113


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(67.5) == 68
    assert round_half_up(49.4) == 49
