"""Tests for missed-session substitution rules."""

from dataclasses import replace
from datetime import timedelta

import pytest

from rollingplan.domain import Hardness, SessionStatus, SessionType, SubstitutionAction
from rollingplan.planning.guardrails import HardnessContext
from rollingplan.reconciliation import apply_substitutions, plan_substitution


@pytest.fixture
def context(today):
    return HardnessContext(today=today, ceiling=3)


def missed(make_session, day, session_type, **fields):
    return replace(make_session(day, session_type, **fields), status=SessionStatus.MISSED)


class TestTempo:
    def test_swapped_into_window(self, today, context, make_session):
        tempo = missed(make_session, today - timedelta(days=1), SessionType.TEMPO)

        result = plan_substitution(tempo, [today + timedelta(days=1), today + timedelta(days=4)], [tempo], context)

        assert result.action == SubstitutionAction.SWAP
        assert result.new_session.date == today + timedelta(days=1)
        assert result.new_session.status == SessionStatus.PLANNED
        assert result.new_session.session_id == "sess_2025-06-03_tempo"

    def test_dropped_outside_window(self, today, context, make_session):
        tempo = missed(make_session, today - timedelta(days=1), SessionType.TEMPO)

        result = plan_substitution(tempo, [today + timedelta(days=4)], [tempo], context)

        assert result.action == SubstitutionAction.DROP
        assert result.new_session is None

    def test_swap_respects_adjacency(self, today, context, make_session):
        tempo = missed(make_session, today - timedelta(days=1), SessionType.TEMPO)
        intervals = make_session(today + timedelta(days=2), SessionType.INTERVALS)

        result = plan_substitution(tempo, [today + timedelta(days=1)], [tempo, intervals], context)

        assert result.action == SubstitutionAction.DROP

    def test_swap_respects_budget(self, today, make_session):
        context = HardnessContext(today=today, ceiling=2, completed_hard_count=2)
        tempo = missed(make_session, today - timedelta(days=1), SessionType.TEMPO)

        result = plan_substitution(tempo, [today + timedelta(days=1)], [tempo], context)

        assert result.action == SubstitutionAction.DROP


class TestLongRun:
    def test_swapped_to_free_day(self, today, context, make_session):
        long_run = missed(make_session, today - timedelta(days=2), SessionType.LONG_RUN, minutes=80)

        result = plan_substitution(long_run, [today + timedelta(days=3)], [long_run], context)

        assert result.action == SubstitutionAction.SWAP
        assert result.new_session.duration_minutes == 80

    def test_shortened_into_next_zone2(self, today, context, make_session):
        long_run = missed(make_session, today - timedelta(days=2), SessionType.LONG_RUN, minutes=90)
        zone2s = [make_session(today + timedelta(days=d), SessionType.ZONE2) for d in (3, 1)]

        result = plan_substitution(long_run, [], [long_run, *zone2s], context)

        assert result.action == SubstitutionAction.SHORTEN
        assert result.replaced_ref == "sess_2025-06-03_z2"
        assert result.new_session.duration_minutes == 68
        assert result.new_session.session_type == SessionType.LONG_RUN

    def test_hard_long_run_eased_when_unsafe(self, today, context, make_session):
        long_run = missed(
            make_session, today - timedelta(days=2), SessionType.LONG_RUN, minutes=100, hardness=Hardness.HARD
        )
        zone2 = make_session(today + timedelta(days=1), SessionType.ZONE2)
        tempo = make_session(today + timedelta(days=2), SessionType.TEMPO)

        result = plan_substitution(long_run, [], [long_run, zone2, tempo], context)

        assert result.action == SubstitutionAction.SHORTEN
        assert result.new_session.hardness == Hardness.NORMAL

    def test_dropped_without_options(self, today, context, make_session):
        long_run = missed(make_session, today - timedelta(days=2), SessionType.LONG_RUN)

        assert plan_substitution(long_run, [], [long_run], context).action == SubstitutionAction.DROP


class TestOtherTypes:
    def test_intervals_always_dropped(self, today, context, make_session):
        intervals = missed(make_session, today - timedelta(days=1), SessionType.INTERVALS)

        result = plan_substitution(intervals, [today + timedelta(days=1)], [intervals], context)

        assert result.action == SubstitutionAction.DROP
        assert result.rule == "RULE_INTERVALS_MISSED_DROP"

    def test_strength_swapped_to_first_free_day(self, today, context, make_session):
        strength = missed(make_session, today - timedelta(days=1), SessionType.STRENGTH)
        occupied = make_session(today + timedelta(days=1), SessionType.ZONE2)

        result = plan_substitution(
            strength, [today + timedelta(days=1), today + timedelta(days=3)], [strength, occupied], context
        )

        assert result.action == SubstitutionAction.SWAP
        assert result.new_session.date == today + timedelta(days=3)

    def test_zone2_not_substituted(self, today, context, make_session):
        zone2 = missed(make_session, today - timedelta(days=1), SessionType.ZONE2)

        result = plan_substitution(zone2, [today], [zone2], context)

        assert result.action == SubstitutionAction.NONE

    def test_never_lands_in_the_past(self, today, context, make_session):
        strength = missed(make_session, today - timedelta(days=3), SessionType.STRENGTH)

        result = plan_substitution(strength, [today - timedelta(days=1)], [strength], context)

        assert result.action == SubstitutionAction.DROP


class TestApplySubstitutions:
    def test_replaced_zone2_removed_and_missed_kept(self, today, context, make_session):
        long_run = missed(make_session, today - timedelta(days=2), SessionType.LONG_RUN, minutes=80)
        zone2 = make_session(today + timedelta(days=2), SessionType.ZONE2)
        schedule = [long_run, zone2]
        substitution = plan_substitution(long_run, [], schedule, context)

        result = apply_substitutions(schedule, [substitution])

        assert result[0] is long_run
        assert [s.session_id for s in result] == ["sess_2025-05-31_lr", "sess_2025-06-04_lr"]

    def test_drop_leaves_schedule_unchanged(self, today, context, make_session):
        intervals = missed(make_session, today - timedelta(days=1), SessionType.INTERVALS)
        substitution = plan_substitution(intervals, [], [intervals], context)

        assert apply_substitutions([intervals], [substitution]) == (intervals,)
