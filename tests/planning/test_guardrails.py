"""Tests for the adjacency and hard-budget guardrails."""

from datetime import timedelta
from itertools import product

import pytest

from rollingplan.domain import FixedEvent, Hardness, SessionType
from rollingplan.metrics import classify_recent
from rollingplan.planning.guardrails import HardnessContext, apply_guardrails, enforce_adjacency, enforce_hard_budget

T, I, LR, ST, Z2 = (
    SessionType.TEMPO,
    SessionType.INTERVALS,
    SessionType.LONG_RUN,
    SessionType.STRENGTH,
    SessionType.ZONE2,
)


def context_for(today, ceiling=3, recent=(), fixed=()):
    return HardnessContext.build(today, ceiling, recent, fixed)


class TestAdjacency:
    def test_second_hard_endurance_day_demoted(self, today, make_session):
        sessions = [make_session(today, T), make_session(today + timedelta(days=1), I, minutes=35)]

        result = enforce_adjacency(sessions, context_for(today), zone2_minutes=45)

        assert [s.session_type for s in result.sessions] == [T, Z2]
        assert result.sessions[1].hardness == Hardness.NORMAL
        assert result.sessions[1].duration_minutes == 35
        assert result.demoted == ("sess_2025-06-03_intervals",)

    def test_hard_strength_dropped(self, today, make_session):
        sessions = [make_session(today, T), make_session(today + timedelta(days=1), ST, hardness=Hardness.HARD)]

        result = enforce_adjacency(sessions, context_for(today), zone2_minutes=45)

        assert [s.session_type for s in result.sessions] == [T]
        assert result.dropped == ("sess_2025-06-03_strength",)

    def test_completed_hard_yesterday_demotes_today(self, today, make_workout, make_session):
        recent = classify_recent([make_workout(today - timedelta(days=1), 40, effort_score=8)], today)
        sessions = [make_session(today, T)]

        result = enforce_adjacency(sessions, context_for(today, recent=recent), zone2_minutes=45)

        assert result.sessions[0].session_type == Z2

    def test_very_hard_workout_protects_second_day(self, today, make_workout, make_session):
        recent = classify_recent([make_workout(today - timedelta(days=1), 100, effort_score=9)], today)
        context = context_for(today, recent=recent)

        result = apply_guardrails([make_session(today + timedelta(days=1), T)], context, zone2_minutes=45)

        assert context.completed_very_hard_dates == {today - timedelta(days=1)}
        assert [s.session_type for s in result.sessions] == [Z2]
        assert result.demoted == ("sess_2025-06-03_tempo",)

    def test_hard_workout_does_not_protect_second_day(self, today, make_workout, make_session):
        recent = classify_recent([make_workout(today - timedelta(days=1), 40, effort_score=7)], today)

        result = enforce_adjacency(
            [make_session(today + timedelta(days=1), T)], context_for(today, recent=recent), zone2_minutes=45
        )

        assert [s.session_type for s in result.sessions] == [T]

    def test_hard_fixed_event_tomorrow_demotes_today(self, today, make_session):
        fixed = [FixedEvent(today + timedelta(days=1), "Volleyball", Hardness.HARD)]

        result = enforce_adjacency([make_session(today, I)], context_for(today, fixed=fixed), zone2_minutes=45)

        assert result.sessions[0].session_type == Z2

    def test_normal_sessions_untouched(self, today, make_session):
        sessions = [make_session(today + timedelta(days=d), Z2) for d in range(3)]

        result = enforce_adjacency(sessions, context_for(today), zone2_minutes=45)

        assert result.sessions == tuple(sessions)


class TestHardBudget:
    def test_intervals_dropped_first(self, today, make_session):
        sessions = [
            make_session(today, T),
            make_session(today + timedelta(days=2), I),
            make_session(today + timedelta(days=4), LR, minutes=95, hardness=Hardness.HARD),
        ]

        result = enforce_hard_budget(sessions, context_for(today, ceiling=2))

        assert [s.session_type for s in result.sessions] == [T, LR]
        assert result.dropped == ("sess_2025-06-04_intervals",)

    def test_completed_hard_sessions_count(self, today, make_workout, make_session):
        recent = classify_recent(
            [
                make_workout(today - timedelta(days=2), 40, effort_score=7),
                make_workout(today - timedelta(days=4), 40, effort_score=7),
            ],
            today,
        )
        sessions = [make_session(today + timedelta(days=1), T), make_session(today + timedelta(days=3), T)]

        result = enforce_hard_budget(sessions, context_for(today, ceiling=3, recent=recent))

        assert [s.date for s in result.sessions] == [today + timedelta(days=1)]

    def test_latest_dropped_within_type(self, today, make_session):
        sessions = [make_session(today, T), make_session(today + timedelta(days=3), T)]
        fixed = [FixedEvent(today + timedelta(days=5), "Soccer", Hardness.HARD)]

        result = enforce_hard_budget(sessions, context_for(today, ceiling=2, fixed=fixed))

        assert [s.date for s in result.sessions] == [today]

    def test_blocks_budgeted_separately(self, today, make_session):
        sessions = [make_session(today + timedelta(days=d), T) for d in (0, 2, 4, 7, 9, 11)]

        result = enforce_hard_budget(sessions, context_for(today, ceiling=2))

        assert [s.date for s in result.sessions] == [today + timedelta(days=d) for d in (0, 2, 7, 9)]


class TestCanPlaceHard:
    def test_neighbour_blocks(self, today, make_session):
        context = context_for(today)
        sessions = [make_session(today + timedelta(days=2), T)]

        assert not context.can_place_hard(today + timedelta(days=1), sessions)
        assert not context.can_place_hard(today + timedelta(days=3), sessions)
        assert context.can_place_hard(today + timedelta(days=4), sessions)

    def test_second_day_after_very_hard_blocks(self, today, make_workout):
        recent = classify_recent([make_workout(today - timedelta(days=1), 45, effort_score=9)], today)
        context = context_for(today, recent=recent)

        assert not context.can_place_hard(today + timedelta(days=1), [])
        assert context.can_place_hard(today + timedelta(days=2), [])

    def test_budget_blocks(self, today, make_session):
        context = context_for(today, ceiling=2)
        sessions = [make_session(today, T), make_session(today + timedelta(days=2), I)]

        assert not context.can_place_hard(today + timedelta(days=5), sessions)


@pytest.mark.parametrize(
    "pattern",
    [
        (T, I, LR, ST, T, I, LR),
        (ST, ST, T, T, I, I, Z2),
        (LR, T, LR, T, LR, T, LR),
        (I, Z2, I, Z2, I, Z2, I),
        (ST, T, ST, I, ST, LR, ST),
    ],
)
@pytest.mark.parametrize("ceiling", [2, 3, 5])
def test_guardrail_invariants(today, make_session, make_workout, pattern, ceiling):
    """After the guardrail pass no two consecutive days are hard and the budget holds."""
    sessions = [
        make_session(today + timedelta(days=d), kind, hardness=Hardness.HARD if kind in {LR, ST, T, I} else Hardness.NORMAL)
        for d, kind in enumerate(pattern)
    ]
    recent = classify_recent([make_workout(today - timedelta(days=1), 30, effort_score=9)], today)
    fixed = [FixedEvent(today + timedelta(days=3), "Basketball", Hardness.HARD)]
    context = context_for(today, ceiling=ceiling, recent=recent, fixed=fixed)

    result = apply_guardrails(sessions, context, zone2_minutes=45)

    hard_days = {s.date for s in result.sessions if s.is_hard} | context.completed_hard_dates | context.fixed_hard_dates
    for day in hard_days:
        if day + timedelta(days=1) in hard_days:
            assert day in context.completed_hard_dates | context.fixed_hard_dates
            assert day + timedelta(days=1) in context.completed_hard_dates | context.fixed_hard_dates
    planned_hard = sum(1 for s in result.sessions if s.is_hard)
    assert planned_hard + context.completed_hard_count + len(context.fixed_hard_dates) <= max(
        ceiling, context.completed_hard_count + len(context.fixed_hard_dates)
    )
    assert len({s.date for s in result.sessions}) == len(result.sessions)


def test_pattern_grid_never_violates_adjacency(today, make_session):
    for first, second in product([T, I, Z2], repeat=2):
        sessions = [make_session(today, first), make_session(today + timedelta(days=1), second)]

        result = apply_guardrails(sessions, context_for(today), zone2_minutes=45)

        assert sum(1 for s in result.sessions if s.is_hard) <= 1
