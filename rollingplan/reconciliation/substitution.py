"""Substitution rules for missed sessions.

Rules are applied forward only: terminal sessions are never rewritten, and
new sessions land on dates >= today.

- Long Run: swap to the next free day, else shorten by upgrading the next
  Zone 2 to a Long Run at 75% of the missed duration, else drop.
- Tempo: swap into a free day 48-72h after the missed date, else drop.
- Intervals: drop; they are the first class to go under budget pressure.
- Strength: swap to the next free day when safe, else drop.
- Zone 2: no substitution.

Hard sessions only land where adjacency and the hard budget stay intact.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from datetime import date, timedelta

from loguru import logger

from rollingplan.domain.enums import Hardness, SessionStatus, SessionType, SubstitutionAction
from rollingplan.domain.models import PlanSession
from rollingplan.planning.guardrails import HardnessContext
from rollingplan.planning.phase import round_half_up
from rollingplan.planning.placement import session_id
from rollingplan.reconciliation.types import MISSED_RULES, ReconcileRule, Substitution

SHORTENED_LONG_RUN_SHARE = 0.75
TEMPO_SWAP_WINDOW_DAYS = (2, 3)


def _forward(schedule: Iterable[PlanSession], today: date) -> list[PlanSession]:
    return [s for s in schedule if s.date >= today and s.status == SessionStatus.PLANNED]


def _moved(session: PlanSession, day: date, note: str) -> PlanSession:
    return replace(
        session,
        session_id=session_id(day, session.session_type),
        date=day,
        status=SessionStatus.PLANNED,
        notes=(*session.notes, note),
    )


def _safe(day: date, hardness: Hardness, forward: Sequence[PlanSession], context: HardnessContext) -> bool:
    if not hardness.is_hard:
        return True
    return context.can_place_hard(day, forward)


def _first_free_day(
    candidates: Iterable[date],
    session: PlanSession,
    schedule: Sequence[PlanSession],
    context: HardnessContext,
) -> date | None:
    occupied = {s.date for s in schedule}
    forward = _forward(schedule, context.today)
    for day in sorted(candidates):
        if day < context.today or day in occupied:
            continue
        if _safe(day, session.hardness, forward, context):
            return day
    return None


def _swap_or_drop(
    missed: PlanSession,
    rule: ReconcileRule,
    free_days: Iterable[date],
    schedule: Sequence[PlanSession],
    context: HardnessContext,
) -> Substitution:
    day = _first_free_day(free_days, missed, schedule, context)
    if day is None:
        return Substitution(missed.session_id, SubstitutionAction.DROP, rule)
    moved = _moved(missed, day, f"swapped from {missed.date.isoformat()}")
    return Substitution(missed.session_id, SubstitutionAction.SWAP, rule, new_session=moved)


def substitute_long_run(
    missed: PlanSession,
    free_days: Iterable[date],
    schedule: Sequence[PlanSession],
    context: HardnessContext,
) -> Substitution:
    rule = ReconcileRule.LR_MISSED_SWAP_OR_SHORTEN
    swap = _swap_or_drop(missed, rule, free_days, schedule, context)
    if swap.action == SubstitutionAction.SWAP:
        return swap

    forward = _forward(schedule, context.today)
    for zone2 in sorted((s for s in forward if s.session_type == SessionType.ZONE2), key=lambda s: s.date):
        others = [s for s in forward if s.date != zone2.date]
        hardness = missed.hardness if _safe(zone2.date, missed.hardness, others, context) else Hardness.NORMAL
        shortened = replace(
            _moved(missed, zone2.date, f"shortened from {missed.date.isoformat()}"),
            duration_minutes=round_half_up(missed.duration_minutes * SHORTENED_LONG_RUN_SHARE),
            hardness=hardness,
        )
        return Substitution(
            missed.session_id,
            SubstitutionAction.SHORTEN,
            rule,
            new_session=shortened,
            replaced_ref=zone2.session_id,
        )
    return Substitution(missed.session_id, SubstitutionAction.DROP, rule)


def substitute_tempo(
    missed: PlanSession,
    free_days: Iterable[date],
    schedule: Sequence[PlanSession],
    context: HardnessContext,
) -> Substitution:
    low, high = TEMPO_SWAP_WINDOW_DAYS
    window = {missed.date + timedelta(days=d) for d in range(low, high + 1)}
    in_window = [d for d in free_days if d in window]
    return _swap_or_drop(missed, ReconcileRule.TEMPO_MISSED_SWAP, in_window, schedule, context)


def substitute_intervals(
    missed: PlanSession,
    free_days: Iterable[date],
    schedule: Sequence[PlanSession],
    context: HardnessContext,
) -> Substitution:
    return Substitution(missed.session_id, SubstitutionAction.DROP, ReconcileRule.INTERVALS_MISSED_DROP)


def substitute_strength(
    missed: PlanSession,
    free_days: Iterable[date],
    schedule: Sequence[PlanSession],
    context: HardnessContext,
) -> Substitution:
    return _swap_or_drop(missed, ReconcileRule.STRENGTH_MISSED_SWAP, free_days, schedule, context)


def substitute_zone2(
    missed: PlanSession,
    free_days: Iterable[date],
    schedule: Sequence[PlanSession],
    context: HardnessContext,
) -> Substitution:
    return Substitution(missed.session_id, SubstitutionAction.NONE, ReconcileRule.Z2_MISSED_SKIP)


SubstitutionRule = Callable[[PlanSession, Iterable[date], Sequence[PlanSession], HardnessContext], Substitution]

SUBSTITUTION_RULES: dict[SessionType, SubstitutionRule] = {
    SessionType.LONG_RUN: substitute_long_run,
    SessionType.TEMPO: substitute_tempo,
    SessionType.INTERVALS: substitute_intervals,
    SessionType.STRENGTH: substitute_strength,
    SessionType.ZONE2: substitute_zone2,
}


def plan_substitution(
    missed: PlanSession,
    free_days: Iterable[date],
    schedule: Sequence[PlanSession],
    context: HardnessContext,
) -> Substitution:
    """Decide the forward adjustment for one missed session.

    Args:
        missed: The session that was missed
        free_days: Open days a session may move to (availability already applied)
        schedule: Current schedule, including forward sessions
        context: Hard load around the window, with today and the ceiling

    Returns:
        Substitution decision
    """
    rule = SUBSTITUTION_RULES.get(missed.session_type)
    if rule is None:
        return Substitution(missed.session_id, SubstitutionAction.NONE, MISSED_RULES[SessionType.ZONE2])
    substitution = rule(missed, list(free_days), schedule, context)
    logger.debug(
        f"Substitution for {missed.session_id}: {substitution.action.value} ({substitution.rule})"
    )
    return substitution


def apply_substitutions(schedule: Sequence[PlanSession], substitutions: Iterable[Substitution]) -> tuple[PlanSession, ...]:
    """Apply substitutions to a schedule.

    New sessions are added and replaced forward sessions removed. Missed and
    other terminal sessions stay as they are.
    """
    sessions = list(schedule)
    for substitution in substitutions:
        if substitution.new_session is None:
            continue
        if substitution.replaced_ref is not None:
            sessions = [
                s for s in sessions if not (s.session_id == substitution.replaced_ref and s.status == SessionStatus.PLANNED)
            ]
        sessions.append(substitution.new_session)
    return tuple(sorted(sessions, key=lambda s: s.date))
