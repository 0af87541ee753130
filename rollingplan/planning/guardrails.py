"""Guardrail pass over placed sessions.

Two passes, in order:
1. Adjacency: no two consecutive calendar days may both carry hard or very
   hard load. Completed workouts and fixed events are immutable, so the
   planned session always gives way: endurance is demoted to Zone 2,
   strength is dropped.
2. Weekly hard budget: completed hard workouts in the rolling week, hard
   fixed events and planned hard sessions must not exceed the ceiling.
   Planned hard sessions are dropped Intervals first, then Tempo, Long Run
   and Strength, latest date first within a type.

Windows longer than a week are budgeted per 7-day block; completed workouts
count toward the first block only.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import date, timedelta

from loguru import logger

from rollingplan.domain.enums import Hardness, Modality, SessionType
from rollingplan.domain.models import ClassifiedWorkout, FixedEvent, PlanSession
from rollingplan.planning.placement import session_id

DROP_PRIORITY = {
    SessionType.INTERVALS: 0,
    SessionType.TEMPO: 1,
    SessionType.LONG_RUN: 2,
    SessionType.STRENGTH: 3,
}
ONE_DAY = timedelta(days=1)
TWO_DAYS = timedelta(days=2)


@dataclass(frozen=True)
class HardnessContext:
    """Immutable hard load around the planning window.

    Attributes:
        today: First day of the planning window
        ceiling: Maximum hard sessions per 7-day block
        completed_hard_dates: Dates of completed hard/very hard workouts
        completed_hard_count: Completed hard workouts in the rolling week
        completed_very_hard_dates: Dates of completed very hard workouts; they also
            keep the second day after them free of hard sessions
        fixed_hard_dates: Dates of hard fixed events
    """

    today: date
    ceiling: int
    completed_hard_dates: frozenset[date] = field(default_factory=frozenset)
    completed_hard_count: int = 0
    completed_very_hard_dates: frozenset[date] = field(default_factory=frozenset)
    fixed_hard_dates: frozenset[date] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        today: date,
        ceiling: int,
        recent: Iterable[ClassifiedWorkout],
        fixed_events: Iterable[FixedEvent],
    ) -> HardnessContext:
        hard_recent = [w for w in recent if w.is_hard and w.date <= today]
        return cls(
            today=today,
            ceiling=ceiling,
            completed_hard_dates=frozenset(w.date for w in hard_recent),
            completed_hard_count=len(hard_recent),
            completed_very_hard_dates=frozenset(w.date for w in hard_recent if w.stress_tier == Hardness.VERY_HARD),
            fixed_hard_dates=frozenset(e.date for e in fixed_events if e.hardness.is_hard),
        )

    def block_of(self, day: date) -> int:
        return (day - self.today).days // 7

    def immutable_hard_on(self, day: date) -> bool:
        return day in self.completed_hard_dates or day in self.fixed_hard_dates

    def hard_count(self, sessions: Iterable[PlanSession], block: int) -> int:
        """Hard load in a 7-day block: planned + hard fixed events (+ completed for block 0)."""
        planned = sum(1 for s in sessions if s.is_hard and self.block_of(s.date) == block)
        fixed = sum(1 for d in self.fixed_hard_dates if self.block_of(d) == block)
        completed = self.completed_hard_count if block == 0 else 0
        return planned + fixed + completed

    def recovering_from_very_hard(self, day: date) -> bool:
        """Whether `day` falls two days after a completed very hard workout."""
        return day - TWO_DAYS in self.completed_very_hard_dates

    def neighbours_hard(self, day: date, sessions: Iterable[PlanSession]) -> bool:
        """Whether the day before or after carries hard load (excluding `day` itself)."""
        neighbours = {day - ONE_DAY, day + ONE_DAY}
        if self.recovering_from_very_hard(day) or any(self.immutable_hard_on(d) for d in neighbours):
            return True
        return any(s.is_hard and s.date in neighbours for s in sessions)

    def can_place_hard(self, day: date, sessions: Sequence[PlanSession]) -> bool:
        """Whether a new hard session on `day` keeps adjacency and budget intact."""
        others = [s for s in sessions if s.date != day]
        if self.neighbours_hard(day, others):
            return False
        return self.hard_count(others, self.block_of(day)) + 1 <= self.ceiling


@dataclass(frozen=True)
class GuardrailResult:
    """Sessions after the guardrail pass plus what changed.

    Attributes:
        sessions: Surviving sessions in date order
        demoted: Session ids demoted to Zone 2 by the adjacency rule
        dropped: Session ids removed by either pass
    """

    sessions: tuple[PlanSession, ...]
    demoted: tuple[str, ...] = ()
    dropped: tuple[str, ...] = ()


def demote_to_zone2(session: PlanSession, zone2_minutes: int, reason: str) -> PlanSession:
    """Replace a hard endurance session with an easy Zone 2 on the same date."""
    return replace(
        session,
        session_id=session_id(session.date, SessionType.ZONE2),
        session_type=SessionType.ZONE2,
        title="Zone 2",
        duration_minutes=min(session.duration_minutes, zone2_minutes),
        hardness=Hardness.NORMAL,
        intensity="Z2",
        notes=(*session.notes, reason),
    )


def enforce_adjacency(
    sessions: Sequence[PlanSession],
    context: HardnessContext,
    zone2_minutes: int,
) -> GuardrailResult:
    """Remove back-to-back hard days, demoting or dropping the planned side.

    A very hard day forces the following day to be session-free or normal,
    which the same check covers since the follow-up may not be hard. A
    completed very hard workout also rules out hard work two days later.
    """
    kept: list[PlanSession] = []
    demoted: list[str] = []
    dropped: list[str] = []
    for session in sorted(sessions, key=lambda s: s.date):
        if not session.is_hard:
            kept.append(session)
            continue
        previous_hard = (
            context.immutable_hard_on(session.date - ONE_DAY)
            or context.recovering_from_very_hard(session.date)
            or any(s.is_hard and s.date == session.date - ONE_DAY for s in kept)
        )
        next_fixed_hard = session.date + ONE_DAY in context.fixed_hard_dates
        if not (previous_hard or next_fixed_hard):
            kept.append(session)
            continue

        if session.modality == Modality.ENDURANCE:
            replacement = demote_to_zone2(session, zone2_minutes, f"demoted from {session.session_type.value}: adjacent hard day")
            demoted.append(session.session_id)
            kept.append(replacement)
            logger.debug(f"Adjacency: demoted {session.session_id} to Zone 2")
        else:
            dropped.append(session.session_id)
            logger.debug(f"Adjacency: dropped {session.session_id}")
    return GuardrailResult(sessions=tuple(kept), demoted=tuple(demoted), dropped=tuple(dropped))


def enforce_hard_budget(sessions: Sequence[PlanSession], context: HardnessContext) -> GuardrailResult:
    """Drop lowest-priority planned hard sessions until every block fits the ceiling."""
    kept = sorted(sessions, key=lambda s: s.date)
    dropped: list[str] = []
    blocks = sorted({context.block_of(s.date) for s in kept})
    for block in blocks:
        while context.hard_count(kept, block) > context.ceiling:
            candidates = [s for s in kept if s.is_hard and context.block_of(s.date) == block]
            if not candidates:
                # Completed and fixed load alone exceed the ceiling; nothing planned left to drop
                break
            victim = min(candidates, key=lambda s: (DROP_PRIORITY[s.session_type], -s.date.toordinal()))
            kept.remove(victim)
            dropped.append(victim.session_id)
            logger.debug(f"Hard budget: dropped {victim.session_id}")
    return GuardrailResult(sessions=tuple(kept), dropped=tuple(dropped))


def apply_guardrails(
    sessions: Sequence[PlanSession],
    context: HardnessContext,
    zone2_minutes: int,
) -> GuardrailResult:
    """Run the adjacency pass, then the hard-budget pass.

    Args:
        sessions: Placed sessions
        context: Immutable hard load and ceiling
        zone2_minutes: Duration cap for demoted endurance sessions

    Returns:
        GuardrailResult combining both passes
    """
    adjacency = enforce_adjacency(sessions, context, zone2_minutes)
    budget = enforce_hard_budget(adjacency.sessions, context)
    result = GuardrailResult(
        sessions=budget.sessions,
        demoted=adjacency.demoted,
        dropped=adjacency.dropped + budget.dropped,
    )
    logger.info(
        "Guardrails applied",
        kept=len(result.sessions),
        demoted=len(result.demoted),
        dropped=len(result.dropped),
        ceiling=context.ceiling,
    )
    return result
