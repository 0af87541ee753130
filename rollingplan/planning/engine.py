"""Planning run orchestration.

One call to plan_week is one run-to-completion planning pass:

    validate -> classify -> load ratio -> targets -> slots -> placement
    -> guardrails -> readiness gate -> long-run carry-over -> report

Every stage takes `today` explicitly; nothing here reads the clock. Only
invalid intake is fatal. Every other condition becomes a PlanFlag on the
result.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Any

from loguru import logger

from rollingplan.config.settings import Settings, settings as default_settings
from rollingplan.core.observability import PlannerStage, log_event, stage_timer
from rollingplan.domain.enums import Hardness, Modality, PlanFlag, PlanMode, SessionType
from rollingplan.domain.errors import InsufficientDataError
from rollingplan.domain.models import (
    DaySlot,
    FixedEvent,
    Intake,
    LoadRatio,
    PlanSession,
    ReadinessSnapshot,
    StatusWindow,
    WorkoutRecord,
)
from rollingplan.intake.validation import validate_intake
from rollingplan.metrics.classification import classify_recent
from rollingplan.metrics.load_ratio import compute_load_ratio
from rollingplan.planning.guardrails import HardnessContext, apply_guardrails
from rollingplan.planning.phase import MarathonPhase, find_race, marathon_phase, resolve_mode
from rollingplan.planning.placement import SessionFactory, max_minutes_for, place_sessions, session_id
from rollingplan.planning.readiness import apply_readiness_gate
from rollingplan.planning.recommendations import Recommendation, build_recommendations, polarized_ratio
from rollingplan.planning.slots import cap_slots, fixed_events_in_window, resolve_slots
from rollingplan.planning.targets import WeeklyTargets, compute_targets, derive_hard_ceiling

MIN_STRENGTH_SESSIONS = 2


@dataclass(frozen=True)
class PlanResult:
    """Output of one planning run.

    Attributes:
        today: Reference local date the plan starts on
        mode: Planning mode
        sessions: Planned sessions in date order
        load_ratio: Load ratio report (risk tier unknown without enough data)
        targets: Weekly quotas and deload state
        hard_ceiling: Hard sessions allowed per 7-day block
        flags: Non-fatal conditions raised during the run
        recommendations: Coaching notes
        fixed_events: Fixed appointments expanded onto the window
        polarized_ratio: Hard share of planned endurance sessions
        phase: Marathon phase, when a race is planned
        excluded_days: Reason each non-open day was excluded
    """

    today: date
    mode: PlanMode
    sessions: tuple[PlanSession, ...]
    load_ratio: LoadRatio
    targets: WeeklyTargets
    hard_ceiling: int
    flags: tuple[PlanFlag, ...] = ()
    recommendations: tuple[Recommendation, ...] = ()
    fixed_events: tuple[FixedEvent, ...] = ()
    polarized_ratio: float = 0.0
    phase: MarathonPhase | None = None
    excluded_days: dict[date, str] = field(default_factory=dict)

    def has_flag(self, flag: PlanFlag) -> bool:
        return flag in self.flags

    def to_dict(self) -> dict[str, Any]:
        """Render JSON-compatible output for the external publisher."""
        return {
            "weekOf": self.today.isoformat(),
            "mode": self.mode.value,
            "sessions": [s.to_dict() for s in self.sessions],
            "loadRatio": self.load_ratio.to_dict(),
            "targets": {**self.targets.to_dict(), "maxHardPerWeek": self.hard_ceiling},
            "flags": [f.value for f in self.flags],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "fixedEvents": [
                {"localDate": e.date.isoformat(), "title": e.title, "hardness": e.hardness.value}
                for e in self.fixed_events
            ],
            "polarizedRatio": {
                "hardShare": self.polarized_ratio,
                "ok": PlanFlag.POLARIZED_RATIO_EXCEEDED not in self.flags,
            },
            "marathonPhase": (
                {"phase": self.phase.name.value, "weeksToRace": self.phase.weeks_to_race} if self.phase else None
            ),
        }


def status_window_active(status_window: StatusWindow | None, today: date, days: int) -> bool:
    """Whether a status window overlaps the planning window."""
    if status_window is None:
        return False
    window_end = today + timedelta(days=days - 1)
    if status_window.until < today:
        return False
    return status_window.since is None or status_window.since <= window_end


def carry_over_long_run(
    sessions: Sequence[PlanSession],
    gated: PlanSession,
    open_slots: Sequence[DaySlot],
    context: HardnessContext,
) -> tuple[PlanSession, ...] | None:
    """Re-place a readiness-downgraded Long Run later in the window.

    Tries a free weekend slot first, then any other free slot, then replaces
    a later Zone 2 (weekend first). A hard Long Run must keep adjacency and
    the hard budget intact.

    Args:
        sessions: Sessions after the readiness gate
        gated: The downgraded Long Run as it was before the gate
        open_slots: Slots left after the weekly session cap; free days
            outside them are never used
        context: Immutable hard load and ceiling

    Returns:
        New session tuple, or None when no safe landing day exists
    """

    def lands_safely(day: date, others: Sequence[PlanSession]) -> bool:
        return not gated.is_hard or context.can_place_hard(day, others)

    def moved_to(day: date) -> PlanSession:
        return replace(
            gated,
            session_id=session_id(day, SessionType.LONG_RUN),
            date=day,
            notes=(*gated.notes, f"carried over from {gated.date.isoformat()}"),
        )

    def weekend_first(day: date) -> tuple[bool, date]:
        return (day.weekday() < 5, day)

    occupied = {s.date for s in sessions}
    free_days = sorted((s.date for s in open_slots if s.date > gated.date and s.date not in occupied), key=weekend_first)
    for day in free_days:
        if lands_safely(day, sessions):
            return tuple(sorted((*sessions, moved_to(day)), key=lambda s: s.date))

    zone2_days = sorted(
        (
            s.date
            for s in sessions
            if s.session_type == SessionType.ZONE2 and s.date > gated.date and not s.readiness_gated
        ),
        key=weekend_first,
    )
    for day in zone2_days:
        others = [s for s in sessions if s.date != day]
        if lands_safely(day, others):
            return tuple(sorted((*others, moved_to(day)), key=lambda s: s.date))
    return None


def plan_week(
    intake: Intake,
    workouts: Iterable[WorkoutRecord],
    today: date,
    *,
    readiness: ReadinessSnapshot | None = None,
    status_window: StatusWindow | None = None,
    prior_schedule: Sequence[PlanSession] = (),
    deload_requested: bool = False,
    settings: Settings | None = None,
) -> PlanResult:
    """Produce the rolling schedule starting on `today`.

    Args:
        intake: Goals, milestones, constraints and baseline
        workouts: Completed workout history
        today: Reference local date (first day of the window)
        readiness: Today's readiness snapshot, if any
        status_window: Active illness/travel/injury window, if any
        prior_schedule: Previously published sessions (terminal dates stay excluded)
        deload_requested: Deload requested by reconciliation
        settings: Optional settings override

    Returns:
        PlanResult

    Raises:
        InvalidConstraintsError: If the intake fails validation
    """
    cfg = settings or default_settings
    workouts = list(workouts)
    window_days = cfg.planning_window_days
    window_end = today + timedelta(days=window_days - 1)
    flags: list[PlanFlag] = []

    with stage_timer(PlannerStage.VALIDATE):
        validate_intake(intake)

    with stage_timer(PlannerStage.CLASSIFY) as meta:
        recent = classify_recent(workouts, today, days=7)
        meta["recent"] = len(recent)

    with stage_timer(PlannerStage.LOAD_RATIO) as meta:
        try:
            load_ratio = compute_load_ratio(workouts, today, cfg)
        except InsufficientDataError as e:
            logger.info(f"No load ratio signal, planning from baseline: {e}")
            load_ratio = LoadRatio.unknown(e.days_with_data)
            flags.append(PlanFlag.INSUFFICIENT_DATA)
        meta["risk_tier"] = load_ratio.risk_tier.value

    with stage_timer(PlannerStage.TARGETS) as meta:
        mode = resolve_mode(intake.goals, intake.milestones)
        race = find_race(intake, today)
        phase = marathon_phase(race.race_date, today, race.training_start_date) if race else None
        window_status = status_window_active(status_window, today, window_days)
        targets = compute_targets(
            intake.baseline,
            mode,
            recent,
            load_ratio,
            deload_requested=deload_requested,
            status_window_active=window_status,
            settings=cfg,
        )
        very_hard = sum(1 for w in recent if w.stress_tier == Hardness.VERY_HARD)
        ceiling = derive_hard_ceiling(intake.baseline, load_ratio.ratio, very_hard, cfg)
        meta["mode"] = mode.value
        meta["hard_ceiling"] = ceiling
    if targets.deload:
        flags.append(PlanFlag.DELOAD)
    if window_status:
        flags.append(PlanFlag.STATUS_WINDOW_ACTIVE)

    with stage_timer(PlannerStage.SLOTS) as meta:
        fixed_events = fixed_events_in_window(intake.constraints, today, window_days)
        completed_dates = {w.date for w in workouts if today <= w.date <= window_end}
        terminal_dates = {s.date for s in prior_schedule if s.is_terminal and today <= s.date <= window_end}
        resolution = resolve_slots(
            intake.constraints,
            today,
            window_days,
            completed_dates=completed_dates,
            terminal_dates=terminal_dates,
            status_window=status_window,
        )
        meta["open_slots"] = len(resolution.open_slots)
    if terminal_dates:
        flags.append(PlanFlag.STALE_SCHEDULE_CONFLICT)
    if not resolution.open_slots:
        flags.append(PlanFlag.NO_OPEN_SLOTS)

    factory = SessionFactory(
        baseline=intake.baseline,
        max_minutes=max_minutes_for(intake.constraints, race, phase, cfg),
        deload=targets.deload,
        phase=phase,
        race=race,
        settings=cfg,
    )

    with stage_timer(PlannerStage.PLACEMENT) as meta:
        placed: list[PlanSession] = []
        placeable: list[DaySlot] = []
        carried = False
        strength_offset = 0
        max_sessions = intake.constraints.max_sessions_per_week
        for block in range((window_days + 6) // 7):
            block_start = today + timedelta(days=7 * block)
            block_slots = [s for s in resolution.open_slots if (s.date - today).days // 7 == block]
            if block == 0:
                endurance, strength = targets.remaining_endurance, targets.remaining_strength
                limit = max_sessions - len(recent) if max_sessions is not None else None
            else:
                endurance, strength = targets.endurance, targets.strength
                limit = max_sessions
            capped = cap_slots(block_slots, limit)
            placeable.extend(capped)
            placement = place_sessions(
                capped,
                mode,
                endurance,
                strength,
                factory,
                week_start=block_start,
                strength_offset=strength_offset,
            )
            placed.extend(placement.sessions)
            strength_offset += sum(1 for s in placement.sessions if s.modality == Modality.STRENGTH)
            carried = carried or placement.carried_over
        meta["placed"] = len(placed)
    if carried:
        flags.append(PlanFlag.QUOTA_CARRIED_OVER)

    context = HardnessContext.build(today, ceiling, recent, fixed_events)
    with stage_timer(PlannerStage.GUARDRAILS) as meta:
        guarded = apply_guardrails(placed, context, factory.zone2(today).duration_minutes)
        meta["dropped"] = len(guarded.dropped)
        meta["demoted"] = len(guarded.demoted)

    with stage_timer(PlannerStage.READINESS) as meta:
        decision = apply_readiness_gate(guarded.sessions, readiness, today, cfg)
        meta["reason"] = decision.reason
    sessions = decision.sessions
    if decision.gated is not None:
        flags.append(PlanFlag.READINESS_GATED)
        if decision.gated.session_type == SessionType.LONG_RUN:
            moved = carry_over_long_run(sessions, decision.gated, placeable, context)
            if moved is None:
                flags.append(PlanFlag.LR_CARRYOVER_FAILED)
                logger.info("Long run carry-over failed", from_date=decision.gated.date.isoformat())
            else:
                sessions = moved

    planned_strength = sum(1 for s in sessions if s.modality == Modality.STRENGTH)
    if targets.strength >= MIN_STRENGTH_SESSIONS and targets.completed_strength + planned_strength < MIN_STRENGTH_SESSIONS:
        flags.append(PlanFlag.STRENGTH_SHORTFALL)
    hard_share = polarized_ratio(sessions)
    if hard_share > cfg.polarized_hard_share_max:
        flags.append(PlanFlag.POLARIZED_RATIO_EXCEEDED)

    recommendations = build_recommendations(
        intake.goals,
        flags,
        load_ratio=load_ratio,
        readiness=readiness,
        phase=phase if race is not None and race.is_marathon else None,
    )
    result = PlanResult(
        today=today,
        mode=mode,
        sessions=tuple(sessions),
        load_ratio=load_ratio,
        targets=targets,
        hard_ceiling=ceiling,
        flags=tuple(flags),
        recommendations=tuple(recommendations),
        fixed_events=tuple(fixed_events),
        polarized_ratio=hard_share,
        phase=phase,
        excluded_days=resolution.excluded,
    )
    log_event(
        "plan_generated",
        today=today.isoformat(),
        mode=mode.value,
        sessions=len(result.sessions),
        flags=",".join(f.value for f in result.flags),
    )
    return result
