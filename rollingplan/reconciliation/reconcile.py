"""Plan reconciliation engine.

Deterministic reconciliation that compares:
- The previously published schedule
- Completed workouts

and assigns each past planned session a terminal status:
- completed: a same-date, same-modality workout matched it
- skipped: no match, and an illness/travel/injury window covers the date
- missed: no match and no status window

Only sessions dated strictly before today are reconciled. Sessions already
terminal, in the schedule or in the audit log, are replayed from the log
rather than decided again, so a second run over the same inputs appends
nothing. Missed sessions get forward-only substitutions.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

from loguru import logger

from rollingplan.config.settings import Settings, settings as default_settings
from rollingplan.core.observability import PlannerStage, stage_timer
from rollingplan.domain.enums import SessionStatus
from rollingplan.domain.models import AdaptationLogEntry, Constraints, PlanSession, StatusWindow, WorkoutRecord
from rollingplan.metrics.classification import classify_recent, modality_for_type
from rollingplan.planning.guardrails import HardnessContext
from rollingplan.planning.slots import resolve_slots
from rollingplan.reconciliation.audit import AdaptationLog, latest_terminal_entries, log_adaptation
from rollingplan.reconciliation.substitution import apply_substitutions, plan_substitution
from rollingplan.reconciliation.types import (
    MISSED_RULES,
    ReconcileRule,
    ReconciliationReport,
    SessionOutcome,
    Substitution,
)


def workout_key(workout: WorkoutRecord, index: int) -> str:
    """Stable identity for a workout within one run."""
    return workout.workout_id or f"workout:{workout.date.isoformat()}:{index}"


def select_best_match(
    session: PlanSession,
    workouts: Sequence[WorkoutRecord],
    used: set[str],
) -> tuple[str, WorkoutRecord] | None:
    """Pick the unused same-date, same-modality workout with the nearest duration.

    Ties go to the workout that appears first in the input.

    Args:
        session: Planned session
        workouts: Workout history in input order
        used: Keys of workouts already matched to other sessions

    Returns:
        (key, workout) of the best candidate, or None
    """
    candidates = [
        (abs(w.duration_minutes - session.duration_minutes), index, w)
        for index, w in enumerate(workouts)
        if w.date == session.date
        and modality_for_type(w.workout_type) == session.modality
        and workout_key(w, index) not in used
    ]
    if not candidates:
        return None
    _, index, best = min(candidates, key=lambda c: (c[0], c[1]))
    return workout_key(best, index), best


def _free_days(
    constraints: Constraints | None,
    schedule: Sequence[PlanSession],
    workouts: Sequence[WorkoutRecord],
    today: date,
    status_window: StatusWindow | None,
) -> list[date]:
    if constraints is None:
        return []
    resolution = resolve_slots(
        constraints,
        today,
        7,
        completed_dates={w.date for w in workouts if w.date >= today},
        terminal_dates={s.date for s in schedule if s.is_terminal},
        status_window=status_window,
    )
    occupied = {s.date for s in schedule}
    return [slot.date for slot in resolution.open_slots if slot.date not in occupied]


def reconcile_schedule(
    prior_schedule: Sequence[PlanSession],
    workouts: Iterable[WorkoutRecord],
    today: date,
    *,
    log: AdaptationLog,
    status_window: StatusWindow | None = None,
    constraints: Constraints | None = None,
    hard_ceiling: int | None = None,
    now: datetime | None = None,
    settings: Settings | None = None,
) -> ReconciliationReport:
    """Reconcile a published schedule against what actually happened.

    Args:
        prior_schedule: Previously published sessions
        workouts: Completed workout history
        today: Reference local date; sessions before it are reconciled
        log: Append-only audit sink
        status_window: Illness/travel/injury window, if any
        constraints: Intake constraints, used to find free days for swaps
        hard_ceiling: Hard sessions per week for swap safety (default from settings)
        now: Timestamp for new audit entries (default: current UTC time)
        settings: Optional settings override

    Returns:
        ReconciliationReport with updated schedule, outcomes and substitutions
    """
    cfg = settings or default_settings
    workouts = list(workouts)
    now = now or datetime.now(timezone.utc)
    logged = latest_terminal_entries(log)
    used: set[str] = set()
    outcomes: list[SessionOutcome] = []
    new_entries: list[AdaptationLogEntry] = []
    updated: dict[str, PlanSession] = {}

    with stage_timer(PlannerStage.RECONCILE) as meta:
        for session in sorted(prior_schedule, key=lambda s: s.date):
            if session.date >= today:
                continue

            if session.is_terminal or session.session_id in logged:
                entry = logged.get(session.session_id)
                status = entry.to_status if entry else session.status
                outcomes.append(
                    SessionOutcome(
                        session_id=session.session_id,
                        date=session.date,
                        from_status=entry.from_status if entry else session.status,
                        to_status=status,
                        rule=entry.rule_applied if entry else "already_terminal",
                        matched_workout_id=entry.matched_workout_id if entry else None,
                        replayed=True,
                    )
                )
                if entry and entry.matched_workout_id:
                    used.add(entry.matched_workout_id)
                updated[session.session_id] = replace(session, status=status)
                continue

            match = select_best_match(session, workouts, used)
            if match is not None:
                key, _ = match
                used.add(key)
                to_status, rule, matched_id = SessionStatus.COMPLETED, ReconcileRule.MATCHED, key
            elif status_window is not None and status_window.covers(session.date, open_start=False):
                to_status, rule, matched_id = SessionStatus.SKIPPED, ReconcileRule.DISRUPTION_DELOAD, None
            else:
                to_status, rule, matched_id = SessionStatus.MISSED, MISSED_RULES[session.session_type], None

            entry = AdaptationLogEntry(
                timestamp=now,
                session_ref=session.session_id,
                from_status=session.status,
                to_status=to_status,
                rule_applied=rule.value,
                matched_workout_id=matched_id,
            )
            log_adaptation(log, entry)
            new_entries.append(entry)
            outcomes.append(
                SessionOutcome(
                    session_id=session.session_id,
                    date=session.date,
                    from_status=session.status,
                    to_status=to_status,
                    rule=rule.value,
                    matched_workout_id=matched_id,
                )
            )
            updated[session.session_id] = replace(session, status=to_status)
            logger.info(
                f"[RECONCILIATION] session_id={session.session_id} "
                f"status={to_status.value} "
                f"rule={rule.value}"
            )

        schedule = tuple(updated.get(s.session_id, s) for s in prior_schedule)

        substitutions: list[Substitution] = []
        recent = classify_recent(workouts, today - timedelta(days=1), days=7)
        context = HardnessContext.build(today, hard_ceiling or cfg.default_hard_ceiling, recent, ())
        for entry in new_entries:
            if entry.to_status != SessionStatus.MISSED:
                continue
            missed = updated[entry.session_ref]
            free_days = _free_days(constraints, schedule, workouts, today, status_window)
            substitution = plan_substitution(missed, free_days, schedule, context)
            substitutions.append(substitution)
            schedule = apply_substitutions(schedule, [substitution])

        deload_next_run = any(o.rule == ReconcileRule.DISRUPTION_DELOAD.value for o in outcomes)
        meta["reconciled"] = len(new_entries)
        meta["replayed"] = sum(1 for o in outcomes if o.replayed)
        meta["deload_next_run"] = deload_next_run

    return ReconciliationReport(
        sessions=tuple(sorted(schedule, key=lambda s: s.date)),
        outcomes=tuple(outcomes),
        new_entries=tuple(new_entries),
        substitutions=tuple(substitutions),
        deload_next_run=deload_next_run,
    )
