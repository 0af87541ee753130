"""Intake validation.

Structural problems (unknown enum values, wrong types) are rejected by the
pydantic models at parse time. This module checks the semantic contract the
planner relies on and reports every problem at once, so a single re-intake
round can fix them all.
"""

from __future__ import annotations

from collections import Counter

from loguru import logger

from rollingplan.domain.enums import GoalKind
from rollingplan.domain.errors import InvalidConstraintsError
from rollingplan.domain.models import Intake

RACE_SUB_KINDS = frozenset(
    {
        "marathon",
        "half",
        "10k",
        "5k",
        "cycling",
        "triathlon_sprint",
        "triathlon_olympic",
        "triathlon_70.3",
        "triathlon_ironman",
    }
)

Z2_DURATION_RANGE = (20, 120)
HARD_SESSIONS_RANGE = (2, 5)


def collect_intake_errors(intake: Intake) -> list[str]:
    """Return all semantic validation errors for an intake (empty if valid)."""
    errors: list[str] = []
    constraints = intake.constraints

    if not constraints.days_available:
        errors.append('daysAvailable is required and must be non-empty. Ask user: "Which days can you train?"')
    if not constraints.preferred_rest_days:
        errors.append('preferredRestDays is required and must be non-empty. Ask user: "Which days do you want to rest?"')
    overlap = set(constraints.days_available) & set(constraints.preferred_rest_days)
    if overlap:
        days = ", ".join(sorted(d.value for d in overlap))
        errors.append(f"daysAvailable and preferredRestDays overlap on: {days}")

    duplicate_ids = [goal_id for goal_id, count in Counter(g.id for g in intake.goals).items() if count > 1]
    for goal_id in duplicate_ids:
        errors.append(f'Duplicate goal id "{goal_id}"')

    for goal in intake.goals:
        if goal.kind == GoalKind.ENDURANCE and goal.sub_kind in RACE_SUB_KINDS and goal.date_local is None:
            errors.append(f'Endurance goal "{goal.id}" requires dateLocal (YYYY-MM-DD) for race planning.')

    for appointment in constraints.fixed_appointments:
        label = appointment.id or appointment.name
        if not appointment.name.strip():
            errors.append("Each fixedAppointment must have a name.")
        if appointment.season_start and appointment.season_end and appointment.season_start > appointment.season_end:
            errors.append(f'fixedAppointment "{label}": seasonStart must be before seasonEnd.')

    baseline = intake.baseline
    if baseline.z2_duration_minutes is not None:
        low, high = Z2_DURATION_RANGE
        if not low <= baseline.z2_duration_minutes <= high:
            errors.append(f"baseline.z2DurationMinutes must be between {low} and {high} minutes.")
    if baseline.max_hard_sessions_per_week is not None:
        low, high = HARD_SESSIONS_RANGE
        if not low <= baseline.max_hard_sessions_per_week <= high:
            errors.append(f"baseline.maxHardSessionsPerWeek must be between {low} and {high}.")

    return errors


def validate_intake(intake: Intake) -> Intake:
    """Validate an intake before any planning is attempted.

    Args:
        intake: Parsed intake

    Returns:
        The same intake, for chaining

    Raises:
        InvalidConstraintsError: If any semantic check fails
    """
    errors = collect_intake_errors(intake)
    if errors:
        logger.warning(
            "Intake validation failed",
            error_count=len(errors),
        )
        for error in errors:
            logger.debug(f"Intake error: {error}")
        raise InvalidConstraintsError(errors)
    return intake
