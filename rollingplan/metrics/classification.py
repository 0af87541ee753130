"""Signal classification for recent workouts.

Every workout gets a stress tier (normal, hard, very_hard) and a modality
(endurance, strength, other). Classification is a pure function of the
record, so it is recomputed every run and never cached.

Tier rules are an ordered list of (name, predicate, tier). The first rule
whose predicate matches decides the tier; when none match the workout is
normal. Physiological data (effort, HR zones, classification) always wins
over the type name, which is consulted only when no such data exists.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from datetime import date
from typing import NamedTuple

from loguru import logger

from rollingplan.core.dates import in_rolling_week
from rollingplan.domain.enums import Hardness, Modality
from rollingplan.domain.models import ClassifiedWorkout, WorkoutRecord

HARD_CLASSIFICATION = re.compile(r"tempo|interval|zone4|zone5|mixed|threshold|vo2max")
HARD_TYPE_FALLBACK = re.compile(
    r"tempo|interval|hiit|crossfit|volleyball|soccer|basketball|handball|martial|boxing|kickbox"
    r"|strength|functional|gym|climbing"
)
LONG_ENDURANCE_TYPE = re.compile(r"running|cycling|bike")
ACTIVE_RECOVERY_TYPE = re.compile(r"flexibility|mobility|yoga|stretch|recovery")

ENDURANCE_TYPE = re.compile(r"run|cycl|bike|ride|swim|row|walk|hike|elliptical|ski|triathlon|tempo|interval|zone")
STRENGTH_TYPE = re.compile(r"strength|weight|functional|gym|lifting|resistance")

LONG_SESSION_MINUTES = 90
VERY_HARD_DURATION_MINUTES = 80
FALLBACK_LONG_ENDURANCE_MINUTES = 50


def top_zone_minutes(record: WorkoutRecord) -> float | None:
    """Minutes in the top two HR zones (Z4 + Z5), None when zones are missing."""
    if not record.hr_zone_minutes:
        return None
    return record.hr_zone_minutes.get(4, 0.0) + record.hr_zone_minutes.get(5, 0.0)


def has_physiological_data(record: WorkoutRecord) -> bool:
    return (
        record.effort_score is not None
        or top_zone_minutes(record) is not None
        or bool(record.classification)
    )


def _hard_by_signal(record: WorkoutRecord) -> bool:
    effort = record.effort_score
    if effort is not None and effort >= 7:
        return True
    if record.classification and HARD_CLASSIFICATION.search(record.classification):
        return True

    top = top_zone_minutes(record)
    if top is None:
        return False
    duration = record.duration_minutes
    if duration > LONG_SESSION_MINUTES:
        # Long sessions judge intensity by share, not absolute minutes
        return top / duration >= 0.15 or top >= 20 or (effort is not None and effort >= 6)
    return top >= 8 or (top >= 5 and duration >= 30)


def _hard_by_type(record: WorkoutRecord) -> bool:
    if has_physiological_data(record):
        return False
    if HARD_TYPE_FALLBACK.search(record.workout_type):
        return True
    return bool(LONG_ENDURANCE_TYPE.search(record.workout_type)) and (
        record.duration_minutes >= FALLBACK_LONG_ENDURANCE_MINUTES
    )


def _very_hard(record: WorkoutRecord) -> bool:
    if record.effort_score is not None and record.effort_score >= 8:
        return True
    top = top_zone_minutes(record)
    if top is not None and top >= 20:
        return True
    return record.duration_minutes >= VERY_HARD_DURATION_MINUTES and (
        _hard_by_signal(record) or _hard_by_type(record)
    )


class TierRule(NamedTuple):
    name: str
    predicate: Callable[[WorkoutRecord], bool]
    tier: Hardness


TIER_RULES: tuple[TierRule, ...] = (
    TierRule("very_hard_signal", _very_hard, Hardness.VERY_HARD),
    TierRule("hard_signal", _hard_by_signal, Hardness.HARD),
    TierRule("type_fallback", _hard_by_type, Hardness.HARD),
)


def modality_for_type(workout_type: str) -> Modality:
    """Map a source workout type name to a modality.

    Team sports and anything unmatched are OTHER: they count toward the
    hard budget but not toward endurance or strength quotas.
    """
    if STRENGTH_TYPE.search(workout_type):
        return Modality.STRENGTH
    if ENDURANCE_TYPE.search(workout_type):
        return Modality.ENDURANCE
    return Modality.OTHER


def classify_workout(
    record: WorkoutRecord,
    rules: Iterable[TierRule] = TIER_RULES,
) -> ClassifiedWorkout:
    """Classify a single workout.

    Args:
        record: Workout to classify
        rules: Ordered tier rules, first match wins

    Returns:
        ClassifiedWorkout with stress tier, modality and the deciding rule
    """
    tier, rule_name = Hardness.NORMAL, "default_normal"
    for rule in rules:
        if rule.predicate(record):
            tier, rule_name = rule.tier, rule.name
            break
    return ClassifiedWorkout(
        record=record,
        stress_tier=tier,
        modality=modality_for_type(record.workout_type),
        rule=rule_name,
    )


def classify_recent(
    workouts: Iterable[WorkoutRecord],
    today: date,
    days: int = 7,
) -> list[ClassifiedWorkout]:
    """Classify workouts dated within the trailing `days` days (today inclusive).

    Args:
        workouts: Workout history, any order
        today: Reference local date
        days: Trailing window length

    Returns:
        Classified workouts sorted by date
    """
    recent = sorted((w for w in workouts if in_rolling_week(w.date, today, days)), key=lambda w: w.date)
    classified = [classify_workout(w) for w in recent]

    for item in classified:
        logger.debug(
            f"Classified {item.record.workout_type} on {item.date.isoformat()}: "
            f"{item.stress_tier.value}/{item.modality.value} via {item.rule}"
        )
    logger.info(
        "Recent workouts classified",
        total=len(classified),
        hard=sum(1 for c in classified if c.stress_tier == Hardness.HARD),
        very_hard=sum(1 for c in classified if c.stress_tier == Hardness.VERY_HARD),
    )
    return classified


def is_active_recovery(record: WorkoutRecord) -> bool:
    return bool(ACTIVE_RECOVERY_TYPE.search(record.workout_type))


def excluded_from_load(record: WorkoutRecord) -> bool:
    """Whether a workout is low-intensity active recovery and so excluded from load.

    Yoga, mobility and similar sessions still count when effort was 5+ or
    more than 5 minutes were spent in zone 3 or above.
    """
    if not is_active_recovery(record):
        return False
    if record.effort_score is not None and record.effort_score >= 5:
        return False
    if record.hr_zone_minutes:
        above_z2 = sum(record.hr_zone_minutes.get(z, 0.0) for z in (3, 4, 5))
        if above_z2 > 5:
            return False
    return True
