"""Planning mode and marathon phase.

The phase drives long-run progression and strength periodization when an
endurance race is on the calendar. Without a race the planner stays on
baseline-anchored durations.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from math import ceil, floor

from rollingplan.domain.enums import GoalKind, MarathonPhaseName, PlanMode
from rollingplan.domain.models import Baseline, Goal, Intake, Milestone

TAPER_WEEKS = 3
PEAK_WEEKS = 1
BUILD_SHARE = 0.35
MIN_BUILD_WEEKS = 2
TAPER_FACTORS = (0.75, 0.60, 0.40)

LR_ANCHOR_MIN = 30
LR_ANCHOR_MAX = 150
LR_PEAK_MIN = 90
LR_PEAK_MULTIPLIER = 2.2
LR_END_OF_BASE_SHARE = 0.75
MIN_SESSION_MINUTES = 20


def round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def resolve_mode(goals: list[Goal], milestones: list[Milestone]) -> PlanMode:
    """Decide which modalities the week is planned for.

    Endurance is active with any endurance goal or any milestone; strength
    with any strength goal. General-only or empty goal sets plan strength.
    """
    has_endurance = bool(milestones) or any(g.kind == GoalKind.ENDURANCE for g in goals)
    has_strength = any(g.kind == GoalKind.STRENGTH for g in goals)
    if has_endurance and has_strength:
        return PlanMode.HYBRID
    if has_endurance:
        return PlanMode.ENDURANCE_ONLY
    return PlanMode.STRENGTH_ONLY


@dataclass(frozen=True)
class RaceTarget:
    """The endurance event the plan periodizes toward."""

    race_date: date
    kind: str
    is_marathon: bool
    training_start_date: date | None = None


def find_race(intake: Intake, today: date) -> RaceTarget | None:
    """Pick the nearest upcoming endurance event from milestones and goals."""
    candidates: list[RaceTarget] = [
        RaceTarget(
            race_date=m.date_local,
            kind=m.kind,
            is_marathon=m.kind == "marathon",
            training_start_date=m.training_start_date or intake.training_start_date,
        )
        for m in intake.milestones
    ]
    candidates.extend(
        RaceTarget(
            race_date=g.date_local,
            kind=g.sub_kind or "endurance",
            is_marathon=g.sub_kind == "marathon",
            training_start_date=intake.training_start_date,
        )
        for g in intake.goals
        if g.kind == GoalKind.ENDURANCE and g.date_local is not None
    )
    if not candidates:
        return None
    upcoming = [c for c in candidates if c.race_date >= today]
    pool = upcoming or candidates
    return min(pool, key=lambda c: (abs((c.race_date - today).days), not c.is_marathon))


@dataclass(frozen=True)
class MarathonPhase:
    """Where `today` sits in the race build-up.

    Attributes:
        name: Phase name
        weeks_to_race: Whole weeks until race day (rounded up)
        weeks_into_phase: 1-based week within base/build, taper week within taper
        phase_weeks: Total weeks of the current base/build phase
    """

    name: MarathonPhaseName
    weeks_to_race: int
    weeks_into_phase: int = 1
    phase_weeks: int = 1


def marathon_phase(race_date: date, today: date, training_start: date | None = None) -> MarathonPhase:
    """Compute the training phase for a race.

    Taper is the last 3 weeks, peak the week before, build about 35% of the
    rest (at least 2 weeks) and base everything earlier. A training start
    date anchors progress within base and build when given.

    Args:
        race_date: Race day
        today: Reference local date
        training_start: Optional date the build-up started

    Returns:
        MarathonPhase
    """
    days_to_race = (race_date - today).days
    if days_to_race < 0:
        return MarathonPhase(MarathonPhaseName.POST, 0)

    weeks_to_race = ceil(days_to_race / 7)
    if weeks_to_race <= TAPER_WEEKS:
        taper_week = TAPER_WEEKS - weeks_to_race + 1
        return MarathonPhase(MarathonPhaseName.TAPER, weeks_to_race, taper_week, TAPER_WEEKS)
    if weeks_to_race <= TAPER_WEEKS + PEAK_WEEKS:
        return MarathonPhase(MarathonPhaseName.PEAK, weeks_to_race)

    remaining = weeks_to_race - TAPER_WEEKS - PEAK_WEEKS
    build_weeks = max(MIN_BUILD_WEEKS, round_half_up(remaining * BUILD_SHARE))
    base_weeks = remaining - build_weeks
    weeks_since_start = None
    if training_start is not None:
        weeks_since_start = max(1, (today - training_start).days // 7 + 1)

    if weeks_to_race <= TAPER_WEEKS + PEAK_WEEKS + build_weeks:
        if weeks_since_start is not None and weeks_since_start > base_weeks:
            into_build = min(weeks_since_start - base_weeks, build_weeks)
        else:
            into_build = TAPER_WEEKS + PEAK_WEEKS + build_weeks - weeks_to_race + 1
        return MarathonPhase(MarathonPhaseName.BUILD, weeks_to_race, into_build, build_weeks)

    if weeks_since_start is not None:
        into_base = min(weeks_since_start, base_weeks)
    else:
        into_base = base_weeks - (weeks_to_race - TAPER_WEEKS - PEAK_WEEKS - build_weeks) + 1
    return MarathonPhase(MarathonPhaseName.BASE, weeks_to_race, into_base, base_weeks)


def long_run_anchor(baseline: Baseline, default_minutes: int) -> int:
    """Baseline long-run duration, clamped to a plausible range."""
    anchor = baseline.longest_recent_run_minutes or default_minutes
    return max(LR_ANCHOR_MIN, min(anchor, LR_ANCHOR_MAX))


def long_run_minutes(
    baseline: Baseline,
    phase: MarathonPhase | None,
    max_minutes: int,
    default_minutes: int = 70,
) -> int:
    """Undeloaded long-run duration for the current phase.

    Progresses linearly from the baseline anchor to 75% of peak through
    base, to peak through build, holds peak, then drops 25/40/60% over the
    three taper weeks. Peak is max(90, 2.2 x anchor), capped at max_minutes.
    """
    anchor = long_run_anchor(baseline, default_minutes)
    if phase is None or phase.name == MarathonPhaseName.POST:
        return max(MIN_SESSION_MINUTES, min(max_minutes, anchor))

    peak = min(max_minutes, max(LR_PEAK_MIN, round_half_up(anchor * LR_PEAK_MULTIPLIER)))
    end_of_base = round_half_up(peak * LR_END_OF_BASE_SHARE)
    progress = (phase.weeks_into_phase - 1) / (phase.phase_weeks - 1) if phase.phase_weeks > 1 else 1.0

    if phase.name == MarathonPhaseName.BASE:
        duration = round_half_up(anchor + (end_of_base - anchor) * progress)
    elif phase.name == MarathonPhaseName.BUILD:
        duration = round_half_up(end_of_base + (peak - end_of_base) * progress)
    elif phase.name == MarathonPhaseName.PEAK:
        duration = peak
    else:
        factor = TAPER_FACTORS[min(phase.weeks_into_phase - 1, len(TAPER_FACTORS) - 1)]
        duration = round_half_up(peak * factor)
    return max(MIN_SESSION_MINUTES, min(max_minutes, duration))
