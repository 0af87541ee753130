"""Session placement.

Fills open slots with concrete sessions. Endurance follows the rotation
Long Run, Zone 2, Quality, Zone 2 in date order, with at most one Long Run
per week and the quality type alternating Intervals/Tempo by ISO week.
Strength draws variants round-robin from the preferred split.

In hybrid mode endurance takes the even-indexed open slots and strength the
odd-indexed ones; a fill pass then gives still-unused slots to whichever
quota remains. Every slot carries at most one session, so modalities never
share a date. Quota beyond the available slots carries to the next run.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from loguru import logger

from rollingplan.config.settings import Settings, settings as default_settings
from rollingplan.core.dates import iso_week_parity
from rollingplan.domain.enums import (
    Hardness,
    MarathonPhaseName,
    Modality,
    PlanMode,
    SessionType,
    StrengthSplit,
)
from rollingplan.domain.models import Baseline, Constraints, DaySlot, PlanSession
from rollingplan.planning.phase import (
    MIN_SESSION_MINUTES,
    MarathonPhase,
    RaceTarget,
    long_run_minutes,
)
from rollingplan.planning.targets import deload_minutes

SPLIT_VARIANTS: dict[StrengthSplit, tuple[str, ...]] = {
    StrengthSplit.FULL_BODY: ("Full Body A", "Full Body B"),
    StrengthSplit.UPPER_LOWER: ("Upper", "Lower"),
    StrengthSplit.PUSH_PULL_LEGS: ("Push", "Pull", "Legs"),
    StrengthSplit.BRO_SPLIT: ("Chest/Triceps", "Back/Biceps", "Legs", "Shoulders"),
}

# (sets x reps, intensity) per phase; None is the no-race default
STRENGTH_PRESCRIPTION: dict[MarathonPhaseName | None, tuple[str, str]] = {
    None: ("3x10-12", "moderate"),
    MarathonPhaseName.BASE: ("3x10-12", "moderate"),
    MarathonPhaseName.BUILD: ("4x5-6", "hard"),
    MarathonPhaseName.PEAK: ("3x3-5", "hard"),
    MarathonPhaseName.TAPER: ("2x8-10", "light"),
    MarathonPhaseName.POST: ("3x10-12", "moderate"),
}
DELOAD_STRENGTH_PRESCRIPTION = ("2x12-15", "light")

HARD_LONG_RUN_MINUTES = 90
Z2_FLOOR_MINUTES = 40
STRENGTH_MINUTES_RANGE = (20, 90)
TAPER_STRENGTH_FACTOR = 0.6
PEAK_TAPER_STRENGTH_DAY_SHARE = 0.7
PHASE_TEMPO_MINUTES = {
    MarathonPhaseName.BUILD: 40,
    MarathonPhaseName.PEAK: 45,
    MarathonPhaseName.TAPER: 25,
}


def session_id(day: date, session_type: SessionType) -> str:
    return f"sess_{day.isoformat()}_{session_type.value.lower()}"


def quality_type_for_week(week_start: date) -> SessionType:
    """Intervals on odd ISO weeks, Tempo on even ones."""
    return SessionType.INTERVALS if iso_week_parity(week_start) == 1 else SessionType.TEMPO


def max_minutes_for(
    constraints: Constraints,
    race: RaceTarget | None,
    phase: MarathonPhase | None,
    settings: Settings | None = None,
) -> int:
    """Per-session duration cap.

    An explicit maxMinutesPerDay wins; otherwise the default cap applies,
    raised during a marathon build so long runs can progress.
    """
    cfg = settings or default_settings
    if constraints.max_minutes_per_day is not None:
        return constraints.max_minutes_per_day
    if race is not None and race.is_marathon and phase is not None and phase.name == MarathonPhaseName.BUILD:
        return cfg.marathon_build_max_minutes_per_day
    return cfg.max_minutes_per_day


@dataclass(frozen=True)
class SessionFactory:
    """Builds concrete sessions with durations, hardness and deload applied.

    Attributes:
        baseline: Intake baseline (duration anchors, split preference)
        max_minutes: Per-session duration cap
        deload: Whether deload durations apply
        phase: Marathon phase, None without a race
        race: Race target, None without a race
        settings: Settings for default durations and deload factors
    """

    baseline: Baseline
    max_minutes: int
    deload: bool = False
    phase: MarathonPhase | None = None
    race: RaceTarget | None = None
    settings: Settings = field(default_factory=lambda: default_settings)

    @property
    def phase_name(self) -> MarathonPhaseName | None:
        return self.phase.name if self.phase is not None else None

    @property
    def is_marathon(self) -> bool:
        return self.race is not None and self.race.is_marathon

    def long_run_base_minutes(self) -> int:
        phase = self.phase if self.is_marathon else None
        return long_run_minutes(self.baseline, phase, self.max_minutes, self.settings.long_run_minutes)

    def zone2_base_minutes(self) -> int:
        long_run = self.long_run_base_minutes()
        minutes = self.baseline.z2_duration_minutes or self.settings.zone2_minutes
        return max(min(minutes, long_run), min(Z2_FLOOR_MINUTES, long_run))

    def strength_base_minutes(self) -> int:
        low, high = STRENGTH_MINUTES_RANGE
        anchor = self.baseline.longest_strength_session_minutes or self.settings.strength_minutes
        minutes = max(low, min(anchor, high))
        if self.phase_name == MarathonPhaseName.TAPER:
            minutes = round(minutes * TAPER_STRENGTH_FACTOR)
        if self.phase_name in {MarathonPhaseName.PEAK, MarathonPhaseName.TAPER}:
            minutes = min(minutes, round(self.max_minutes * PEAK_TAPER_STRENGTH_DAY_SHARE))
        return minutes

    def _finalize(self, minutes: int, hardness: Hardness, stacks_deload: bool = True) -> tuple[int, bool]:
        applied = self.deload and stacks_deload
        if applied:
            minutes = deload_minutes(minutes, hardness, self.settings)
        return max(MIN_SESSION_MINUTES, min(self.max_minutes, minutes)), applied

    def long_run(self, day: date) -> PlanSession:
        base = self.long_run_base_minutes()
        hardness = Hardness.HARD if base >= HARD_LONG_RUN_MINUTES else Hardness.NORMAL
        # Taper already cuts volume; deload does not stack on it
        stacks = self.phase_name != MarathonPhaseName.TAPER
        minutes, applied = self._finalize(base, hardness, stacks)
        title = "Long Run"
        if self.race is not None and any(k in self.race.kind for k in ("triathlon", "cycling")):
            title = "Long Endurance"
        return PlanSession(
            session_id=session_id(day, SessionType.LONG_RUN),
            date=day,
            modality=Modality.ENDURANCE,
            session_type=SessionType.LONG_RUN,
            title=title,
            duration_minutes=minutes,
            hardness=hardness,
            intensity="easy",
            deload_applied=applied,
        )

    def zone2(self, day: date, title: str = "Zone 2", minutes: int | None = None) -> PlanSession:
        base = minutes if minutes is not None else self.zone2_base_minutes()
        minutes, applied = self._finalize(base, Hardness.NORMAL)
        return PlanSession(
            session_id=session_id(day, SessionType.ZONE2),
            date=day,
            modality=Modality.ENDURANCE,
            session_type=SessionType.ZONE2,
            title=title,
            duration_minutes=minutes,
            hardness=Hardness.NORMAL,
            intensity="Z2",
            deload_applied=applied,
        )

    def quality(self, day: date, session_type: SessionType) -> PlanSession:
        if session_type == SessionType.INTERVALS:
            base, title, intensity = self.settings.intervals_minutes, "Intervals (5K pace)", "VO2max"
        else:
            base = self.settings.tempo_minutes
            if self.is_marathon:
                base = PHASE_TEMPO_MINUTES.get(self.phase_name, base)
            marathon_pace = self.is_marathon and self.phase_name in {MarathonPhaseName.BUILD, MarathonPhaseName.PEAK}
            title = "Marathon Pace" if marathon_pace else "Tempo"
            intensity = "marathon_pace" if marathon_pace else "threshold"
        minutes, applied = self._finalize(base, Hardness.HARD)
        return PlanSession(
            session_id=session_id(day, session_type),
            date=day,
            modality=Modality.ENDURANCE,
            session_type=session_type,
            title=title,
            duration_minutes=minutes,
            hardness=Hardness.HARD,
            intensity=intensity,
            deload_applied=applied,
        )

    def strength(self, day: date, variant_index: int) -> PlanSession:
        variants = SPLIT_VARIANTS[self.baseline.strength_split_preference]
        if self.deload:
            sets_reps, intensity = DELOAD_STRENGTH_PRESCRIPTION
        else:
            sets_reps, intensity = STRENGTH_PRESCRIPTION[self.phase_name]
        hardness = Hardness.HARD if intensity == "hard" else Hardness.NORMAL
        minutes, applied = self._finalize(self.strength_base_minutes(), hardness)
        return PlanSession(
            session_id=session_id(day, SessionType.STRENGTH),
            date=day,
            modality=Modality.STRENGTH,
            session_type=SessionType.STRENGTH,
            title=variants[variant_index % len(variants)],
            duration_minutes=minutes,
            hardness=hardness,
            intensity=intensity,
            sets_reps=sets_reps,
            deload_applied=applied,
        )


def endurance_sequence(count: int, week_start: date) -> list[SessionType]:
    """Endurance session types for `count` sessions in rotation order.

    LR, Z2, Q, Z2, then Z2, Z2, Q', Z2, ... with a single Long Run. The
    second quality session of a week takes the other quality type.
    """
    first_quality = quality_type_for_week(week_start)
    other_quality = SessionType.TEMPO if first_quality == SessionType.INTERVALS else SessionType.INTERVALS
    sequence: list[SessionType] = []
    qualities = 0
    for i in range(count):
        position = i % 4
        if position == 0 and i == 0:
            sequence.append(SessionType.LONG_RUN)
        elif position == 2:
            sequence.append(first_quality if qualities % 2 == 0 else other_quality)
            qualities += 1
        else:
            sequence.append(SessionType.ZONE2)
    return sequence


@dataclass(frozen=True)
class PlacementResult:
    """Placed sessions and the quota that did not fit.

    Attributes:
        sessions: Sessions in date order
        carried_endurance: Endurance quota left for the next run
        carried_strength: Strength quota left for the next run
    """

    sessions: tuple[PlanSession, ...]
    carried_endurance: int = 0
    carried_strength: int = 0

    @property
    def carried_over(self) -> bool:
        return self.carried_endurance > 0 or self.carried_strength > 0


def assign_modalities(
    slot_count: int,
    mode: PlanMode,
    endurance: int,
    strength: int,
) -> list[Modality | None]:
    """Decide which modality each open slot receives (None leaves it free)."""
    assignment: list[Modality | None] = [None] * slot_count
    left = {Modality.ENDURANCE: endurance, Modality.STRENGTH: strength}
    if mode != PlanMode.HYBRID:
        left[Modality.STRENGTH if mode == PlanMode.ENDURANCE_ONLY else Modality.ENDURANCE] = 0

    if mode == PlanMode.HYBRID:
        for index in range(slot_count):
            modality = Modality.ENDURANCE if index % 2 == 0 else Modality.STRENGTH
            if left[modality] > 0:
                assignment[index] = modality
                left[modality] -= 1

    # Fill pass: leftover quota takes any still-free slot, endurance first
    for index in range(slot_count):
        if assignment[index] is not None:
            continue
        for modality in (Modality.ENDURANCE, Modality.STRENGTH):
            if left[modality] > 0:
                assignment[index] = modality
                left[modality] -= 1
                break
    return assignment


def place_sessions(
    slots: Sequence[DaySlot],
    mode: PlanMode,
    remaining_endurance: int,
    remaining_strength: int,
    factory: SessionFactory,
    *,
    week_start: date,
    strength_offset: int = 0,
) -> PlacementResult:
    """Fill open slots with sessions.

    Args:
        slots: Open day-slots in date order
        mode: Planning mode
        remaining_endurance: Endurance quota to place
        remaining_strength: Strength quota to place
        factory: Session builder
        week_start: First day of the planning week (drives quality type)
        strength_offset: Split variant index to continue from

    Returns:
        PlacementResult with sessions and carried-over quota
    """
    if mode == PlanMode.ENDURANCE_ONLY:
        remaining_strength = 0
    elif mode == PlanMode.STRENGTH_ONLY:
        remaining_endurance = 0

    assignment = assign_modalities(len(slots), mode, remaining_endurance, remaining_strength)
    endurance_slots = [s for s, m in zip(slots, assignment, strict=True) if m == Modality.ENDURANCE]
    strength_slots = [s for s, m in zip(slots, assignment, strict=True) if m == Modality.STRENGTH]

    sessions: list[PlanSession] = []
    for slot, session_type in zip(endurance_slots, endurance_sequence(len(endurance_slots), week_start), strict=True):
        if session_type == SessionType.LONG_RUN:
            sessions.append(factory.long_run(slot.date))
        elif session_type == SessionType.ZONE2:
            sessions.append(factory.zone2(slot.date))
        else:
            sessions.append(factory.quality(slot.date, session_type))
    for index, slot in enumerate(strength_slots):
        sessions.append(factory.strength(slot.date, strength_offset + index))

    sessions.sort(key=lambda s: s.date)
    result = PlacementResult(
        sessions=tuple(sessions),
        carried_endurance=remaining_endurance - len(endurance_slots),
        carried_strength=remaining_strength - len(strength_slots),
    )
    for session in result.sessions:
        logger.debug(
            f"Placed {session.session_type.value} on {session.date.isoformat()} "
            f"({session.duration_minutes} min, {session.hardness.value})"
        )
    logger.info(
        "Sessions placed",
        placed=len(result.sessions),
        open_slots=len(slots),
        carried_endurance=result.carried_endurance,
        carried_strength=result.carried_strength,
    )
    return result
