"""Data models for the planning engine.

Two families live here:
- Input models (pydantic): workout history, intake, readiness and status
  windows. These are validated at the boundary and accept both snake_case
  and camelCase keys.
- Computed values (frozen dataclasses): classified workouts, load ratio,
  plan sessions and audit entries. They are recomputed every run and
  updated only through dataclasses.replace.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from rollingplan.domain.enums import (
    DataQuality,
    FitnessLevel,
    GoalKind,
    Hardness,
    Modality,
    RiskTier,
    SessionStatus,
    SessionType,
    StatusKind,
    StrengthSplit,
    Weekday,
)

_INPUT_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    extra="ignore",
)


# -----------------------------
# Inputs
# -----------------------------
class WorkoutRecord(BaseModel):
    """A completed workout as delivered by the ingestion collaborator.

    Attributes:
        date: Local calendar date of the workout
        duration_minutes: Total duration in minutes
        workout_type: Source type name (e.g. "running", "strength training")
        effort_score: Optional RPE-style effort 0-10
        hr_zone_minutes: Optional minutes per heart-rate zone, keyed 1-5
        classification: Optional source classification (tempo, zone2, ...)
        workout_id: Optional source identifier
    """

    model_config = _INPUT_CONFIG

    date: date
    duration_minutes: float = Field(ge=0)
    workout_type: str = "workout"
    effort_score: float | None = Field(default=None, ge=0, le=10)
    hr_zone_minutes: dict[int, float] | None = None
    classification: str | None = None
    workout_id: str | None = None

    @field_validator("workout_type", "classification")
    @classmethod
    def normalize_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().lower()


class Goal(BaseModel):
    model_config = _INPUT_CONFIG

    id: str
    kind: GoalKind
    sub_kind: str | None = None
    target_value: float | None = None
    priority: str | None = None
    date_local: date | None = None


class Milestone(BaseModel):
    """One endurance event; drives long-run progression toward its date."""

    model_config = _INPUT_CONFIG

    id: str
    kind: str
    date_local: date
    priority: str | None = None
    target_time_seconds: int | None = None
    training_start_date: date | None = None


class FixedAppointment(BaseModel):
    model_config = _INPUT_CONFIG

    name: str
    weekday: Weekday = Field(validation_alias="dayOfWeek")
    id: str | None = None
    time_window: str | None = None
    season_start: date | None = None
    season_end: date | None = None

    @field_validator("weekday", mode="before")
    @classmethod
    def parse_weekday(cls, value: Any) -> Weekday:
        return Weekday.parse(value)

    def applies_on(self, day: date) -> bool:
        """Whether this appointment blocks the given date."""
        if Weekday.from_date(day) != self.weekday:
            return False
        if self.season_start is not None and day < self.season_start:
            return False
        return not (self.season_end is not None and day > self.season_end)


class Constraints(BaseModel):
    """Scheduling constraints.

    Empty days_available or preferred_rest_days is accepted here and rejected
    by intake validation, which reports all problems at once.
    """

    model_config = _INPUT_CONFIG

    days_available: list[Weekday] = Field(default_factory=list)
    preferred_rest_days: list[Weekday] = Field(default_factory=list)
    max_sessions_per_week: int | None = Field(default=None, ge=0)
    max_minutes_per_day: int | None = Field(default=None, gt=0)
    fixed_appointments: list[FixedAppointment] = Field(default_factory=list)

    @field_validator("days_available", "preferred_rest_days", mode="before")
    @classmethod
    def parse_weekdays(cls, value: Any) -> list[Weekday]:
        if value is None:
            return []
        return [Weekday.parse(v) for v in value]


class Baseline(BaseModel):
    """Self-reported baseline, the fallback when history is thin."""

    model_config = _INPUT_CONFIG

    running_frequency_per_week: int | None = Field(default=None, ge=0)
    strength_frequency_per_week: int | None = Field(default=None, ge=0)
    longest_recent_run_minutes: int | None = Field(default=None, ge=0)
    z2_duration_minutes: int | None = None
    longest_strength_session_minutes: int | None = Field(default=None, ge=0)
    strength_split_preference: StrengthSplit = StrengthSplit.FULL_BODY
    perceived_fitness: FitnessLevel = FitnessLevel.MODERATE
    max_hard_sessions_per_week: int | None = None


class Intake(BaseModel):
    model_config = _INPUT_CONFIG

    constraints: Constraints
    goals: list[Goal] = Field(default_factory=list)
    milestones: list[Milestone] = Field(default_factory=list)
    baseline: Baseline = Field(default_factory=Baseline)
    training_start_date: date | None = None


class ReadinessSnapshot(BaseModel):
    """Composite same-day readiness (sleep, HRV, resting HR, load)."""

    model_config = _INPUT_CONFIG

    date: date
    score: float = Field(ge=0, le=100)
    label: str | None = None
    data_quality: DataQuality = DataQuality.GOOD


class StatusWindow(BaseModel):
    """Active illness/travel/injury window.

    Shared by planning and reconciliation so both read the same dates.
    """

    model_config = _INPUT_CONFIG

    kind: StatusKind
    until: date
    since: date | None = None
    note: str | None = None

    def covers(self, day: date, *, open_start: bool = True) -> bool:
        """Whether `day` falls inside the window.

        Without `since` the window runs up to `until` from an unknown start.
        Pass `open_start=False` to count only dates after a known start, as
        reconciliation of past sessions does.
        """
        if self.since is None:
            return open_start and day <= self.until
        return self.since <= day <= self.until


# -----------------------------
# Computed values
# -----------------------------
@dataclass(frozen=True)
class ClassifiedWorkout:
    """A workout with its derived stress tier and modality.

    Attributes:
        record: Source workout
        stress_tier: Derived hardness tier
        modality: Derived modality
        rule: Name of the classifier rule that decided the tier
    """

    record: WorkoutRecord
    stress_tier: Hardness
    modality: Modality
    rule: str

    @property
    def date(self) -> date:
        return self.record.date

    @property
    def is_hard(self) -> bool:
        return self.stress_tier.is_hard


@dataclass(frozen=True)
class LoadRatio:
    """Acute:chronic workload ratio report.

    Attributes:
        acute_load_minutes: Sum of the 7 most recent days with data
        chronic_load_minutes_avg: Sum of the 28 most recent days with data / 4
        ratio: acute / chronic average, None when chronic is zero or unknown
        risk_tier: Risk tier derived from ratio
        days_with_data: Distinct days with load in the lookback window
    """

    acute_load_minutes: float
    chronic_load_minutes_avg: float
    ratio: float | None
    risk_tier: RiskTier
    days_with_data: int = 0

    @classmethod
    def unknown(cls, days_with_data: int = 0) -> LoadRatio:
        return cls(
            acute_load_minutes=0.0,
            chronic_load_minutes_avg=0.0,
            ratio=None,
            risk_tier=RiskTier.UNKNOWN,
            days_with_data=days_with_data,
        )

    @property
    def calls_for_deload(self) -> bool:
        return self.risk_tier in {RiskTier.ELEVATED, RiskTier.HIGH}

    def to_dict(self) -> dict[str, Any]:
        return {
            "acuteLoadMinutes": self.acute_load_minutes,
            "chronicLoadMinutesAvg": self.chronic_load_minutes_avg,
            "ratio": self.ratio,
            "riskTier": self.risk_tier.value,
            "insufficientData": self.risk_tier == RiskTier.UNKNOWN and self.days_with_data < 7,
        }


@dataclass(frozen=True)
class PlanSession:
    """The scheduling unit: one session on one date.

    Created by the placer; changed only by the guardrail pass (removal),
    the readiness gate (downgrade) and reconciliation (status).
    """

    session_id: str
    date: date
    modality: Modality
    session_type: SessionType
    title: str
    duration_minutes: int
    hardness: Hardness
    status: SessionStatus = SessionStatus.PLANNED
    intensity: str | None = None
    sets_reps: str | None = None
    deload_applied: bool = False
    readiness_gated: bool = False
    notes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_hard(self) -> bool:
        return self.hardness.is_hard

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.session_id,
            "localDate": self.date.isoformat(),
            "modality": self.modality.value,
            "kind": self.session_type.value,
            "title": self.title,
            "durationMinutes": self.duration_minutes,
            "hardness": self.hardness.value,
            "status": self.status.value,
            "intensity": self.intensity,
            "setsReps": self.sets_reps,
            "deload": self.deload_applied,
            "readinessGated": self.readiness_gated,
            "notes": list(self.notes),
        }


@dataclass(frozen=True)
class AdaptationLogEntry:
    """One append-only audit record of a session status transition."""

    timestamp: datetime
    session_ref: str
    from_status: SessionStatus
    to_status: SessionStatus
    rule_applied: str
    matched_workout_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "at": self.timestamp.isoformat(),
            "sessionId": self.session_ref,
            "fromStatus": self.from_status.value,
            "toStatus": self.to_status.value,
            "rule": self.rule_applied,
            "actualWorkoutId": self.matched_workout_id,
        }


@dataclass(frozen=True)
class DaySlot:
    """An assignable calendar day."""

    date: date
    weekday: Weekday

    @property
    def is_weekend(self) -> bool:
        return self.weekday.is_weekend


@dataclass(frozen=True)
class FixedEvent:
    """A fixed appointment expanded onto a date in the planning window."""

    date: date
    title: str
    hardness: Hardness
    modality: Modality = Modality.OTHER
