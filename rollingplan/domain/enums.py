"""Canonical enums for the planning engine.

All enums are string-based so planned sessions, reports and audit entries
serialize to JSON without translation tables.
"""

from datetime import date
from enum import StrEnum


# -----------------------------
# Calendar
# -----------------------------
class Weekday(StrEnum):
    """Two-letter weekday keys as used in intake constraints."""

    MO = "mo"
    TU = "tu"
    WE = "we"
    TH = "th"
    FR = "fr"
    SA = "sa"
    SU = "su"

    @classmethod
    def from_date(cls, day: date) -> "Weekday":
        return _WEEKDAY_ORDER[day.weekday()]

    @classmethod
    def parse(cls, value: "str | Weekday") -> "Weekday":
        """Parse a weekday from intake spellings (mo, mon, monday, Wed, ...).

        Raises:
            ValueError: If the value does not name a weekday
        """
        if isinstance(value, Weekday):
            return value
        key = str(value).strip().lower()[:2]
        try:
            return cls(key)
        except ValueError as e:
            raise ValueError(f"Invalid weekday: {value!r}. Use mo, tu, we, th, fr, sa, su") from e

    @property
    def is_weekend(self) -> bool:
        return self in {Weekday.SA, Weekday.SU}


_WEEKDAY_ORDER = (Weekday.MO, Weekday.TU, Weekday.WE, Weekday.TH, Weekday.FR, Weekday.SA, Weekday.SU)


# -----------------------------
# Training stress
# -----------------------------
class Modality(StrEnum):
    """Broad training category."""

    ENDURANCE = "endurance"
    STRENGTH = "strength"
    OTHER = "other"


class Hardness(StrEnum):
    """Physiological cost tier driving recovery spacing."""

    NORMAL = "normal"
    HARD = "hard"
    VERY_HARD = "very_hard"

    @property
    def is_hard(self) -> bool:
        return self in {Hardness.HARD, Hardness.VERY_HARD}


class RiskTier(StrEnum):
    """Acute:chronic load ratio risk tier."""

    DETRAINING = "detraining"
    SAFE = "safe"
    ELEVATED = "elevated"
    HIGH = "high"
    UNKNOWN = "unknown"


# -----------------------------
# Sessions
# -----------------------------
class SessionType(StrEnum):
    """Concrete session kinds the placer emits."""

    LONG_RUN = "LR"
    ZONE2 = "Z2"
    TEMPO = "Tempo"
    INTERVALS = "Intervals"
    STRENGTH = "Strength"


class SessionStatus(StrEnum):
    """Plan session lifecycle status."""

    PLANNED = "planned"
    COMPLETED = "completed"
    MISSED = "missed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self != SessionStatus.PLANNED


# -----------------------------
# Intake
# -----------------------------
class GoalKind(StrEnum):
    ENDURANCE = "endurance"
    STRENGTH = "strength"
    BODYCOMP = "bodycomp"
    SLEEP = "sleep"
    VO2MAX = "vo2max"
    GENERAL = "general"


class StrengthSplit(StrEnum):
    FULL_BODY = "full_body"
    UPPER_LOWER = "upper_lower"
    PUSH_PULL_LEGS = "push_pull_legs"
    BRO_SPLIT = "bro_split"


class FitnessLevel(StrEnum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    ADVANCED = "advanced"


class StatusKind(StrEnum):
    """Disruption windows that suspend training."""

    ILLNESS = "illness"
    TRAVEL = "travel"
    INJURY = "injury"


class DataQuality(StrEnum):
    GOOD = "good"
    PARTIAL = "partial"
    INSUFFICIENT = "insufficient"


# -----------------------------
# Planning
# -----------------------------
class PlanMode(StrEnum):
    """Which modalities the week is planned for."""

    HYBRID = "hybrid"
    ENDURANCE_ONLY = "endurance_only"
    STRENGTH_ONLY = "strength_only"


class MarathonPhaseName(StrEnum):
    BASE = "base"
    BUILD = "build"
    PEAK = "peak"
    TAPER = "taper"
    POST = "post"


class PlanFlag(StrEnum):
    """Structured, non-fatal conditions reported with a plan."""

    INSUFFICIENT_DATA = "insufficient_data"
    NO_OPEN_SLOTS = "no_open_slots"
    STALE_SCHEDULE_CONFLICT = "stale_schedule_conflict"
    DELOAD = "deload"
    QUOTA_CARRIED_OVER = "quota_carried_over"
    READINESS_GATED = "readiness_gated"
    LR_CARRYOVER_FAILED = "lr_carryover_failed"
    STRENGTH_SHORTFALL = "strength_shortfall"
    POLARIZED_RATIO_EXCEEDED = "polarized_ratio_exceeded"
    STATUS_WINDOW_ACTIVE = "status_window_active"


class SubstitutionAction(StrEnum):
    SWAP = "swap"
    SHORTEN = "shorten"
    DROP = "drop"
    NONE = "none"
