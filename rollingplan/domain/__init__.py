"""Domain types: enums, input models, computed values and errors."""

from rollingplan.domain.enums import (
    DataQuality,
    FitnessLevel,
    GoalKind,
    Hardness,
    MarathonPhaseName,
    Modality,
    PlanFlag,
    PlanMode,
    RiskTier,
    SessionStatus,
    SessionType,
    StatusKind,
    StrengthSplit,
    SubstitutionAction,
    Weekday,
)
from rollingplan.domain.errors import InsufficientDataError, InvalidConstraintsError, PlannerError
from rollingplan.domain.models import (
    AdaptationLogEntry,
    Baseline,
    ClassifiedWorkout,
    Constraints,
    DaySlot,
    FixedAppointment,
    FixedEvent,
    Goal,
    Intake,
    LoadRatio,
    Milestone,
    PlanSession,
    ReadinessSnapshot,
    StatusWindow,
    WorkoutRecord,
)

__all__ = [
    "AdaptationLogEntry",
    "Baseline",
    "ClassifiedWorkout",
    "Constraints",
    "DataQuality",
    "DaySlot",
    "FitnessLevel",
    "FixedAppointment",
    "FixedEvent",
    "Goal",
    "GoalKind",
    "Hardness",
    "InsufficientDataError",
    "Intake",
    "InvalidConstraintsError",
    "LoadRatio",
    "MarathonPhaseName",
    "Milestone",
    "Modality",
    "PlanFlag",
    "PlanMode",
    "PlanSession",
    "PlannerError",
    "ReadinessSnapshot",
    "RiskTier",
    "SessionStatus",
    "SessionType",
    "StatusKind",
    "StatusWindow",
    "StrengthSplit",
    "SubstitutionAction",
    "Weekday",
    "WorkoutRecord",
]
