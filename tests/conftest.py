"""Root conftest for all tests.

Shared fixtures for building intakes, workouts and sessions around a fixed
reference Monday, so no test depends on the wall clock.
"""

from collections.abc import Callable
from datetime import date
from typing import Any

import pytest
from loguru import logger

from rollingplan.domain import (
    Constraints,
    Hardness,
    Intake,
    Modality,
    PlanSession,
    SessionType,
    WorkoutRecord,
)
from rollingplan.planning.placement import session_id

MONDAY = date(2025, 6, 2)
DEFAULT_CONSTRAINTS: dict[str, Any] = {
    "daysAvailable": ["mo", "tu", "we", "th", "fr", "sa"],
    "preferredRestDays": ["su"],
}


@pytest.fixture(autouse=True)
def quiet_logger():
    """Keep loguru output out of test reports."""
    logger.remove()
    yield
    logger.remove()


@pytest.fixture
def today() -> date:
    return MONDAY


@pytest.fixture
def make_constraints() -> Callable[..., Constraints]:
    def _make(**overrides: Any) -> Constraints:
        return Constraints.model_validate({**DEFAULT_CONSTRAINTS, **overrides})

    return _make


@pytest.fixture
def make_intake() -> Callable[..., Intake]:
    """Build an intake; goals default to a single strength goal."""

    def _make(
        goals: list[dict[str, Any]] | None = None,
        baseline: dict[str, Any] | None = None,
        constraints: dict[str, Any] | None = None,
        milestones: list[dict[str, Any]] | None = None,
    ) -> Intake:
        return Intake.model_validate(
            {
                "constraints": {**DEFAULT_CONSTRAINTS, **(constraints or {})},
                "goals": goals if goals is not None else [{"id": "g1", "kind": "strength"}],
                "baseline": baseline or {},
                "milestones": milestones or [],
            }
        )

    return _make


@pytest.fixture
def make_workout() -> Callable[..., WorkoutRecord]:
    def _make(day: date, minutes: float = 45, workout_type: str = "running", **fields: Any) -> WorkoutRecord:
        return WorkoutRecord(date=day, duration_minutes=minutes, workout_type=workout_type, **fields)

    return _make


@pytest.fixture
def make_session() -> Callable[..., PlanSession]:
    def _make(
        day: date,
        session_type: SessionType = SessionType.ZONE2,
        minutes: int = 45,
        hardness: Hardness | None = None,
        **fields: Any,
    ) -> PlanSession:
        if hardness is None:
            hardness = Hardness.HARD if session_type in {SessionType.TEMPO, SessionType.INTERVALS} else Hardness.NORMAL
        modality = Modality.STRENGTH if session_type == SessionType.STRENGTH else Modality.ENDURANCE
        return PlanSession(
            session_id=session_id(day, session_type),
            date=day,
            modality=modality,
            session_type=session_type,
            title=session_type.value,
            duration_minutes=minutes,
            hardness=hardness,
            **fields,
        )

    return _make
