"""Readiness gate.

Readiness has no established predictive value beyond the next day, so the
gate touches only the earliest planned session dated today or tomorrow.
Score above 65 changes nothing; 50-65 downgrades Tempo and Intervals to
Zone 2; below 50 also downgrades the Long Run. Strength is never touched
and insufficient data quality turns the gate off.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date, timedelta

from loguru import logger

from rollingplan.config.settings import Settings, settings as default_settings
from rollingplan.domain.enums import DataQuality, Hardness, SessionStatus, SessionType
from rollingplan.domain.models import PlanSession, ReadinessSnapshot
from rollingplan.planning.placement import session_id

MODERATE_DOWNGRADE = frozenset({SessionType.TEMPO, SessionType.INTERVALS})
SEVERE_DOWNGRADE = frozenset({SessionType.TEMPO, SessionType.INTERVALS, SessionType.LONG_RUN})


@dataclass(frozen=True)
class ReadinessDecision:
    """Outcome of the gate.

    Attributes:
        sessions: Sessions after gating
        gated: The original session that was downgraded, if any
        reason: Why the gate did or did not act
    """

    sessions: tuple[PlanSession, ...]
    gated: PlanSession | None = None
    reason: str = "no_change"


def downgrade_types_for(score: float, settings: Settings | None = None) -> frozenset[SessionType]:
    """Session types the gate downgrades at a given score."""
    cfg = settings or default_settings
    if score > cfg.readiness_no_change_above:
        return frozenset()
    if score >= cfg.readiness_severe_below:
        return MODERATE_DOWNGRADE
    return SEVERE_DOWNGRADE


def imminent_session(sessions: Sequence[PlanSession], today: date) -> PlanSession | None:
    """Earliest planned session dated today or tomorrow."""
    horizon = {today, today + timedelta(days=1)}
    candidates = [s for s in sessions if s.date in horizon and s.status == SessionStatus.PLANNED]
    return min(candidates, key=lambda s: s.date, default=None)


def apply_readiness_gate(
    sessions: Sequence[PlanSession],
    readiness: ReadinessSnapshot | None,
    today: date,
    settings: Settings | None = None,
) -> ReadinessDecision:
    """Downgrade the imminent session when readiness is low.

    The downgraded session keeps its date and duration and becomes an easy
    Zone 2.

    Args:
        sessions: Sessions after the guardrail pass
        readiness: Today's readiness snapshot, if any
        today: Reference local date
        settings: Optional settings override

    Returns:
        ReadinessDecision
    """
    sessions = tuple(sessions)
    if readiness is None:
        return ReadinessDecision(sessions, reason="no_readiness")
    if readiness.date != today:
        return ReadinessDecision(sessions, reason="stale_readiness")
    if readiness.data_quality == DataQuality.INSUFFICIENT:
        return ReadinessDecision(sessions, reason="insufficient_data_quality")

    target = imminent_session(sessions, today)
    if target is None:
        return ReadinessDecision(sessions, reason="no_imminent_session")
    if target.session_type not in downgrade_types_for(readiness.score, settings):
        return ReadinessDecision(sessions, reason="no_change")

    score = round(readiness.score)
    downgraded = replace(
        target,
        session_id=session_id(target.date, SessionType.ZONE2),
        session_type=SessionType.ZONE2,
        title=f"Zone 2 (readiness {score})",
        hardness=Hardness.NORMAL,
        intensity="Z2",
        readiness_gated=True,
        notes=(*target.notes, f"downgraded from {target.session_type.value}: readiness {score}"),
    )
    logger.info(
        "Readiness gate downgraded session",
        session_id=target.session_id,
        from_type=target.session_type.value,
        score=readiness.score,
    )
    return ReadinessDecision(
        sessions=tuple(downgraded if s is target else s for s in sessions),
        gated=target,
        reason="downgraded",
    )
