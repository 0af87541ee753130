"""Types for plan reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any

from rollingplan.domain.enums import SessionStatus, SessionType, SubstitutionAction
from rollingplan.domain.models import AdaptationLogEntry, PlanSession


class ReconcileRule(StrEnum):
    """Machine-readable rule names recorded in the audit trail."""

    MATCHED = "RULE_MATCHED_COMPLETED"
    DISRUPTION_DELOAD = "RULE_DISRUPTION_DELOAD"
    LR_MISSED_SWAP_OR_SHORTEN = "RULE_LR_MISSED_SWAP_OR_SHORTEN"
    TEMPO_MISSED_SWAP = "RULE_TEMPO_MISSED_SWAP"
    INTERVALS_MISSED_DROP = "RULE_INTERVALS_MISSED_DROP"
    STRENGTH_MISSED_SWAP = "RULE_STRENGTH_MISSED_SWAP"
    Z2_MISSED_SKIP = "RULE_Z2_MISSED_SKIP"


MISSED_RULES: dict[SessionType, ReconcileRule] = {
    SessionType.LONG_RUN: ReconcileRule.LR_MISSED_SWAP_OR_SHORTEN,
    SessionType.TEMPO: ReconcileRule.TEMPO_MISSED_SWAP,
    SessionType.INTERVALS: ReconcileRule.INTERVALS_MISSED_DROP,
    SessionType.STRENGTH: ReconcileRule.STRENGTH_MISSED_SWAP,
    SessionType.ZONE2: ReconcileRule.Z2_MISSED_SKIP,
}


@dataclass(frozen=True)
class SessionOutcome:
    """Reconciliation outcome for a single past session.

    Attributes:
        session_id: Planned session id
        date: Planned date
        from_status: Status before reconciliation
        to_status: Terminal status assigned
        rule: Rule that decided the transition
        matched_workout_id: Workout that satisfied the session, if any
        replayed: True when the outcome came from the audit log, not this run
    """

    session_id: str
    date: date
    from_status: SessionStatus
    to_status: SessionStatus
    rule: str
    matched_workout_id: str | None = None
    replayed: bool = False


@dataclass(frozen=True)
class Substitution:
    """Forward-looking adjustment for a missed session.

    Attributes:
        session_ref: Id of the missed session
        action: swap, shorten, drop or none
        rule: Rule that produced the decision
        new_session: Session added to the forward schedule, if any
        replaced_ref: Id of the forward session the new one replaces, if any
    """

    session_ref: str
    action: SubstitutionAction
    rule: str
    new_session: PlanSession | None = None
    replaced_ref: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_ref,
            "action": self.action.value,
            "rule": self.rule,
            "newSession": self.new_session.to_dict() if self.new_session else None,
            "replacedSessionId": self.replaced_ref,
        }


@dataclass(frozen=True)
class ReconciliationReport:
    """Result of one reconciliation run.

    Attributes:
        sessions: Updated schedule (terminal statuses set, substitutions applied)
        outcomes: One outcome per past session considered
        new_entries: Audit entries appended during this run
        substitutions: Forward adjustments for missed sessions
        deload_next_run: Whether the next planning run should deload
    """

    sessions: tuple[PlanSession, ...]
    outcomes: tuple[SessionOutcome, ...] = ()
    new_entries: tuple[AdaptationLogEntry, ...] = ()
    substitutions: tuple[Substitution, ...] = field(default_factory=tuple)
    deload_next_run: bool = False

    def status_of(self, session_id: str) -> SessionStatus | None:
        for outcome in self.outcomes:
            if outcome.session_id == session_id:
                return outcome.to_status
        return None
