"""Plan reconciliation module.

Compares a published schedule with completed workouts, records every
status transition in an append-only audit trail and applies forward-only
substitutions for missed sessions.
"""

from rollingplan.reconciliation.audit import AdaptationLog, InMemoryAdaptationLog, log_adaptation
from rollingplan.reconciliation.reconcile import reconcile_schedule, select_best_match
from rollingplan.reconciliation.substitution import apply_substitutions, plan_substitution
from rollingplan.reconciliation.types import ReconcileRule, ReconciliationReport, SessionOutcome, Substitution

__all__ = [
    "AdaptationLog",
    "InMemoryAdaptationLog",
    "ReconcileRule",
    "ReconciliationReport",
    "SessionOutcome",
    "Substitution",
    "apply_substitutions",
    "log_adaptation",
    "plan_substitution",
    "reconcile_schedule",
    "select_best_match",
]
