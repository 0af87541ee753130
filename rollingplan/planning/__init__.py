"""Rolling weekly planning: targets, slots, placement, guardrails and gating.

This package provides:
- Planning mode and marathon phase resolution
- Weekly quotas, deload scaling and the hard-session ceiling
- Slot resolution and session placement
- The guardrail pass and the readiness gate
- plan_week, the run orchestrator
"""

from rollingplan.planning.engine import PlanResult, plan_week
from rollingplan.planning.guardrails import GuardrailResult, HardnessContext, apply_guardrails
from rollingplan.planning.phase import MarathonPhase, long_run_minutes, marathon_phase, resolve_mode
from rollingplan.planning.placement import PlacementResult, SessionFactory, place_sessions
from rollingplan.planning.readiness import ReadinessDecision, apply_readiness_gate
from rollingplan.planning.recommendations import Recommendation
from rollingplan.planning.slots import SlotResolution, fixed_events_in_window, resolve_slots
from rollingplan.planning.targets import WeeklyTargets, compute_targets, deload_minutes, derive_hard_ceiling

__all__ = [
    "GuardrailResult",
    "HardnessContext",
    "MarathonPhase",
    "PlacementResult",
    "PlanResult",
    "ReadinessDecision",
    "Recommendation",
    "SessionFactory",
    "SlotResolution",
    "WeeklyTargets",
    "apply_guardrails",
    "apply_readiness_gate",
    "compute_targets",
    "deload_minutes",
    "derive_hard_ceiling",
    "fixed_events_in_window",
    "long_run_minutes",
    "marathon_phase",
    "place_sessions",
    "plan_week",
    "resolve_mode",
    "resolve_slots",
]
