"""Adaptive rolling training planner.

Turns completed workouts, readiness and intake goals into a rolling
7-day schedule, and reconciles that schedule against what happened.
"""

from rollingplan.planning.engine import PlanResult, plan_week
from rollingplan.reconciliation.reconcile import reconcile_schedule

__all__ = ["PlanResult", "plan_week", "reconcile_schedule"]

__version__ = "0.1.0"
