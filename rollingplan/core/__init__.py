"""Cross-cutting helpers: logging, stage events and local dates."""

from rollingplan.core.dates import date_window, in_rolling_week, local_today, rolling_week
from rollingplan.core.logger import setup_logger, setup_logger_from_settings
from rollingplan.core.observability import PlannerStage, log_event, log_stage_event, stage_timer

__all__ = [
    "PlannerStage",
    "date_window",
    "in_rolling_week",
    "local_today",
    "log_event",
    "log_stage_event",
    "rolling_week",
    "setup_logger",
    "setup_logger_from_settings",
    "stage_timer",
]
