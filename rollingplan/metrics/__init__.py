"""Training stress metrics: workout classification and load ratio."""

from rollingplan.metrics.classification import (
    TIER_RULES,
    TierRule,
    classify_recent,
    classify_workout,
    excluded_from_load,
    modality_for_type,
)
from rollingplan.metrics.load_ratio import (
    aggregate_daily_minutes,
    compute_load_ratio,
    ratio_from_loads,
    risk_tier_for_ratio,
)

__all__ = [
    "TIER_RULES",
    "TierRule",
    "aggregate_daily_minutes",
    "classify_recent",
    "classify_workout",
    "compute_load_ratio",
    "excluded_from_load",
    "modality_for_type",
    "ratio_from_loads",
    "risk_tier_for_ratio",
]
