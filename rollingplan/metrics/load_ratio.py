"""Acute:chronic load ratio (ACWR) computation.

This module computes the injury-risk heuristic the planner uses to decide
whether to deload. Load is total duration minutes per local day; low
intensity active recovery is excluded.

Metrics:
- Acute: sum of the 7 most recent days with data (<= today)
- Chronic: sum of the 28 most recent days with data (<= today) / 4,
  a weekly-equivalent average
- Ratio: acute / chronic, rounded to 2 decimals

Properties:
- Deterministic: Same input always produces same output
- Missing days are skipped, not zero-filled, so sparse history degrades
  gracefully instead of reading as detraining
- Fewer than the minimum days with data raises InsufficientDataError
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, timedelta

from loguru import logger

from rollingplan.config.settings import Settings, settings as default_settings
from rollingplan.domain.enums import RiskTier
from rollingplan.domain.errors import InsufficientDataError
from rollingplan.domain.models import LoadRatio, WorkoutRecord
from rollingplan.metrics.classification import excluded_from_load

ACUTE_DAYS = 7
CHRONIC_DAYS = 28
CHRONIC_WEEKS = 4


def aggregate_daily_minutes(
    workouts: Iterable[WorkoutRecord],
    today: date,
    lookback_days: int,
) -> dict[date, float]:
    """Sum duration minutes per local day within the lookback window.

    Args:
        workouts: Workout history, any order
        today: Reference local date (inclusive upper bound)
        lookback_days: Window length in days, today inclusive

    Returns:
        Mapping of date to total minutes, only for days with load
    """
    start = today - timedelta(days=lookback_days - 1)
    daily: dict[date, float] = defaultdict(float)
    for workout in workouts:
        if not start <= workout.date <= today:
            continue
        if excluded_from_load(workout):
            continue
        if workout.duration_minutes > 0:
            daily[workout.date] += workout.duration_minutes
    return dict(daily)


def risk_tier_for_ratio(ratio: float | None, settings: Settings | None = None) -> RiskTier:
    """Map a ratio onto its risk tier.

    Tiers: < 0.8 detraining, 0.8-1.5 inclusive safe, > 1.5 and <= 2.0
    elevated, > 2.0 high. None maps to unknown.
    """
    cfg = settings or default_settings
    if ratio is None:
        return RiskTier.UNKNOWN
    if ratio < cfg.acwr_detraining_below:
        return RiskTier.DETRAINING
    if ratio <= cfg.acwr_safe_max:
        return RiskTier.SAFE
    if ratio <= cfg.acwr_elevated_max:
        return RiskTier.ELEVATED
    return RiskTier.HIGH


def ratio_from_loads(
    acute_minutes: float,
    chronic_minutes_avg: float,
    days_with_data: int = CHRONIC_DAYS,
    settings: Settings | None = None,
) -> LoadRatio:
    """Build a LoadRatio from already aggregated acute and chronic loads."""
    ratio = round(acute_minutes / chronic_minutes_avg, 2) if chronic_minutes_avg > 0 else None
    return LoadRatio(
        acute_load_minutes=round(acute_minutes, 1),
        chronic_load_minutes_avg=round(chronic_minutes_avg, 1),
        ratio=ratio,
        risk_tier=risk_tier_for_ratio(ratio, settings),
        days_with_data=days_with_data,
    )


def compute_load_ratio(
    workouts: Iterable[WorkoutRecord],
    today: date,
    settings: Settings | None = None,
) -> LoadRatio:
    """Compute the acute:chronic load ratio as of `today`.

    Args:
        workouts: Workout history
        today: Reference local date
        settings: Optional settings override

    Returns:
        LoadRatio report

    Raises:
        InsufficientDataError: If fewer than settings.min_days_with_data
            distinct days carry load within the lookback window
    """
    cfg = settings or default_settings
    daily = aggregate_daily_minutes(workouts, today, cfg.lookback_days)
    dates = sorted(daily)

    if len(dates) < cfg.min_days_with_data:
        logger.info(
            "Load ratio unavailable",
            days_with_data=len(dates),
            required_days=cfg.min_days_with_data,
        )
        raise InsufficientDataError(len(dates), cfg.min_days_with_data)

    acute = sum(daily[d] for d in dates[-ACUTE_DAYS:])
    chronic_avg = sum(daily[d] for d in dates[-CHRONIC_DAYS:]) / CHRONIC_WEEKS
    result = ratio_from_loads(acute, chronic_avg, len(dates), cfg)

    logger.info(
        "Load ratio computed",
        acute=result.acute_load_minutes,
        chronic_avg=result.chronic_load_minutes_avg,
        ratio=result.ratio,
        risk_tier=result.risk_tier.value,
    )
    return result
