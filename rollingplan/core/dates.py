"""Local-date helpers.

Planning logic never reads the clock. The only place "today" is derived
from wall-clock time is local_today(), called by whoever drives a run.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo


def local_today(tz: str | None = None) -> date:
    """Return today's date in the configured training timezone.

    Args:
        tz: IANA timezone name. Defaults to settings.timezone.

    Returns:
        Local calendar date
    """
    if tz is None:
        from rollingplan.config.settings import settings

        tz = settings.timezone
    return datetime.now(ZoneInfo(tz)).date()


def date_window(start: date, days: int) -> list[date]:
    """Return `days` consecutive dates starting at `start` (inclusive)."""
    return [start + timedelta(days=i) for i in range(days)]


def rolling_week(today: date, days: int = 7) -> tuple[date, date]:
    """Return the trailing window [today - (days - 1), today] used for completed-session accounting."""
    return today - timedelta(days=days - 1), today


def in_rolling_week(day: date, today: date, days: int = 7) -> bool:
    start, end = rolling_week(today, days)
    return start <= day <= end


def iso_week_parity(day: date) -> int:
    """0 for even ISO weeks, 1 for odd ones."""
    return day.isocalendar()[1] % 2
