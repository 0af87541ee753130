"""Slot resolution.

A slot is a calendar day in the planning window that may receive a new
session. A day is open only when it is an available weekday, not a
preferred rest day, free of fixed appointments, outside any active status
window and carries no completed workout or terminal session.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from loguru import logger

from rollingplan.core.dates import date_window
from rollingplan.domain.enums import Hardness, Weekday
from rollingplan.domain.models import Constraints, DaySlot, FixedEvent, StatusWindow

HARD_FIXED_EVENT = re.compile(r"volleyball|soccer|basketball|handball|hockey|rugby|tennis|squash|boxing|martial")

REASON_NOT_AVAILABLE = "not_available"
REASON_REST_DAY = "rest_day"
REASON_FIXED_APPOINTMENT = "fixed_appointment"
REASON_STATUS_WINDOW = "status_window"
REASON_COMPLETED = "completed"
REASON_TERMINAL_SESSION = "terminal_session"


def fixed_events_in_window(constraints: Constraints, today: date, days: int = 7) -> list[FixedEvent]:
    """Expand fixed appointments onto dates in [today, today + days).

    Team and contact sports are hard; everything else is normal.
    """
    events = [
        FixedEvent(
            date=day,
            title=appointment.name,
            hardness=Hardness.HARD if HARD_FIXED_EVENT.search(appointment.name.lower()) else Hardness.NORMAL,
        )
        for appointment in constraints.fixed_appointments
        for day in date_window(today, days)
        if appointment.applies_on(day)
    ]
    return sorted(events, key=lambda e: e.date)


@dataclass(frozen=True)
class SlotResolution:
    """Open slots plus the reason every other day was excluded.

    Attributes:
        open_slots: Assignable days in date order
        excluded: Reason per excluded date (first failing check)
    """

    open_slots: tuple[DaySlot, ...]
    excluded: dict[date, str] = field(default_factory=dict)

    def excluded_for(self, reason: str) -> list[date]:
        return sorted(d for d, r in self.excluded.items() if r == reason)


def resolve_slots(
    constraints: Constraints,
    today: date,
    days: int = 7,
    *,
    completed_dates: Iterable[date] = (),
    terminal_dates: Iterable[date] = (),
    status_window: StatusWindow | None = None,
) -> SlotResolution:
    """Compute the open day-slots for the planning window.

    Args:
        constraints: Validated intake constraints
        today: First day of the window
        days: Window length
        completed_dates: Dates with a completed workout
        terminal_dates: Dates of prior sessions already completed, missed or skipped
        status_window: Active illness/travel/injury window, if any

    Returns:
        SlotResolution
    """
    available = set(constraints.days_available)
    rest = set(constraints.preferred_rest_days)
    completed = set(completed_dates)
    terminal = set(terminal_dates)

    open_slots: list[DaySlot] = []
    excluded: dict[date, str] = {}
    for day in date_window(today, days):
        weekday = Weekday.from_date(day)
        if weekday in rest:
            excluded[day] = REASON_REST_DAY
        elif weekday not in available:
            excluded[day] = REASON_NOT_AVAILABLE
        elif any(a.applies_on(day) for a in constraints.fixed_appointments):
            excluded[day] = REASON_FIXED_APPOINTMENT
        elif status_window is not None and status_window.covers(day):
            excluded[day] = REASON_STATUS_WINDOW
        elif day in completed:
            excluded[day] = REASON_COMPLETED
        elif day in terminal:
            excluded[day] = REASON_TERMINAL_SESSION
        else:
            open_slots.append(DaySlot(date=day, weekday=weekday))

    for day, reason in sorted(excluded.items()):
        logger.debug(f"Slot {day.isoformat()} excluded: {reason}")
    logger.info(
        "Slots resolved",
        open_slots=len(open_slots),
        excluded=len(excluded),
    )
    return SlotResolution(open_slots=tuple(open_slots), excluded=excluded)


def cap_slots(slots: Iterable[DaySlot], limit: int | None) -> list[DaySlot]:
    """Keep at most `limit` slots, earliest first. None means no cap."""
    slots = list(slots)
    if limit is None:
        return slots
    return slots[: max(0, limit)]
