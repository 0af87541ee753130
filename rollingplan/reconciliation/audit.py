"""Adaptation audit trail.

Append-only sink for session status transitions. Entries are never
modified or deleted; persistence is left to the caller, who can implement
the AdaptationLog protocol over any store.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from loguru import logger

from rollingplan.domain.models import AdaptationLogEntry


class AdaptationLog(Protocol):
    """Ordered, append-only event sink."""

    def append(self, entry: AdaptationLogEntry) -> None: ...

    def entries(self) -> tuple[AdaptationLogEntry, ...]: ...


class InMemoryAdaptationLog:
    """AdaptationLog kept in process memory."""

    def __init__(self, entries: Iterable[AdaptationLogEntry] = ()) -> None:
        self._entries: list[AdaptationLogEntry] = list(entries)

    def append(self, entry: AdaptationLogEntry) -> None:
        self._entries.append(entry)

    def entries(self) -> tuple[AdaptationLogEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def log_adaptation(log: AdaptationLog, entry: AdaptationLogEntry) -> None:
    """Append a status transition to the audit trail.

    This is an append-only operation. Once logged, entries cannot be modified.

    Args:
        log: Audit sink
        entry: Transition to record
    """
    logger.debug(
        f"Logging adaptation: session_id={entry.session_ref}, "
        f"{entry.from_status.value}->{entry.to_status.value}, rule={entry.rule_applied}"
    )
    log.append(entry)


def latest_terminal_entries(log: AdaptationLog) -> dict[str, AdaptationLogEntry]:
    """Most recent terminal transition per session reference."""
    latest: dict[str, AdaptationLogEntry] = {}
    for entry in log.entries():
        if entry.to_status.is_terminal:
            latest[entry.session_ref] = entry
    return latest
