"""Stage events for planner runs.

Every pipeline stage reports `planner_stage` events with a start, success
or fail status and a `planner_timing` event carrying its wall-clock
duration. Fields travel as loguru `extra` so sinks can render them.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum

from loguru import logger

LogValue = str | int | float | bool | None

STAGE_STATUSES = frozenset({"start", "success", "fail"})


class PlannerStage(StrEnum):
    """Pipeline stages in execution order; reconciliation runs on its own."""

    VALIDATE = "validate_intake"
    CLASSIFY = "classify"
    LOAD_RATIO = "load_ratio"
    TARGETS = "targets"
    SLOTS = "slots"
    PLACEMENT = "placement"
    GUARDRAILS = "guardrails"
    READINESS = "readiness"
    RECONCILE = "reconcile"


def log_event(event: str, **kwargs: LogValue) -> None:
    """Log a structured event.

    Thin wrapper around logger.info so every stage logs in the same shape.

    Standard events:
    - planner_stage: Stage transition (see log_stage_event)
    - planner_timing: Stage duration
    - plan_generated: Final plan summary

    Args:
        event: Event name
        **kwargs: Additional structured fields to include in the log
    """
    logger.info(event, **kwargs)


def log_stage_event(
    stage: PlannerStage,
    status: str,
    meta: dict[str, LogValue] | None = None,
) -> None:
    """Emit a `planner_stage` event.

    Raises:
        ValueError: If `status` is not start, success or fail.
    """
    if status not in STAGE_STATUSES:
        raise ValueError(f"Status must be one of {sorted(STAGE_STATUSES)}, got: {status}")

    fields: dict[str, LogValue] = {**(meta or {}), "stage": stage.value, "status": status}
    log_event("planner_stage", **fields)


@contextmanager
def stage_timer(stage: PlannerStage) -> Iterator[dict[str, LogValue]]:
    """Wrap a stage with start/success/fail events and its duration.

    The yielded dict is attached to the success event, so callers can
    report counts from inside the block.

    Args:
        stage: Planner stage

    Yields:
        Mutable metadata dictionary
    """
    meta: dict[str, LogValue] = {}
    start_time = time.monotonic()
    log_stage_event(stage, "start")
    try:
        yield meta
    except Exception as e:
        log_stage_event(stage, "fail", {"error": type(e).__name__})
        raise
    else:
        log_stage_event(stage, "success", meta)
    finally:
        log_event(
            "planner_timing",
            stage=stage.value,
            duration_seconds=round(time.monotonic() - start_time, 6),
        )
