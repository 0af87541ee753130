"""Loguru sinks for planner runs.

Planner components log structured fields as keyword arguments
(``logger.info("load_ratio_computed", ratio=1.4)``). The console sink
renders those fields as ``key=value`` pairs after the message; the
optional file sink can write one JSON object per record instead so the
audit of a cron run can be shipped elsewhere.
"""

import sys
from pathlib import Path

from loguru import logger

from rollingplan.config.settings import Settings
from rollingplan.config.settings import settings as default_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def render_fields(extra: dict) -> str:
    """Render structured log fields as sorted ``key=value`` pairs."""
    return " ".join(f"{key}={extra[key]}" for key in sorted(extra))


def _formatter(base: str):
    def _format(record) -> str:
        # Braces inside field values must not reach loguru's format parser.
        fields = render_fields(record["extra"]).replace("{", "{{").replace("}", "}}")
        suffix = f" | {fields}" if fields else ""
        return f"{base}{suffix}\n{{exception}}"

    return _format


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    json_file: bool = False,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> list[int]:
    """Configure loguru with a console sink and an optional rotating file sink.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, only console logging.
        json_file: Serialize file records as JSON lines instead of text.
        rotation: Log rotation size (e.g., "10 MB", "1 day")
        retention: Log retention period (e.g., "7 days", "1 month")

    Returns:
        The loguru handler ids that were added.
    """
    logger.remove()

    handler_ids = [
        logger.add(
            sys.stderr,
            format=_formatter(CONSOLE_FORMAT),
            level=level,
            colorize=True,
        )
    ]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_options = {"serialize": True} if json_file else {"format": _formatter(FILE_FORMAT)}
        handler_ids.append(
            logger.add(
                log_path,
                level=level,
                rotation=rotation,
                retention=retention,
                compression="zip",
                backtrace=True,
                diagnose=False,
                **file_options,
            )
        )

    logger.debug(f"Logger initialized with level={level}")
    return handler_ids


def setup_logger_from_settings(settings: Settings | None = None) -> list[int]:
    """Configure logging from the environment-driven settings."""
    cfg = settings or default_settings
    return setup_logger(level=cfg.log_level, log_file=cfg.log_file, json_file=cfg.log_json)
