"""
Logging for the freelance marketplace.

Acceptances and payment confirmations for the same job may arrive on
different request threads at once. Each line therefore names its thread,
and lines written through a per-job logger also carry the job id, so a
lost acceptance race can be read back in order:

    2026-10-19 10:15:31 [INFO    ] [Thread-4] job=17 freelance_market.job.17 - Accepted by bob
    2026-10-19 10:15:31 [WARNING ] [Thread-5] job=17 freelance_market.job.17 - Acceptance by carol rejected: status is accepted

Handlers:
    console               always
    market.log            rotating, production only
    market_error.log      rotating, ERROR and above, production only

Usage:
    setup_logging(log_level=logging.INFO, enable_file_logging=True)
    logger = get_logger(__name__)
    job_logger = get_job_logger(17)
"""

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union


APP_LOGGER_NAME = "freelance_market"
JOB_LOGGER_PREFIX = f"{APP_LOGGER_NAME}.job."

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] [%(thread_name)s] %(job_tag)s%(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5


# =============================================================================
# RECORD CONTEXT
# =============================================================================

def job_id_from_logger_name(name: str) -> Optional[int]:
    """Return the job id of a per-job logger name, or None."""
    if not name.startswith(JOB_LOGGER_PREFIX):
        return None
    suffix = name[len(JOB_LOGGER_PREFIX):]
    return int(suffix) if suffix.isdigit() else None


class MarketContextFilter(logging.Filter):
    """
    Stamps every record with `thread_name`, `job_id` and `job_tag`.

    `job_id` is taken from the logger name (see get_job_logger) and is None
    for module loggers; `job_tag` is its formatted form ("job=17 " or "").
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.thread_name = threading.current_thread().name
        record.job_id = job_id_from_logger_name(record.name)
        record.job_tag = f"job={record.job_id} " if record.job_id is not None else ""
        return True


# =============================================================================
# SETUP
# =============================================================================

def _rotating_handler(
    path: Path,
    level: int,
    formatter: logging.Formatter,
    context_filter: logging.Filter,
    max_bytes: int,
    backup_count: int,
) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(context_filter)
    return handler


def setup_logging(
    app_name: str = APP_LOGGER_NAME,
    log_level: int = logging.INFO,
    log_dir: Optional[Union[str, Path]] = None,
    enable_file_logging: bool = True,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> logging.Logger:
    """
    Configure the application logger tree.

    Safe to call more than once (each app created in tests reconfigures it).

    Args:
        app_name: Root logger name; module and job loggers hang below it
        log_level: Minimum level for console and the main log file
        log_dir: Directory for log files (default: ./logs next to this file)
        enable_file_logging: Add the rotating market.log / market_error.log
        max_bytes: Rotation size per file
        backup_count: Rotated files kept per log

    Returns:
        The configured root application logger
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)
    logger.propagate = False
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    context_filter = MarketContextFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    logger.addHandler(console_handler)

    if enable_file_logging:
        log_dir = Path(log_dir) if log_dir else Path(__file__).parent / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        logger.addHandler(_rotating_handler(
            log_dir / "market.log", log_level, formatter, context_filter,
            max_bytes, backup_count,
        ))
        logger.addHandler(_rotating_handler(
            log_dir / "market_error.log", logging.ERROR, formatter, context_filter,
            max_bytes, backup_count,
        ))
        logger.info(f"File logging enabled in {log_dir}")

    logger.info(f"Logging configured at level {logging.getLevelName(log_level)}")
    return logger


# =============================================================================
# LOGGER FACTORIES
# =============================================================================

def get_logger(name: str) -> logging.Logger:
    """Module logger under the application namespace (pass __name__)."""
    if not name.startswith(APP_LOGGER_NAME):
        name = f"{APP_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def get_job_logger(job_id: Union[int, str]) -> logging.Logger:
    """
    Logger for one job's lifecycle.

    Post, accept and payment steps for a job all log through
    "freelance_market.job.<job_id>", and their records carry `job_id`.
    """
    return logging.getLogger(f"{JOB_LOGGER_PREFIX}{job_id}")
