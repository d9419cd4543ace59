"""
Logging setup for measures and the batch driver.

Console records carry the job context a batch run attaches through
`extra` (building, upgrade, job, measure) as a trailing ``[key=value]``
block. File records are written one dict per line so a finished run's log
can be grepped by building or job.

Level comes from RESMEASURES_LOG_LEVEL, the log directory from
RESMEASURES_LOG_DIR.

Usage:
    from resmeasures.utils.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Job finished", extra={"building_id": 12, "upgrade_name": "Baseline"})
"""

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

DEFAULT_LOG_LEVEL = os.environ.get("RESMEASURES_LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(os.environ.get("RESMEASURES_LOG_DIR", "logs"))

CONTEXT_KEYS = ("building_id", "upgrade_name", "job_id", "measure")

# Chatty HTTP loggers used by weather downloads
QUIET_LOGGERS = ("urllib3", "requests")


def record_context(record: logging.LogRecord, keys=CONTEXT_KEYS) -> List[Tuple[str, object]]:
    """(key, value) pairs of the job context present on a record."""
    return [(key, getattr(record, key)) for key in keys if hasattr(record, key)]


class MeasureFormatter(logging.Formatter):
    """Console formatter: level colors and the job context suffix."""

    LEVEL_COLORS: Dict[int, str] = {
        logging.DEBUG: "36",
        logging.INFO: "32",
        logging.WARNING: "33",
        logging.ERROR: "31",
        logging.CRITICAL: "35",
    }

    def __init__(self, use_colors: bool = True):
        super().__init__("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s", "%Y-%m-%d %H:%M:%S")
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        context = record_context(record)
        if context:
            text += " [" + ", ".join(f"{k}={v}" for k, v in context) + "]"
        code = self.LEVEL_COLORS.get(record.levelno)
        if self.use_colors and code:
            text = f"\033[{code}m{text}\033[0m"
        return text


class FileFormatter(logging.Formatter):
    """One dict per record for log files."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(record_context(record, CONTEXT_KEYS + ("error_type",)))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return str(entry)


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_to_file: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """
    Replace the root handlers with a console handler and, optionally, a
    file handler that records everything from DEBUG up.

    Args:
        level: Console log level name
        log_to_file: Also write a log file
        log_file: File path (default: LOG_DIR/resmeasures_YYYYMMDD.log)
    """
    root = logging.getLogger()
    root.setLevel(_level(level))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(_level(level))
    console.setFormatter(MeasureFormatter())
    root.addHandler(console)

    if log_to_file:
        if log_file is None:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            path = LOG_DIR / f"resmeasures_{datetime.now():%Y%m%d}.log"
        else:
            path = Path(log_file)
        file_handler = logging.FileHandler(path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(FileFormatter())
        root.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


_configured = False


def ensure_logging() -> None:
    """Configure logging once per process."""
    global _configured
    if _configured:
        return
    setup_logging()
    _configured = True


ensure_logging()
