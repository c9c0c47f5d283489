# src/config/logging_config.py

"""Per-run logging for the scheduled price monitor.

Every run writes a ``run_YYYYMMDD_HHMMSS.log`` file under the logs
directory that collects all ``price_monitor.*`` records. Warnings and
errors are also echoed to stderr for the scheduler's job log.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

ROOT_LOGGER_NAME = "price_monitor"

_FILE_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"
_STDERR_FORMAT = "%(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _handler(
    handler: logging.Handler, level: int, fmt: str,
) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=_DATE_FORMAT))
    return handler


def setup_logging(logs_dir: Path | None = None) -> Path:
    """Attach the run-file and stderr handlers to ``price_monitor``.

    Calling it again in the same process keeps the existing handlers.
    Returns the path of this run's log file.
    """
    logs_dir = logs_dir or Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(logging.DEBUG)
    if root.handlers:
        return log_file

    root.addHandler(_handler(
        logging.FileHandler(log_file, encoding="utf-8"),
        logging.DEBUG,
        _FILE_FORMAT,
    ))
    root.addHandler(_handler(
        logging.StreamHandler(sys.stderr), logging.WARNING, _STDERR_FORMAT,
    ))
    root.debug("Run log opened at %s", log_file)
    return log_file
