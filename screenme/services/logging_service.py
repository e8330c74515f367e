"""
Logging setup for ScreenMe.

The root logger gets a console handler and, when the log directory is
writable, a per-day file handler (~/.local/share/screenme/logs/screenme_YYYYMMDD.log).
Modules never configure logging themselves; they call get_logger(__name__).
"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional

DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "screenme" / "logs"
LOG_FILE_PREFIX = "screenme"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def log_file_path(log_dir: Path, day: Optional[date] = None) -> Path:
    """Path of the log file for day (today by default) inside log_dir."""
    day = day or date.today()
    return log_dir / f"{LOG_FILE_PREFIX}_{day:%Y%m%d}.log"


def _file_handler(log_dir: Path, formatter: logging.Formatter) -> logging.FileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file_path(log_dir), encoding="utf-8")
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: int = logging.INFO,
    log_to_file: bool = True,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Configure the root logger. Only the first call has any effect.

    Args:
        log_level: Level for the root logger and its handlers.
        log_to_file: Also write to the daily log file.
        log_dir: Directory for log files. Defaults to DEFAULT_LOG_DIR.
    """
    global _configured
    if _configured:
        return

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_to_file:
        try:
            root.addHandler(_file_handler(log_dir or DEFAULT_LOG_DIR, formatter))
        except OSError as e:
            root.warning(f"Could not open log file: {e}. Logging to console only.")

    _configured = True


def reset_logging() -> None:
    """Close and drop the root handlers so setup_logging() can run again."""
    global _configured
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    _configured = False


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
