"""
ScreenMe - screenshot capture and annotation tool.

This is the main entry point for the application.
Run with: python -m screenme.app (or the `screenme` console script)
"""

import fcntl
import os
import signal
import sys
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication

from screenme import __version__
from screenme.core.app_core import AppCore
from screenme.services.logging_service import get_logger, setup_logging

# Lock file for single-instance enforcement
LOCK_FILE = Path.home() / ".cache" / "screenme" / "screenme.lock"

# Interval of the timer that lets Python signal handlers run
SIGNAL_POLL_INTERVAL_MS = 100

_app: Optional[QApplication] = None
_app_core: Optional[AppCore] = None
_lock_fd: Optional[int] = None
_should_quit = False


def acquire_single_instance_lock(lock_file: Path = LOCK_FILE) -> bool:
    """
    Acquire a file lock to ensure only one instance runs.

    Returns:
        True if the lock was acquired, False if another instance holds it.
    """
    global _lock_fd
    lock_file.parent.mkdir(parents=True, exist_ok=True)

    try:
        lock_fd = os.open(str(lock_file), os.O_CREAT | os.O_RDWR)
    except OSError:
        return False

    try:
        fcntl.flock(lock_fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except OSError:
        os.close(lock_fd)
        return False

    os.ftruncate(lock_fd, 0)
    os.write(lock_fd, str(os.getpid()).encode())

    # The descriptor stays open for the life of the process to hold the lock
    _lock_fd = lock_fd
    return True


def request_quit(signum, frame) -> None:
    global _should_quit
    _should_quit = True


def check_for_quit() -> None:
    """Timer callback: quit cleanly once a termination signal arrived."""
    if not _should_quit:
        return

    get_logger(__name__).info("Signal received, shutting down...")
    if _app_core is not None:
        _app_core.shutdown()
    elif _app is not None:
        _app.quit()


def main() -> int:
    """
    Main entry point for ScreenMe.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    global _app, _app_core

    setup_logging()
    logger = get_logger(__name__)

    try:
        logger.info(f"Starting ScreenMe {__version__}...")

        if not acquire_single_instance_lock():
            logger.warning("Another instance of ScreenMe is already running. Exiting.")
            print("ScreenMe is already running. Check your system tray.")
            return 1

        _app = QApplication(sys.argv)
        _app.setApplicationName("ScreenMe")
        _app.setOrganizationName("ScreenMe")
        _app.setApplicationVersion(__version__)
        # Runs from the tray; closing a display must not end the process
        _app.setQuitOnLastWindowClosed(False)

        signal.signal(signal.SIGINT, request_quit)
        signal.signal(signal.SIGTERM, request_quit)

        # The Qt event loop blocks Python signal handlers; poll for them
        quit_timer = QTimer()
        quit_timer.timeout.connect(check_for_quit)
        quit_timer.start(SIGNAL_POLL_INTERVAL_MS)

        _app_core = AppCore(_app)

        logger.info("ScreenMe initialization complete. Entering event loop...")
        exit_code = _app.exec()

        logger.info(f"ScreenMe exiting with code {exit_code}")
        return exit_code

    except Exception as e:
        logger.critical(f"Fatal error during startup: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
