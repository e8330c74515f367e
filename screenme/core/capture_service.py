"""
Capture service for ScreenMe.

Grabs the primary screen as a QImage. Region selection happens afterwards
on the frozen image inside the screenshot display, so both capture modes
share the same grab.
"""

from typing import Optional

from PySide6.QtCore import QObject
from PySide6.QtGui import QGuiApplication, QImage

from screenme.services.logging_service import get_logger


class CaptureService(QObject):
    """Takes screenshots of the primary screen."""

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)

    def grab_primary_screen(self) -> Optional[QImage]:
        """
        Capture the whole primary screen.

        Returns:
            The captured image, or None if no screen is available or the
            grab produced an empty image.
        """
        screen = QGuiApplication.primaryScreen()
        if screen is None:
            self._logger.error("No primary screen available for capture")
            return None

        # grabWindow(0) captures the entire screen, not a specific window
        image = screen.grabWindow(0).toImage()
        if image.isNull():
            self._logger.error(f"Capture of screen {screen.name()} returned an empty image")
            return None

        self._logger.info(
            f"Captured {image.width()}x{image.height()} from {screen.name()}"
        )
        return image
