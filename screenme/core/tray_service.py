"""
System tray service for ScreenMe.

The tray icon is the only permanent UI: its menu starts a region capture,
a full screen capture, or quits the application.
"""

from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal
from PySide6.QtGui import QAction, QColor, QIcon, QPainter, QPen, QPixmap
from PySide6.QtWidgets import QMenu, QSystemTrayIcon

from screenme.services.logging_service import get_logger

# Lets the menu close before the screen is grabbed
MENU_CLOSE_DELAY_MS = 150


class TrayService(QObject):
    """
    System tray icon and menu.

    Signals:
        capture_region_requested: "Capture Region" was clicked.
        capture_fullscreen_requested: "Capture Full Screen" was clicked.
        quit_requested: "Quit" was clicked.
    """

    capture_region_requested = Signal()
    capture_fullscreen_requested = Signal()
    quit_requested = Signal()

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)

        self._tray_icon = QSystemTrayIcon(self._create_icon(), None)
        self._tray_icon.setToolTip("ScreenMe - Screenshot Tool")

        self._tray_menu = QMenu()
        self._setup_menu()
        self._tray_icon.setContextMenu(self._tray_menu)

        self._logger.info("Tray service initialized")

    def _create_icon(self) -> QIcon:
        """Draw a small white camera so no icon resources are needed."""
        size = 64
        pixmap = QPixmap(size, size)
        pixmap.fill(QColor(0, 0, 0, 0))

        painter = QPainter(pixmap)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        pen = QPen(QColor(255, 255, 255))
        pen.setWidth(2)
        painter.setPen(pen)
        painter.setBrush(QColor(255, 255, 255))
        painter.drawRoundedRect(8, 20, 48, 32, 4, 4)

        painter.setBrush(QColor(60, 60, 60))
        painter.drawEllipse(22, 24, 20, 20)

        painter.setBrush(QColor(255, 255, 255))
        painter.drawRect(12, 14, 12, 8)
        painter.end()

        return QIcon(pixmap)

    def _setup_menu(self) -> None:
        region_action = QAction("Capture Region", self._tray_menu)
        region_action.triggered.connect(lambda checked=False: self._on_capture_region())
        self._tray_menu.addAction(region_action)

        fullscreen_action = QAction("Capture Full Screen", self._tray_menu)
        fullscreen_action.triggered.connect(lambda checked=False: self._on_capture_fullscreen())
        self._tray_menu.addAction(fullscreen_action)

        self._tray_menu.addSeparator()

        quit_action = QAction("Quit", self._tray_menu)
        quit_action.triggered.connect(lambda checked=False: self._on_quit())
        self._tray_menu.addAction(quit_action)

    def show(self) -> None:
        self._tray_icon.show()
        self._logger.debug("Tray icon shown")

    def hide(self) -> None:
        self._tray_icon.hide()
        self._logger.debug("Tray icon hidden")

    def _on_capture_region(self) -> None:
        self._logger.info("Capture Region requested from tray")
        QTimer.singleShot(MENU_CLOSE_DELAY_MS, self.capture_region_requested.emit)

    def _on_capture_fullscreen(self) -> None:
        self._logger.info("Capture Full Screen requested from tray")
        QTimer.singleShot(MENU_CLOSE_DELAY_MS, self.capture_fullscreen_requested.emit)

    def _on_quit(self) -> None:
        self._logger.info("Quit requested from tray")
        self.quit_requested.emit()
