"""
Application core for ScreenMe.

AppCore wires the services together:
- ConfigService for the save folder, extension and hotkeys
- CaptureService for grabbing the primary screen
- TrayService and HotkeyService as the two ways to start a capture
- One ScreenshotDisplay at a time for selecting and annotating the capture
"""

from typing import Optional

from PySide6.QtCore import QObject, QRect, Slot
from PySide6.QtWidgets import QApplication

from screenme.core.capture_service import CaptureService
from screenme.core.hotkey_service import HotkeyService
from screenme.core.tray_service import TrayService
from screenme.editor.screenshot_display import ScreenshotDisplay, open_display
from screenme.services.config_service import ConfigService
from screenme.services.logging_service import get_logger


class AppCore(QObject):
    """
    Central application core.

    The capture flow:
    1. A hotkey or the tray menu requests a capture
    2. CaptureService grabs the primary screen
    3. A ScreenshotDisplay opens full screen with the image
    4. When the display closes, the next capture is allowed
    """

    def __init__(
        self,
        app: QApplication,
        config_service: Optional[ConfigService] = None,
        capture_service: Optional[CaptureService] = None,
        enable_tray: bool = True,
        enable_hotkeys: bool = True,
    ) -> None:
        super().__init__()
        self._app = app
        self._logger = get_logger(__name__)
        self._logger.info("Initializing ScreenMe application core...")

        self._config_service = config_service or ConfigService()
        self._capture_service = capture_service or CaptureService(self)
        self._tray_service: Optional[TrayService] = None
        self._hotkey_service: Optional[HotkeyService] = None
        self._display: Optional[ScreenshotDisplay] = None

        self._apply_menu_style()
        if enable_tray:
            self._init_tray()
        if enable_hotkeys:
            self._init_hotkeys()

    def _apply_menu_style(self) -> None:
        self._app.setStyleSheet("""
            QToolTip {
                background-color: #3d3d3d;
                color: #dcdcdc;
                border: 1px solid #5a5a5a;
                padding: 4px;
            }
            QMenu {
                background-color: #2d2d2d;
                color: #dcdcdc;
                border: 1px solid #3a3a3a;
            }
            QMenu::item {
                padding: 6px 20px;
            }
            QMenu::item:selected {
                background-color: #4a6a9a;
            }
        """)

    def _init_tray(self) -> None:
        self._tray_service = TrayService(self)
        self._tray_service.capture_region_requested.connect(self.take_screenshot)
        self._tray_service.capture_fullscreen_requested.connect(self.take_fullscreen_screenshot)
        self._tray_service.quit_requested.connect(self.shutdown)
        self._tray_service.show()

    def _init_hotkeys(self) -> None:
        self._hotkey_service = HotkeyService(self._config_service, self)
        self._hotkey_service.region_capture_triggered.connect(self.take_screenshot)
        self._hotkey_service.fullscreen_capture_triggered.connect(self.take_fullscreen_screenshot)

    # ─── Capture Flow ─────────────────────────────────────────────────────

    @Slot()
    def take_screenshot(self) -> Optional[ScreenshotDisplay]:
        """Capture the screen and let the user select a region on it."""
        self._logger.info("Region capture requested")
        return self._open_capture(preselect_all=False)

    @Slot()
    def take_fullscreen_screenshot(self) -> Optional[ScreenshotDisplay]:
        """Capture the screen with the whole image already selected."""
        self._logger.info("Fullscreen capture requested")
        return self._open_capture(preselect_all=True)

    def _open_capture(self, preselect_all: bool) -> Optional[ScreenshotDisplay]:
        if self._display is not None:
            self._logger.info("A screenshot display is already open; ignoring request")
            return None

        image = self._capture_service.grab_primary_screen()
        if image is None:
            return None

        selection: Optional[QRect] = image.rect() if preselect_all else None
        self._display = open_display(image, self._config_service, selection=selection)
        self._display.closed.connect(self._on_display_closed)
        return self._display

    @Slot()
    def _on_display_closed(self) -> None:
        display = self._display
        self._display = None
        if display is not None:
            display.deleteLater()
        self._logger.debug("Screenshot display released")

    # ─── Application Lifecycle ────────────────────────────────────────────

    @Slot()
    def shutdown(self) -> None:
        """Stop listeners, hide the tray icon and quit the event loop."""
        self._logger.info("Shutting down ScreenMe...")

        if self._display is not None:
            self._display.close()

        if self._hotkey_service:
            self._hotkey_service.stop()

        if self._tray_service:
            self._tray_service.hide()

        QApplication.quit()

    # ─── Properties ───────────────────────────────────────────────────────

    @property
    def display(self) -> Optional[ScreenshotDisplay]:
        """The open screenshot display, if any."""
        return self._display
