"""
Global hotkey service for ScreenMe.

Listens for the region and fullscreen capture shortcuts with pynput, so
they work while the application has no focused window. pynput calls back
on its own thread; matches are handed to the Qt main thread through a
queued QMetaObject.invokeMethod.

Only X11 sessions are supported by the pynput backend used here.
"""

import threading
from typing import Dict, Optional, Set

from PySide6.QtCore import QMetaObject, QObject, Qt, Signal, Slot

from screenme.services.config_service import ConfigService
from screenme.services.logging_service import get_logger

try:
    from pynput import keyboard
    PYNPUT_AVAILABLE = True
except ImportError:
    PYNPUT_AVAILABLE = False

ACTION_REGION_CAPTURE = "region_capture"
ACTION_FULLSCREEN_CAPTURE = "fullscreen_capture"


class HotkeyService(QObject):
    """
    Global hotkey registration.

    Signals:
        region_capture_triggered: The region capture shortcut was pressed.
        fullscreen_capture_triggered: The fullscreen capture shortcut was pressed.
    """

    region_capture_triggered = Signal()
    fullscreen_capture_triggered = Signal()

    def __init__(
        self,
        config_service: ConfigService,
        parent: Optional[QObject] = None,
        start_listener: bool = True,
    ) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._config = config_service

        self._listener = None
        self._current_keys: Set = set()
        self._hotkeys: Dict[frozenset, str] = {}
        self._lock = threading.Lock()

        if not PYNPUT_AVAILABLE:
            self._logger.warning(
                "pynput not available. Global hotkeys are disabled. "
                "Install with: pip install pynput"
            )
            return

        self._setup_hotkeys()
        if start_listener:
            self._start_listener()

    def _parse_hotkey(self, hotkey_str: str) -> frozenset:
        """
        Parse a hotkey string like "ctrl+shift+a" into a set of pynput keys.

        Unknown key names are logged and skipped.
        """
        keys = set()
        for part in hotkey_str.lower().split("+"):
            part = part.strip()
            if part in ("ctrl", "control"):
                keys.add(keyboard.Key.ctrl_l)
            elif part == "shift":
                keys.add(keyboard.Key.shift_l)
            elif part == "alt":
                keys.add(keyboard.Key.alt_l)
            elif part in ("super", "win", "cmd"):
                keys.add(keyboard.Key.cmd)
            elif len(part) == 1:
                keys.add(keyboard.KeyCode.from_char(part))
            else:
                self._logger.warning(f"Unknown key in hotkey string: {part}")

        return frozenset(keys)

    def _setup_hotkeys(self) -> None:
        region_hotkey = self._config.hotkey_region_capture
        fullscreen_hotkey = self._config.hotkey_fullscreen_capture

        self._logger.info(
            f"Setting up hotkeys: region={region_hotkey}, fullscreen={fullscreen_hotkey}"
        )

        self._hotkeys = {
            self._parse_hotkey(region_hotkey): ACTION_REGION_CAPTURE,
            self._parse_hotkey(fullscreen_hotkey): ACTION_FULLSCREEN_CAPTURE,
        }

    def _start_listener(self) -> None:
        self._listener = keyboard.Listener(
            on_press=self._on_key_press,
            on_release=self._on_key_release,
        )
        self._listener.daemon = True
        self._listener.start()
        self._logger.info("Global hotkey listener started")

    def _on_key_press(self, key) -> None:
        with self._lock:
            self._current_keys.add(self._normalize_key(key))
            current_combo = frozenset(self._current_keys)

            for hotkey_combo, action in self._hotkeys.items():
                if self._combo_matches(hotkey_combo, current_combo):
                    self._trigger_action(action)
                    break

    def _on_key_release(self, key) -> None:
        with self._lock:
            self._current_keys.discard(self._normalize_key(key))

    def _normalize_key(self, key):
        """Map right-hand modifiers onto their left-hand variants."""
        if not PYNPUT_AVAILABLE:
            return key

        modifier_map = {
            keyboard.Key.ctrl_r: keyboard.Key.ctrl_l,
            keyboard.Key.shift_r: keyboard.Key.shift_l,
            keyboard.Key.alt_r: keyboard.Key.alt_l,
            keyboard.Key.alt_gr: keyboard.Key.alt_l,
        }
        return modifier_map.get(key, key)

    def _combo_matches(self, registered: frozenset, current: frozenset) -> bool:
        # Exact match: extra held keys do not trigger
        return registered == current

    def _trigger_action(self, action: str) -> None:
        self._logger.info(f"Hotkey action: {action}")

        if action == ACTION_REGION_CAPTURE:
            QMetaObject.invokeMethod(
                self, "_emit_region_capture", Qt.ConnectionType.QueuedConnection
            )
        elif action == ACTION_FULLSCREEN_CAPTURE:
            QMetaObject.invokeMethod(
                self, "_emit_fullscreen_capture", Qt.ConnectionType.QueuedConnection
            )

    @Slot()
    def _emit_region_capture(self) -> None:
        self.region_capture_triggered.emit()

    @Slot()
    def _emit_fullscreen_capture(self) -> None:
        self.fullscreen_capture_triggered.emit()

    def stop(self) -> None:
        """Stop the hotkey listener. Safe to call more than once."""
        if self._listener:
            self._listener.stop()
            self._listener = None
            self._logger.info("Global hotkey listener stopped")
