"""
Configuration service for ScreenMe.

Settings are stored as JSON in ~/.config/screenme/config.json following
the XDG Base Directory Specification. The display surface only reads the
save folder and file extension; hotkeys are read by the hotkey service.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

from screenme.services.logging_service import get_logger

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "screenme"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "default_save_folder": str(Path.home() / "Pictures" / "ScreenMe"),
    # Without the leading dot: "png", "jpg" or "jpeg"
    "file_extension": "png",
    # Format: modifier keys + key, e.g. "ctrl+shift+a"
    "hotkeys": {
        "region_capture": "ctrl+shift+a",
        "fullscreen_capture": "ctrl+shift+f",
    },
}


def normalize_extension(extension: Any) -> str:
    """Lower-case image extension without a leading dot (".JPG" -> "jpg")."""
    return str(extension).lower().lstrip(".")


class ConfigService:
    """
    Loads, saves and exposes application configuration.

    Loaded values are deep-merged over DEFAULT_CONFIG, so a partial or
    older config file still yields every key.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize the ConfigService.

        Args:
            config_path: Optional path to config file. Defaults to
                        ~/.config/screenme/config.json
        """
        self._logger = get_logger(__name__)
        self._config_path = config_path or DEFAULT_CONFIG_FILE
        self._config: Dict[str, Any] = {}

        self._load()

    def _load(self) -> None:
        """Load configuration from file, using defaults if needed."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)

        if not self._config_path.exists():
            self._logger.info(
                f"Config file not found at {self._config_path}. Using defaults."
            )
            self._save_to_file()
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded_config = json.load(f)

            if isinstance(loaded_config, dict):
                self._deep_merge(self._config, loaded_config)
                self._logger.info(f"Configuration loaded from {self._config_path}")
                # Save back so new default keys get persisted
                self._save_to_file()
            else:
                raise ValueError("Config file does not contain a valid JSON object")

        except (json.JSONDecodeError, ValueError) as e:
            self._logger.warning(
                f"Config file corrupted or invalid: {e}. Recreating with defaults."
            )
            self._config = copy.deepcopy(DEFAULT_CONFIG)
            self._save_to_file()

        except (OSError, PermissionError) as e:
            self._logger.warning(f"Could not read config file: {e}. Using defaults.")

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Recursively merge override dict into base dict."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _save_to_file(self) -> None:
        """Save current configuration to file."""
        try:
            self._config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self._config_path, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2)

            self._logger.debug(f"Configuration saved to {self._config_path}")

        except (OSError, PermissionError) as e:
            self._logger.error(f"Could not save config file: {e}")

    def load_config(self) -> Dict[str, Any]:
        """Return a copy of the whole configuration."""
        return copy.deepcopy(self._config)

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a value in memory; call save() to persist it."""
        self._config[key] = value
        self._logger.debug(f"Config key '{key}' set to '{value}'")

    def save(self) -> None:
        """Persist current configuration to disk."""
        self._save_to_file()

    # ─── Screenshot Settings ──────────────────────────────────────────────

    @property
    def default_save_folder(self) -> str:
        return self.get("default_save_folder", DEFAULT_CONFIG["default_save_folder"])

    @property
    def file_extension(self) -> str:
        """Configured image extension, lower-case and without a leading dot."""
        return normalize_extension(self.get("file_extension", DEFAULT_CONFIG["file_extension"]))

    # ─── Hotkey Settings ──────────────────────────────────────────────────

    @property
    def hotkeys(self) -> Dict[str, str]:
        return self.get("hotkeys", DEFAULT_CONFIG["hotkeys"])

    @property
    def hotkey_region_capture(self) -> str:
        return self.hotkeys.get("region_capture", "ctrl+shift+a")

    @property
    def hotkey_fullscreen_capture(self) -> str:
        return self.hotkeys.get("fullscreen_capture", "ctrl+shift+f")
