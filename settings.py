"""
settings.py

Persistent settings management for the SVG editor core.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/svgedit/settings.toml
    - macOS: ~/Library/Application Support/svgedit/settings.toml
    - Linux: ~/.config/svgedit/settings.toml

Default values are documented in comments throughout this file.
If settings.toml is corrupted, these defaults will be used.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

APP_NAME = "svgedit"

log = logging.getLogger(__name__)

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


# =============================================================================
# History Settings
# =============================================================================

@dataclass
class HistorySettings:
    """Undo/redo history settings.

    Defaults:
        max_size: 50
    """
    max_size: int = 50  # Default: 50 commands, oldest dropped first


# =============================================================================
# Clipboard Settings
# =============================================================================

@dataclass
class ClipboardSettings:
    """Copy/paste settings.

    Defaults:
        paste_offset_base: 10.0
        paste_offset_step: 5.0
        id_prefix: "pasted"
    """
    paste_offset_base: float = 10.0   # Default: 10.0 units for the first paste
    paste_offset_step: float = 5.0    # Default: 5.0 units added per repeated paste
    id_prefix: str = "pasted"         # Default: "pasted" (ids look like pasted-<uuid>)


# =============================================================================
# Gesture Settings
# =============================================================================

@dataclass
class GestureSettings:
    """Pointer and keyboard gesture settings.

    Defaults:
        min_resize_size: 10.0
        nudge_step: 1.0
        nudge_step_large: 10.0
    """
    min_resize_size: float = 10.0    # Default: 10.0 pixels
    nudge_step: float = 1.0          # Default: 1.0 pixel per arrow key
    nudge_step_large: float = 10.0   # Default: 10.0 pixels with Shift held


@dataclass
class DebugSettings:
    """Diagnostics settings.

    Defaults:
        trace: False
    """
    trace: bool = False  # Default: False (see debug_trace.py)


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        history: Undo/redo history settings.
        clipboard: Copy/paste settings.
        gestures: Drag, resize and nudge settings.
        debug: Diagnostics settings.
    """
    history: HistorySettings = field(default_factory=HistorySettings)
    clipboard: ClipboardSettings = field(default_factory=ClipboardSettings)
    gestures: GestureSettings = field(default_factory=GestureSettings)
    debug: DebugSettings = field(default_factory=DebugSettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
        settings_dir: Explicit directory, overriding the platform default.
    """

    def __init__(self, app_name: str = APP_NAME, settings_dir: Optional[Path] = None):
        if settings_dir is None:
            settings_dir = Path(platformdirs.user_config_dir(app_name))
        self.settings_dir = Path(settings_dir)
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            log.warning("Ignoring unreadable settings file %s: %s", self.settings_file, e)
            return AppSettings()

        return self._parse_toml(data)

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        history = data.get("history", {})
        settings.history.max_size = history.get("max_size", settings.history.max_size)

        clip = data.get("clipboard", {})
        settings.clipboard.paste_offset_base = clip.get("paste_offset_base", settings.clipboard.paste_offset_base)
        settings.clipboard.paste_offset_step = clip.get("paste_offset_step", settings.clipboard.paste_offset_step)
        settings.clipboard.id_prefix = clip.get("id_prefix", settings.clipboard.id_prefix)

        gest = data.get("gestures", {})
        settings.gestures.min_resize_size = gest.get("min_resize_size", settings.gestures.min_resize_size)
        settings.gestures.nudge_step = gest.get("nudge_step", settings.gestures.nudge_step)
        settings.gestures.nudge_step_large = gest.get("nudge_step_large", settings.gestures.nudge_step_large)

        debug = data.get("debug", {})
        settings.debug.trace = debug.get("trace", settings.debug.trace)

        if not isinstance(settings.history.max_size, int) or settings.history.max_size < 1:
            log.warning("history.max_size must be a positive integer; using default")
            settings.history.max_size = HistorySettings.max_size

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "history": {
                "max_size": s.history.max_size,
            },
            "clipboard": {
                "paste_offset_base": s.clipboard.paste_offset_base,
                "paste_offset_step": s.clipboard.paste_offset_step,
                "id_prefix": s.clipboard.id_prefix,
            },
            "gestures": {
                "min_resize_size": s.gestures.min_resize_size,
                "nudge_step": s.gestures.nudge_step,
                "nudge_step_large": s.gestures.nudge_step_large,
            },
            "debug": {
                "trace": s.debug.trace,
            },
        }

    def to_toml(self) -> str:
        """Convert current settings to a TOML-formatted string.

        Returns:
            TOML representation of the current settings.
        """
        return tomli_w.dumps(self._to_toml_dict())

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
