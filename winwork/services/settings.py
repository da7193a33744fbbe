"""Application settings with defaults and validated accessors."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from .. import models
from ..repositories.settings import SettingKind, SettingsRepository
from .tags import is_hex_color, normalize_color

logger = logging.getLogger(__name__)

THEMES = ("Light", "Dark", "Auto")
HOTKEY_MODIFIERS = ("ctrl", "alt", "shift", "win")

# key -> (default value, description)
DEFAULTS: Dict[str, Tuple[str, str]] = {
    "Theme": ("Dark", "Application theme (Light/Dark/Auto)"),
    "GlobalHotkey": ("Ctrl+Alt+L", "Global hotkey to show application"),
    "MinimizeToTray": ("true", "Minimize to system tray when closed"),
    "StartWithWindows": ("false", "Start application with Windows"),
    "ShowNotifications": ("true", "Show tray notifications"),
    "AutoBackup": ("true", "Automatically backup data"),
    "BackupInterval": ("7", "Backup interval in days"),
    "BackgroundColor": ("#1E1E1E", "Main window background colour"),
    "Window.Opacity": ("100", "Main window opacity in percent"),
    "Terminal.PowerShellPath": ("powershell.exe", "Path to PowerShell executable"),
    "Terminal.GitBashPath": ("", "Path to Git Bash executable (optional)"),
    "Terminal.CmdPath": ("cmd.exe", "Path to CMD executable"),
    "Terminal.Default": ("PowerShell", "Default terminal when opening Terminal items"),
}


class SettingsService:
    def __init__(self, settings: SettingsRepository) -> None:
        self.settings = settings

    def get_all(self) -> List[models.AppSetting]:
        return self.settings.get_all()

    def _write_default(self, key: str) -> Optional[str]:
        if key not in DEFAULTS:
            return None
        value, description = DEFAULTS[key]
        self.settings.set_value(key, value, description)
        return value

    def get(self, key: str) -> Optional[str]:
        value = self.settings.get_value(key)
        if value is None:
            return self._write_default(key)
        return value

    def get_typed(self, key: str, kind: SettingKind) -> Optional[Any]:
        value = self.settings.get_typed(key, kind)
        if value is None and self._write_default(key) is not None:
            return self.settings.get_typed(key, kind)
        return value

    def set(self, key: str, value: Optional[str], description: Optional[str] = None) -> bool:
        if not key or not key.strip():
            return False
        self.settings.set_value(key.strip(), value or "", description)
        return True

    def set_typed(self, key: str, kind: SettingKind, value: Any) -> bool:
        if not key or not key.strip():
            return False
        self.settings.set_typed(key.strip(), kind, value)
        return True

    def delete(self, key: str) -> bool:
        return self.settings.delete(key)

    def reset_to_defaults(self) -> None:
        for key, (value, description) in DEFAULTS.items():
            self.settings.set_value(key, value, description)
        logger.info("Reset %d settings to defaults", len(DEFAULTS))

    def get_theme(self) -> str:
        return self.get("Theme") or "Dark"

    def set_theme(self, theme: str) -> bool:
        for known in THEMES:
            if theme and theme.strip().lower() == known.lower():
                return self.set("Theme", known)
        return False

    def get_global_hotkey(self) -> str:
        return self.get("GlobalHotkey") or "Ctrl+Alt+L"

    def set_global_hotkey(self, hotkey: str) -> bool:
        if not hotkey or not hotkey.strip():
            return False
        lowered = hotkey.lower()
        if not any(modifier in lowered for modifier in HOTKEY_MODIFIERS):
            return False
        return self.set("GlobalHotkey", hotkey.strip())

    def get_minimize_to_tray(self) -> bool:
        value = self.get_typed("MinimizeToTray", SettingKind.BOOL)
        return True if value is None else value

    def set_minimize_to_tray(self, enabled: bool) -> bool:
        return self.set_typed("MinimizeToTray", SettingKind.BOOL, enabled)

    def get_start_with_windows(self) -> bool:
        return bool(self.get_typed("StartWithWindows", SettingKind.BOOL))

    def set_start_with_windows(self, enabled: bool) -> bool:
        return self.set_typed("StartWithWindows", SettingKind.BOOL, enabled)

    def get_background_color(self) -> str:
        return normalize_color(self.get("BackgroundColor"))

    def set_background_color(self, color: str) -> bool:
        if not is_hex_color(color):
            return False
        return self.set("BackgroundColor", normalize_color(color))

    def get_window_opacity(self) -> int:
        value = self.get_typed("Window.Opacity", SettingKind.INT)
        if value is None or not 0 <= value <= 100:
            return 100
        return value

    def set_window_opacity(self, opacity: int) -> bool:
        if not 0 <= opacity <= 100:
            return False
        return self.set_typed("Window.Opacity", SettingKind.INT, opacity)

    def get_terminal_path(self, terminal: str) -> str:
        return self.get(f"Terminal.{terminal}Path") or ""
