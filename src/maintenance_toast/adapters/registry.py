"""Registry adapter using pywin32 (win32api)."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


def _hive(name: str):
    import win32con

    hives = {
        "HKLM": win32con.HKEY_LOCAL_MACHINE,
        "HKCU": win32con.HKEY_CURRENT_USER,
    }
    return hives[name]


class WindowsRegistry:
    """RegistryStore backed by the Win32 registry API."""

    def _open(self, hive: str, path: str):
        import pywintypes
        import win32api
        import win32con

        try:
            return win32api.RegOpenKeyEx(_hive(hive), path, 0, win32con.KEY_READ)
        except pywintypes.error:
            return None

    def get_value(self, hive: str, path: str, name: str) -> Any | None:
        import pywintypes
        import win32api

        key = self._open(hive, path)
        if key is None:
            return None
        try:
            value, _ = win32api.RegQueryValueEx(key, name)
            return value
        except pywintypes.error:
            return None
        finally:
            win32api.RegCloseKey(key)

    def has_key(self, hive: str, path: str) -> bool:
        import win32api

        key = self._open(hive, path)
        if key is None:
            return False
        win32api.RegCloseKey(key)
        return True

    def subkeys(self, hive: str, path: str) -> list[str]:
        import win32api

        key = self._open(hive, path)
        if key is None:
            return []
        try:
            return [entry[0] for entry in win32api.RegEnumKeyEx(key)]
        finally:
            win32api.RegCloseKey(key)

    def set_value(self, hive: str, path: str, name: str, value: Any) -> None:
        import win32api
        import win32con

        if isinstance(value, int):
            value_type, data = win32con.REG_DWORD, int(value)
        else:
            value_type, data = win32con.REG_SZ, str(value)

        key, _ = win32api.RegCreateKeyEx(_hive(hive), path, win32con.KEY_WRITE)
        try:
            win32api.RegSetValueEx(key, name, 0, value_type, data)
        finally:
            win32api.RegCloseKey(key)
        logger.debug("Set %s\\%s\\%s", hive, path, name)
