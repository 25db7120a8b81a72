"""Host facts adapter.

Uses:
- pywin32 for the logged-on account and the UI language
- psutil for the last boot time
- the registry for the installed OS build
"""

from __future__ import annotations

import locale
import logging
from datetime import datetime

from ..core.ports import RegistryStore

logger = logging.getLogger(__name__)

CURRENT_VERSION_KEY = r"SOFTWARE\Microsoft\Windows NT\CurrentVersion"


class WindowsHost:
    """HostInfo for the local Windows session."""

    def __init__(self, registry: RegistryStore):
        self._registry = registry

    def account(self) -> tuple[str, str]:
        import win32api
        import win32con

        sam = win32api.GetUserNameEx(win32con.NameSamCompatible)
        domain, _, user = sam.rpartition("\\")
        return domain, user

    def boot_time(self) -> datetime:
        import psutil

        return datetime.fromtimestamp(psutil.boot_time())

    def os_build(self) -> int:
        build = self._registry.get_value("HKLM", CURRENT_VERSION_KEY, "CurrentBuild")
        if build is None:
            return 0
        return int(build)

    def culture(self) -> str:
        try:
            import win32api

            name = locale.windows_locale.get(win32api.GetUserDefaultUILanguage())
        except Exception as e:
            logger.debug(f"UI language lookup failed: {e}")
            name = None
        return name.replace("_", "-") if name else "en-US"
