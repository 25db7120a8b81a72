"""Management client adapter (ConfigMgr agent via WMI).

Uses:
- psutil to check whether the agent service is installed
- pywin32 (win32com) for WMI queries against root\\ccm\\ClientSDK
"""

from __future__ import annotations

import logging
from datetime import datetime

logger = logging.getLogger(__name__)

CLIENT_SERVICE = "ccmexec"
CLIENT_NAMESPACE = "root\\ccm\\ClientSDK"
LOGON_NAMESPACE = "root\\ccm"


def _service_exists(name: str) -> bool:
    import psutil

    try:
        psutil.win_service_get(name)
        return True
    except psutil.NoSuchProcess:
        return False


def _query(namespace: str, wql: str) -> list:
    import win32com.client

    service = win32com.client.GetObject(f"winmgmts:\\\\.\\{namespace}")
    return list(service.ExecQuery(wql))


def _call(namespace: str, wmi_class: str, method: str) -> dict:
    import win32com.client

    cls = win32com.client.GetObject(f"winmgmts:\\\\.\\{namespace}:{wmi_class}")
    result = cls.ExecMethod_(method)
    return {prop.Name: prop.Value for prop in result.Properties_}


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def parse_wmi_datetime(value: str | None) -> datetime | None:
    """Parse a CIM datetime ("yyyymmddHHMMSS.ffffff+UUU"), ignoring the offset."""
    if not value:
        return None
    try:
        return datetime.strptime(value[:14], "%Y%m%d%H%M%S")
    except ValueError:
        logger.debug("Unparseable WMI datetime %r", value)
        return None


class ConfigMgrClient:
    """ManagementClient backed by the ConfigMgr agent."""

    def __init__(self):
        self._installed: bool | None = None

    def is_installed(self) -> bool:
        if self._installed is None:
            try:
                self._installed = _service_exists(CLIENT_SERVICE)
            except Exception as e:
                logger.warning("Could not query service %s: %s", CLIENT_SERVICE, e)
                self._installed = False
        return self._installed

    def reboot_pending(self) -> bool:
        result = _call(CLIENT_NAMESPACE, "CCM_ClientUtilities", "DetermineIfRebootPending")
        logger.info(
            "Management client reboot state: pending=%s, hard=%s",
            result.get("RebootPending"),
            result.get("IsHardRebootPending"),
        )
        return bool(result.get("RebootPending") or result.get("IsHardRebootPending"))

    def program_deadlines(self, package_id: str) -> list[datetime]:
        programs = _query(
            CLIENT_NAMESPACE,
            f"SELECT * FROM CCM_Program WHERE PackageID = '{_quote(package_id)}'",
        )
        deadlines = [parse_wmi_datetime(program.Deadline) for program in programs]
        return [d for d in deadlines if d is not None]

    def is_package_deployed(self, package_id: str) -> bool:
        programs = _query(
            CLIENT_NAMESPACE,
            f"SELECT PackageID FROM CCM_Program WHERE PackageID = '{_quote(package_id)}'",
        )
        return bool(programs)

    def is_application_deployed(self, application_id: str) -> bool:
        applications = _query(
            CLIENT_NAMESPACE,
            f"SELECT Id FROM CCM_Application WHERE Id = '{_quote(application_id)}'",
        )
        return bool(applications)

    def active_logon_sids(self) -> list[str]:
        events = _query(
            LOGON_NAMESPACE,
            "SELECT UserSID FROM CCM_UserLogonEvents WHERE LogoffTime = NULL",
        )
        return sorted({event.UserSID for event in events if event.UserSID})
