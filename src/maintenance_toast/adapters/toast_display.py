"""Toast display adapter: hands the rendered XML to the WinRT notifier via PowerShell."""

from __future__ import annotations

import logging
import subprocess

from ..core.errors import DisplayError

logger = logging.getLogger(__name__)

_SCRIPT = (
    "[Windows.UI.Notifications.ToastNotificationManager, Windows.UI.Notifications, ContentType = WindowsRuntime] | Out-Null;"
    " [Windows.Data.Xml.Dom.XmlDocument, Windows.Data.Xml.Dom.XmlDocument, ContentType = WindowsRuntime] | Out-Null;"
    " $xml = New-Object Windows.Data.Xml.Dom.XmlDocument;"
    " $xml.LoadXml(%s);"
    " $toast = [Windows.UI.Notifications.ToastNotification]::new($xml);"
    " [Windows.UI.Notifications.ToastNotificationManager]::CreateToastNotifier(%s).Show($toast);"
)


def _ps_quote(value: str) -> str:
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


def build_script(app_id: str, document_xml: str) -> str:
    return _SCRIPT % (_ps_quote(document_xml), _ps_quote(app_id))


def _run(args: list[str]) -> subprocess.CompletedProcess[str]:
    creationflags = getattr(subprocess, "CREATE_NO_WINDOW", 0)
    return subprocess.run(args, capture_output=True, text=True, timeout=30, creationflags=creationflags)


class PowerShellToastDisplay:
    """ToastDisplay that shells out to powershell.exe."""

    def __init__(self, executable: str = "powershell.exe"):
        self._executable = executable

    def show(self, app_id: str, document_xml: str) -> None:
        args = [
            self._executable,
            "-NoLogo",
            "-NonInteractive",
            "-NoProfile",
            "-ExecutionPolicy",
            "Bypass",
            "-Command",
            build_script(app_id, document_xml),
        ]
        try:
            result = _run(args)
        except (OSError, subprocess.SubprocessError) as e:
            raise DisplayError(f"Could not start {self._executable}: {e}") from e
        if result.returncode != 0:
            raise DisplayError(result.stderr.strip() or f"exit code {result.returncode}")
        logger.info("Toast displayed as %s", app_id)
