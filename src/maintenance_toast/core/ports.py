"""Core ports (interfaces) for maintenance-toast.

These protocols define the boundaries between the decision engine and the
Windows-specific adapters (registry, WMI, ADSI, toast rendering, speech).
They are intentionally small and query-oriented so the core stays pure.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class DirectoryUser:
    """A user entry resolved from the directory service."""

    distinguished_name: str
    given_name: str | None = None


@runtime_checkable
class RegistryStore(Protocol):
    """Read/write access to the host registry."""

    def get_value(self, hive: str, path: str, name: str) -> Any | None:
        """Return a value's data, or None when the key or value is missing."""

    def has_key(self, hive: str, path: str) -> bool:
        """True if the key exists."""

    def subkeys(self, hive: str, path: str) -> list[str]:
        """Names of the key's direct subkeys; empty when the key is missing."""

    def set_value(self, hive: str, path: str, name: str, value: Any) -> None:
        """Create the key if needed and write a value."""


@runtime_checkable
class ManagementClient(Protocol):
    """The host's systems-management agent."""

    def is_installed(self) -> bool:
        """True if the agent service exists on this host."""

    def reboot_pending(self) -> bool:
        """True if the agent reports a pending reboot."""

    def program_deadlines(self, package_id: str) -> list[datetime]:
        """Deadlines of every catalog program deployed under package_id."""

    def is_package_deployed(self, package_id: str) -> bool:
        """True if package_id is in this host's program catalog."""

    def is_application_deployed(self, application_id: str) -> bool:
        """True if application_id is in this host's application catalog."""

    def active_logon_sids(self) -> list[str]:
        """SIDs of the users the agent sees as logged on (no logoff time yet)."""


@runtime_checkable
class DirectoryService(Protocol):
    """Enterprise identity directory."""

    def find_user(self, account: str, search_base: str | None = None) -> DirectoryUser | None:
        """Look up a user by account name."""

    def password_expiry_filetime(self, distinguished_name: str) -> int | None:
        """Raw computed password-expiry FILETIME for the user."""


@runtime_checkable
class HostInfo(Protocol):
    """Point-in-time facts about the host and the logged-on user."""

    def account(self) -> tuple[str, str]:
        """(domain, user name) of the current account."""

    def boot_time(self) -> datetime:
        """Local time of the last boot."""

    def os_build(self) -> int:
        """Installed OS build number."""

    def culture(self) -> str:
        """UI culture name, e.g. "en-US"."""


@runtime_checkable
class ToastDisplay(Protocol):
    """Native toast rendering."""

    def show(self, app_id: str, document_xml: str) -> None:
        """Display the document; raises DisplayError on failure."""


@runtime_checkable
class SpeechOutput(Protocol):
    """Text-to-speech playback."""

    def speak(self, text: str, culture: str) -> None:
        """Speak text with a voice matching culture when available."""
