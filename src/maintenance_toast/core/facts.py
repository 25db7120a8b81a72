"""Fact gatherers: point-in-time probes of the host.

Every gatherer is read-only and degrades to an "unknown" result instead of
raising, so one unreachable collaborator never aborts the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .ports import DirectoryService, HostInfo, ManagementClient, RegistryStore
from .settings import Settings

logger = logging.getLogger(__name__)

CBS_REBOOT_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\Component Based Servicing\RebootPending"
WU_REBOOT_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\WindowsUpdate\Auto Update\RebootRequired"
SESSION_MANAGER_KEY = r"SYSTEM\CurrentControlSet\Control\Session Manager"
SESSION_DATA_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\Authentication\LogonUI\SessionData"

FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)
FILETIME_NEVER = 0x7FFFFFFFFFFFFFFF


@dataclass(frozen=True)
class PasswordExpiry:
    expiring: bool = False
    date: datetime | None = None
    days_remaining: int | None = None


@dataclass(frozen=True)
class Facts:
    """Facts gathered for one run. None means "not gathered"."""

    os_build: int | None = None
    reboot_pending_registry: bool = False
    reboot_pending_client: bool = False
    uptime_days: int | None = None
    password_expiry: PasswordExpiry = PasswordExpiry()
    dynamic_deadline: datetime | None = None
    given_name: str | None = None


@dataclass(frozen=True)
class Probes:
    """The ports the gatherers read from."""

    registry: RegistryStore
    client: ManagementClient
    directory: DirectoryService
    host: HostInfo


def reboot_pending_registry(registry: RegistryStore) -> bool:
    try:
        cbs = bool(registry.subkeys("HKLM", CBS_REBOOT_KEY))
        wu = registry.has_key("HKLM", WU_REBOOT_KEY)
        rename = registry.get_value("HKLM", SESSION_MANAGER_KEY, "PendingFileRenameOperations")
    except Exception as e:
        logger.warning("Registry reboot check failed: %s", e)
        return False

    pending = cbs or wu or bool(rename)
    logger.info(
        "Registry reboot check: servicing=%s, windows update=%s, file rename=%s",
        cbs,
        wu,
        bool(rename),
    )
    return pending


def reboot_pending_client(client: ManagementClient) -> bool:
    if not client.is_installed():
        logger.info("Management client not installed, skipping its reboot check")
        return False
    try:
        return bool(client.reboot_pending())
    except Exception as e:
        logger.warning("Management client reboot check failed: %s", e)
        return False


def uptime_days(host: HostInfo, now: datetime) -> int | None:
    try:
        boot = host.boot_time()
    except Exception as e:
        logger.warning("Could not read last boot time: %s", e)
        return None
    return max((now - boot) // timedelta(days=1), 0)


def given_name(
    directory: DirectoryService,
    client: ManagementClient,
    registry: RegistryStore,
    host: HostInfo,
    search_base: str | None = None,
) -> str | None:
    """Given name of the logged-on user, or None when it cannot be resolved."""
    try:
        _, user = host.account()
    except Exception as e:
        logger.warning("Could not resolve current account: %s", e)
        return None

    try:
        entry = directory.find_user(user, search_base)
        if entry and entry.given_name:
            return entry.given_name
        logger.info("No given name in directory for %s, trying session data", user)
    except Exception as e:
        logger.warning("Directory lookup for given name failed: %s", e)

    try:
        return _given_name_from_session_data(client, registry)
    except Exception as e:
        logger.warning("Session data lookup for given name failed: %s", e)
        return None


def _given_name_from_session_data(client: ManagementClient, registry: RegistryStore) -> str | None:
    if not client.is_installed():
        logger.info("Management client not installed, no session data for given name")
        return None

    sids = client.active_logon_sids()
    if len(sids) > 1:
        logger.warning("%d users are logged on, not guessing the given name", len(sids))
        return None
    if not sids:
        logger.info("No active logon reported by the management client")
        return None

    sid = sids[0]
    for session in registry.subkeys("HKLM", SESSION_DATA_KEY):
        path = f"{SESSION_DATA_KEY}\\{session}"
        if registry.get_value("HKLM", path, "LoggedOnUserSID") != sid:
            continue
        display = registry.get_value("HKLM", path, "LoggedOnDisplayName")
        parts = str(display or "").split()
        if parts:
            return parts[0]
    logger.info("No display name in session data for %s", sid)
    return None


def filetime_to_datetime(value: int) -> datetime | None:
    """Convert a FILETIME to naive local time; None for "never" and out-of-range values."""
    if not value or value >= FILETIME_NEVER:
        return None
    try:
        utc = FILETIME_EPOCH + timedelta(microseconds=value // 10)
        return utc.astimezone().replace(tzinfo=None)
    except (OverflowError, ValueError, OSError):
        logger.warning("FILETIME %d is outside the supported date range", value)
        return None


def password_expiry(
    directory: DirectoryService,
    host: HostInfo,
    threshold_days: int,
    now: datetime,
    search_base: str | None = None,
) -> PasswordExpiry:
    try:
        _, user = host.account()
        entry = directory.find_user(user, search_base)
        if entry is None:
            logger.warning("Account %s not found in directory", user)
            return PasswordExpiry()
        raw = directory.password_expiry_filetime(entry.distinguished_name)
    except Exception as e:
        logger.warning("Password expiry lookup failed: %s", e)
        return PasswordExpiry()

    expires = filetime_to_datetime(raw) if raw is not None else None
    if expires is None:
        logger.info("Password expiry not set for %s", user)
        return PasswordExpiry()

    remaining = (expires.date() - now.date()).days
    return PasswordExpiry(
        expiring=0 <= remaining <= threshold_days,
        date=expires,
        days_remaining=remaining,
    )


def dynamic_deadline(client: ManagementClient, package_id: str, now: datetime) -> datetime | None:
    if not client.is_installed():
        logger.info("Management client not installed, no dynamic deadline")
        return None
    try:
        deadlines = client.program_deadlines(package_id)
    except Exception as e:
        logger.warning("Dynamic deadline lookup for %s failed: %s", package_id, e)
        return None

    yesterday = now - timedelta(days=1)
    current = [d for d in deadlines if d and d > yesterday]
    if not current:
        logger.info("No current deadline found for %s", package_id)
        return None
    return min(current)


def gather_facts(settings: Settings, probes: Probes, now: datetime) -> Facts:
    """Probe only what the enabled features and options need."""
    values: dict = {}
    search_base = settings.option("ADSearchBase").value if settings.enabled("ADSearchBase") else None

    if settings.feature("UpgradeOS"):
        try:
            values["os_build"] = probes.host.os_build()
        except Exception as e:
            logger.warning("Could not read installed OS build: %s", e)

    if settings.feature("PendingRebootCheck") or settings.enabled("PendingRebootCheckText"):
        values["reboot_pending_registry"] = reboot_pending_registry(probes.registry)
        values["reboot_pending_client"] = reboot_pending_client(probes.client)

    if settings.feature("PendingRebootUptime") or settings.enabled("PendingRebootUptimeText"):
        values["uptime_days"] = uptime_days(probes.host, now)

    if settings.feature("ADPasswordExpiration") or settings.enabled("ADPasswordExpirationText"):
        values["password_expiry"] = password_expiry(
            probes.directory, probes.host, settings.password_expiration_days, now, search_base
        )

    dynamic = settings.option("DynamicDeadline")
    if dynamic.enabled and dynamic.value:
        values["dynamic_deadline"] = dynamic_deadline(probes.client, dynamic.value, now)

    if settings.enabled("GreetGivenName"):
        values["given_name"] = given_name(
            probes.directory, probes.client, probes.registry, probes.host, search_base
        )

    return Facts(**values)
