"""Scenario selection: first matching trigger in a fixed priority order."""

from __future__ import annotations

from enum import Enum, auto
from typing import Callable

from .composer import uptime_exceeded
from .facts import Facts
from .settings import Settings

TOP_LEVEL_FEATURES = ("UpgradeOS", "PendingRebootUptime", "PendingRebootCheck", "ADPasswordExpiration")


class Trigger(Enum):
    UPGRADE_OS = auto()
    UPTIME_EXCEEDED = auto()
    REBOOT_PENDING_REGISTRY = auto()
    REBOOT_PENDING_CLIENT = auto()
    PASSWORD_EXPIRING = auto()
    DEFAULT = auto()


def _upgrade_os(settings: Settings, facts: Facts) -> bool:
    target = settings.target_build
    return (
        settings.feature("UpgradeOS")
        and target is not None
        and facts.os_build is not None
        and facts.os_build < target
    )


_PRIORITY: tuple[tuple[Trigger, Callable[[Settings, Facts], bool]], ...] = (
    (Trigger.UPGRADE_OS, _upgrade_os),
    (
        Trigger.UPTIME_EXCEEDED,
        lambda s, f: s.feature("PendingRebootUptime") and uptime_exceeded(s, f),
    ),
    (
        Trigger.REBOOT_PENDING_REGISTRY,
        lambda s, f: s.feature("PendingRebootCheck") and f.reboot_pending_registry,
    ),
    (
        Trigger.REBOOT_PENDING_CLIENT,
        lambda s, f: s.feature("PendingRebootCheck") and f.reboot_pending_client,
    ),
    (
        Trigger.PASSWORD_EXPIRING,
        lambda s, f: s.feature("ADPasswordExpiration") and f.password_expiry.expiring,
    ),
    (
        Trigger.DEFAULT,
        lambda s, f: not any(s.feature(name) for name in TOP_LEVEL_FEATURES),
    ),
)


def select_trigger(settings: Settings, facts: Facts) -> Trigger | None:
    """Return the first matching trigger, or None when nothing should fire."""
    for trigger, matches in _PRIORITY:
        if matches(settings, facts):
            return trigger
    return None
