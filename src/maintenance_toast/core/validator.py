"""Configuration validation: ordered exclusion rules, fail fast on the first."""

from __future__ import annotations

from itertools import combinations
from typing import Callable

from .errors import ValidationError
from .settings import Settings

REBOOT_FEATURES = ("PendingRebootCheck", "PendingRebootUptime", "ADPasswordExpiration")
EXTRA_TEXTS = ("PendingRebootUptimeText", "PendingRebootCheckText", "ADPasswordExpirationText")


def _check_toast(settings: Settings, client_installed: bool) -> str | None:
    if not settings.feature("Toast"):
        return "Toast is not enabled, nothing to do"
    return None


def _check_upgrade_os(settings: Settings, client_installed: bool) -> str | None:
    if not settings.feature("UpgradeOS"):
        return None
    for name in REBOOT_FEATURES:
        if settings.feature(name):
            return f"UpgradeOS cannot be combined with {name}"
    for name in ("PendingRebootUptimeText", "PendingRebootCheckText"):
        if settings.enabled(name):
            return f"UpgradeOS cannot be combined with {name}"
    return None


def _check_features(settings: Settings, client_installed: bool) -> str | None:
    for a, b in combinations(REBOOT_FEATURES, 2):
        if settings.feature(a) and settings.feature(b):
            return f"{a} and {b} cannot both be enabled"
    return None


def _check_extra_texts(settings: Settings, client_installed: bool) -> str | None:
    for a, b in combinations(EXTRA_TEXTS, 2):
        if settings.enabled(a) and settings.enabled(b):
            return f"{a} and {b} cannot both be enabled"
    return None


def _check_text_matches_feature(settings: Settings, client_installed: bool) -> str | None:
    if settings.feature("PendingRebootCheck") and settings.enabled("PendingRebootUptimeText"):
        return "PendingRebootCheck uses PendingRebootCheckText, not PendingRebootUptimeText"
    if settings.feature("PendingRebootUptime") and settings.enabled("PendingRebootCheckText"):
        return "PendingRebootUptime uses PendingRebootUptimeText, not PendingRebootCheckText"
    return None


def _check_app_identity(settings: Settings, client_installed: bool) -> str | None:
    software_center = settings.enabled("UseSoftwareCenterApp")
    powershell = settings.enabled("UsePowershellApp")
    if software_center == powershell:
        return "Exactly one of UseSoftwareCenterApp and UsePowershellApp must be enabled"
    if software_center and not client_installed:
        return "UseSoftwareCenterApp requires the management client, which is not installed"
    return None


def _check_deadlines(settings: Settings, client_installed: bool) -> str | None:
    if settings.enabled("Deadline") and settings.enabled("DynamicDeadline"):
        return "Deadline and DynamicDeadline cannot both be enabled"
    return None


def _check_run_ids(settings: Settings, client_installed: bool) -> str | None:
    if settings.enabled("RunApplicationID") and settings.enabled("RunPackageID"):
        return "RunApplicationID and RunPackageID cannot both be enabled"
    return None


RULES: tuple[tuple[str, Callable[[Settings, bool], str | None]], ...] = (
    ("toast-disabled", _check_toast),
    ("upgrade-os-exclusive", _check_upgrade_os),
    ("feature-exclusive", _check_features),
    ("extra-text-exclusive", _check_extra_texts),
    ("extra-text-mismatch", _check_text_matches_feature),
    ("app-identity", _check_app_identity),
    ("deadline-exclusive", _check_deadlines),
    ("run-id-exclusive", _check_run_ids),
)


def validate(settings: Settings, client_installed: bool) -> None:
    """Raise ValidationError for the first violated rule, in table order."""
    for rule, check in RULES:
        message = check(settings, client_installed)
        if message:
            raise ValidationError(rule, message)
