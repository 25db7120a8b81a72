import pytest

from maintenance_toast.core.errors import ValidationError
from maintenance_toast.core.settings import Option, Settings
from maintenance_toast.core.validator import validate


def _settings(features=("Toast",), options=("UsePowershellApp",)):
    return Settings(
        features=frozenset(features),
        options={name: Option(enabled=True) for name in options},
    )


def _rule(settings, client_installed=True):
    with pytest.raises(ValidationError) as exc:
        validate(settings, client_installed)
    return exc.value.rule


def test_minimal_config_is_valid():
    validate(_settings(), client_installed=False)


def test_toast_disabled():
    assert _rule(_settings(features=())) == "toast-disabled"


@pytest.mark.parametrize(
    "feature", ["PendingRebootCheck", "PendingRebootUptime", "ADPasswordExpiration"]
)
def test_upgrade_os_excludes_features(feature):
    assert _rule(_settings(features=("Toast", "UpgradeOS", feature))) == "upgrade-os-exclusive"


@pytest.mark.parametrize("option", ["PendingRebootUptimeText", "PendingRebootCheckText"])
def test_upgrade_os_excludes_reboot_texts(option):
    settings = _settings(features=("Toast", "UpgradeOS"), options=("UsePowershellApp", option))
    assert _rule(settings) == "upgrade-os-exclusive"


def test_upgrade_os_allows_password_text():
    validate(
        _settings(
            features=("Toast", "UpgradeOS"),
            options=("UsePowershellApp", "ADPasswordExpirationText"),
        ),
        client_installed=True,
    )


@pytest.mark.parametrize(
    "pair",
    [
        ("PendingRebootCheck", "PendingRebootUptime"),
        ("PendingRebootCheck", "ADPasswordExpiration"),
        ("PendingRebootUptime", "ADPasswordExpiration"),
    ],
)
def test_reboot_features_are_exclusive(pair):
    assert _rule(_settings(features=("Toast",) + pair)) == "feature-exclusive"


@pytest.mark.parametrize(
    "pair",
    [
        ("PendingRebootUptimeText", "PendingRebootCheckText"),
        ("PendingRebootUptimeText", "ADPasswordExpirationText"),
        ("PendingRebootCheckText", "ADPasswordExpirationText"),
    ],
)
def test_extra_texts_are_exclusive(pair):
    assert _rule(_settings(options=("UsePowershellApp",) + pair)) == "extra-text-exclusive"


def test_reboot_check_needs_its_own_text():
    settings = _settings(
        features=("Toast", "PendingRebootCheck"),
        options=("UsePowershellApp", "PendingRebootUptimeText"),
    )
    assert _rule(settings) == "extra-text-mismatch"


def test_uptime_needs_its_own_text():
    settings = _settings(
        features=("Toast", "PendingRebootUptime"),
        options=("UsePowershellApp", "PendingRebootCheckText"),
    )
    assert _rule(settings) == "extra-text-mismatch"


def test_matching_texts_are_valid():
    validate(
        _settings(
            features=("Toast", "PendingRebootCheck"),
            options=("UsePowershellApp", "PendingRebootCheckText"),
        ),
        client_installed=True,
    )
    validate(
        _settings(
            features=("Toast", "PendingRebootUptime"),
            options=("UsePowershellApp", "PendingRebootUptimeText"),
        ),
        client_installed=True,
    )


def test_app_identity_needs_exactly_one():
    assert _rule(_settings(options=())) == "app-identity"
    assert _rule(_settings(options=("UsePowershellApp", "UseSoftwareCenterApp"))) == "app-identity"


def test_software_center_needs_client():
    settings = _settings(options=("UseSoftwareCenterApp",))
    assert _rule(settings, client_installed=False) == "app-identity"
    validate(settings, client_installed=True)


def test_deadlines_are_exclusive():
    settings = _settings(options=("UsePowershellApp", "Deadline", "DynamicDeadline"))
    assert _rule(settings) == "deadline-exclusive"


def test_run_ids_are_exclusive():
    settings = _settings(options=("UsePowershellApp", "RunPackageID", "RunApplicationID"))
    assert _rule(settings) == "run-id-exclusive"


def test_first_violation_wins():
    settings = _settings(
        features=("Toast", "UpgradeOS", "PendingRebootCheck", "PendingRebootUptime"),
        options=("Deadline", "DynamicDeadline"),
    )
    assert _rule(settings) == "upgrade-os-exclusive"
