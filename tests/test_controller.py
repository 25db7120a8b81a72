from datetime import datetime, timedelta

import pytest

from maintenance_toast.core import controller as controller_module
from maintenance_toast.core.controller import (
    POWERSHELL_APP_ID,
    RUN_ID_KEY,
    SOFTWARE_CENTER_APP_ID,
    ToastController,
)
from maintenance_toast.core.errors import DisplayError, UnsupportedHostError, ValidationError
from maintenance_toast.core.facts import WU_REBOOT_KEY
from maintenance_toast.core.ports import (
    DirectoryService,
    HostInfo,
    ManagementClient,
    RegistryStore,
    SpeechOutput,
    ToastDisplay,
)
from maintenance_toast.core.selector import Trigger
from maintenance_toast.core.settings import Option, Settings

NOW = datetime(2026, 3, 10, 15, 0)


class _Registry(RegistryStore):
    def __init__(self, values=None, keys=None):
        self.values = dict(values or {})
        self.keys = dict(keys or {})
        self.writes = []

    def get_value(self, hive, path, name):
        return self.values.get((hive, path, name))

    def has_key(self, hive, path):
        return (hive, path) in self.keys

    def subkeys(self, hive, path):
        return self.keys.get((hive, path), [])

    def set_value(self, hive, path, name, value):
        self.writes.append((hive, path, name, value))
        self.values[(hive, path, name)] = value


class _Client(ManagementClient):
    def __init__(self, installed=False, deployed=()):
        self.installed = installed
        self.deployed = set(deployed)

    def is_installed(self):
        return self.installed

    def reboot_pending(self):
        return False

    def program_deadlines(self, package_id):
        return []

    def is_package_deployed(self, package_id):
        return package_id in self.deployed

    def is_application_deployed(self, application_id):
        return application_id in self.deployed

    def active_logon_sids(self):
        return []


class _FailingClient(_Client):
    def is_package_deployed(self, package_id):
        raise RuntimeError("WMI namespace root\\ccm\\ClientSDK not available")


class _Directory(DirectoryService):
    def find_user(self, account, search_base=None):
        return None

    def password_expiry_filetime(self, distinguished_name):
        return None


class _Host(HostInfo):
    def __init__(self, build=19045, uptime_days=1):
        self.build = build
        self.uptime_days = uptime_days

    def account(self):
        return "CORP", "jdoe"

    def boot_time(self):
        return NOW - timedelta(days=self.uptime_days)

    def os_build(self):
        return self.build

    def culture(self):
        return "en-US"


class _Display(ToastDisplay):
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def show(self, app_id, document_xml):
        if self.error:
            raise self.error
        self.calls.append((app_id, document_xml))


class _Speech(SpeechOutput):
    def __init__(self):
        self.calls = []

    def speak(self, text, culture):
        self.calls.append((text, culture))


def _settings(features=(), **options):
    opts = {"UsePowershellApp": Option(enabled=True)}
    opts.update(
        {name: value if isinstance(value, Option) else Option(enabled=value) for name, value in options.items()}
    )
    return Settings(
        features=frozenset(("Toast",) + tuple(features)),
        options=opts,
        texts={"TitleText": "Restart required", "CustomAudioTextToSpeech": "Please restart"},
    )


def _controller(registry=None, client=None, host=None, display=None, speech=None):
    return ToastController(
        registry=registry or _Registry(),
        client=client or _Client(),
        directory=_Directory(),
        host=host or _Host(),
        display=display or _Display(),
        speech=speech or _Speech(),
        clock=lambda: NOW,
    )


def test_controller_default_notification():
    display = _Display()
    outcome = _controller(display=display).run(_settings())

    assert outcome.trigger is Trigger.DEFAULT
    assert outcome.displayed is True
    assert len(display.calls) == 1
    app_id, xml = display.calls[0]
    assert app_id == POWERSHELL_APP_ID
    assert "Restart required" in xml


def test_controller_reboot_pending_from_registry():
    registry = _Registry(keys={("HKLM", WU_REBOOT_KEY): []})
    display = _Display()

    outcome = _controller(registry=registry, display=display).run(_settings(["PendingRebootCheck"]))

    assert outcome.trigger is Trigger.REBOOT_PENDING_REGISTRY
    assert len(display.calls) == 1


def test_controller_condition_not_met_is_clean_noop():
    display = _Display()

    outcome = _controller(display=display).run(_settings(["PendingRebootCheck"]))

    assert outcome.trigger is None
    assert outcome.displayed is False
    assert display.calls == []


def test_controller_uptime_exceeded():
    settings = _settings(["PendingRebootUptime"], MaxUptimeDays=Option(value="3"))

    outcome = _controller(host=_Host(uptime_days=4)).run(settings)

    assert outcome.trigger is Trigger.UPTIME_EXCEEDED
    assert outcome.facts.uptime_days == 4


def test_controller_validation_failure_displays_nothing():
    display = _Display()
    settings = _settings(["PendingRebootCheck", "PendingRebootUptime"])

    with pytest.raises(ValidationError) as exc:
        _controller(display=display).run(settings)

    assert exc.value.rule == "feature-exclusive"
    assert display.calls == []


def test_controller_unsupported_host():
    with pytest.raises(UnsupportedHostError):
        _controller(host=_Host(build=9600)).run(_settings())


def test_controller_display_failure_is_logged_not_raised(caplog):
    display = _Display(error=DisplayError("rejected"))

    outcome = _controller(display=display).run(_settings())

    assert outcome.trigger is Trigger.DEFAULT
    assert outcome.displayed is False
    assert "Failed to display notification" in caplog.text


def test_controller_blocked_toasts_only_warn(caplog):
    registry = _Registry(
        values={("HKCU", controller_module.PUSH_NOTIFICATIONS_KEY, "ToastEnabled"): 0}
    )

    outcome = _controller(registry=registry).run(_settings())

    assert outcome.displayed is True
    assert "turned off" in caplog.text


def test_controller_registers_app_identity():
    registry = _Registry()
    client = _Client(installed=True)
    settings = Settings(
        features=frozenset({"Toast"}),
        options={"UseSoftwareCenterApp": Option(enabled=True)},
    )
    display = _Display()

    _controller(registry=registry, client=client, display=display).run(settings)

    path = f"{controller_module.NOTIFICATION_SETTINGS_KEY}\\{SOFTWARE_CENTER_APP_ID}"
    assert ("HKCU", path, "ShowInActionCenter", 1) in registry.writes
    assert display.calls[0][0] == SOFTWARE_CENTER_APP_ID


def test_controller_persists_deployed_run_id():
    registry = _Registry()
    client = _Client(installed=True, deployed={"KR100907"})
    settings = _settings(RunPackageID=Option(enabled=True, value="KR100907"))

    _controller(registry=registry, client=client).run(settings)

    assert ("HKCU", RUN_ID_KEY, "RunPackageID", "KR100907") in registry.writes


def test_controller_skips_undeployed_run_id():
    registry = _Registry()
    client = _Client(installed=True)
    settings = _settings(RunApplicationID=Option(enabled=True, value="ScopeId_1/Application_2"))

    _controller(registry=registry, client=client).run(settings)

    assert not any(write[1] == RUN_ID_KEY for write in registry.writes)


def test_controller_deployment_query_failure_still_displays(caplog):
    registry = _Registry()
    display = _Display()
    client = _FailingClient(installed=True)
    settings = _settings(RunPackageID=Option(enabled=True, value="KR100907"))

    outcome = _controller(registry=registry, client=client, display=display).run(settings)

    assert outcome.displayed is True
    assert len(display.calls) == 1
    assert not any(write[1] == RUN_ID_KEY for write in registry.writes)
    assert "Could not check whether RunPackageID KR100907 is deployed" in caplog.text


def test_controller_speaks_after_display():
    speech = _Speech()

    _controller(speech=speech).run(_settings(CustomAudio=True))

    assert speech.calls == [("Please restart", "en-US")]


def test_controller_no_speech_without_display():
    speech = _Speech()

    _controller(speech=speech).run(_settings(["PendingRebootCheck"], CustomAudio=True))

    assert speech.calls == []
