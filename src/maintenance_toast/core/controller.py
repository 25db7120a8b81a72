"""Core orchestration for maintenance-toast.

Keeps the validate -> gather -> compose -> select -> display pipeline in
one place, decoupled from the Windows implementations via ports.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from .composer import compose
from .document import NotificationDocument, to_xml
from .errors import DisplayError, UnsupportedHostError
from .facts import Facts, Probes, gather_facts
from .ports import DirectoryService, HostInfo, ManagementClient, RegistryStore, SpeechOutput, ToastDisplay
from .selector import Trigger, select_trigger
from .settings import Settings
from .validator import validate

logger = logging.getLogger(__name__)

MIN_SUPPORTED_BUILD = 10240

SOFTWARE_CENTER_APP_ID = "Microsoft.SoftwareCenter.DesktopToasts"
POWERSHELL_APP_ID = "{1AC14E77-02E7-4E5D-B744-2EB1AE5198B7}\\WindowsPowerShell\\v1.0\\powershell.exe"

PUSH_NOTIFICATIONS_KEY = r"Software\Microsoft\Windows\CurrentVersion\PushNotifications"
NOTIFICATION_SETTINGS_KEY = r"Software\Microsoft\Windows\CurrentVersion\Notifications\Settings"
RUN_ID_KEY = r"SOFTWARE\ToastNotificationScript"


@dataclass(frozen=True)
class RunOutcome:
    """Result of one invocation."""

    trigger: Trigger | None
    document: NotificationDocument | None = None
    facts: Facts | None = None
    displayed: bool = False


def app_id_for(settings: Settings) -> str:
    if settings.enabled("UseSoftwareCenterApp"):
        return SOFTWARE_CENTER_APP_ID
    return POWERSHELL_APP_ID


class ToastController:
    """Runs a single notification decision for one settings value."""

    def __init__(
        self,
        registry: RegistryStore,
        client: ManagementClient,
        directory: DirectoryService,
        host: HostInfo,
        display: ToastDisplay,
        speech: SpeechOutput,
        image_dir: str | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._registry = registry
        self._client = client
        self._directory = directory
        self._host = host
        self._display = display
        self._speech = speech
        self._image_dir = image_dir
        self._clock = clock

    def check_host(self) -> None:
        """Raise UnsupportedHostError on builds without toast support."""
        build = self._host.os_build()
        if build < MIN_SUPPORTED_BUILD:
            raise UnsupportedHostError(f"OS build {build} does not support toast notifications")
        enabled = self._registry.get_value("HKCU", PUSH_NOTIFICATIONS_KEY, "ToastEnabled")
        if enabled == 0:
            logger.warning("Toast notifications are turned off for this user, they may not be shown")

    def register_app(self, app_id: str) -> None:
        path = f"{NOTIFICATION_SETTINGS_KEY}\\{app_id}"
        if self._registry.get_value("HKCU", path, "ShowInActionCenter") == 1:
            return
        try:
            self._registry.set_value("HKCU", path, "ShowInActionCenter", 1)
            logger.info("Enabled %s in the action center", app_id)
        except Exception as e:
            logger.warning("Could not enable %s in the action center: %s", app_id, e)

    def persist_run_id(self, settings: Settings) -> None:
        """Store RunPackageID/RunApplicationID once it is confirmed deployed."""
        for name, deployed in (
            ("RunPackageID", self._client.is_package_deployed),
            ("RunApplicationID", self._client.is_application_deployed),
        ):
            option = settings.option(name)
            if not option.enabled or not option.value:
                continue
            try:
                confirmed = self._client.is_installed() and deployed(option.value)
            except Exception as e:
                logger.warning("Could not check whether %s %s is deployed: %s", name, option.value, e)
                continue
            if not confirmed:
                logger.warning("%s %s is not deployed to this host, not storing it", name, option.value)
                continue
            try:
                self._registry.set_value("HKCU", RUN_ID_KEY, name, option.value)
            except Exception as e:
                logger.warning("Could not store %s %s: %s", name, option.value, e)
                continue
            logger.info("Stored %s %s", name, option.value)

    def run(self, settings: Settings) -> RunOutcome:
        self.check_host()
        validate(settings, self._client.is_installed())
        logger.info("Configuration validated")

        app_id = app_id_for(settings)
        self.register_app(app_id)
        self.persist_run_id(settings)

        now = self._clock()
        probes = Probes(self._registry, self._client, self._directory, self._host)
        facts = gather_facts(settings, probes, now)
        document = compose(settings, facts, now, self._image_dir)

        trigger = select_trigger(settings, facts)
        if trigger is None:
            logger.info("No notification condition met, nothing to display")
            return RunOutcome(trigger=None, document=document, facts=facts)

        logger.info("Displaying notification for %s", trigger.name)
        try:
            self._display.show(app_id, to_xml(document))
        except DisplayError as e:
            logger.error("Failed to display notification: %s", e)
            return RunOutcome(trigger=trigger, document=document, facts=facts)

        if settings.enabled("CustomAudio"):
            self._speak(settings)
        return RunOutcome(trigger=trigger, document=document, facts=facts, displayed=True)

    def _speak(self, settings: Settings) -> None:
        text = settings.text("CustomAudioTextToSpeech")
        if not text:
            return
        try:
            self._speech.speak(text, settings.culture)
        except Exception as e:
            logger.warning("Text-to-speech playback failed: %s", e)
