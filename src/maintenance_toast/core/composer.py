"""Notification composer: settings + facts -> NotificationDocument.

Pure function of its inputs; the current time is passed in so the greeting
and deadline rendering are deterministic under test.
"""

from __future__ import annotations

import os
from datetime import datetime

from .document import ActionButton, NotificationDocument, SnoozeInput, TextGroup
from .facts import Facts
from .settings import Settings

DATETIME_FORMAT = "%x %H:%M"
DATE_FORMAT = "%x"

RUN_PACKAGE_PROTOCOL = "ToastRunPackageID:"
RUN_APPLICATION_PROTOCOL = "ToastRunApplicationID:"


def greeting_slot(hour: int) -> str:
    """Text slot holding the greeting for an hour of the day."""
    if 0 <= hour < 12:
        return "GreetMorningText"
    if 12 <= hour < 16:
        return "GreetAfternoonText"
    return "GreetEveningText"


def header_text(settings: Settings, facts: Facts, now: datetime) -> str:
    if not settings.enabled("GreetGivenName"):
        return settings.text("HeaderText")
    greeting = settings.text(greeting_slot(now.hour))
    if facts.given_name:
        return f"{greeting} {facts.given_name}"
    return greeting


def action_arguments(settings: Settings) -> str:
    if settings.enabled("CreateScriptsProtocolHandler"):
        if settings.enabled("RunPackageID"):
            return RUN_PACKAGE_PROTOCOL
        if settings.enabled("RunApplicationID"):
            return RUN_APPLICATION_PROTOCOL
    return settings.option("Action").value or ""


def build_actions(settings: Settings) -> tuple[tuple[ActionButton, ...], SnoozeInput | None]:
    snooze = settings.enabled("SnoozeButton")
    show_action = snooze or settings.enabled("ActionButton")
    show_dismiss = snooze or settings.enabled("DismissButton")

    buttons = []
    if show_action:
        buttons.append(ActionButton(settings.text("ActionButton"), action_arguments(settings)))
    if show_dismiss:
        buttons.append(ActionButton(settings.text("DismissButton"), "dismiss", activation="system"))
    if not snooze:
        return tuple(buttons), None

    snooze_input = SnoozeInput(
        title=settings.text("SnoozeText"),
        minutes_label=settings.text("MinutesText"),
        hour_label=settings.text("HourText"),
        hours_label=settings.text("HoursText") or settings.text("HourText"),
    )
    buttons.append(
        ActionButton(
            settings.text("SnoozeButton"),
            "snooze",
            activation="system",
            input_id=snooze_input.input_id,
        )
    )
    return tuple(buttons), snooze_input


def build_groups(settings: Settings, facts: Facts) -> tuple[TextGroup, ...]:
    groups = [
        TextGroup(settings.text("TitleText"), style="title"),
        TextGroup(settings.text("BodyText1")),
        TextGroup(settings.text("BodyText2")),
    ]

    deadline = settings.static_deadline or facts.dynamic_deadline
    if deadline:
        groups.append(
            TextGroup(settings.text("DeadlineText"), style="base", caption=deadline.strftime(DATETIME_FORMAT))
        )

    if settings.enabled("PendingRebootCheckText"):
        groups.append(TextGroup(settings.text("PendingRebootCheckText")))

    expiry = facts.password_expiry
    if settings.enabled("ADPasswordExpirationText") and expiry.date:
        groups.append(
            TextGroup(settings.text("ADPasswordExpirationText"), caption=expiry.date.strftime(DATE_FORMAT))
        )

    if uptime_exceeded(settings, facts) and settings.enabled("PendingRebootUptimeText"):
        uptime = " ".join(
            part
            for part in (
                settings.text("ComputerUptimeText"),
                str(facts.uptime_days),
                settings.text("ComputerUptimeDaysText"),
            )
            if part
        )
        groups.append(TextGroup(settings.text("PendingRebootUptimeText"), caption=uptime))

    return tuple(groups)


def uptime_exceeded(settings: Settings, facts: Facts) -> bool:
    return facts.uptime_days is not None and facts.uptime_days > settings.max_uptime_days


def _image(image_dir: str | None, settings: Settings, option: str) -> str | None:
    name = settings.option(option).value
    if not name:
        return None
    return os.path.join(image_dir, name) if image_dir else name


def compose(
    settings: Settings,
    facts: Facts,
    now: datetime,
    image_dir: str | None = None,
) -> NotificationDocument:
    actions, snooze_input = build_actions(settings)
    return NotificationDocument(
        scenario=settings.scenario,
        header=header_text(settings, facts, now),
        groups=build_groups(settings, facts),
        actions=actions,
        snooze_input=snooze_input,
        attribution=settings.text("AttributionText"),
        hero_image=_image(image_dir, settings, "HeroImageName"),
        logo_image=_image(image_dir, settings, "LogoImageName"),
        silent_audio=settings.enabled("CustomAudio"),
    )
