"""Notification document model and its toast XML rendering."""

from __future__ import annotations

from dataclasses import dataclass
from xml.etree import ElementTree as ET

SNOOZE_CHOICES = (15, 30, 60, 240, 480)


@dataclass(frozen=True)
class TextGroup:
    """One visual group: a styled line, optionally followed by a caption."""

    text: str
    style: str = "body"
    caption: str | None = None


@dataclass(frozen=True)
class ActionButton:
    label: str
    arguments: str
    activation: str = "protocol"
    input_id: str | None = None


@dataclass(frozen=True)
class SnoozeInput:
    title: str
    minutes_label: str
    hour_label: str
    hours_label: str
    choices: tuple[int, ...] = SNOOZE_CHOICES
    input_id: str = "snoozeTime"

    def choice_label(self, minutes: int) -> str:
        if minutes < 60:
            return f"{minutes} {self.minutes_label}".strip()
        hours = minutes // 60
        unit = self.hour_label if hours == 1 else self.hours_label
        return f"{hours} {unit}".strip()


@dataclass(frozen=True)
class NotificationDocument:
    scenario: str
    header: str
    groups: tuple[TextGroup, ...] = ()
    actions: tuple[ActionButton, ...] = ()
    snooze_input: SnoozeInput | None = None
    attribution: str = ""
    hero_image: str | None = None
    logo_image: str | None = None
    silent_audio: bool = False

    def button(self, arguments: str) -> ActionButton | None:
        return next((a for a in self.actions if a.arguments == arguments), None)


def to_xml(document: NotificationDocument) -> str:
    """Render the document in the Windows ToastGeneric schema."""
    toast = ET.Element("toast", scenario=document.scenario)
    binding = ET.SubElement(ET.SubElement(toast, "visual"), "binding", template="ToastGeneric")

    if document.hero_image:
        ET.SubElement(binding, "image", placement="hero", src=document.hero_image)
    if document.logo_image:
        ET.SubElement(
            binding,
            "image",
            {"id": "1", "placement": "appLogoOverride", "hint-crop": "circle", "src": document.logo_image},
        )
    ET.SubElement(binding, "text", placement="attribution").text = document.attribution
    ET.SubElement(binding, "text").text = document.header

    for group in document.groups:
        subgroup = ET.SubElement(ET.SubElement(binding, "group"), "subgroup")
        ET.SubElement(subgroup, "text", {"hint-style": group.style, "hint-wrap": "true"}).text = group.text
        if group.caption is not None:
            ET.SubElement(subgroup, "text", {"hint-style": "caption", "hint-align": "left"}).text = group.caption

    actions = ET.SubElement(toast, "actions")
    snooze = document.snooze_input
    if snooze:
        field = ET.SubElement(
            actions,
            "input",
            id=snooze.input_id,
            type="selection",
            title=snooze.title,
            defaultInput=str(snooze.choices[0]),
        )
        for minutes in snooze.choices:
            ET.SubElement(field, "selection", id=str(minutes), content=snooze.choice_label(minutes))

    for button in document.actions:
        attrs = {
            "activationType": button.activation,
            "arguments": button.arguments,
            "content": button.label,
        }
        if button.input_id:
            attrs["hint-inputId"] = button.input_id
        ET.SubElement(actions, "action", attrs)

    if document.silent_audio:
        ET.SubElement(toast, "audio", silent="true")
    else:
        ET.SubElement(toast, "audio", src="ms-winsoundevent:notification.default")

    return ET.tostring(toast, encoding="unicode")
