"""Core settings model (structured view of the declarative configuration)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping

from .errors import ConfigLoadError

FEATURES = frozenset(
    {
        "Toast",
        "UpgradeOS",
        "PendingRebootUptime",
        "PendingRebootCheck",
        "ADPasswordExpiration",
    }
)

OPTIONS = frozenset(
    {
        "TargetOS",
        "MaxUptimeDays",
        "PendingRebootUptimeText",
        "PendingRebootCheckText",
        "ADPasswordExpirationText",
        "ADPasswordExpirationDays",
        "RunPackageID",
        "RunApplicationID",
        "Deadline",
        "DynamicDeadline",
        "CreateScriptsProtocolHandler",
        "UseSoftwareCenterApp",
        "UsePowershellApp",
        "CustomAudio",
        "ActionButton",
        "DismissButton",
        "SnoozeButton",
        "Scenario",
        "Action",
        "GreetGivenName",
        "MultiLanguageSupport",
        "LogoImageName",
        "HeroImageName",
        "ADSearchBase",
    }
)

TEXTS = frozenset(
    {
        "AttributionText",
        "HeaderText",
        "TitleText",
        "BodyText1",
        "BodyText2",
        "SnoozeText",
        "DeadlineText",
        "GreetMorningText",
        "GreetAfternoonText",
        "GreetEveningText",
        "MinutesText",
        "HourText",
        "HoursText",
        "ComputerUptimeText",
        "ComputerUptimeDaysText",
        "ActionButton",
        "DismissButton",
        "SnoozeButton",
        "PendingRebootUptimeText",
        "PendingRebootCheckText",
        "ADPasswordExpirationText",
        "CustomAudioTextToSpeech",
    }
)

DEFAULT_MAX_UPTIME_DAYS = 6
DEFAULT_PASSWORD_EXPIRATION_DAYS = 14

DEADLINE_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%d-%m-%Y %H:%M",
)


def parse_flag(value: str | None) -> bool:
    """Only a literal "true" (any case) enables a flag."""
    return value is not None and value.strip().lower() == "true"


def parse_deadline(value: str) -> datetime:
    text = value.strip()
    for fmt in DEADLINE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ConfigLoadError(f"Unrecognized deadline format: {value!r}")


@dataclass(frozen=True)
class Option:
    """A secondary configuration entry: enabled flag plus scalar attributes."""

    enabled: bool = False
    value: str | None = None
    build: str | None = None
    type: str | None = None
    attrs: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


_UNSET = Option()


@dataclass(frozen=True)
class Settings:
    """Immutable per-invocation settings."""

    features: frozenset[str] = frozenset()
    options: Mapping[str, Option] = field(default_factory=lambda: MappingProxyType({}))
    texts: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    culture: str = "en-US"

    def __post_init__(self):
        # Freeze caller-supplied containers and drop unknown names
        object.__setattr__(self, "features", frozenset(self.features) & FEATURES)
        object.__setattr__(
            self,
            "options",
            MappingProxyType({k: v for k, v in dict(self.options).items() if k in OPTIONS}),
        )
        object.__setattr__(
            self,
            "texts",
            MappingProxyType({k: v for k, v in dict(self.texts).items() if k in TEXTS}),
        )

    def feature(self, name: str) -> bool:
        return name in self.features

    def option(self, name: str) -> Option:
        return self.options.get(name, _UNSET)

    def enabled(self, name: str) -> bool:
        return self.option(name).enabled

    def text(self, name: str) -> str:
        return self.texts.get(name, "")

    # Typed accessors

    @property
    def target_build(self) -> int | None:
        build = self.option("TargetOS").build
        if not build:
            return None
        return _to_int("TargetOS", build)

    @property
    def max_uptime_days(self) -> int:
        value = self.option("MaxUptimeDays").value
        if not value:
            return DEFAULT_MAX_UPTIME_DAYS
        return _to_int("MaxUptimeDays", value)

    @property
    def password_expiration_days(self) -> int:
        value = self.option("ADPasswordExpirationDays").value
        if not value:
            return DEFAULT_PASSWORD_EXPIRATION_DAYS
        return _to_int("ADPasswordExpirationDays", value)

    @property
    def static_deadline(self) -> datetime | None:
        option = self.option("Deadline")
        if not option.enabled or not option.value:
            return None
        return parse_deadline(option.value)

    @property
    def scenario(self) -> str:
        return self.option("Scenario").type or "reminder"

    def check_typed_values(self) -> None:
        """Parse every typed option once so malformed values fail at load time."""
        self.target_build
        self.max_uptime_days
        self.password_expiration_days
        self.static_deadline


def _to_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise ConfigLoadError(f"Option {name} expects an integer, got {value!r}") from None
