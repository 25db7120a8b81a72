"""Error types shared by the core and adapters."""

from __future__ import annotations


class ToastError(Exception):
    """Base class for all maintenance-toast errors."""


class ConfigLoadError(ToastError):
    """Configuration source unreachable or malformed."""


class ValidationError(ToastError):
    """A configuration exclusion rule was violated."""

    def __init__(self, rule: str, message: str):
        super().__init__(message)
        self.rule = rule


class UnsupportedHostError(ToastError):
    """The host cannot display toast notifications."""


class DisplayError(ToastError):
    """The platform rejected or failed to render a notification."""
