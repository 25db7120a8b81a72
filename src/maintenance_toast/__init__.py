"""maintenance-toast - configuration-driven maintenance reminders as Windows toast notifications"""

__version__ = "1.0.0"
__description__ = "Configuration-driven maintenance reminders as Windows toast notifications"

__all__ = ["main", "__version__"]


def __getattr__(name: str):
    """Lazy import so the core can be imported without the CLI wiring.

    The Windows adapters import pywin32/comtypes only when called, which keeps
    the package importable on CI/non-Windows hosts.
    """
    if name == "main":
        from .main import main

        return main
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
