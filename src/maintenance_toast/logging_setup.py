"""Log file setup: one append-only line per event."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"

# handlers attached by the last configure_logging call
_installed: list[logging.Handler] = []


def configure_logging(path: str | None, debug: bool = False) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)
    _installed.append(console)

    if path:
        try:
            handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        except OSError as e:
            root.warning("Could not open log file %s: %s", path, e)
            return
        handler.setFormatter(formatter)
        root.addHandler(handler)
        _installed.append(handler)
