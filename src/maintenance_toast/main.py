#!/usr/bin/env python3
"""maintenance-toast: evaluate the configuration once and show at most one toast"""

import argparse
import locale
import logging
import sys

from .config import config
from .core.errors import ConfigLoadError, UnsupportedHostError, ValidationError
from .logging_setup import configure_logging
from .platform_utils import IS_WINDOWS, get_platform_info

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="maintenance-toast",
        description="Show a maintenance reminder toast driven by an XML configuration",
    )
    ap.add_argument("-c", "--config", default=config.CONFIG_SOURCE,
                    help="Configuration path or http(s) URL")
    ap.add_argument("--log", default=config.LOG_PATH, help="Append-only log file")
    ap.add_argument("--image-dir", default=config.IMAGE_DIR,
                    help="Folder with the hero and logo images")
    ap.add_argument("--debug", action="store_true", default=config.DEBUG,
                    help="Verbose logging")
    return ap


def run(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log, args.debug)
    logger.debug("Platform: %s", get_platform_info())

    if not IS_WINDOWS:
        logger.error("Unsupported host: toast notifications require Windows")
        return 1

    # dates in the toast follow the user's regional settings
    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error as e:
        logger.warning("Could not apply the user locale: %s", e)

    from .adapters.config_xml import load_settings
    from .adapters.directory import ActiveDirectory
    from .adapters.host_info import WindowsHost
    from .adapters.management_client import ConfigMgrClient
    from .adapters.registry import WindowsRegistry
    from .adapters.speech import SapiSpeech
    from .adapters.toast_display import PowerShellToastDisplay
    from .core.controller import ToastController

    registry = WindowsRegistry()
    host = WindowsHost(registry)

    try:
        settings = load_settings(args.config, host.culture())
        controller = ToastController(
            registry=registry,
            client=ConfigMgrClient(),
            directory=ActiveDirectory(),
            host=host,
            display=PowerShellToastDisplay(config.POWERSHELL),
            speech=SapiSpeech(),
            image_dir=args.image_dir,
        )
        outcome = controller.run(settings)
    except ConfigLoadError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except ValidationError as e:
        logger.error("Invalid configuration [%s]: %s", e.rule, e)
        return 1
    except UnsupportedHostError as e:
        logger.error("Unsupported host: %s", e)
        return 1
    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        return 1

    if outcome.trigger is None:
        logger.info("Done, no notification needed")
    elif outcome.displayed:
        logger.info("Done, notification shown for %s", outcome.trigger.name)
    return 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
