"""Process configuration for maintenance-toast"""
import os
import tempfile
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Process-level settings; the notification itself is driven by the XML config"""

    BASE_DIR = Path(__file__).parent

    # Declarative notification config (path, UNC path or http(s) URL)
    CONFIG_SOURCE = os.getenv("TOAST_CONFIG", str(BASE_DIR / "config-toast.xml"))

    # Append-only log file
    LOG_PATH = os.getenv("TOAST_LOG_PATH", os.path.join(tempfile.gettempdir(), "maintenance-toast.log"))

    # Folder holding the hero and logo images
    IMAGE_DIR = os.getenv("TOAST_IMAGE_DIR", str(BASE_DIR / "images"))

    POWERSHELL = os.getenv("TOAST_POWERSHELL", "powershell.exe")

    DEBUG = os.getenv("DEBUG", "false").lower() == "true"


config = Config()
