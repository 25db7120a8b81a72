"""Platform detection for maintenance-toast"""

import platform
import sys

IS_WINDOWS = sys.platform == "win32"


def get_platform_info() -> dict:
    """Get detailed platform information."""
    return {
        "system": platform.system(),
        "release": platform.release(),
        "version": platform.version(),
        "machine": platform.machine(),
        "python_version": platform.python_version(),
        "is_windows": IS_WINDOWS,
    }
