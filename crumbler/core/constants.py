"""Application constants and paths for crumbler."""

import os
import sys
from pathlib import Path

# Application metadata
APP_NAME = "crumbler"
APP_VERSION = "0.3.0"
CONFIG_VERSION = 1


def _config_root() -> Path:
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", "")) / APP_NAME
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / APP_NAME


# Base paths
CONFIG_DIR = _config_root()
LOGS_DIR = CONFIG_DIR / "logs"

# File paths
CONFIG_FILE = CONFIG_DIR / "config.json"
DEBUG_LOG_FILE = LOGS_DIR / "debug.log"
AUDIT_LOG_FILE = LOGS_DIR / "audit.log"

# Logging settings
DEBUG_LOG_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
DEBUG_LOG_BACKUP_COUNT = 3

# Browser names accepted on the command line and in the config file
SUPPORTED_BROWSERS = ("firefox", "chromium", "chrome", "edge", "brave")

# Output formats
OUTPUT_FORMATS = ("netscape", "httpie", "human")

# Commands that can be wrapped
WRAPPABLE_COMMANDS = ("curl", "wget", "http", "https")

# Default settings
DEFAULT_SETTINGS = {
    "browser": "firefox",
    "output_format": "netscape",
    "bypass_lock": False,
    "debug": False,
}
