"""Browser path and credential constants for crumbler."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from crumbler.core.models import Browser


@dataclass(frozen=True)
class BrowserConfig:
    """Per-browser locations and OS credential store entries."""

    browser: Browser
    windows_dir: str  # Relative to %LOCALAPPDATA% (Chromium) or %APPDATA% (Firefox)
    macos_dir: str  # Relative to ~/Library/Application Support
    linux_dir: str  # Relative to ~/.config (Chromium) or ~ (Firefox)
    executables: tuple[str, ...]  # Tried in order when spawning a session
    keychain_service: str = ""  # macOS keychain entry (Chromium only)
    keychain_account: str = ""
    secret_application: str = ""  # Secret Service "application" attribute (Linux)

    def root_dir(self, platform: str | None = None) -> Path:
        """Return the browser's data root for the given platform."""
        platform = platform or sys.platform
        home = Path.home()

        if platform == "win32":
            env = "LOCALAPPDATA" if self.browser.is_chromium else "APPDATA"
            return Path(os.environ.get(env, "")) / self.windows_dir
        if platform == "darwin":
            return home / "Library" / "Application Support" / self.macos_dir
        if self.browser.is_chromium:
            xdg = os.environ.get("XDG_CONFIG_HOME")
            return (Path(xdg) if xdg else home / ".config") / self.linux_dir
        return home / self.linux_dir


CHROMIUM_CONFIG = BrowserConfig(
    browser=Browser.CHROMIUM,
    windows_dir="Chromium",
    macos_dir="Chromium",
    linux_dir="chromium",
    executables=("chromium", "chromium-browser"),
    keychain_service="Chromium Safe Storage",
    keychain_account="Chromium",
    secret_application="chromium",
)

CHROME_CONFIG = BrowserConfig(
    browser=Browser.CHROME,
    windows_dir="Google/Chrome",
    macos_dir="Google/Chrome",
    linux_dir="google-chrome",
    executables=("google-chrome", "google-chrome-stable", "chrome"),
    keychain_service="Chrome Safe Storage",
    keychain_account="Chrome",
    secret_application="chrome",
)

EDGE_CONFIG = BrowserConfig(
    browser=Browser.EDGE,
    windows_dir="Microsoft/Edge",
    macos_dir="Microsoft Edge",
    linux_dir="microsoft-edge",
    executables=("microsoft-edge", "microsoft-edge-stable", "msedge"),
    keychain_service="Microsoft Edge Safe Storage",
    keychain_account="Microsoft Edge",
    secret_application="edge",
)

BRAVE_CONFIG = BrowserConfig(
    browser=Browser.BRAVE,
    windows_dir="BraveSoftware/Brave-Browser",
    macos_dir="BraveSoftware/Brave-Browser",
    linux_dir="BraveSoftware/Brave-Browser",
    executables=("brave-browser", "brave"),
    keychain_service="Brave Safe Storage",
    keychain_account="Brave",
    secret_application="brave",
)

FIREFOX_CONFIG = BrowserConfig(
    browser=Browser.FIREFOX,
    windows_dir="Mozilla/Firefox",
    macos_dir="Firefox",
    linux_dir=".mozilla/firefox",
    executables=("firefox",),
)

# All supported browsers
CHROMIUM_BROWSERS = (CHROMIUM_CONFIG, CHROME_CONFIG, EDGE_CONFIG, BRAVE_CONFIG)
ALL_BROWSERS = (*CHROMIUM_BROWSERS, FIREFOX_CONFIG)

_CONFIGS = {config.browser: config for config in ALL_BROWSERS}


def get_browser_config(browser: Browser) -> BrowserConfig:
    """Get browser configuration for a supported browser."""
    return _CONFIGS[browser]
