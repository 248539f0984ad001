"""Browser cookie store readers."""

from crumbler.scanner.browser_paths import (
    BrowserConfig,
    ALL_BROWSERS,
    CHROMIUM_BROWSERS,
    CHROMIUM_CONFIG,
    CHROME_CONFIG,
    EDGE_CONFIG,
    BRAVE_CONFIG,
    FIREFOX_CONFIG,
    get_browser_config,
)
from crumbler.scanner.profile_paths import ChromiumProfilePaths, FirefoxProfilePaths
from crumbler.scanner.cookie_reader import BaseCookieReader, create_reader, open_database
from crumbler.scanner.chromium_cookie_reader import ChromiumCookieReader
from crumbler.scanner.firefox_cookie_reader import FirefoxCookieReader
from crumbler.scanner.decryptor import ChromiumDecryptor
from crumbler.scanner.timestamps import chrome_time_to_datetime, chrome_to_unix_nanos

__all__ = [
    # Browser configs
    "BrowserConfig",
    "ALL_BROWSERS",
    "CHROMIUM_BROWSERS",
    "CHROMIUM_CONFIG",
    "CHROME_CONFIG",
    "EDGE_CONFIG",
    "BRAVE_CONFIG",
    "FIREFOX_CONFIG",
    "get_browser_config",
    # Profile paths
    "ChromiumProfilePaths",
    "FirefoxProfilePaths",
    # Cookie readers
    "BaseCookieReader",
    "ChromiumCookieReader",
    "FirefoxCookieReader",
    "create_reader",
    "open_database",
    # Decryption
    "ChromiumDecryptor",
    # Timestamps
    "chrome_time_to_datetime",
    "chrome_to_unix_nanos",
]
