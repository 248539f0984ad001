"""Profile path providers for Chromium-based browsers and Firefox."""

from __future__ import annotations

import configparser
import logging
import sys
from pathlib import Path

from crumbler.core.errors import ProfileNotFoundError
from crumbler.core.models import Browser
from crumbler.scanner.browser_paths import FIREFOX_CONFIG, get_browser_config

logger = logging.getLogger(__name__)

DEFAULT_CHROMIUM_PROFILE = "Default"


class ChromiumProfilePaths:
    """Locates the cookie database and Local State of a Chromium profile."""

    def __init__(self, user_data_dir: Path, profile: str = DEFAULT_CHROMIUM_PROFILE) -> None:
        """
        Args:
            user_data_dir: Directory holding "Local State" and the profile folders.
            profile: Profile folder name ("Default", "Profile 1", ...).
        """
        self.user_data_dir = Path(user_data_dir)
        self.profile = profile
        self.profile_dir = self.user_data_dir / profile

    @classmethod
    def from_root(
        cls,
        root_dir: Path,
        profile: str = DEFAULT_CHROMIUM_PROFILE,
        platform: str | None = None,
    ) -> ChromiumProfilePaths:
        """
        Create paths from a browser root directory.

        On Windows the profiles live under "<root>/User Data".
        """
        root_dir = Path(root_dir)
        if (platform or sys.platform) == "win32":
            root_dir = root_dir / "User Data"
        return cls(root_dir, profile)

    @classmethod
    def default_profile(
        cls, browser: Browser, platform: str | None = None
    ) -> ChromiumProfilePaths:
        """Return paths for the default profile of the given variant."""
        config = get_browser_config(browser)
        return cls.from_root(config.root_dir(platform), platform=platform)

    def cookies_database(self) -> Path:
        """
        Return the cookie database path.

        Modern Chromium (v96+) keeps it in Network/Cookies; older versions
        in the profile root.
        """
        modern_path = self.profile_dir / "Network" / "Cookies"
        if modern_path.exists():
            return modern_path
        return self.profile_dir / "Cookies"

    def local_state(self) -> Path:
        """Return the Local State file path."""
        return self.user_data_dir / "Local State"

    def __repr__(self) -> str:
        return f"ChromiumProfilePaths({str(self.user_data_dir)!r}, {self.profile!r})"


class FirefoxProfilePaths:
    """Locates the cookie database of a Firefox profile."""

    def __init__(self, root_dir: Path, profile: str | None = None) -> None:
        """
        Args:
            root_dir: Firefox root directory (the one holding profiles.ini).
            profile: Profile path relative to the root. If None, the root
                     itself is used as the profile directory.
        """
        self.root_dir = Path(root_dir)
        self.profile_dir = self.root_dir / profile if profile else self.root_dir

    @classmethod
    def from_root(cls, root_dir: Path) -> FirefoxProfilePaths:
        """Use root_dir directly as the profile directory."""
        return cls(root_dir)

    @classmethod
    def default_profile(cls, root_dir: Path | None = None) -> FirefoxProfilePaths:
        """
        Return paths for the default Firefox profile.

        Raises:
            ProfileNotFoundError: If profiles.ini is missing or names no default.
        """
        firefox_root = Path(root_dir) if root_dir else FIREFOX_CONFIG.root_dir()
        profiles_ini = firefox_root / "profiles.ini"

        if not profiles_ini.exists():
            raise ProfileNotFoundError(f"Firefox profiles.ini not found: {profiles_ini}")

        parser = configparser.ConfigParser(strict=False, interpolation=None)
        try:
            parser.read(profiles_ini, encoding="utf-8")
        except configparser.Error as e:
            raise ProfileNotFoundError(f"Cannot parse Firefox profiles.ini: {e}") from e

        profile = get_default_profile_path(parser)
        if profile is None:
            raise ProfileNotFoundError(f"No default profile in {profiles_ini}")

        logger.debug("Firefox default profile: %s", profile)
        return cls(firefox_root, profile)

    def cookies_database(self) -> Path:
        """Return the cookie database path."""
        return self.profile_dir / "cookies.sqlite"

    def __repr__(self) -> str:
        return f"FirefoxProfilePaths({str(self.profile_dir)!r})"


def get_default_profile_path(parser: configparser.ConfigParser) -> str | None:
    """
    Get the default profile's path from a parsed profiles.ini.

    The first Install<hash> section wins (Firefox 67+ keeps one default per
    installation); otherwise the first Profile section with Default=1.
    Absolute paths are returned unchanged, so joining them onto the root
    yields the absolute path.
    """
    for section in parser.sections():
        if section.startswith("Install") and parser.has_option(section, "Default"):
            return parser.get(section, "Default")

    for section in parser.sections():
        if not section.startswith("Profile"):
            continue
        if parser.get(section, "Default", fallback="0") != "1":
            continue
        if not parser.has_option(section, "Path"):
            logger.debug("Firefox section %s has no Path", section)
            continue
        return parser.get(section, "Path")

    return None
