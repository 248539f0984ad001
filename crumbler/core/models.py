"""Core data models for crumbler."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Browser(Enum):
    """Supported browsers."""

    FIREFOX = "firefox"
    CHROMIUM = "chromium"
    CHROME = "chrome"
    EDGE = "edge"
    BRAVE = "brave"

    @property
    def is_chromium(self) -> bool:
        """True for every Chromium-based variant."""
        return self is not Browser.FIREFOX

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_name(cls, name: str) -> Browser:
        """
        Parse a browser from its command-line name.

        Raises:
            ValueError: If the name is not a supported browser.
        """
        try:
            return cls(name.lower())
        except ValueError:
            supported = ", ".join(b.value for b in cls)
            raise ValueError(
                f"'{name}' is not one of the supported browsers ({supported})"
            ) from None

    def __str__(self) -> str:
        return self.display_name


_DISPLAY_NAMES = {
    Browser.FIREFOX: "Firefox",
    Browser.CHROMIUM: "Chromium",
    Browser.CHROME: "Google Chrome",
    Browser.EDGE: "Microsoft Edge",
    Browser.BRAVE: "Brave",
}


class SameSite(Enum):
    """SameSite attribute of a cookie."""

    NONE = "None"
    LAX = "Lax"
    STRICT = "Strict"

    @classmethod
    def from_code(cls, code: int) -> SameSite:
        """
        Decode the integer stored by browsers.

        0 is None, 1 is Lax; any other code is treated as Strict.
        """
        if code == 0:
            return cls.NONE
        if code == 1:
            return cls.LAX
        return cls.STRICT

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Cookie:
    """A single cookie read from a browser store."""

    name: str
    value: str
    domain: str  # As stored: ".google.com" means domain-wide
    path: str
    expires: datetime  # Timezone-aware UTC
    secure: bool
    http_only: bool
    same_site: SameSite

    @property
    def is_domain_wide(self) -> bool:
        """True if the cookie applies to subdomains too."""
        return self.domain.startswith(".")

    @property
    def expires_timestamp(self) -> int:
        """Expiry in whole seconds since the Unix epoch."""
        return int(self.expires.timestamp())

