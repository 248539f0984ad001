"""Temporary browser sessions.

A session launches the browser on a fresh, throwaway profile, waits for
the user to log in and close it, then reads the cookies the profile
collected. The profile directory is removed afterwards.
"""

from __future__ import annotations

import logging
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Sequence

from crumbler.core.errors import SessionError
from crumbler.core.host_filter import HostFilter
from crumbler.core.models import Browser, Cookie
from crumbler.scanner.browser_paths import get_browser_config
from crumbler.scanner.chromium_cookie_reader import ChromiumCookieReader
from crumbler.scanner.cookie_reader import BaseCookieReader
from crumbler.scanner.firefox_cookie_reader import FirefoxCookieReader
from crumbler.scanner.profile_paths import ChromiumProfilePaths, FirefoxProfilePaths

logger = logging.getLogger(__name__)

PROFILE_DIR_PREFIX = "crumbler-session-"


class Session:
    """
    A browser run on a temporary profile.

    Usage:
        cookies = Session.open(Browser.FIREFOX, ["https://example.com"], ["example.com"])
    """

    def __init__(
        self,
        browser: Browser,
        urls: Sequence[str] = (),
        host_filter: HostFilter | None = None,
    ) -> None:
        self.browser = browser
        self.urls = list(urls)
        self.host_filter = host_filter or HostFilter()
        self.config = get_browser_config(browser)

    @classmethod
    def open(
        cls,
        browser: Browser,
        urls: Sequence[str] = (),
        hosts: Sequence[str] = (),
    ) -> list[Cookie]:
        """
        Run a session and return the cookies matching the hosts.

        Blocks until the browser exits.

        Raises:
            SessionError: If no executable for the browser can be started.
            CookieStoreError: If the session profile cannot be read.
        """
        return cls(browser, urls, HostFilter.for_hosts(hosts)).run()

    def command(self, executable: str, profile_dir: Path) -> list[str]:
        """Build the command line launching the browser on profile_dir."""
        if self.browser.is_chromium:
            return [
                executable,
                "--new-window",
                f"--user-data-dir={profile_dir}",
                *self.urls,
            ]
        return [
            executable,
            "-no-remote",
            "-profile",
            str(profile_dir),
            "-new-instance",
            *self.urls,
        ]

    def run(self) -> list[Cookie]:
        """Launch the browser, wait for it to exit and read the profile."""
        with tempfile.TemporaryDirectory(prefix=PROFILE_DIR_PREFIX) as tmp:
            profile_dir = Path(tmp)
            logger.info("Starting %s session in %s", self.browser, profile_dir)
            print(
                f"Opening a {self.browser} session; close the browser when done",
                file=sys.stderr,
            )

            returncode = self._spawn(profile_dir)
            if returncode != 0:
                logger.warning("%s exited with status %d", self.browser, returncode)

            with self._create_reader(profile_dir) as reader:
                return reader.get_cookies()

    def _spawn(self, profile_dir: Path) -> int:
        """
        Run the first executable that can be started.

        Returns:
            The browser's exit status
        """
        for executable in self.config.executables:
            cmd = self.command(executable, profile_dir)
            try:
                completed = subprocess.run(
                    cmd,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    check=False,
                )
            except FileNotFoundError:
                logger.debug("Executable not found: %s", executable)
                continue
            except OSError as e:
                raise SessionError(f"Failed to start {executable}: {e}") from e

            return completed.returncode

        raise SessionError(
            f"No executable found for {self.browser} "
            f"(tried: {', '.join(self.config.executables)})"
        )

    def _create_reader(self, profile_dir: Path) -> BaseCookieReader:
        # The temporary directory is the user data dir itself, on every platform
        if self.browser.is_chromium:
            return ChromiumCookieReader(
                self.browser, ChromiumProfilePaths(profile_dir), self.host_filter
            )
        return FirefoxCookieReader(FirefoxProfilePaths.from_root(profile_dir), self.host_filter)
