"""Base cookie reader interface and factory."""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

from crumbler.core.errors import (
    DatabaseOpenError,
    FilterRegistrationError,
    QueryExecutionError,
)
from crumbler.core.host_filter import HostFilter, HostPredicate

if TYPE_CHECKING:
    from crumbler.core.models import Browser, Cookie

logger = logging.getLogger(__name__)

# Name of the scalar function the cookie queries filter on
HOST_FILTER_FUNCTION = "host_filter"


def open_database(db_path: Path, bypass_lock: bool = False) -> sqlite3.Connection:
    """
    Open a cookie database read-only.

    With bypass_lock, the database is opened with immutable=1 so SQLite
    ignores the lock held by a running browser. Reads may then see a torn
    page if the browser writes concurrently.

    Args:
        db_path: Path to the SQLite database.
        bypass_lock: Whether to bypass the file lock.

    Returns:
        Open connection; the file header has already been validated.

    Raises:
        DatabaseOpenError: If the file is missing, locked or not a database.
    """
    mode = "immutable=1" if bypass_lock else "mode=ro"
    uri = f"{Path(db_path).resolve().as_uri()}?{mode}"

    try:
        conn = sqlite3.connect(uri, uri=True)
    except sqlite3.Error as e:
        raise DatabaseOpenError(db_path, str(e)) from e

    try:
        # Forces SQLite to read the header, rejecting non-database files
        conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
    except sqlite3.Error as e:
        conn.close()
        raise DatabaseOpenError(db_path, str(e)) from e

    logger.debug("Opened %s (%s)", db_path, mode)
    return conn


class BaseCookieReader(ABC):
    """
    Abstract base class for cookie database readers.

    A reader owns one read-only connection and registers its HostFilter
    with it as the host_filter() SQL function. The connection must only be
    used from the thread that created the reader.
    """

    #: Query run by get_cookies(); must filter with host_filter()
    QUERY: str = ""

    def __init__(
        self,
        db_path: Path,
        host_filter: HostFilter | HostPredicate | None = None,
        bypass_lock: bool = False,
    ) -> None:
        """
        Open the database and register the host filter.

        Args:
            db_path: Path to the cookie database.
            host_filter: HostFilter or plain predicate; None matches all rows.
            bypass_lock: Open the database in immutable mode.

        Raises:
            DatabaseOpenError: If the database cannot be opened.
            FilterRegistrationError: If SQLite rejects the filter function.
        """
        if not isinstance(host_filter, HostFilter):
            host_filter = HostFilter(host_filter)

        self.db_path = Path(db_path)
        self.host_filter = host_filter
        self._conn = open_database(self.db_path, bypass_lock)

        try:
            self._conn.create_function(HOST_FILTER_FUNCTION, 1, self.host_filter)
        except sqlite3.Error as e:
            self._conn.close()
            raise FilterRegistrationError(f"Failed to create SQLite function: {e}") from e

    @property
    @abstractmethod
    def browser(self) -> Browser:
        """Browser this reader reads from."""

    def set_filter(self, predicate: HostPredicate) -> None:
        """
        Replace the host predicate.

        A query already running may see either predicate for a given row.
        """
        self.host_filter.set_predicate(predicate)

    def _execute(self, query: str, params: tuple = ()) -> list[tuple[Any, ...]]:
        """Run a query and fetch all rows, wrapping SQLite errors."""
        try:
            return self._conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise QueryExecutionError(query, str(e)) from e

    @abstractmethod
    def get_cookies(self) -> list[Cookie]:
        """
        Read the cookies accepted by the host filter.

        Returns:
            List of Cookie objects, in no particular order.

        Raises:
            CookieStoreError: If the query or decryption fails. No partial
                              result is returned.
        """

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> BaseCookieReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def create_reader(
    browser: Browser,
    root_dir: Path | None = None,
    host_filter: HostFilter | HostPredicate | None = None,
    bypass_lock: bool = False,
) -> BaseCookieReader:
    """
    Factory function to create the appropriate reader for a browser.

    Args:
        browser: Browser to read from.
        root_dir: Profile root; the default profile is used when None.
        host_filter: Filter applied to cookie hosts.
        bypass_lock: Open the database in immutable mode.

    Returns:
        ChromiumCookieReader for Chromium-based browsers,
        FirefoxCookieReader for Firefox.
    """
    # Import here to avoid circular imports
    from crumbler.scanner.chromium_cookie_reader import ChromiumCookieReader
    from crumbler.scanner.firefox_cookie_reader import FirefoxCookieReader
    from crumbler.scanner.profile_paths import ChromiumProfilePaths, FirefoxProfilePaths

    if browser.is_chromium:
        chromium_paths = (
            ChromiumProfilePaths.from_root(root_dir)
            if root_dir
            else ChromiumProfilePaths.default_profile(browser)
        )
        return ChromiumCookieReader(browser, chromium_paths, host_filter, bypass_lock)

    firefox_paths = (
        FirefoxProfilePaths.from_root(root_dir)
        if root_dir
        else FirefoxProfilePaths.default_profile()
    )
    return FirefoxCookieReader(firefox_paths, host_filter, bypass_lock)
