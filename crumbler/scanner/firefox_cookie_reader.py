"""Firefox browser cookie reader.

Schema (Firefox 104+, columns used by the reader):

    CREATE TABLE moz_cookies (
        id INTEGER PRIMARY KEY,
        originAttributes TEXT NOT NULL DEFAULT '',
        name TEXT, value TEXT, host TEXT, path TEXT,
        expiry INTEGER,
        isSecure INTEGER, isHttpOnly INTEGER,
        sameSite INTEGER DEFAULT 0,
        ...
    );
"""

from __future__ import annotations

import logging

from crumbler.core.errors import MissingColumnError
from crumbler.core.host_filter import HostFilter, HostPredicate
from crumbler.core.models import Browser, Cookie, SameSite
from crumbler.scanner.cookie_reader import BaseCookieReader
from crumbler.scanner.profile_paths import FirefoxProfilePaths
from crumbler.scanner.timestamps import unix_seconds_to_datetime

logger = logging.getLogger(__name__)


class FirefoxCookieReader(BaseCookieReader):
    """
    Cookie reader for Firefox browser.

    Firefox does not encrypt cookie values, so rows map directly to
    cookies. Expiry values beyond year 9999 are clamped.
    """

    QUERY_COLUMNS = (
        "name", "value", "host", "path", "expiry", "isSecure", "sameSite", "isHttpOnly"
    )

    QUERY = (
        f"SELECT {', '.join(QUERY_COLUMNS)} "
        "FROM moz_cookies "
        "WHERE host_filter(host)"
    )

    # moz_cookies declares these nullable; host NULL never passes the filter
    REQUIRED_COLUMNS = (
        "name", "value", "path", "expiry", "isSecure", "sameSite", "isHttpOnly"
    )

    def __init__(
        self,
        profile_paths: FirefoxProfilePaths,
        host_filter: HostFilter | HostPredicate | None = None,
        bypass_lock: bool = False,
    ) -> None:
        self.profile_paths = profile_paths
        super().__init__(profile_paths.cookies_database(), host_filter, bypass_lock)

    @property
    def browser(self) -> Browser:
        return Browser.FIREFOX

    def get_cookies(self) -> list[Cookie]:
        """
        Read the cookies accepted by the host filter.

        Raises:
            MissingColumnError: If a row has NULL in a required column.
        """
        cookies = []
        for row in self._execute(self.QUERY):
            name, value, host, path, expiry, is_secure, same_site, is_http_only = row
            self._check_row(host, dict(zip(self.QUERY_COLUMNS, row)))

            cookies.append(
                Cookie(
                    name=name,
                    value=value,
                    domain=host,
                    path=path,
                    expires=unix_seconds_to_datetime(expiry),
                    secure=bool(is_secure),
                    http_only=bool(is_http_only),
                    same_site=SameSite.from_code(same_site),
                )
            )

        logger.debug("Read %d cookie(s) from Firefox (%s)", len(cookies), self.db_path)
        return cookies

    def _check_row(self, host: str, columns: dict[str, object]) -> None:
        for column in self.REQUIRED_COLUMNS:
            if columns[column] is None:
                raise MissingColumnError(host, column)

