"""Chromium-based browser cookie reader.

Schema (cookie DB version 18+, columns used by the reader):

    CREATE TABLE cookies (
        creation_utc    INTEGER NOT NULL,
        host_key        TEXT NOT NULL,
        name            TEXT NOT NULL,
        value           TEXT NOT NULL,
        encrypted_value BLOB NOT NULL,
        path            TEXT NOT NULL,
        expires_utc     INTEGER NOT NULL,
        is_secure       INTEGER NOT NULL,
        is_httponly     INTEGER NOT NULL,
        samesite        INTEGER NOT NULL,
        ...
    );
    CREATE TABLE meta (key LONGVARCHAR NOT NULL UNIQUE PRIMARY KEY, value LONGVARCHAR);
"""

from __future__ import annotations

import logging
import sqlite3

from crumbler.core.errors import CookieValueDecryptError, DecryptionError
from crumbler.core.host_filter import HostFilter, HostPredicate
from crumbler.core.models import Browser, Cookie, SameSite
from crumbler.scanner.cookie_reader import BaseCookieReader
from crumbler.scanner.decryptor import ChromiumDecryptor
from crumbler.scanner.keys import KeyAcquirer
from crumbler.scanner.profile_paths import ChromiumProfilePaths
from crumbler.scanner.timestamps import chrome_time_to_datetime

logger = logging.getLogger(__name__)

# From this cookie DB version on, encrypted plaintexts start with SHA-256(host_key)
DOMAIN_DIGEST_DB_VERSION = 24


class ChromiumCookieReader(BaseCookieReader):
    """Cookie reader for Chromium-based browsers (Chromium, Chrome, Edge, Brave)."""

    QUERY = (
        "SELECT name, value, encrypted_value, host_key, path, expires_utc, "
        "is_secure, samesite, is_httponly "
        "FROM cookies "
        "WHERE host_filter(host_key)"
    )

    def __init__(
        self,
        browser: Browser,
        profile_paths: ChromiumProfilePaths,
        host_filter: HostFilter | HostPredicate | None = None,
        bypass_lock: bool = False,
        platform: str | None = None,
        key_acquirers: dict[bytes, KeyAcquirer] | None = None,
    ) -> None:
        """
        Args:
            browser: Chromium variant.
            profile_paths: Locations of the cookie database and Local State.
            host_filter: Filter applied to host_key.
            bypass_lock: Open the database in immutable mode.
            platform: sys.platform value used to pick ciphers and keys.
            key_acquirers: Overrides the platform's default key strategies.
        """
        if not browser.is_chromium:
            raise ValueError(f"{browser} is not a Chromium-based browser")

        self._browser = browser
        self.profile_paths = profile_paths
        super().__init__(profile_paths.cookies_database(), host_filter, bypass_lock)

        if key_acquirers is None:
            self.decryptor = ChromiumDecryptor.for_profile(
                browser, profile_paths.local_state(), platform
            )
        else:
            self.decryptor = ChromiumDecryptor(browser, key_acquirers, platform)

    @property
    def browser(self) -> Browser:
        return self._browser

    def db_version(self) -> int | None:
        """Return the cookie DB schema version from the meta table, if any."""
        try:
            row = self._conn.execute(
                "SELECT value FROM meta WHERE key = 'version'"
            ).fetchone()
        except sqlite3.Error as e:
            logger.debug("No meta version in %s: %s", self.db_path, e)
            return None

        if row is None:
            return None
        try:
            return int(row[0])
        except (TypeError, ValueError):
            logger.warning("Unexpected meta version %r in %s", row[0], self.db_path)
            return None

    def get_cookies(self) -> list[Cookie]:
        """Read and decrypt the cookies accepted by the host filter."""
        version = self.db_version()
        has_domain_digest = version is not None and version >= DOMAIN_DIGEST_DB_VERSION

        rows = self._execute(self.QUERY)

        cookies = []
        for (
            name,
            value,
            encrypted_value,
            host_key,
            path,
            expires_utc,
            is_secure,
            samesite,
            is_httponly,
        ) in rows:
            # An empty encrypted_value means `value` holds the plaintext
            if encrypted_value:
                try:
                    value = self.decryptor.decrypt_value(
                        bytes(encrypted_value),
                        host_key if has_domain_digest else None,
                    )
                except DecryptionError as e:
                    raise CookieValueDecryptError(host_key, name, e) from e

            cookies.append(
                Cookie(
                    name=name,
                    value=value,
                    domain=host_key,
                    path=path,
                    expires=chrome_time_to_datetime(expires_utc),
                    secure=bool(is_secure),
                    http_only=bool(is_httponly),
                    same_site=SameSite.from_code(samesite),
                )
            )

        logger.debug(
            "Read %d cookie(s) from %s (%s, db version %s)",
            len(cookies),
            self.browser,
            self.db_path,
            version,
        )
        return cookies
