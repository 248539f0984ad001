"""Database lock detection for crumbler.

A running browser keeps its cookie database locked (Firefox opens it in
exclusive locking mode, Chromium on Windows denies sharing). Reading it
then fails unless the lock is bypassed with an immutable open.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path

import psutil

try:
    import win32file
    import pywintypes
    HAS_WIN32 = True
except ImportError:
    HAS_WIN32 = False

from crumbler.core.models import Browser

logger = logging.getLogger(__name__)

# Error code for sharing violation (file locked)
ERROR_SHARING_VIOLATION = 32

# Process names (lowercase) per browser, across platforms
BROWSER_PROCESS_NAMES = {
    Browser.FIREFOX: frozenset({"firefox", "firefox.exe", "firefox-bin"}),
    Browser.CHROMIUM: frozenset({"chromium", "chromium-browser", "chromium.exe"}),
    Browser.CHROME: frozenset({"chrome", "chrome.exe", "google chrome"}),
    Browser.EDGE: frozenset({"msedge", "msedge.exe", "microsoft edge"}),
    Browser.BRAVE: frozenset({"brave", "brave.exe", "brave browser"}),
}


@dataclass
class LockReport:
    """Result of a lock check on a database file."""

    db_path: Path
    is_locked: bool
    blocking_processes: list[str] = field(default_factory=list)


class LockResolver:
    """Detects if cookie databases are locked by running browser processes."""

    def check_lock(self, db_path: Path, browser: Browser | None = None) -> LockReport:
        """
        Check if a database file is locked.

        Args:
            db_path: Path to the database file
            browser: Browser owning the database, used to name the blocker

        Returns:
            LockReport with lock status and blocking processes
        """
        if not db_path.exists():
            return LockReport(db_path=db_path, is_locked=False)

        if HAS_WIN32:
            is_locked = self._check_with_win32(db_path)
        else:
            is_locked = self._check_with_sqlite(db_path)

        blocking_processes: list[str] = []
        if is_locked:
            blocking_processes = self._find_blocking_processes(browser)

        return LockReport(
            db_path=db_path,
            is_locked=is_locked,
            blocking_processes=blocking_processes,
        )

    def get_running_browsers(self) -> dict[Browser, list[str]]:
        """
        Get the currently running browsers.

        Returns:
            Mapping of browser to the matching process names
        """
        running: dict[Browser, list[str]] = {}

        try:
            for proc in psutil.process_iter(["name"]):
                name = (proc.info.get("name") or "").lower()
                for browser, names in BROWSER_PROCESS_NAMES.items():
                    if name in names:
                        running.setdefault(browser, []).append(name)
        except psutil.Error as e:
            logger.warning("Error enumerating processes: %s", e)

        return running

    def is_browser_running(self, browser: Browser) -> bool:
        """Return True if any process of the browser is running."""
        return browser in self.get_running_browsers()

    def _check_with_win32(self, db_path: Path) -> bool:
        """
        Check file lock using win32 API.

        Returns:
            True on a sharing violation
        """
        try:
            handle = win32file.CreateFile(
                str(db_path),
                win32file.GENERIC_READ,
                win32file.FILE_SHARE_READ | win32file.FILE_SHARE_WRITE,
                None,
                win32file.OPEN_EXISTING,
                0,
                None,
            )
            win32file.CloseHandle(handle)
            return False
        except pywintypes.error as e:
            if e.winerror == ERROR_SHARING_VIOLATION:
                return True
            # Other errors (file not found, access denied, etc.)
            logger.debug("Win32 error checking %s: %s", db_path, e)
            return False

    def _check_with_sqlite(self, db_path: Path) -> bool:
        """
        Check for an exclusive SQLite lock by reading the schema.

        Returns:
            True if SQLite reports the database as locked
        """
        try:
            conn = sqlite3.connect(f"{db_path.resolve().as_uri()}?mode=ro", uri=True, timeout=0)
        except sqlite3.Error as e:
            logger.debug("Cannot open %s for lock check: %s", db_path, e)
            return False

        try:
            conn.execute("PRAGMA schema_version").fetchone()
            return False
        except sqlite3.OperationalError as e:
            return "locked" in str(e).lower()
        except sqlite3.Error:
            return False
        finally:
            conn.close()

    def _find_blocking_processes(self, browser: Browser | None) -> list[str]:
        """
        Find browser processes likely blocking the database.

        Args:
            browser: Browser owning the database, or None if unknown

        Returns:
            Process names that may be blocking
        """
        running = self.get_running_browsers()

        if browser is not None:
            return sorted(set(running.get(browser, [])))

        # Unknown browser - report all running browsers
        return sorted({name for names in running.values() for name in names})
