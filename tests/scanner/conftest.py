"""Test fixtures for scanner module."""

import hashlib
import sqlite3
from pathlib import Path

import pytest
from Crypto.Cipher import AES
from Crypto.Util.Padding import pad

# Chromium epoch offset: seconds between 1601-01-01 and 1970-01-01
# To convert a Unix timestamp (seconds since 1970) to Chromium time:
# chromium_time = (unix_time + 11644473600) * 1_000_000
CHROMIUM_EPOCH_OFFSET = 11644473600

# Key derived from "peanuts" with one PBKDF2 round
PEANUTS_KEY = bytes(
    [253, 98, 31, 229, 162, 180, 2, 83, 157, 250, 20, 124, 169, 39, 39, 120]
)

# Sample 256-bit key for AES-GCM values
GCM_KEY = bytes(range(32))


def unix_to_chromium_time(unix_seconds: int) -> int:
    """Convert Unix timestamp to Chromium microseconds since 1601."""
    return (unix_seconds + CHROMIUM_EPOCH_OFFSET) * 1_000_000


def encrypt_cbc(plaintext: bytes, key: bytes = PEANUTS_KEY, tag: bytes = b"v10") -> bytes:
    """Encrypt a value the way Chromium does on Linux and macOS."""
    cipher = AES.new(key, AES.MODE_CBC, iv=b" " * 16)
    return tag + cipher.encrypt(pad(plaintext, AES.block_size))


def encrypt_gcm(plaintext: bytes, key: bytes = GCM_KEY, nonce: bytes = b"\x01" * 12) -> bytes:
    """Encrypt a value the way Chromium does on Windows."""
    cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
    ciphertext, tag = cipher.encrypt_and_digest(plaintext)
    return b"v10" + nonce + ciphertext + tag


def with_domain_digest(host_key: str, value: bytes) -> bytes:
    """Prefix a plaintext with SHA-256(host_key), as cookie DB version 24+ does."""
    return hashlib.sha256(host_key.encode()).digest() + value


CHROMIUM_SCHEMA = """
    CREATE TABLE cookies (
        creation_utc INTEGER NOT NULL,
        host_key TEXT NOT NULL,
        top_frame_site_key TEXT NOT NULL,
        name TEXT NOT NULL,
        value TEXT NOT NULL,
        encrypted_value BLOB NOT NULL,
        path TEXT NOT NULL,
        expires_utc INTEGER NOT NULL,
        is_secure INTEGER NOT NULL,
        is_httponly INTEGER NOT NULL,
        last_access_utc INTEGER NOT NULL,
        has_expires INTEGER NOT NULL,
        is_persistent INTEGER NOT NULL,
        priority INTEGER NOT NULL,
        samesite INTEGER NOT NULL,
        source_scheme INTEGER NOT NULL,
        source_port INTEGER NOT NULL,
        is_same_party INTEGER NOT NULL,
        last_update_utc INTEGER NOT NULL,
        source_type INTEGER NOT NULL
    )
"""

FIREFOX_SCHEMA = """
    CREATE TABLE moz_cookies (
        id INTEGER PRIMARY KEY,
        originAttributes TEXT NOT NULL DEFAULT '',
        name TEXT NOT NULL,
        value TEXT NOT NULL,
        host TEXT NOT NULL,
        path TEXT NOT NULL DEFAULT '/',
        expiry INTEGER NOT NULL,
        lastAccessed INTEGER NOT NULL,
        creationTime INTEGER NOT NULL,
        isSecure INTEGER NOT NULL DEFAULT 0,
        isHttpOnly INTEGER NOT NULL DEFAULT 0,
        inBrowserElement INTEGER NOT NULL DEFAULT 0,
        sameSite INTEGER NOT NULL DEFAULT 0,
        rawSameSite INTEGER NOT NULL DEFAULT 0,
        schemeMap INTEGER NOT NULL DEFAULT 0,
        isPartitionedAttributeSet INTEGER NOT NULL DEFAULT 0
    )
"""


def create_chromium_db(db_path: Path, cookies: list[dict], version: int | None = 21) -> Path:
    """
    Create a Chromium cookies database.

    Each cookie dict needs host_key and name; value, encrypted_value, path,
    expires_utc, is_secure, is_httponly and samesite have defaults.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    creation = unix_to_chromium_time(1704067200)

    conn = sqlite3.connect(db_path)
    conn.execute(CHROMIUM_SCHEMA)
    conn.execute(
        "CREATE TABLE meta (key LONGVARCHAR NOT NULL UNIQUE PRIMARY KEY, value LONGVARCHAR)"
    )
    if version is not None:
        conn.execute("INSERT INTO meta VALUES ('version', ?)", (str(version),))

    for cookie in cookies:
        conn.execute(
            """
            INSERT INTO cookies (
                creation_utc, host_key, top_frame_site_key, name, value,
                encrypted_value, path, expires_utc, is_secure, is_httponly,
                last_access_utc, has_expires, is_persistent, priority, samesite,
                source_scheme, source_port, is_same_party, last_update_utc, source_type
            ) VALUES (?, ?, '', ?, ?, ?, ?, ?, ?, ?, ?, 1, 1, 1, ?, 2, 443, 0, ?, 0)
            """,
            (
                creation,
                cookie["host_key"],
                cookie["name"],
                cookie.get("value", ""),
                cookie.get("encrypted_value", b""),
                cookie.get("path", "/"),
                cookie.get("expires_utc", unix_to_chromium_time(1735689600)),
                cookie.get("is_secure", 1),
                cookie.get("is_httponly", 0),
                creation,
                cookie.get("samesite", 0),
                creation,
            ),
        )

    conn.commit()
    conn.close()
    return db_path


def create_firefox_db(db_path: Path, cookies: list[dict]) -> Path:
    """Create a Firefox cookies.sqlite database."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    creation = 1704067200 * 1000000  # creationTime is microseconds

    conn = sqlite3.connect(db_path)
    conn.execute(FIREFOX_SCHEMA)

    for cookie in cookies:
        conn.execute(
            """
            INSERT INTO moz_cookies (
                originAttributes, name, value, host, path, expiry,
                lastAccessed, creationTime, isSecure, isHttpOnly,
                inBrowserElement, sameSite, rawSameSite, schemeMap,
                isPartitionedAttributeSet
            ) VALUES ('', ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?, 0, 0, 0)
            """,
            (
                cookie["name"],
                cookie.get("value", "test_value"),
                cookie["host"],
                cookie.get("path", "/"),
                cookie.get("expiry", 1735689600),
                creation,
                creation,
                cookie.get("is_secure", 0),
                cookie.get("is_httponly", 0),
                cookie.get("samesite", 0),
            ),
        )

    conn.commit()
    conn.close()
    return db_path


@pytest.fixture
def chromium_profile(tmp_path: Path) -> Path:
    """Create a Chromium user data directory with a Default profile."""
    user_data = tmp_path / "chromium"
    create_chromium_db(
        user_data / "Default" / "Network" / "Cookies",
        [
            {"host_key": ".google.com", "name": "NID", "encrypted_value": encrypt_cbc(b"nid-value"), "samesite": 1},
            {"host_key": ".google.com", "name": "SID", "value": "plain-sid", "is_httponly": 1},
            {"host_key": "accounts.google.com", "name": "LSID", "encrypted_value": encrypt_cbc(b"lsid"), "samesite": 2},
            {"host_key": ".github.com", "name": "_gh_sess", "value": "gh", "expires_utc": 0, "is_secure": 0},
            {"host_key": "example.com", "name": "session_id", "value": "s1", "samesite": -1},
        ],
    )
    (user_data / "Local State").write_text("{}")
    return user_data


@pytest.fixture
def mock_firefox_root(tmp_path: Path) -> Path:
    """Create a mock Firefox root directory with profiles.ini."""
    firefox_root = tmp_path / "Mozilla" / "Firefox"
    firefox_root.mkdir(parents=True)

    # Create profiles.ini
    (firefox_root / "profiles.ini").write_text(
        "[General]\n"
        "StartWithLastProfile=1\n"
        "\n"
        "[Profile0]\n"
        "Name=default\n"
        "IsRelative=1\n"
        "Path=Profiles/abc123.default\n"
        "Default=1\n"
        "\n"
        "[Profile1]\n"
        "Name=dev\n"
        "IsRelative=1\n"
        "Path=Profiles/xyz789.dev\n"
    )

    create_firefox_db(
        firefox_root / "Profiles" / "abc123.default" / "cookies.sqlite",
        [
            {"host": "mozilla.org", "name": "session", "is_secure": 1, "samesite": 1},
            {"host": ".mozilla.org", "name": "tracking_id", "samesite": 2},
            {"host": "addons.mozilla.org", "name": "api_token", "is_secure": 1, "is_httponly": 1},
            {"host": "reddit.com", "name": "token", "expiry": 0},
        ],
    )
    create_firefox_db(firefox_root / "Profiles" / "xyz789.dev" / "cookies.sqlite", [])

    return firefox_root


@pytest.fixture
def mock_corrupted_db(tmp_path: Path) -> Path:
    """Create a corrupted/invalid database file."""
    db_path = tmp_path / "Corrupted"
    db_path.write_bytes(b"This is not a valid SQLite database")
    return db_path
