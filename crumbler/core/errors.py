"""Exception hierarchy for crumbler.

Every error raised by the extraction engine derives from CrumblerError so
callers can catch a single type. None of these errors carry cookie values
or key material in their messages.
"""

from __future__ import annotations

from pathlib import Path


class CrumblerError(Exception):
    """Base class for all crumbler errors."""


class ConfigError(CrumblerError):
    """Raised when configuration is invalid."""


class ProfileNotFoundError(CrumblerError):
    """Raised when a browser profile cannot be located."""


class InvalidHostError(CrumblerError):
    """Raised when a requested host or URL cannot be parsed."""


# Cookie store errors


class CookieStoreError(CrumblerError):
    """Raised when reading a cookie database fails."""


class DatabaseOpenError(CookieStoreError):
    """The database path is invalid, locked or not a SQLite file."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"Failed to open cookies database {self.path}: {reason}")


class QueryExecutionError(CookieStoreError):
    """The cookie query failed, usually because of an unknown schema."""

    def __init__(self, query: str, reason: str) -> None:
        self.query = query
        super().__init__(f"Failed to execute SQL query: {reason}")


class FilterRegistrationError(CookieStoreError):
    """SQLite rejected the host filter function."""


class MissingColumnError(CookieStoreError):
    """A cookie row has NULL in a column every cookie needs."""

    def __init__(self, host: str, column: str) -> None:
        self.host = host
        self.column = column
        super().__init__(f"Cookie for {host!r} has NULL in column {column!r}")


class CookieValueDecryptError(CookieStoreError):
    """A cookie value could not be decrypted; wraps a DecryptionError."""

    def __init__(self, host: str, name: str, source: DecryptionError) -> None:
        self.host = host
        self.name = name
        self.source = source
        super().__init__(f"Failed to decrypt cookie {name!r} for {host!r}: {source}")


# Decryption errors


class DecryptionError(CrumblerError):
    """Raised when decryption fails."""


class KeyAcquisitionError(DecryptionError):
    """The OS credential store or Local State could not provide a key."""

    def __init__(self, key_variant: str, platform: str, reason: str) -> None:
        self.key_variant = key_variant
        self.platform = platform
        super().__init__(f"Failed to get {key_variant} key on {platform}: {reason}")


class KeyNotFoundError(DecryptionError):
    """The Local State file has no encrypted key."""


class CipherError(DecryptionError):
    """Cipher or authentication failure, or truncated ciphertext."""


class ValueDecodeError(DecryptionError):
    """Decrypted or plaintext bytes are not valid UTF-8."""


# Collaborator errors


class SessionError(CrumblerError):
    """Raised when a browser session cannot be run."""


class WrapError(CrumblerError):
    """Raised when a wrapped command cannot be run."""
