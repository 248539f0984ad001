"""Key acquisition strategies for Chromium cookie decryption.

Chromium encrypts cookie values with a symmetric key whose origin depends
on the operating system:

- Linux and other Unixes: "v10" values use a key derived from the fixed
  password "peanuts"; on Linux, "v11" values use a key derived from a
  password stored in the Secret Service keyring.
- macOS: "v10" values use a key derived from a password stored in the
  login keychain.
- Windows: "v10" values use a 256-bit key stored in the profile's Local
  State file, itself wrapped with DPAPI.

Each strategy implements KeyAcquirer.acquire(); default_key_acquirers()
picks the strategies for the running platform.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import sys
from abc import ABC, abstractmethod
from pathlib import Path

import keyring
import keyring.errors
from Crypto.Hash import SHA1
from Crypto.Protocol.KDF import PBKDF2

from crumbler.core.errors import (
    CipherError,
    KeyAcquisitionError,
    KeyNotFoundError,
)
from crumbler.core.models import Browser
from crumbler.scanner.browser_paths import get_browser_config

logger = logging.getLogger(__name__)

# Version tags prefixed to encrypted cookie values
V10_PREFIX = b"v10"
V11_PREFIX = b"v11"

# Prefix of the DPAPI-wrapped key in Local State
DPAPI_PREFIX = b"DPAPI"

# Salt for symmetric key derivation
SYMMETRIC_SALT = b"saltysalt"

# AES-128 key length, in bytes
DERIVED_KEY_LENGTH = 16

# PBKDF2 iterations used by Chromium to derive the key from the password
LINUX_HASH_ROUNDS = 1
MACOS_HASH_ROUNDS = 1003

# Password used by Chromium when no keyring is available (Linux "v10")
POSIX_DEFAULT_PASSWORD = b"peanuts"


def derive_key(password: bytes, rounds: int) -> bytes:
    """
    Derive an AES-128 key from a password the way Chromium does.

    PBKDF2 with HMAC-SHA1 and the fixed "saltysalt" salt.
    """
    return PBKDF2(
        password,
        SYMMETRIC_SALT,
        dkLen=DERIVED_KEY_LENGTH,
        count=rounds,
        hmac_hash_module=SHA1,
    )


def dpapi_decrypt(data: bytes) -> bytes:
    """
    Decrypt data using Windows DPAPI.

    Raises:
        CipherError: If DPAPI is unavailable or refuses the blob.
    """
    try:
        import pywintypes
        import win32crypt
    except ImportError as e:
        raise CipherError("DPAPI is not available on this platform") from e

    try:
        _, decrypted = win32crypt.CryptUnprotectData(data, None, None, None, 0)
    except pywintypes.error as e:
        # Wrong user context, corrupted blob, ...
        raise CipherError(f"DPAPI decryption failed: {e.strerror}") from e
    return decrypted


class KeyAcquirer(ABC):
    """Retrieves or derives the key used for one version tag."""

    key_variant = "v10"
    platform_name = "posix"

    @abstractmethod
    def acquire(self, browser: Browser) -> bytes:
        """
        Return the symmetric key for the given browser.

        May block on an OS authorization prompt.

        Raises:
            KeyAcquisitionError: If the key cannot be obtained.
            KeyNotFoundError: If the Local State holds no key (Windows).
        """

    def _error(self, reason: str) -> KeyAcquisitionError:
        return KeyAcquisitionError(self.key_variant, self.platform_name, reason)


class PosixDefaultKeyAcquirer(KeyAcquirer):
    """Key derived from Chromium's built-in "peanuts" password."""

    def acquire(self, browser: Browser) -> bytes:
        return derive_key(POSIX_DEFAULT_PASSWORD, LINUX_HASH_ROUNDS)


def read_secret_service_password(application: str) -> bytes | None:
    """
    Look up the Safe Storage password in the Secret Service default collection.

    Returns:
        The stored password, or None if no item matches.

    Raises:
        secretstorage.exceptions.SecretStorageException: On D-Bus or unlock failures.
    """
    import secretstorage

    connection = secretstorage.dbus_init()
    try:
        collection = secretstorage.get_default_collection(connection)
        if collection.is_locked() and collection.unlock():
            raise secretstorage.exceptions.LockedException("Unlock prompt was dismissed")

        item = next(collection.search_items({"application": application}), None)
        if item is None:
            return None
        if item.is_locked() and item.unlock():
            raise secretstorage.exceptions.LockedException("Unlock prompt was dismissed")
        return item.get_secret()
    finally:
        connection.close()


class LinuxSecretServiceKeyAcquirer(KeyAcquirer):
    """Key derived from the password Chromium stores in the Secret Service."""

    key_variant = "v11"
    platform_name = "linux"

    def acquire(self, browser: Browser) -> bytes:
        application = get_browser_config(browser).secret_application

        try:
            import secretstorage.exceptions
        except ImportError as e:
            raise self._error("secretstorage is not installed") from e

        try:
            password = read_secret_service_password(application)
        except secretstorage.exceptions.SecretStorageException as e:
            raise self._error(f"Secret Service lookup failed: {e}") from e

        if password is None:
            raise self._error(f"no Secret Service entry for application '{application}'")

        logger.debug("Read %s password from the Secret Service", browser)
        return derive_key(password, LINUX_HASH_ROUNDS)


class MacKeychainKeyAcquirer(KeyAcquirer):
    """Key derived from the password Chromium stores in the login keychain."""

    platform_name = "macos"

    def acquire(self, browser: Browser) -> bytes:
        config = get_browser_config(browser)

        try:
            password = keyring.get_password(config.keychain_service, config.keychain_account)
        except keyring.errors.KeyringError as e:
            raise self._error(f"keychain lookup failed: {e}") from e

        if password is None:
            raise self._error(f"no keychain entry for '{config.keychain_service}'")

        logger.debug("Read %s password from the keychain", browser)
        return derive_key(password.encode("utf-8"), MACOS_HASH_ROUNDS)


class WindowsLocalStateKeyAcquirer(KeyAcquirer):
    """AES-256 key stored DPAPI-wrapped in the Local State file."""

    platform_name = "windows"

    def __init__(self, local_state_path: Path) -> None:
        self.local_state_path = Path(local_state_path)

    def _read_encrypted_key(self) -> str:
        try:
            with open(self.local_state_path, "r", encoding="utf-8") as f:
                local_state = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise self._error(f"cannot read Local State {self.local_state_path}: {e}") from e

        try:
            encrypted_key = local_state["os_crypt"]["encrypted_key"]
        except (KeyError, TypeError):
            raise KeyNotFoundError(
                f"No os_crypt.encrypted_key in {self.local_state_path}"
            ) from None

        if not isinstance(encrypted_key, str):
            raise self._error("os_crypt.encrypted_key is not a string")
        return encrypted_key

    def acquire(self, browser: Browser) -> bytes:
        encrypted_key_b64 = self._read_encrypted_key()

        try:
            encrypted_key = base64.b64decode(encrypted_key_b64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise self._error(f"encrypted key is not valid base64: {e}") from e

        if not encrypted_key.startswith(DPAPI_PREFIX):
            raise self._error(
                f"invalid key prefix, expected '{DPAPI_PREFIX.decode()}'"
            )

        try:
            key = dpapi_decrypt(encrypted_key[len(DPAPI_PREFIX):])
        except CipherError as e:
            raise self._error(str(e)) from e

        logger.debug("Unwrapped %s key from %s", browser, self.local_state_path)
        return key


def default_key_acquirers(
    local_state_path: Path | None = None,
    platform: str | None = None,
) -> dict[bytes, KeyAcquirer]:
    """
    Select the key strategies for a platform, keyed by version tag.

    Args:
        local_state_path: Local State file of the profile (Windows only).
        platform: sys.platform value; defaults to the running platform.
    """
    platform = platform or sys.platform

    if platform == "win32":
        if local_state_path is None:
            raise ValueError("local_state_path is required on Windows")
        return {V10_PREFIX: WindowsLocalStateKeyAcquirer(local_state_path)}

    if platform == "darwin":
        return {V10_PREFIX: MacKeychainKeyAcquirer()}

    acquirers: dict[bytes, KeyAcquirer] = {V10_PREFIX: PosixDefaultKeyAcquirer()}
    if platform.startswith("linux"):
        acquirers[V11_PREFIX] = LinuxSecretServiceKeyAcquirer()
    return acquirers
