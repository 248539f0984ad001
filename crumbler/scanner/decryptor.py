"""Chromium cookie value decryptor (AES-CBC on POSIX, DPAPI + AES-GCM on Windows)."""

from __future__ import annotations

import hashlib
import logging
import sys
import threading
from pathlib import Path
from typing import Mapping

from Crypto.Cipher import AES
from Crypto.Util.Padding import unpad

from crumbler.core.errors import CipherError, ValueDecodeError
from crumbler.core.models import Browser
from crumbler.scanner.keys import KeyAcquirer, default_key_acquirers, dpapi_decrypt

logger = logging.getLogger(__name__)

# Length of the version tag ("v10", "v11") prefixed to encrypted values
VERSION_TAG_LENGTH = 3

# Chromium's fixed initialization vector for AES-128-CBC
CBC_IV = b" " * AES.block_size

# AES-256-GCM layout: nonce (12 bytes) + ciphertext + tag (16 bytes)
GCM_NONCE_LENGTH = 12
GCM_TAG_LENGTH = 16

# Cookie DB version 24+ prefixes plaintexts with SHA-256(host_key)
DOMAIN_DIGEST_LENGTH = 32


def decrypt_cbc(key: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt an AES-128-CBC value (POSIX platforms, tag already stripped).

    Raises:
        CipherError: On invalid length, key or padding.
    """
    if not ciphertext or len(ciphertext) % AES.block_size:
        raise CipherError(
            f"Ciphertext length {len(ciphertext)} is not a positive multiple of "
            f"{AES.block_size}"
        )

    try:
        cipher = AES.new(key, AES.MODE_CBC, iv=CBC_IV)
        return unpad(cipher.decrypt(ciphertext), AES.block_size)
    except ValueError as e:
        # Bad key length or padding (usually a wrong key)
        raise CipherError(f"AES-CBC decryption failed: {e}") from e


def decrypt_gcm(key: bytes, data: bytes) -> bytes:
    """
    Decrypt an AES-256-GCM value (Windows, tag already stripped).

    Format: nonce (12 bytes) + ciphertext + authentication tag (16 bytes)

    Raises:
        CipherError: On truncated input or failed authentication.
    """
    if len(data) < GCM_NONCE_LENGTH + GCM_TAG_LENGTH:
        raise CipherError(f"Encrypted value too short for AES-GCM ({len(data)} bytes)")

    nonce = data[:GCM_NONCE_LENGTH]
    ciphertext = data[GCM_NONCE_LENGTH:-GCM_TAG_LENGTH]
    tag = data[-GCM_TAG_LENGTH:]

    try:
        cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
        return cipher.decrypt_and_verify(ciphertext, tag)
    except ValueError as e:
        # Tag verification failed or bad key length
        raise CipherError(f"AES-GCM decryption failed: {e}") from e


def _decode(plaintext: bytes) -> str:
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValueDecodeError(f"Cookie value is not valid UTF-8: {e.reason}") from e


class ChromiumDecryptor:
    """
    Decrypts Chromium cookie values.

    Keys are acquired lazily, once per version tag, and cached for the
    lifetime of the decryptor. A failed acquisition is not cached, so the
    next value needing that key retries it.

    Usage:
        decryptor = ChromiumDecryptor.for_profile(Browser.CHROME, local_state_path)
        plain_text = decryptor.decrypt_value(encrypted_value)
    """

    def __init__(
        self,
        browser: Browser,
        key_acquirers: Mapping[bytes, KeyAcquirer],
        platform: str | None = None,
    ) -> None:
        """
        Args:
            browser: Chromium variant the values come from.
            key_acquirers: Key strategy per version tag.
            platform: sys.platform value; selects the cipher.
        """
        self.browser = browser
        self.platform = platform or sys.platform
        self._key_acquirers = dict(key_acquirers)
        self._keys: dict[bytes, bytes] = {}
        self._key_lock = threading.Lock()

    @classmethod
    def for_profile(
        cls,
        browser: Browser,
        local_state_path: Path | None = None,
        platform: str | None = None,
    ) -> ChromiumDecryptor:
        """Create a decryptor with the default key strategies for the platform."""
        platform = platform or sys.platform
        return cls(browser, default_key_acquirers(local_state_path, platform), platform)

    @property
    def uses_gcm(self) -> bool:
        return self.platform == "win32"

    def get_key(self, tag: bytes) -> bytes:
        """
        Return the key for a version tag, acquiring it on first use.

        Raises:
            KeyError: If no strategy handles the tag.
            KeyAcquisitionError, KeyNotFoundError: If acquisition fails.
        """
        key = self._keys.get(tag)
        if key is not None:
            return key

        with self._key_lock:
            key = self._keys.get(tag)
            if key is None:
                acquirer = self._key_acquirers[tag]
                logger.debug(
                    "Acquiring %s key for %s with %s",
                    tag.decode("ascii"),
                    self.browser,
                    type(acquirer).__name__,
                )
                key = acquirer.acquire(self.browser)
                self._keys[tag] = key
        return key

    def decrypt_value(self, encrypted_value: bytes, host_key: str | None = None) -> str:
        """
        Decrypt an encrypted cookie value.

        Args:
            encrypted_value: The raw encrypted_value blob from the database.
            host_key: When given, the plaintext is expected to start with
                      SHA-256(host_key), as written by cookie DB version 24+.

        Returns:
            Decrypted string value.

        Raises:
            DecryptionError: If the key cannot be acquired, the cipher fails,
                             or the result is not UTF-8.
        """
        tag = encrypted_value[:VERSION_TAG_LENGTH]

        if tag not in self._key_acquirers:
            if self.uses_gcm:
                # Pre-v80 Windows values are wrapped with DPAPI only
                return _decode(dpapi_decrypt(encrypted_value))
            # No recognized tag: the value is not encrypted
            return _decode(encrypted_value)

        key = self.get_key(tag)
        payload = encrypted_value[VERSION_TAG_LENGTH:]

        if self.uses_gcm:
            plaintext = decrypt_gcm(key, payload)
        else:
            plaintext = decrypt_cbc(key, payload)

        if host_key is not None:
            plaintext = self._strip_domain_digest(plaintext, host_key)

        return _decode(plaintext)

    @staticmethod
    def _strip_domain_digest(plaintext: bytes, host_key: str) -> bytes:
        digest = hashlib.sha256(host_key.encode("utf-8")).digest()
        if plaintext[:DOMAIN_DIGEST_LENGTH] != digest:
            raise CipherError("Decrypted value does not start with the host key digest")
        return plaintext[DOMAIN_DIGEST_LENGTH:]
