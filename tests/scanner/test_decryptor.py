"""Tests for Chromium cookie decryptor."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock, patch

import pytest

from crumbler.core.errors import (
    CipherError,
    DecryptionError,
    KeyAcquisitionError,
    ValueDecodeError,
)
from crumbler.core.models import Browser
from crumbler.scanner.decryptor import ChromiumDecryptor, decrypt_cbc, decrypt_gcm
from crumbler.scanner.keys import PosixDefaultKeyAcquirer

from .conftest import GCM_KEY, PEANUTS_KEY, encrypt_cbc, encrypt_gcm, with_domain_digest


def mock_acquirer(key: bytes = PEANUTS_KEY) -> MagicMock:
    acquirer = MagicMock()
    acquirer.acquire.return_value = key
    return acquirer


@pytest.fixture
def linux_decryptor() -> ChromiumDecryptor:
    """Decryptor using the built-in v10 key."""
    return ChromiumDecryptor(
        Browser.CHROMIUM, {b"v10": PosixDefaultKeyAcquirer()}, platform="linux"
    )


class TestCbcDecryption:
    """Tests for AES-128-CBC values (Linux, macOS)."""

    def test_known_vector(self, linux_decryptor: ChromiumDecryptor) -> None:
        """A value encrypted by Chromium with the built-in key decrypts."""
        encrypted = b"v10" + bytes.fromhex("e9bf20c4cfaaa2fa8df33a4260424e5b")

        assert linux_decryptor.decrypt_value(encrypted) == "PENDING+400"

    def test_round_trip(self, linux_decryptor: ChromiumDecryptor) -> None:
        assert linux_decryptor.decrypt_value(encrypt_cbc("héllo wörld".encode())) == "héllo wörld"

    def test_empty_plaintext(self, linux_decryptor: ChromiumDecryptor) -> None:
        """An encrypted empty string is one block of padding."""
        assert linux_decryptor.decrypt_value(encrypt_cbc(b"")) == ""

    def test_truncated_ciphertext(self) -> None:
        with pytest.raises(CipherError, match="multiple"):
            decrypt_cbc(PEANUTS_KEY, b"\x00" * 15)

    def test_tag_only(self, linux_decryptor: ChromiumDecryptor) -> None:
        """A tag with no ciphertext is rejected."""
        with pytest.raises(CipherError):
            linux_decryptor.decrypt_value(b"v10")

    def test_invalid_utf8(self, linux_decryptor: ChromiumDecryptor) -> None:
        with pytest.raises(ValueDecodeError):
            linux_decryptor.decrypt_value(encrypt_cbc(b"\xff\xfe\xfd"))

    def test_v11_uses_its_own_key(self) -> None:
        """v11 values are decrypted with the v11 strategy's key."""
        v11_key = bytes(range(16))
        decryptor = ChromiumDecryptor(
            Browser.CHROME,
            {b"v10": mock_acquirer(), b"v11": mock_acquirer(v11_key)},
            platform="linux",
        )

        assert decryptor.decrypt_value(encrypt_cbc(b"secret", v11_key, b"v11")) == "secret"


class TestGcmDecryption:
    """Tests for AES-256-GCM values (Windows)."""

    @pytest.fixture
    def windows_decryptor(self) -> ChromiumDecryptor:
        return ChromiumDecryptor(Browser.EDGE, {b"v10": mock_acquirer(GCM_KEY)}, platform="win32")

    def test_round_trip(self, windows_decryptor: ChromiumDecryptor) -> None:
        assert windows_decryptor.decrypt_value(encrypt_gcm(b"gcm value")) == "gcm value"

    def test_tampered_tag(self, windows_decryptor: ChromiumDecryptor) -> None:
        """Authentication failure raises CipherError."""
        encrypted = bytearray(encrypt_gcm(b"gcm value"))
        encrypted[-1] ^= 0x01

        with pytest.raises(CipherError, match="AES-GCM"):
            windows_decryptor.decrypt_value(bytes(encrypted))

    def test_too_short(self) -> None:
        with pytest.raises(CipherError, match="too short"):
            decrypt_gcm(GCM_KEY, b"\x00" * 27)

    def test_untagged_value_uses_dpapi(self, windows_decryptor: ChromiumDecryptor) -> None:
        """Values without a version tag are DPAPI blobs."""
        with patch("crumbler.scanner.decryptor.dpapi_decrypt", return_value=b"legacy") as mock:
            assert windows_decryptor.decrypt_value(b"\x01\x00\x00\x00blob") == "legacy"

        mock.assert_called_once_with(b"\x01\x00\x00\x00blob")


class TestUntaggedValues:
    """Tests for values without a version tag outside Windows."""

    def test_plaintext_passthrough(self, linux_decryptor: ChromiumDecryptor) -> None:
        assert linux_decryptor.decrypt_value(b"plain value") == "plain value"

    def test_plaintext_invalid_utf8(self, linux_decryptor: ChromiumDecryptor) -> None:
        with pytest.raises(ValueDecodeError):
            linux_decryptor.decrypt_value(b"\xc3\x28")


class TestDomainDigest:
    """Tests for the SHA-256(host_key) prefix of cookie DB version 24+."""

    def test_digest_is_stripped(self, linux_decryptor: ChromiumDecryptor) -> None:
        encrypted = encrypt_cbc(with_domain_digest(".example.com", b"value"))

        assert linux_decryptor.decrypt_value(encrypted, ".example.com") == "value"

    def test_digest_mismatch(self, linux_decryptor: ChromiumDecryptor) -> None:
        """A value moved to another host is rejected."""
        encrypted = encrypt_cbc(with_domain_digest(".example.com", b"value"))

        with pytest.raises(CipherError, match="digest"):
            linux_decryptor.decrypt_value(encrypted, ".evil.com")

    def test_digest_not_stripped_without_host(self, linux_decryptor: ChromiumDecryptor) -> None:
        """Older databases keep the whole plaintext."""
        encrypted = encrypt_cbc(b"no digest here")

        assert linux_decryptor.decrypt_value(encrypted) == "no digest here"


class TestKeyCaching:
    """Tests for lazy, memoized key acquisition."""

    def test_key_acquired_once(self) -> None:
        acquirer = mock_acquirer()
        decryptor = ChromiumDecryptor(Browser.CHROMIUM, {b"v10": acquirer}, platform="linux")

        for _ in range(3):
            decryptor.decrypt_value(encrypt_cbc(b"x"))

        acquirer.acquire.assert_called_once_with(Browser.CHROMIUM)

    def test_key_not_acquired_for_plaintext(self) -> None:
        """Untagged values never trigger acquisition."""
        acquirer = mock_acquirer()
        decryptor = ChromiumDecryptor(Browser.CHROMIUM, {b"v10": acquirer}, platform="linux")

        decryptor.decrypt_value(b"plain")

        acquirer.acquire.assert_not_called()

    def test_failure_is_not_cached(self) -> None:
        """A failed acquisition is retried on the next value."""
        acquirer = MagicMock()
        acquirer.acquire.side_effect = [
            KeyAcquisitionError("v10", "macos", "prompt dismissed"),
            PEANUTS_KEY,
        ]
        decryptor = ChromiumDecryptor(Browser.CHROME, {b"v10": acquirer}, platform="darwin")

        with pytest.raises(DecryptionError):
            decryptor.decrypt_value(encrypt_cbc(b"x"))

        assert decryptor.decrypt_value(encrypt_cbc(b"x")) == "x"
        assert acquirer.acquire.call_count == 2

    def test_concurrent_first_use(self) -> None:
        """Threads racing on the first value share one acquisition."""
        acquirer = mock_acquirer()
        decryptor = ChromiumDecryptor(Browser.CHROMIUM, {b"v10": acquirer}, platform="linux")
        encrypted = encrypt_cbc(b"shared")
        results = []

        def worker() -> None:
            results.append(decryptor.decrypt_value(encrypted))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == ["shared"] * 8
        acquirer.acquire.assert_called_once()


class TestForProfile:
    """Tests for the platform factory."""

    def test_linux_strategies(self) -> None:
        decryptor = ChromiumDecryptor.for_profile(Browser.CHROMIUM, platform="linux")

        assert not decryptor.uses_gcm
        assert decryptor.decrypt_value(encrypt_cbc(b"peanuts")) == "peanuts"

    def test_windows_uses_gcm(self, tmp_path) -> None:
        decryptor = ChromiumDecryptor.for_profile(
            Browser.CHROME, tmp_path / "Local State", platform="win32"
        )

        assert decryptor.uses_gcm
