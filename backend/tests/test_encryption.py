"""Unit tests for credential encryption"""

import base64

import pytest

from seo_platform.core import encryption
from seo_platform.core.config import settings
from seo_platform.core.encryption import EncryptionError, decrypt, decrypt_credentials, encrypt, encrypt_credentials


def test_encrypt_decrypt_credentials():
    blob = encrypt_credentials({"apiKey": "sk-live-123", "region": "eu"})

    assert "sk-live-123" not in blob
    assert decrypt_credentials(blob) == {"apiKey": "sk-live-123", "region": "eu"}


def test_each_encryption_uses_fresh_salt_and_iv():
    first, second = encrypt("same text"), encrypt("same text")

    assert first != second
    raw = base64.b64decode(first)
    assert len(raw) == encryption.SALT_LENGTH + encryption.IV_LENGTH + encryption.TAG_LENGTH + len("same text")


def test_tampered_ciphertext_is_rejected():
    raw = bytearray(base64.b64decode(encrypt("secret")))
    raw[-1] ^= 0x01

    with pytest.raises(EncryptionError, match="authentication failed"):
        decrypt(base64.b64encode(bytes(raw)).decode())


def test_truncated_and_garbage_input():
    with pytest.raises(EncryptionError):
        decrypt(base64.b64encode(b"short").decode())
    with pytest.raises(EncryptionError):
        decrypt("%%% not base64 %%%")


def test_wrong_secret_cannot_decrypt(monkeypatch):
    blob = encrypt("secret")
    monkeypatch.setattr(settings, "SECRET_ENCRYPTION_KEY", "another-secret")

    with pytest.raises(EncryptionError):
        decrypt(blob)


def test_missing_secret(monkeypatch):
    monkeypatch.setattr(settings, "SECRET_ENCRYPTION_KEY", None)

    with pytest.raises(EncryptionError, match="SECRET_ENCRYPTION_KEY"):
        encrypt("anything")
