"""
Encryption utilities for third-party credentials stored per workspace.

Uses AES-256-GCM from the cryptography library. Each call derives a fresh key
from SECRET_ENCRYPTION_KEY with PBKDF2-HMAC-SHA512 and a random salt, so the
output layout is:

    base64( salt[64] | iv[16] | tag[16] | ciphertext )
"""

import base64
import binascii
import json
import logging
import os
from typing import Any, Dict

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from seo_platform.core.config import settings

logger = logging.getLogger(__name__)

SALT_LENGTH = 64
IV_LENGTH = 16
TAG_LENGTH = 16
KEY_LENGTH = 32
ITERATIONS = 100000


class EncryptionError(Exception):
    """Custom exception for encryption errors"""
    pass


def _get_secret() -> str:
    secret = settings.SECRET_ENCRYPTION_KEY
    if not secret:
        raise EncryptionError("SECRET_ENCRYPTION_KEY environment variable is not set")
    return secret


def _derive_key(secret: str, salt: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA512(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=ITERATIONS,
    )
    return kdf.derive(secret.encode("utf-8"))


def encrypt(plaintext: str) -> str:
    """
    Encrypt a string with AES-256-GCM

    Args:
        plaintext: String to encrypt

    Returns:
        Base64 blob of salt, IV, auth tag and ciphertext
    """
    secret = _get_secret()

    salt = os.urandom(SALT_LENGTH)
    iv = os.urandom(IV_LENGTH)
    key = _derive_key(secret, salt)

    # AESGCM returns ciphertext with the tag appended
    sealed = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), None)
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]

    return base64.b64encode(salt + iv + tag + ciphertext).decode("ascii")


def decrypt(encrypted_data: str) -> str:
    """
    Decrypt a blob produced by encrypt()

    Args:
        encrypted_data: Base64 blob

    Returns:
        Original plaintext
    """
    secret = _get_secret()

    try:
        raw = base64.b64decode(encrypted_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncryptionError(f"Failed to decrypt data: {e}")

    header_length = SALT_LENGTH + IV_LENGTH + TAG_LENGTH
    if len(raw) < header_length:
        raise EncryptionError("Failed to decrypt data: ciphertext is truncated")

    salt = raw[:SALT_LENGTH]
    iv = raw[SALT_LENGTH:SALT_LENGTH + IV_LENGTH]
    tag = raw[SALT_LENGTH + IV_LENGTH:header_length]
    ciphertext = raw[header_length:]

    key = _derive_key(secret, salt)
    try:
        plaintext = AESGCM(key).decrypt(iv, ciphertext + tag, None)
    except InvalidTag:
        logger.error("Decryption failed: authentication tag mismatch")
        raise EncryptionError("Failed to decrypt data: authentication failed")

    return plaintext.decode("utf-8")


def encrypt_credentials(credentials: Dict[str, Any]) -> str:
    """Serialize a credentials object to JSON and encrypt it"""
    return encrypt(json.dumps(credentials))


def decrypt_credentials(encrypted_data: str) -> Dict[str, Any]:
    """Decrypt and parse a credentials object"""
    plaintext = decrypt(encrypted_data)
    try:
        return json.loads(plaintext)
    except json.JSONDecodeError as e:
        raise EncryptionError(f"Decrypted credentials are not valid JSON: {e}")
