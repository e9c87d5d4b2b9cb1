"""AES-256-GCM for secrets stored in system_settings"""
import os
import base64

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from gymdesk.core.config import settings

NONCE_SIZE = 12


class SecretDecryptError(ValueError):
    """Ciphertext was tampered with, belongs to another field, or the key changed"""


def _cipher() -> AESGCM:
    if not settings.AES_KEY:
        raise ValueError("AES_KEY is not configured")
    key = bytes.fromhex(settings.AES_KEY)
    if len(key) != 32:
        raise ValueError("AES_KEY must be 32 bytes (64 hex characters)")
    return AESGCM(key)


def encrypt(plaintext: str, field: str = "") -> str:
    """
    Encrypt `plaintext` for the system_settings column `field`.
    The column name is bound as associated data, so a value copied into
    another column will not decrypt.
    """
    nonce = os.urandom(NONCE_SIZE)
    ciphertext = _cipher().encrypt(nonce, plaintext.encode("utf-8"), field.encode("utf-8") or None)
    return base64.b64encode(nonce + ciphertext).decode("ascii")


def decrypt(encrypted: str, field: str = "") -> str:
    data = base64.b64decode(encrypted)
    if len(data) <= NONCE_SIZE:
        raise SecretDecryptError("Ciphertext too short")
    try:
        plaintext = _cipher().decrypt(data[:NONCE_SIZE], data[NONCE_SIZE:], field.encode("utf-8") or None)
    except InvalidTag:
        raise SecretDecryptError(f"Could not authenticate secret for {field or 'unnamed field'}")
    return plaintext.decode("utf-8")
