"""
Field-level PII encryption for consumer records using Fernet.

FIELD_ENCRYPTION_KEY may hold a comma-separated list of keys for rotation:
the first key encrypts new values, every key is tried when decrypting.
After adding a key, run `manage.py rotate_consumer_pii` so existing rows
move to it and the old key can be dropped.

    FIELD_ENCRYPTION_KEY="newKeyABC...,oldKeyXYZ..."

Usage in models:
    from caseload.encryption import encrypt_field, decrypt_field

    class Consumer(models.Model):
        _name_encrypted = models.BinaryField(default=b"")

        @property
        def name(self):
            return decrypt_field(self._name_encrypted)

        @name.setter
        def name(self, value):
            self._name_encrypted = encrypt_field(value)
"""
import logging

from cryptography.fernet import Fernet, InvalidToken, MultiFernet
from django.conf import settings
from django.core.checks import Error, register

logger = logging.getLogger(__name__)

_fernet = None


class DecryptionError(Exception):
    """Raised when a stored value cannot be decrypted with the configured keys."""


def _get_fernet():
    """Build (once) the cipher for the configured key or keys."""
    global _fernet
    if _fernet is None:
        key_string = settings.FIELD_ENCRYPTION_KEY
        if not key_string:
            raise ValueError("FIELD_ENCRYPTION_KEY is not set.")
        keys = [k.strip() for k in key_string.split(",") if k.strip()]
        ciphers = [Fernet(k.encode()) for k in keys]
        _fernet = ciphers[0] if len(ciphers) == 1 else MultiFernet(ciphers)
    return _fernet


def encrypt_field(plaintext):
    """Encrypt a string for a BinaryField. Empty values are stored as b''."""
    if plaintext is None or plaintext == "":
        return b""
    return _get_fernet().encrypt(plaintext.encode("utf-8"))


def decrypt_field(ciphertext):
    if not ciphertext:
        return ""
    if isinstance(ciphertext, memoryview):
        ciphertext = bytes(ciphertext)
    try:
        return _get_fernet().decrypt(ciphertext).decode("utf-8")
    except InvalidToken:
        logger.error("Decryption failed: possible key mismatch or data corruption")
        raise DecryptionError(
            "Decryption failed: possible key mismatch or data corruption"
        )


def rotate_field(ciphertext):
    """Re-encrypt a stored value under the first configured key.

    Returns the ciphertext unchanged when only one key is configured or
    the value is empty. Raises DecryptionError if no configured key fits.
    """
    if not ciphertext:
        return b""
    if isinstance(ciphertext, memoryview):
        ciphertext = bytes(ciphertext)
    fernet = _get_fernet()
    if not isinstance(fernet, MultiFernet):
        return ciphertext
    try:
        return fernet.rotate(ciphertext)
    except InvalidToken:
        logger.error("Key rotation failed: value does not decrypt with any configured key")
        raise DecryptionError("Value does not decrypt with any configured key")


@register()
def check_encryption_key(app_configs, **kwargs):
    """System check: the configured key must round-trip a test value."""
    global _fernet
    errors = []
    try:
        _fernet = None
        probe = "caseload-encryption-selftest"
        if decrypt_field(encrypt_field(probe)) != probe:
            errors.append(Error(
                "FIELD_ENCRYPTION_KEY round-trip check failed.",
                hint="Check that FIELD_ENCRYPTION_KEY is a valid Fernet key.",
                id="caseload.E001",
            ))
    except Exception as exc:
        errors.append(Error(
            f"FIELD_ENCRYPTION_KEY is invalid or missing: {exc}",
            hint=(
                "Generate a key with: python -c \"from cryptography.fernet import "
                "Fernet; print(Fernet.generate_key().decode())\""
            ),
            id="caseload.E001",
        ))
    finally:
        _fernet = None
    return errors
