"""
Symmetric encryption for integration credentials stored in the config store.

Third-party API keys have to be sent back to the external service on every
probe and upload, so they cannot be hashed. They are encrypted with Fernet
(AES-128-CBC + HMAC-SHA256) using a key derived from SECRET_KEY via HKDF.

Changing SECRET_KEY makes previously stored credentials undecryptable; callers
treat that as "not configured" and the user has to re-enter the key.

Usage:
    from app.core.encryption import encrypt_credential, decrypt_credential

    stored = encrypt_credential("chv_api_key")
    api_key = decrypt_credential(stored)
"""
import base64
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from app.core.config import settings
from app.core.logging_config import log_error

# Fernet tokens are versioned (0x80) so their base64 form always starts with this
FERNET_TOKEN_PREFIX = "gAAAAA"

_fernet_key_cache: Optional[bytes] = None


def _get_fernet_key() -> bytes:
    """Derive (once) the Fernet key from SECRET_KEY."""
    global _fernet_key_cache

    if _fernet_key_cache is not None:
        return _fernet_key_cache

    if not settings.secret_key:
        raise ValueError(
            "SECRET_KEY must be set for encryption. "
            "Set it in your .env file or environment variables."
        )

    kdf = HKDF(
        algorithm=hashes.SHA256(),
        length=32,
        salt=None,
        info=b'diarum-integration-credential-encryption'
    )
    derived_key = kdf.derive(settings.secret_key.encode('utf-8'))
    _fernet_key_cache = base64.urlsafe_b64encode(derived_key)

    return _fernet_key_cache


def _get_fernet() -> Fernet:
    return Fernet(_get_fernet_key())


def encrypt_credential(value: str) -> str:
    """Encrypt a credential for storage."""
    if not value or not value.strip():
        raise ValueError("Cannot encrypt empty credential")

    try:
        return _get_fernet().encrypt(value.encode('utf-8')).decode('utf-8')
    except Exception as e:
        log_error(e, action="credential_encryption")
        raise


def decrypt_credential(encrypted_value: str) -> str:
    """
    Decrypt a credential produced by encrypt_credential.

    Raises:
        ValueError: if the value is empty, corrupted, or was encrypted under a
            different SECRET_KEY.
    """
    if not encrypted_value or not encrypted_value.strip():
        raise ValueError("Cannot decrypt empty credential")

    try:
        return _get_fernet().decrypt(encrypted_value.encode('utf-8')).decode('utf-8')
    except InvalidToken as e:
        log_error(e, action="credential_decryption")
        raise ValueError(
            "Failed to decrypt credential. The stored value may be corrupted "
            "or SECRET_KEY has changed."
        )


def is_encrypted(value: str) -> bool:
    """Heuristic: does this look like a Fernet token (as opposed to a legacy plaintext value)?"""
    if not value:
        return False
    return value.startswith(FERNET_TOKEN_PREFIX)


def reset_key_cache():
    """Forget the derived key. Only needed in tests or if SECRET_KEY changes at runtime."""
    global _fernet_key_cache
    _fernet_key_cache = None
