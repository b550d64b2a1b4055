"""Encryption at rest for provider access and refresh tokens.

Provider tokens are bearer credentials for the user's account at the provider,
so they are never stored in plaintext. Each protector derives its own Fernet
key from the configured master key and a purpose string:

    fernet_key = HKDF-SHA256(master_key, info=purpose)

Two protectors with different purposes therefore cannot read each other's
ciphertext, even though they share the master key. Fernet provides
AES-128-CBC with an HMAC-SHA256 tag, so tampered ciphertext is rejected
instead of decrypting to garbage.
"""

import base64

import structlog
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from authlink.core.exceptions import ConfigurationError, DecryptionError
from authlink.domain.interfaces.services import ITokenProtector

logger = structlog.get_logger(__name__)

DEFAULT_PURPOSE = "ExternalTokenProtector.v1"


class FernetTokenProtector(ITokenProtector):
    """Purpose-scoped Fernet encryption for provider tokens.

    Args:
        master_key: The configured encryption secret. Any non-blank string.
        purpose: Key-derivation context. Changing it makes existing
            ciphertext unreadable.

    Raises:
        ConfigurationError: If `master_key` is missing or blank.
    """

    def __init__(self, master_key: str, purpose: str = DEFAULT_PURPOSE):
        if not master_key or not master_key.strip():
            raise ConfigurationError("External token encryption key is missing.")
        self._purpose = purpose
        derived = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=None,
            info=purpose.encode("utf-8"),
        ).derive(master_key.encode("utf-8"))
        self._fernet = Fernet(base64.urlsafe_b64encode(derived))

    def protect(self, plaintext: str) -> str:
        if not plaintext:
            raise ValueError("Value to protect cannot be empty")
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def unprotect(self, ciphertext: str) -> str:
        if not ciphertext:
            raise ValueError("Value to unprotect cannot be empty")
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as e:
            logger.warning("token_unprotect_failed", purpose=self._purpose, error_type=type(e).__name__)
            raise DecryptionError() from e
