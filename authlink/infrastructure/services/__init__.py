"""Infrastructure services.

Concrete implementations of the domain service interfaces: hashing,
encryption, OAuth state signing, the Google OAuth client and the clock.
"""

from .authentication import (
    FernetTokenProtector,
    GoogleOAuthClient,
    HmacExternalLinkStateSigner,
    PasslibPasswordHasher,
    Sha256RefreshTokenHasher,
)
from .clock import SystemClock

__all__ = [
    "FernetTokenProtector",
    "GoogleOAuthClient",
    "HmacExternalLinkStateSigner",
    "PasslibPasswordHasher",
    "Sha256RefreshTokenHasher",
    "SystemClock",
]
