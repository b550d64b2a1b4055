"""Authentication infrastructure services.

These implement the domain interfaces and are wired into the domain services
by the FastAPI dependency providers.
"""

from .google_oauth import GoogleOAuthClient
from .link_state_signer import HmacExternalLinkStateSigner
from .password_hasher import PasslibPasswordHasher
from .refresh_token_hasher import Sha256RefreshTokenHasher
from .token_protector import FernetTokenProtector

__all__ = [
    "FernetTokenProtector",
    "GoogleOAuthClient",
    "HmacExternalLinkStateSigner",
    "PasslibPasswordHasher",
    "Sha256RefreshTokenHasher",
]
