"""Domain interfaces for dependency inversion.

These interfaces define contracts that the infrastructure layer implements,
keeping the domain services free of storage, cryptography and HTTP details.
"""

from .repositories import (
    IExternalLinkRepository,
    ILoginAttemptRepository,
    ISessionRepository,
    IUserRepository,
)
from .services import (
    IClock,
    IExternalLinkStateSigner,
    IExternalOAuthClient,
    IPasswordHasher,
    IRefreshTokenHasher,
    ITokenProtector,
)

__all__ = [
    "IUserRepository",
    "ISessionRepository",
    "ILoginAttemptRepository",
    "IExternalLinkRepository",
    "IPasswordHasher",
    "IClock",
    "IRefreshTokenHasher",
    "ITokenProtector",
    "IExternalLinkStateSigner",
    "IExternalOAuthClient",
]
