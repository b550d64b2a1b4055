"""Domain value objects."""

from .external_link import (
    ExternalAccessToken,
    ExternalLinkStart,
    ExternalLinkView,
    ExternalOAuthToken,
    ExternalOAuthUserProfile,
    LinkStateClaims,
)
from .external_provider import ExternalProvider, ExternalSubjectId
from .tokens import AccessGrants, AuthTokens, IssuedAccessToken, RoleGrant

__all__ = [
    "AccessGrants",
    "AuthTokens",
    "ExternalAccessToken",
    "ExternalLinkStart",
    "ExternalLinkView",
    "ExternalOAuthToken",
    "ExternalOAuthUserProfile",
    "ExternalProvider",
    "ExternalSubjectId",
    "IssuedAccessToken",
    "LinkStateClaims",
    "RoleGrant",
]
