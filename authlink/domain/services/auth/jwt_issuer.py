"""Access-token issuance and verification.

Access tokens are HS256-signed JWTs. Besides the registered claims they carry
the user's effective roles and permissions, flattened at issue time:

    roles       = direct roles ∪ group-derived roles   (case-insensitive)
    permissions = ∪ permissions of every role above

A user without any role gets the default role "User".
"""

import uuid
from datetime import timedelta
from typing import Any, Dict, Iterable, List

import jwt
from structlog import get_logger

from authlink.core.exceptions import AuthenticationError, TokenConfigurationError
from authlink.domain.entities.user import User
from authlink.domain.interfaces.services import IClock
from authlink.domain.value_objects.tokens import AccessGrants, IssuedAccessToken, RoleGrant

logger = get_logger(__name__)

ALGORITHM = "HS256"
DEFAULT_EXPIRY_MINUTES = 60
DEFAULT_ROLE = "User"


class JwtTokenIssuer:
    """Issues and decodes access tokens.

    The configuration is checked on every call instead of at construction, so a
    missing key surfaces as a `TokenConfigurationError` that callers can turn
    into an ordinary failed request.

    Attributes:
        signing_key (str): Symmetric HS256 key.
        issuer (str): Value of the `iss` claim.
        audience (str): Value of the `aud` claim.
        expiry (timedelta): Access-token lifetime.
    """

    def __init__(
        self,
        signing_key: str,
        issuer: str,
        audience: str,
        clock: IClock,
        expiry_minutes: int = DEFAULT_EXPIRY_MINUTES,
    ):
        self.signing_key = signing_key
        self.issuer = issuer
        self.audience = audience
        self.clock = clock
        self.expiry = timedelta(minutes=expiry_minutes if expiry_minutes > 0 else DEFAULT_EXPIRY_MINUTES)

    def issue(self, user: User, grants: AccessGrants) -> IssuedAccessToken:
        """Creates a signed access token for `user`.

        Args:
            user: The authenticated user.
            grants: The user's direct and group-derived roles.

        Returns:
            IssuedAccessToken: The encoded token and its expiry.

        Raises:
            TokenConfigurationError: If the key, issuer or audience is missing.
        """
        self._ensure_configured()
        roles = role_names(grants)
        permissions = permission_names(grants)

        issued_at = self.clock.now()
        expires_at = issued_at + self.expiry
        payload = {
            "sub": str(user.id),
            "username": user.username,
            "email": user.email,
            "roles": roles,
            "permissions": permissions,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": issued_at,
            "exp": expires_at,
            "jti": uuid.uuid4().hex,
        }
        token = jwt.encode(payload, self.signing_key, algorithm=ALGORITHM)
        logger.debug("access_token_issued", user_id=str(user.id), roles=len(roles), permissions=len(permissions))
        return IssuedAccessToken(token=token, expires_at=expires_at)

    def decode(self, token: str) -> Dict[str, Any]:
        """Verifies signature, issuer, audience and expiry and returns the claims.

        Raises:
            AuthenticationError: If the token fails any check.
            TokenConfigurationError: If the issuer is not configured.
        """
        self._ensure_configured()
        try:
            return jwt.decode(
                token,
                self.signing_key,
                algorithms=[ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["sub", "exp", "iat", "iss", "aud"]},
            )
        except jwt.PyJWTError as e:
            logger.info("access_token_rejected", error_type=type(e).__name__)
            raise AuthenticationError("Access token is invalid or expired.", code="invalid_access_token") from e

    def _ensure_configured(self) -> None:
        if not self.signing_key or not self.issuer or not self.audience:
            raise TokenConfigurationError()


def _all_grants(grants: AccessGrants) -> Iterable[RoleGrant]:
    return list(grants.direct_roles) + list(grants.group_roles)


def role_names(grants: AccessGrants) -> List[str]:
    """Sorted role names, de-duplicated ignoring case; ["User"] when empty."""
    unique: Dict[str, str] = {}
    for name in sorted(g.name.strip() for g in _all_grants(grants) if g.name and g.name.strip()):
        unique.setdefault(name.casefold(), name)
    return sorted(unique.values()) or [DEFAULT_ROLE]


def permission_names(grants: AccessGrants) -> List[str]:
    permissions = set()
    for grant in _all_grants(grants):
        permissions |= set(grant.permissions)
    return sorted(permissions)
