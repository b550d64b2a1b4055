"""Value objects produced by the authentication flows."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Tuple


@dataclass(frozen=True)
class RoleGrant:
    """A role held by a user together with the permissions it carries."""

    name: str
    permissions: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class AccessGrants:
    """Roles assigned to a user directly and through group membership."""

    direct_roles: Tuple[RoleGrant, ...] = ()
    group_roles: Tuple[RoleGrant, ...] = ()


@dataclass(frozen=True)
class IssuedAccessToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class AuthTokens:
    """The token pair returned by login and refresh.

    `refresh_token` is the only copy of the raw refresh token; the server keeps
    just its digest.
    """

    access_token: str
    access_token_expires_at: datetime
    refresh_token: str
    refresh_token_expires_at: datetime
    token_type: str = "bearer"
