from __future__ import annotations

from typing import Annotated
import uuid

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from structlog import get_logger

from authlink.core.exceptions import AuthenticationError
from authlink.domain.entities.user import User
from authlink.domain.interfaces.repositories import IUserRepository
from authlink.domain.services.auth.jwt_issuer import JwtTokenIssuer
from authlink.infrastructure.dependency_injection.auth_dependencies import (
    get_token_issuer,
    get_user_repository,
)

__all__ = ["get_current_user", "CurrentUser"]

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Type-annotated dependency shortcuts
# ---------------------------------------------------------------------------


TokenStr = Annotated[str, Depends(OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login"))]


# ---------------------------------------------------------------------------
# Public dependencies
# ---------------------------------------------------------------------------


async def get_current_user(  # noqa: D401
    token: TokenStr,
    token_issuer: Annotated[JwtTokenIssuer, Depends(get_token_issuer)],
    user_repository: Annotated[IUserRepository, Depends(get_user_repository)],
) -> User:
    """Return the authenticated :class:`~authlink.domain.entities.user.User`.

    Verifies the bearer JWT and loads the user named by its `sub` claim.
    Deleted or locked users are rejected even while their token is unexpired.
    """
    claims = token_issuer.decode(token)
    try:
        user_id = uuid.UUID(str(claims.get("sub")))
    except ValueError:
        raise AuthenticationError("Access token is invalid or expired.", code="invalid_access_token")

    user = await user_repository.get_by_id(user_id)
    if user is None or not user.is_active:
        logger.info("bearer_user_unavailable", user_id=str(user_id))
        raise AuthenticationError("Access token is invalid or expired.", code="invalid_access_token")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
