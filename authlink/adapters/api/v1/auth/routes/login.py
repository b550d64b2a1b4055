"""Login endpoint.

Authenticates a user by username or email and returns an access token together
with a refresh token bound to a new session. All decisions are made by
`AuthenticationService`; failures surface as `InvalidCredentialsError`, which
the exception handlers turn into a 401 with a generic message.
"""

import structlog
from fastapi import APIRouter, Request, status

from authlink.adapters.api.v1.auth.schemas import LoginRequest, TokenResponse
from authlink.adapters.api.v1.auth.utils import client_context
from authlink.core.logging import mask_identifier
from authlink.infrastructure.dependency_injection.auth_dependencies import AuthenticationServiceDep

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Authenticate a user",
    description="Authenticates with username or email and password, and opens a refresh-token session.",
)
async def login_user(
    request: Request,
    payload: LoginRequest,
    auth_service: AuthenticationServiceDep,
) -> TokenResponse:
    """Authenticate a user and issue a token pair.

    Args:
        request (Request): Used for the client IP and User-Agent recorded with the attempt.
        payload (LoginRequest): Identifier, password and optional device name.
        auth_service (AuthenticationService): Domain authentication service.

    Returns:
        TokenResponse: Access token, refresh token and their expiry instants.

    Raises:
        InvalidCredentialsError: Unknown user, locked or deleted account, or wrong password.
    """
    ip_address, user_agent = client_context(request)
    logger.debug("login_requested", identifier=mask_identifier(payload.identifier))
    tokens = await auth_service.login(
        payload.identifier,
        payload.password,
        ip_address=ip_address,
        user_agent=user_agent,
        device_name=payload.device_name,
    )
    return TokenResponse.from_tokens(tokens)
