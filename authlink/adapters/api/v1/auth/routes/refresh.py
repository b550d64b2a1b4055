"""Refresh-token rotation endpoint."""

from fastapi import APIRouter, status

from authlink.adapters.api.v1.auth.schemas import RefreshTokenRequest, TokenResponse
from authlink.infrastructure.dependency_injection.auth_dependencies import AuthenticationServiceDep

router = APIRouter()


@router.post(
    "",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Rotate a refresh token",
    description=(
        "Exchanges a refresh token for a new access token and a new refresh token. "
        "The presented refresh token stops working immediately."
    ),
)
async def refresh_tokens(payload: RefreshTokenRequest, auth_service: AuthenticationServiceDep) -> TokenResponse:
    tokens = await auth_service.refresh_token(payload.refresh_token)
    return TokenResponse.from_tokens(tokens)
