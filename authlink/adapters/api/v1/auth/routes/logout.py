from __future__ import annotations

"""Logout endpoint.

Revokes the session that owns the presented refresh token. Access tokens are
short-lived JWTs and are not tracked, so they remain valid until they expire.
"""

from fastapi import APIRouter, Response, status

from authlink.adapters.api.v1.auth.schemas import RefreshTokenRequest
from authlink.infrastructure.dependency_injection.auth_dependencies import SessionServiceDep

router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Revoke a refresh token",
    responses={
        204: {"description": "Session revoked"},
        401: {"description": "Refresh token is unknown"},
    },
)
async def logout_user(payload: RefreshTokenRequest, session_service: SessionServiceDep) -> Response:
    await session_service.revoke_by_refresh_token(payload.refresh_token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
