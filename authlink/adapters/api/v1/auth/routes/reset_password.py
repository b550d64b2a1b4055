"""Password reset endpoint.

Consumes a reset token previously stored on the user and sets a new password.
A successful reset also clears the lockout state.
"""

from fastapi import APIRouter, status

from authlink.adapters.api.v1.auth.schemas import MessageResponse, ResetPasswordRequest
from authlink.infrastructure.dependency_injection.auth_dependencies import AuthenticationServiceDep

router = APIRouter()


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Reset a password with a reset token",
    responses={
        200: {"description": "Password updated"},
        400: {"description": "Unknown user, or invalid or expired reset token"},
    },
)
async def reset_password(payload: ResetPasswordRequest, auth_service: AuthenticationServiceDep) -> MessageResponse:
    await auth_service.reset_password(payload.email, payload.reset_token, payload.new_password)
    return MessageResponse(message="Password has been reset.")
