"""User registration endpoint."""

from fastapi import APIRouter, status

from authlink.adapters.api.v1.auth.schemas import RegisterRequest, RegisterResponse
from authlink.infrastructure.dependency_injection.auth_dependencies import AuthenticationServiceDep

router = APIRouter()


@router.post(
    "",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    responses={
        201: {"description": "User created"},
        409: {"description": "Username or email already exists"},
        422: {"description": "Validation error"},
    },
)
async def register_user(payload: RegisterRequest, auth_service: AuthenticationServiceDep) -> RegisterResponse:
    user_id = await auth_service.register(payload.username, payload.email, payload.password)
    return RegisterResponse(user_id=user_id)
