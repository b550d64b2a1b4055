"""Endpoints for listing and revoking the caller's refresh-token sessions."""

import uuid
from typing import List

from fastapi import APIRouter, Response, status

from authlink.core.dependencies.auth import CurrentUser
from authlink.infrastructure.dependency_injection.auth_dependencies import SessionServiceDep

from .schemas import SessionResponse

router = APIRouter()


@router.get("", response_model=List[SessionResponse])
async def list_sessions(current_user: CurrentUser, session_service: SessionServiceDep) -> List[SessionResponse]:
    sessions = await session_service.list_sessions(current_user.id)
    return [SessionResponse.from_entity(session) for session in sessions]


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"description": "Session not found"}},
)
async def revoke_session(
    session_id: uuid.UUID,
    current_user: CurrentUser,
    session_service: SessionServiceDep,
) -> Response:
    """Revoke one of the caller's sessions. Revoking an already revoked session succeeds."""
    await session_service.revoke_session(current_user.id, session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
