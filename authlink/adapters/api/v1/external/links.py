"""External Account Linking Endpoints

Start, complete, list and remove links between a local user and a third-party
account. Start, list and unlink act on the bearer token's user. Complete is
called from the provider redirect and identifies the user through the signed
state instead, so it needs no bearer token.
"""

from typing import List

from fastapi import APIRouter, Response, status

from authlink.core.dependencies.auth import CurrentUser
from authlink.infrastructure.dependency_injection.auth_dependencies import ExternalLinkServiceDep

from .schemas import ExternalLinkCompleteRequest, ExternalLinkResponse, ExternalLinkStartResponse

router = APIRouter()


@router.get("", response_model=List[ExternalLinkResponse])
async def list_external_links(
    current_user: CurrentUser,
    link_service: ExternalLinkServiceDep,
) -> List[ExternalLinkResponse]:
    """List the caller's linked external accounts, ordered by provider."""
    views = await link_service.list_links(current_user.id)
    return [ExternalLinkResponse.from_view(view) for view in views]


@router.post(
    "/{provider}/start",
    response_model=ExternalLinkStartResponse,
    responses={
        400: {"description": "Unsupported provider"},
        403: {"description": "User is not available"},
    },
)
async def start_external_link(
    provider: str,
    current_user: CurrentUser,
    link_service: ExternalLinkServiceDep,
) -> ExternalLinkStartResponse:
    """Begin linking `provider` to the caller.

    Args:
        provider: Provider name, case-insensitive (e.g. ``google``).
        current_user: The authenticated user.
        link_service: The external link service.

    Returns:
        ExternalLinkStartResponse: The consent URL and the signed state it carries.
    """
    start = await link_service.start(current_user.id, provider)
    return ExternalLinkStartResponse.from_start(start)


@router.post(
    "/{provider}/complete",
    response_model=ExternalLinkResponse,
    responses={
        400: {"description": "Invalid state, provider mismatch or missing refresh token"},
        409: {"description": "External account is already linked"},
        502: {"description": "Provider request failed"},
    },
)
async def complete_external_link(
    provider: str,
    payload: ExternalLinkCompleteRequest,
    link_service: ExternalLinkServiceDep,
) -> ExternalLinkResponse:
    """Finish the authorization-code flow and store the encrypted provider tokens."""
    view = await link_service.complete(provider, payload.code, payload.state)
    return ExternalLinkResponse.from_view(view)


@router.delete(
    "/{provider}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"description": "No link exists for this provider"}},
)
async def unlink_external_account(
    provider: str,
    current_user: CurrentUser,
    link_service: ExternalLinkServiceDep,
) -> Response:
    await link_service.unlink(current_user.id, provider)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
