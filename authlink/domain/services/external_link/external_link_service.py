"""Linking local users to accounts at external OAuth providers.

A link moves through three states:

    NotLinked --start--> LinkStarted (signed state issued) --complete--> Linked
    Linked --unlink--> NotLinked

`start` needs an authenticated caller. `complete` runs on the provider's
redirect and has no caller identity of its own: the user is recovered from the
signed state, which is why the state's signature and expiry are the security
boundary of the whole flow.

Provider tokens only ever reach storage through the token protector.
"""

import uuid
from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from structlog import get_logger

from authlink.core.exceptions import (
    ExternalAccountConflictError,
    ExternalLinkError,
    ExternalLinkNotFoundError,
    ExternalProviderError,
    MissingRefreshTokenError,
    ProviderMismatchError,
    UnsupportedProviderError,
    UserUnavailableError,
    ValidationError,
)
from authlink.core.logging import mask_identifier
from authlink.domain.entities.external_identity import ExternalIdentity
from authlink.domain.entities.external_token import ExternalToken
from authlink.domain.entities.user import User
from authlink.domain.interfaces.repositories import IExternalLinkRepository, IUserRepository
from authlink.domain.interfaces.services import (
    IClock,
    IExternalLinkStateSigner,
    IExternalOAuthClient,
    ITokenProtector,
)
from authlink.domain.value_objects.external_link import (
    ExternalAccessToken,
    ExternalLinkStart,
    ExternalLinkView,
)
from authlink.domain.value_objects.external_provider import ExternalProvider, ExternalSubjectId

logger = get_logger(__name__)

REFRESH_SKEW = timedelta(seconds=60)


class ExternalLinkService:
    """Runs the OAuth2 authorization-code flow that links external accounts.

    Attributes:
        user_repository (IUserRepository): Resolves the acting user.
        link_repository (IExternalLinkRepository): Identities and their tokens.
        state_signer (IExternalLinkStateSigner): Issues and checks `state`.
        token_protector (ITokenProtector): Encrypts provider tokens at rest.
        clock (IClock): Source of link and expiry times.
        oauth_clients (Dict[str, IExternalOAuthClient]): One client per
            supported provider, keyed by normalized provider name.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        link_repository: IExternalLinkRepository,
        state_signer: IExternalLinkStateSigner,
        oauth_clients: Iterable[IExternalOAuthClient],
        token_protector: ITokenProtector,
        clock: IClock,
    ):
        self.user_repository = user_repository
        self.link_repository = link_repository
        self.state_signer = state_signer
        self.token_protector = token_protector
        self.clock = clock
        self.oauth_clients: Dict[str, IExternalOAuthClient] = {
            client.provider.value: client for client in oauth_clients
        }

    async def start(self, user_id: uuid.UUID, provider: str) -> ExternalLinkStart:
        """Issues a signed state and the provider URL the user is sent to.

        Raises:
            UnsupportedProviderError: If no client is configured for `provider`.
            UserUnavailableError: If the user is missing, deleted or locked.
        """
        external_provider, client = self._resolve(provider)
        user = await self._active_user(user_id)

        state = self.state_signer.create_state(user.id, external_provider)
        authorization_url = client.build_authorization_url(state)
        logger.info("external_link_started", user_id=str(user.id), provider=external_provider.value)
        return ExternalLinkStart(
            authorization_url=authorization_url,
            state=state,
            provider=external_provider.value,
        )

    async def complete(self, provider: str, code: str, state: str) -> ExternalLinkView:
        """Finishes a link after the provider redirected back with `code` and `state`.

        Nothing is written unless every check passes. The identity and the
        encrypted tokens are then saved together.

        Raises:
            UnsupportedProviderError: Unknown provider.
            ValidationError: Blank authorization code.
            LinkStateError: Missing, malformed, forged or expired state.
            ProviderMismatchError: The state was issued for another provider.
            UserUnavailableError: The user bound to the state cannot link.
            ExternalProviderError: The provider failed, returned no access
                token, or returned a profile without a subject.
            ExternalAccountConflictError: The subject belongs to another user,
                or the user already linked a different subject.
            MissingRefreshTokenError: No refresh token returned and none stored.
        """
        external_provider, client = self._resolve(provider)
        if not code or not code.strip():
            raise ValidationError("Authorization code is required.")

        claims = self.state_signer.validate_state(state)
        if claims.provider != external_provider:
            logger.warning(
                "external_link_provider_mismatch",
                requested=external_provider.value,
                bound=claims.provider.value,
            )
            raise ProviderMismatchError()

        user = await self._active_user(claims.user_id)

        oauth_token = await client.exchange_code(code.strip())
        if not oauth_token.access_token:
            raise ExternalProviderError("Access token was not returned by the provider.")

        profile = await client.get_user_profile(oauth_token.access_token)
        if profile is None or not profile.subject_id or not profile.subject_id.strip():
            raise ExternalProviderError("External profile information is missing.")
        subject = ExternalSubjectId(profile.subject_id)

        linked_to_subject = await self.link_repository.get_identity_by_subject(
            external_provider.value, subject.value
        )
        if linked_to_subject is not None and linked_to_subject.user_id != user.id:
            logger.warning(
                "external_subject_linked_elsewhere",
                user_id=str(user.id),
                provider=external_provider.value,
                subject=mask_identifier(subject.value),
            )
            raise ExternalAccountConflictError("External account is already linked to another user.")

        identity = await self.link_repository.get_identity(user.id, external_provider.value)
        if identity is not None and identity.subject_id != subject.value:
            raise ExternalAccountConflictError("A different external account is already linked.")

        stored_token = await self.link_repository.get_token(user.id, external_provider.value)
        refresh_token = oauth_token.refresh_token
        if not refresh_token:
            if stored_token is None or not stored_token.refresh_token:
                raise MissingRefreshTokenError()
            refresh_token = self.token_protector.unprotect(stored_token.refresh_token)

        if oauth_token.scope:
            scopes = oauth_token.scope
        elif stored_token is not None and stored_token.scopes:
            scopes = stored_token.scopes
        else:
            scopes = " ".join(client.default_scopes)

        now = self.clock.now()
        if identity is None:
            identity = ExternalIdentity(
                user_id=user.id,
                provider=external_provider.value,
                subject_id=subject.value,
                linked_at=now,
            )
        identity.email = profile.email
        identity.display_name = profile.display_name

        if stored_token is None:
            stored_token = ExternalToken(
                user_id=user.id,
                provider=external_provider.value,
                access_token="",
                refresh_token="",
                expires_at=now,
                updated_at=now,
            )
        stored_token.access_token = self.token_protector.protect(oauth_token.access_token)
        stored_token.refresh_token = self.token_protector.protect(refresh_token)
        stored_token.expires_at = now + timedelta(seconds=oauth_token.expires_in)
        stored_token.scopes = scopes
        stored_token.updated_at = now

        await self.link_repository.save_link(identity, stored_token)
        logger.info(
            "external_link_completed",
            user_id=str(user.id),
            provider=external_provider.value,
            subject=mask_identifier(subject.value),
        )
        return _view(identity)

    async def unlink(self, user_id: uuid.UUID, provider: str) -> None:
        """Removes the identity and tokens for `provider`.

        Raises:
            UserUnavailableError: If the user is missing, deleted or locked.
            ExternalLinkNotFoundError: If neither an identity nor a token exists.
        """
        external_provider = _parse_provider(provider)
        user = await self._active_user(user_id)

        identity = await self.link_repository.get_identity(user.id, external_provider.value)
        token = await self.link_repository.get_token(user.id, external_provider.value)
        if identity is None and token is None:
            raise ExternalLinkNotFoundError()

        await self.link_repository.delete_link(identity, token)
        logger.info("external_link_removed", user_id=str(user.id), provider=external_provider.value)

    async def list_links(self, user_id: uuid.UUID, provider: Optional[str] = None) -> List[ExternalLinkView]:
        provider_value = _parse_provider(provider).value if provider else None
        identities = await self.link_repository.list_identities(user_id, provider_value)
        return [_view(identity) for identity in sorted(identities, key=lambda i: i.provider)]

    async def get_access_token(
        self, user_id: uuid.UUID, provider: str, required_scope: Optional[str] = None
    ) -> ExternalAccessToken:
        """Returns a usable provider access token, refreshing it when close to expiry.

        Raises:
            UnsupportedProviderError: Unknown provider.
            UserUnavailableError: The user cannot act.
            ExternalLinkNotFoundError: The provider is not linked.
            ExternalLinkError: `required_scope` was not granted.
            ExternalProviderError: The refresh grant failed.
        """
        external_provider, client = self._resolve(provider)
        user = await self._active_user(user_id)

        token = await self.link_repository.get_token(user.id, external_provider.value)
        if token is None or not token.access_token:
            raise ExternalLinkNotFoundError()

        if required_scope and required_scope.lower() not in {s.lower() for s in token.scope_list}:
            raise ExternalLinkError("Required scope has not been granted.", code="missing_scope")

        now = self.clock.now()
        if token.expires_at <= now + REFRESH_SKEW:
            if not token.refresh_token:
                raise MissingRefreshTokenError()
            refreshed = await client.refresh_access_token(self.token_protector.unprotect(token.refresh_token))
            if not refreshed.access_token:
                raise ExternalProviderError("Failed to refresh access token.")
            token.access_token = self.token_protector.protect(refreshed.access_token)
            if refreshed.refresh_token:
                token.refresh_token = self.token_protector.protect(refreshed.refresh_token)
            token.expires_at = now + timedelta(seconds=refreshed.expires_in)
            if refreshed.scope:
                token.scopes = refreshed.scope
            token.updated_at = now
            await self.link_repository.save_token(token)
            logger.info("external_access_token_refreshed", user_id=str(user.id), provider=external_provider.value)

        return ExternalAccessToken(
            provider=external_provider.value,
            access_token=self.token_protector.unprotect(token.access_token),
            expires_at=token.expires_at,
            scopes=tuple(token.scope_list),
        )

    def _resolve(self, provider: str):
        external_provider = _parse_provider(provider)
        client = self.oauth_clients.get(external_provider.value)
        if client is None:
            raise UnsupportedProviderError()
        return external_provider, client

    async def _active_user(self, user_id: uuid.UUID) -> User:
        user = await self.user_repository.get_by_id(user_id)
        if user is None or not user.is_active:
            raise UserUnavailableError()
        return user


def _parse_provider(provider: Optional[str]) -> ExternalProvider:
    try:
        return ExternalProvider(provider)
    except ValueError:
        raise UnsupportedProviderError()


def _view(identity: ExternalIdentity) -> ExternalLinkView:
    return ExternalLinkView(
        provider=identity.provider,
        subject_id=identity.subject_id,
        email=identity.email,
        display_name=identity.display_name,
        linked_at=identity.linked_at,
    )
