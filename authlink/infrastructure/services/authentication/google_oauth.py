"""OAuth2 authorization-code client for Google, built on authlib.

Talks to the three Google endpoints involved in linking an account:

- the authorization endpoint, which is only used to build the redirect URL
- the token endpoint (`authorization_code` and `refresh_token` grants through
  authlib's `AsyncOAuth2Client`, client credentials in the form body)
- the OpenID Connect user-info endpoint (`GET` with the access token as bearer)

Response keys are matched case-insensitively. Any non-2xx status, OAuth error
response, transport failure or unreadable body is reported as
`ExternalProviderError`; provider error details are logged but never surfaced
to callers. Nothing is retried.
"""

from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple

import httpx
import structlog
from authlib.integrations.base_client import OAuthError
from authlib.integrations.httpx_client import AsyncOAuth2Client
from authlib.oauth2.rfc6749.parameters import prepare_grant_uri

from authlink.core.config.auth import DEFAULT_GOOGLE_SCOPES
from authlink.core.exceptions import ConfigurationError, ExternalProviderError
from authlink.domain.interfaces.services import IExternalOAuthClient
from authlink.domain.value_objects.external_link import ExternalOAuthToken, ExternalOAuthUserProfile
from authlink.domain.value_objects.external_provider import ExternalProvider

logger = structlog.get_logger(__name__)

GOOGLE_AUTHORIZATION_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_ENDPOINT = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleOAuthClient(IExternalOAuthClient):
    """Google implementation of `IExternalOAuthClient`.

    Configuration is checked when the client is first used rather than when it
    is built, so an unconfigured provider fails the request that needs it and
    nothing else.

    Args:
        client_id: OAuth client id.
        client_secret: OAuth client secret.
        redirect_uri: Callback URL registered with Google.
        scopes: Scopes requested at authorization time.
        transport: Optional httpx transport, used by tests to stub Google.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: Optional[Iterable[str]] = None,
        authorization_endpoint: str = GOOGLE_AUTHORIZATION_ENDPOINT,
        token_endpoint: str = GOOGLE_TOKEN_ENDPOINT,
        userinfo_endpoint: str = GOOGLE_USERINFO_ENDPOINT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._scopes: Tuple[str, ...] = tuple(scopes) if scopes else tuple(DEFAULT_GOOGLE_SCOPES)
        self._authorization_endpoint = authorization_endpoint
        self._token_endpoint = token_endpoint
        self._userinfo_endpoint = userinfo_endpoint
        self._transport = transport
        self._timeout = timeout

    @property
    def provider(self) -> ExternalProvider:
        return ExternalProvider("google")

    @property
    def default_scopes(self) -> Tuple[str, ...]:
        return self._scopes

    def build_authorization_url(self, state: str) -> str:
        self._ensure_configured()
        return prepare_grant_uri(
            self._authorization_endpoint,
            client_id=self._client_id,
            response_type="code",
            redirect_uri=self._redirect_uri,
            scope=list(self._scopes),
            state=state,
            access_type="offline",
            prompt="consent",
            include_granted_scopes="true",
        )

    async def exchange_code(self, code: str) -> ExternalOAuthToken:
        self._ensure_configured()
        data = await self._token_request(
            lambda client: client.fetch_token(self._token_endpoint, code=code, grant_type="authorization_code")
        )
        return _parse_token(data)

    async def refresh_access_token(self, refresh_token: str) -> ExternalOAuthToken:
        """Uses the `refresh_token` grant.

        Google does not rotate refresh tokens, so when the response omits one the
        token passed in is returned in its place.
        """
        self._ensure_configured()
        data = await self._token_request(
            lambda client: client.refresh_token(self._token_endpoint, refresh_token=refresh_token)
        )
        token = _parse_token(data)
        if not token.refresh_token:
            token = ExternalOAuthToken(
                access_token=token.access_token,
                refresh_token=refresh_token,
                expires_in=token.expires_in,
                scope=token.scope,
                token_type=token.token_type,
            )
        return token

    async def get_user_profile(self, access_token: str) -> Optional[ExternalOAuthUserProfile]:
        bearer = {"access_token": access_token, "token_type": "Bearer"}
        try:
            async with self._session(token=bearer) as client:
                response = _check_response(await client.get(self._userinfo_endpoint))
        except (httpx.HTTPError, OAuthError, ValueError) as e:
            self._log_failure(self._userinfo_endpoint, e)
            raise ExternalProviderError() from e

        data = _lower_keys(response.json())
        subject = _as_str(data.get("sub")) or _as_str(data.get("id"))
        if not subject:
            return None
        return ExternalOAuthUserProfile(
            subject_id=subject,
            email=_as_str(data.get("email")),
            display_name=_as_str(data.get("name")),
        )

    def _session(self, **kwargs) -> AsyncOAuth2Client:
        client = AsyncOAuth2Client(
            client_id=self._client_id,
            client_secret=self._client_secret,
            token_endpoint_auth_method="client_secret_post",
            redirect_uri=self._redirect_uri,
            scope=list(self._scopes),
            transport=self._transport,
            timeout=self._timeout,
            **kwargs,
        )
        client.register_compliance_hook("access_token_response", _check_response)
        client.register_compliance_hook("refresh_token_response", _check_response)
        return client

    async def _token_request(self, grant: Callable[[AsyncOAuth2Client], Awaitable[Any]]) -> Dict[str, Any]:
        try:
            async with self._session() as client:
                token = await grant(client)
        except (httpx.HTTPError, OAuthError, ValueError) as e:
            self._log_failure(self._token_endpoint, e)
            raise ExternalProviderError() from e
        return _lower_keys(token)

    @staticmethod
    def _log_failure(url: str, error: Exception) -> None:
        if isinstance(error, httpx.HTTPStatusError):
            logger.warning(
                "oauth_provider_error_status",
                provider="google",
                url=url,
                status_code=error.response.status_code,
            )
        elif isinstance(error, OAuthError):
            logger.warning("oauth_provider_error_response", provider="google", url=url, error=error.error)
        elif isinstance(error, httpx.HTTPError):
            logger.warning("oauth_provider_unreachable", provider="google", url=url, error_type=type(error).__name__)
        else:
            logger.warning("oauth_provider_invalid_body", provider="google", url=url)

    def _ensure_configured(self) -> None:
        if not self._client_id or not self._client_secret or not self._redirect_uri:
            raise ConfigurationError("Google OAuth client is not configured.")


def _check_response(response: httpx.Response) -> httpx.Response:
    """Compliance hook: rejects error statuses and bodies that are not JSON objects."""
    response.raise_for_status()
    if not isinstance(response.json(), dict):
        raise ValueError("Provider response is not a JSON object.")
    return response


def _lower_keys(body: Dict[str, Any]) -> Dict[str, Any]:
    return {str(key).lower(): value for key, value in body.items()}


def _parse_token(data: Dict[str, Any]) -> ExternalOAuthToken:
    try:
        expires_in = int(data.get("expires_in") or 0)
    except (TypeError, ValueError):
        expires_in = 0
    return ExternalOAuthToken(
        access_token=_as_str(data.get("access_token")) or "",
        refresh_token=_as_str(data.get("refresh_token")),
        expires_in=expires_in,
        scope=_as_str(data.get("scope")),
        token_type=_as_str(data.get("token_type")),
    )


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
