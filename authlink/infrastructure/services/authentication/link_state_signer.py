"""HMAC-signed `state` values for the external account link flow.

The state binds an OAuth round trip to the local user who started it, so the
callback can be completed without a server-side session. Wire format:

    payload   = "{user_id}|{provider}|{issued_at_unix}|{nonce}"
    signature = base64(HMAC-SHA256(key, payload))
    state     = base64url_unpadded(payload + "|" + signature)

The signature is split off the decoded bytes and checked before the payload is
decoded as text or split into fields, so changing any character of a state is
reported as a signature failure rather than as whichever field happened to
break. A state that is not the canonical encoding of its bytes counts as
tampered too.
"""

import base64
import binascii
import hashlib
import hmac
import uuid
from datetime import datetime, timedelta, timezone

import structlog

from authlink.core.exceptions import ConfigurationError, LinkStateError, LinkStateFailure
from authlink.domain.interfaces.services import IClock, IExternalLinkStateSigner
from authlink.domain.value_objects.external_link import LinkStateClaims
from authlink.domain.value_objects.external_provider import ExternalProvider

logger = structlog.get_logger(__name__)

DEFAULT_EXPIRY_MINUTES = 15
_SEPARATOR = b"|"


class HmacExternalLinkStateSigner(IExternalLinkStateSigner):
    """Creates and validates signed link states.

    Args:
        signing_key: Secret used for the HMAC. Must not be blank.
        clock: Source of the issue and validation times.
        expiry_minutes: How long a state stays valid. Non-positive values fall
            back to 15 minutes.

    Raises:
        ConfigurationError: If `signing_key` is missing or blank.
    """

    def __init__(self, signing_key: str, clock: IClock, expiry_minutes: int = DEFAULT_EXPIRY_MINUTES):
        if not signing_key or not signing_key.strip():
            raise ConfigurationError("External link state signing key is missing.")
        self._key = signing_key.encode("utf-8")
        self._clock = clock
        self._expiry = timedelta(minutes=expiry_minutes if expiry_minutes > 0 else DEFAULT_EXPIRY_MINUTES)

    def create_state(self, user_id: uuid.UUID, provider: ExternalProvider) -> str:
        issued_at = int(self._clock.now().timestamp())
        payload = "|".join([str(user_id), provider.value, str(issued_at), uuid.uuid4().hex]).encode("utf-8")
        return _encode(payload + _SEPARATOR + self._sign(payload))

    def validate_state(self, state: str) -> LinkStateClaims:
        if not state or not state.strip():
            raise LinkStateError(LinkStateFailure.MISSING)

        state = state.strip()
        raw = _decode(state)
        payload, separator, signature = raw.rpartition(_SEPARATOR)
        if not separator:
            raise LinkStateError(LinkStateFailure.MALFORMED)
        if not hmac.compare_digest(self._sign(payload), signature) or _encode(raw) != state:
            logger.warning("link_state_signature_mismatch")
            raise LinkStateError(LinkStateFailure.INVALID_SIGNATURE)

        try:
            parts = payload.decode("utf-8").split("|")
        except UnicodeDecodeError:
            raise LinkStateError(LinkStateFailure.MALFORMED)
        if len(parts) != 4:
            raise LinkStateError(LinkStateFailure.MALFORMED)

        raw_user_id, raw_provider, raw_issued_at, _nonce = parts
        try:
            user_id = uuid.UUID(raw_user_id)
        except ValueError:
            raise LinkStateError(LinkStateFailure.INVALID_USER_ID)

        try:
            provider = ExternalProvider(raw_provider)
            issued_at = datetime.fromtimestamp(int(raw_issued_at), tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            raise LinkStateError(LinkStateFailure.MALFORMED)

        if self._clock.now() > issued_at + self._expiry:
            raise LinkStateError(LinkStateFailure.EXPIRED)

        return LinkStateClaims(user_id=user_id, provider=provider)

    def _sign(self, payload: bytes) -> bytes:
        return base64.b64encode(hmac.new(self._key, payload, hashlib.sha256).digest())


def _encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _decode(state: str) -> bytes:
    padded = state + "=" * (-len(state) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError):
        raise LinkStateError(LinkStateFailure.MALFORMED)
