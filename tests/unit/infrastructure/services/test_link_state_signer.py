"""Tests for the HMAC link-state signer: round trip, tampering, expiry and format errors."""

import base64
import uuid

import pytest

from authlink.core.exceptions import ConfigurationError, LinkStateError, LinkStateFailure
from authlink.domain.value_objects.external_provider import ExternalProvider
from authlink.infrastructure.services.authentication import HmacExternalLinkStateSigner

GOOGLE = ExternalProvider("google")
BASE64URL = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


def _decode(state: str) -> bytes:
    return base64.urlsafe_b64decode(state + "=" * (-len(state) % 4))


def _encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _reason(signer, state) -> LinkStateFailure:
    with pytest.raises(LinkStateError) as exc_info:
        signer.validate_state(state)
    return exc_info.value.reason


def test_round_trip(state_signer):
    user_id = uuid.uuid4()

    state = state_signer.create_state(user_id, GOOGLE)
    claims = state_signer.validate_state(state)

    assert claims.user_id == user_id
    assert claims.provider == GOOGLE
    assert "=" not in state


def test_states_are_unique(state_signer):
    user_id = uuid.uuid4()
    assert state_signer.create_state(user_id, GOOGLE) != state_signer.create_state(user_id, GOOGLE)


def test_wire_format(state_signer, clock):
    user_id = uuid.uuid4()
    parts = _decode(state_signer.create_state(user_id, GOOGLE)).decode("utf-8").split("|")

    assert len(parts) == 5
    assert parts[0] == str(user_id)
    assert parts[1] == "google"
    assert parts[2] == str(int(clock.now().timestamp()))
    assert len(parts[3]) == 32


# "apple" gives a state whose last character carries unused bits; "google" does not.
@pytest.mark.parametrize("provider", ["google", "apple"])
def test_every_modified_character_invalidates_the_signature(state_signer, provider):
    # Arrange
    state = state_signer.create_state(uuid.uuid4(), ExternalProvider(provider))
    outcomes = set()

    # Act
    for position, original in enumerate(state):
        for replacement in BASE64URL:
            if replacement == original:
                continue
            tampered = state[:position] + replacement + state[position + 1 :]
            outcomes.add(_reason(state_signer, tampered))

    # Assert
    assert outcomes == {LinkStateFailure.INVALID_SIGNATURE}


def test_separator_injected_into_signature_is_a_signature_failure(state_signer):
    raw = _decode(state_signer.create_state(uuid.uuid4(), GOOGLE))
    tampered = raw[:-10] + b"|" + raw[-9:]
    assert _reason(state_signer, _encode(tampered)) == LinkStateFailure.INVALID_SIGNATURE


def test_state_signed_with_another_key_is_rejected(state_signer, clock):
    other = HmacExternalLinkStateSigner("a-completely-different-signing-key", clock)
    state = other.create_state(uuid.uuid4(), GOOGLE)
    assert _reason(state_signer, state) == LinkStateFailure.INVALID_SIGNATURE


def test_state_is_valid_up_to_the_expiry_boundary(state_signer, clock):
    state = state_signer.create_state(uuid.uuid4(), GOOGLE)

    clock.advance(minutes=14)
    state_signer.validate_state(state)
    clock.advance(minutes=1)
    state_signer.validate_state(state)
    clock.advance(seconds=1)
    assert _reason(state_signer, state) == LinkStateFailure.EXPIRED


@pytest.mark.parametrize("state", ["", "   ", None])
def test_missing_state(state_signer, state):
    assert _reason(state_signer, state) == LinkStateFailure.MISSING


@pytest.mark.parametrize("state", ["***not base64***", _encode(b"no separator at all")])
def test_malformed_state(state_signer, state):
    assert _reason(state_signer, state) == LinkStateFailure.MALFORMED


@pytest.mark.parametrize(
    "payload",
    [
        b"only|three|parts",
        b"a|b|c|d|e",
        b"\xff\xfe|google|1700000000|nonce",
    ],
)
def test_signed_payload_with_wrong_shape_is_malformed(state_signer, payload):
    state = _encode(payload + b"|" + state_signer._sign(payload))
    assert _reason(state_signer, state) == LinkStateFailure.MALFORMED


def test_unsigned_extra_fields_are_a_signature_failure(state_signer):
    assert _reason(state_signer, _encode(b"a|b|c|d|e|f")) == LinkStateFailure.INVALID_SIGNATURE


def test_signed_payload_with_bad_user_id(state_signer):
    payload = f"not-a-uuid|google|1700000000|{uuid.uuid4().hex}".encode("utf-8")
    state = _encode(payload + b"|" + state_signer._sign(payload))
    assert _reason(state_signer, state) == LinkStateFailure.INVALID_USER_ID


def test_signed_payload_with_bad_timestamp(state_signer):
    payload = f"{uuid.uuid4()}|google|yesterday|{uuid.uuid4().hex}".encode("utf-8")
    state = _encode(payload + b"|" + state_signer._sign(payload))
    assert _reason(state_signer, state) == LinkStateFailure.MALFORMED


@pytest.mark.parametrize("key", ["", "   ", None])
def test_missing_key_is_a_configuration_error(clock, key):
    with pytest.raises(ConfigurationError):
        HmacExternalLinkStateSigner(key, clock)


def test_non_positive_expiry_falls_back_to_default(clock):
    signer = HmacExternalLinkStateSigner("key-key-key-key-key-key-key-key!", clock, expiry_minutes=0)
    state = signer.create_state(uuid.uuid4(), GOOGLE)
    clock.advance(minutes=15)
    signer.validate_state(state)
    clock.advance(seconds=1)
    assert _reason(signer, state) == LinkStateFailure.EXPIRED
