import uuid
from datetime import datetime, timedelta, timezone

from tests.factories import create_fake_session

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def test_session_is_active_until_expiry():
    session = create_fake_session(uuid.uuid4(), expires_at=NOW + timedelta(minutes=1))
    assert session.is_active(NOW) is True
    assert session.is_active(NOW + timedelta(minutes=1)) is False


def test_revoke_sets_flag_and_timestamp_together():
    session = create_fake_session(uuid.uuid4(), expires_at=NOW + timedelta(days=1))
    session.revoke(NOW)
    assert session.is_revoked is True
    assert session.revoked_at == NOW
    assert session.is_active(NOW) is False


def test_rotate_replaces_digest_and_clears_revocation():
    session = create_fake_session(uuid.uuid4(), refresh_token_hash="old", revoked_at=NOW)
    session.rotate("new", NOW + timedelta(days=30))
    assert session.refresh_token_hash == "new"
    assert session.expires_at == NOW + timedelta(days=30)
    assert session.is_revoked is False
    assert session.revoked_at is None
