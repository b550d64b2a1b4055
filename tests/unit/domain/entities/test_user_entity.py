from authlink.domain.entities.user import normalize_identifier
from tests.factories import create_fake_user


def test_normalize_identifier_trims_and_upper_cases():
    assert normalize_identifier("  Alice@Example.com ") == "ALICE@EXAMPLE.COM"


def test_is_active_reflects_lock_and_deletion():
    assert create_fake_user().is_active is True
    assert create_fake_user(is_locked=True).is_active is False
    assert create_fake_user(is_deleted=True).is_active is False


def test_failed_access_counter():
    user = create_fake_user()
    user.register_failed_access()
    user.register_failed_access()
    assert user.access_failed_count == 2
    user.reset_failed_access()
    assert user.access_failed_count == 0


def test_clear_password_reset():
    user = create_fake_user(password_reset_token="abc")
    user.clear_password_reset()
    assert user.password_reset_token is None
    assert user.password_reset_token_expires_at is None
