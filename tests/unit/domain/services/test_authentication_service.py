"""Unit tests for `AuthenticationService`: login, refresh, register and reset password."""

import asyncio
import uuid
from datetime import timedelta

import jwt
import pytest

from authlink.core.exceptions import (
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    PasswordResetError,
    ValidationError,
)
from authlink.domain.services.auth.authentication_service import (
    INVALID_PASSWORD,
    JWT_CONFIGURATION_MISSING,
    USER_NOT_FOUND_OR_LOCKED,
    AuthenticationService,
)
from authlink.domain.services.auth.jwt_issuer import JwtTokenIssuer
from authlink.domain.services.auth.login_attempts import LoginAttemptRecorder
from authlink.domain.value_objects.tokens import AccessGrants, RoleGrant
from tests.utils.keys import TEST_JWT_AUDIENCE, TEST_JWT_ISSUER, TEST_JWT_SIGNING_KEY
from tests.factories.user import create_fake_user


@pytest.fixture
def alice(user_repository, password_hasher):
    user = create_fake_user(
        username="alice",
        email="alice@example.com",
        password="CorrectHorse1!",
        password_hasher=password_hasher,
    )
    user_repository.users[user.id] = user
    return user


def _decode(token: str) -> dict:
    return jwt.decode(token, TEST_JWT_SIGNING_KEY, algorithms=["HS256"], audience=TEST_JWT_AUDIENCE)


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_by_username_issues_tokens_and_session(
        self, auth_service, alice, session_repository, attempt_repository, clock
    ):
        # Act
        tokens = await auth_service.login("alice", "CorrectHorse1!", ip_address="10.0.0.1", user_agent="pytest")

        # Assert
        claims = _decode(tokens.access_token)
        assert claims["sub"] == str(alice.id)
        assert claims["iss"] == TEST_JWT_ISSUER
        assert claims["roles"] == ["User"]
        assert tokens.token_type == "bearer"
        assert tokens.refresh_token_expires_at == clock.now() + timedelta(days=30)

        assert len(session_repository.sessions) == 1
        session = next(iter(session_repository.sessions.values()))
        assert session.user_id == alice.id
        assert session.refresh_token_hash != tokens.refresh_token
        assert session.ip_address == "10.0.0.1"

        assert len(attempt_repository.attempts) == 1
        attempt = attempt_repository.attempts[0]
        assert attempt.is_successful is True
        assert attempt.user_id == alice.id
        assert attempt.failure_reason is None

    @pytest.mark.asyncio
    async def test_login_by_email_is_case_insensitive(self, auth_service, alice):
        tokens = await auth_service.login("  ALICE@Example.COM ", "CorrectHorse1!")
        assert _decode(tokens.access_token)["email"] == "alice@example.com"

    @pytest.mark.asyncio
    async def test_wrong_password_increments_counter_and_records_reason(
        self, auth_service, alice, attempt_repository, session_repository
    ):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await auth_service.login("alice", "wrong")

        assert exc_info.value.message == "Invalid username or password."
        assert alice.access_failed_count == 1
        assert session_repository.sessions == {}
        attempt = attempt_repository.attempts[-1]
        assert attempt.is_successful is False
        assert attempt.user_id == alice.id
        assert attempt.failure_reason == INVALID_PASSWORD

    @pytest.mark.asyncio
    async def test_successful_login_resets_failure_counter(self, auth_service, alice):
        alice.access_failed_count = 3
        await auth_service.login("alice", "CorrectHorse1!")
        assert alice.access_failed_count == 0

    @pytest.mark.asyncio
    async def test_unknown_user_fails_with_generic_message(self, auth_service, attempt_repository):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await auth_service.login("nobody", "whatever")

        assert exc_info.value.message == "Invalid username or password."
        attempt = attempt_repository.attempts[-1]
        assert attempt.user_id is None
        assert attempt.identifier == "nobody"
        assert attempt.failure_reason == USER_NOT_FOUND_OR_LOCKED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("flag", ["is_locked", "is_deleted"])
    async def test_locked_or_deleted_user_cannot_login(self, auth_service, alice, attempt_repository, flag):
        setattr(alice, flag, True)

        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("alice", "CorrectHorse1!")

        assert attempt_repository.attempts[-1].failure_reason == USER_NOT_FOUND_OR_LOCKED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("identifier, password", [("", "x"), ("   ", "x"), ("alice", "")])
    async def test_blank_credentials_fail_without_audit(
        self, auth_service, attempt_repository, identifier, password
    ):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(identifier, password)
        assert attempt_repository.attempts == []

    @pytest.mark.asyncio
    async def test_missing_jwt_configuration_is_a_failed_attempt(
        self,
        alice,
        user_repository,
        session_repository,
        attempt_repository,
        password_hasher,
        refresh_token_hasher,
        clock,
    ):
        # Arrange
        service = AuthenticationService(
            user_repository=user_repository,
            session_repository=session_repository,
            login_attempts=LoginAttemptRecorder(attempt_repository, clock),
            password_hasher=password_hasher,
            refresh_token_hasher=refresh_token_hasher,
            token_issuer=JwtTokenIssuer("", TEST_JWT_ISSUER, TEST_JWT_AUDIENCE, clock),
            clock=clock,
        )

        # Act & Assert
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await service.login("alice", "CorrectHorse1!")

        assert exc_info.value.message == "Invalid username or password."
        assert session_repository.sessions == {}
        assert attempt_repository.attempts[-1].failure_reason == JWT_CONFIGURATION_MISSING

    @pytest.mark.asyncio
    async def test_claims_carry_direct_and_group_grants(self, auth_service, alice, user_repository):
        user_repository.grants[alice.id] = AccessGrants(
            direct_roles=(RoleGrant("Admin", frozenset({"users.read", "users.write"})),),
            group_roles=(
                RoleGrant("Auditor", frozenset({"audit.read"})),
                RoleGrant("admin", frozenset({"users.read"})),
            ),
        )

        tokens = await auth_service.login("alice", "CorrectHorse1!")

        claims = _decode(tokens.access_token)
        assert claims["roles"] == ["Admin", "Auditor"]
        assert claims["permissions"] == ["audit.read", "users.read", "users.write"]


class TestRefreshToken:
    @pytest.mark.asyncio
    async def test_refresh_rotates_token_in_place(self, auth_service, alice, session_repository):
        # Arrange
        first = await auth_service.login("alice", "CorrectHorse1!")
        session_id = next(iter(session_repository.sessions))

        # Act
        second = await auth_service.refresh_token(first.refresh_token)

        # Assert
        assert second.refresh_token != first.refresh_token
        assert list(session_repository.sessions) == [session_id]
        assert _decode(second.access_token)["sub"] == str(alice.id)

        with pytest.raises(InvalidRefreshTokenError):
            await auth_service.refresh_token(first.refresh_token)

    @pytest.mark.asyncio
    async def test_unknown_refresh_token_is_rejected(self, auth_service):
        with pytest.raises(InvalidRefreshTokenError) as exc_info:
            await auth_service.refresh_token("not-a-real-token")
        assert exc_info.value.message == "Refresh token is invalid or expired."

    @pytest.mark.asyncio
    async def test_revoked_session_is_rejected(self, auth_service, alice, session_repository, clock):
        tokens = await auth_service.login("alice", "CorrectHorse1!")
        next(iter(session_repository.sessions.values())).revoke(clock.now())

        with pytest.raises(InvalidRefreshTokenError):
            await auth_service.refresh_token(tokens.refresh_token)

    @pytest.mark.asyncio
    async def test_expired_session_is_revoked_lazily(self, auth_service, alice, session_repository, clock):
        tokens = await auth_service.login("alice", "CorrectHorse1!")
        clock.advance(days=30)

        with pytest.raises(InvalidRefreshTokenError):
            await auth_service.refresh_token(tokens.refresh_token)

        session = next(iter(session_repository.sessions.values()))
        assert session.is_revoked is True
        assert session.revoked_at == clock.now()

    @pytest.mark.asyncio
    async def test_session_of_locked_user_is_revoked(self, auth_service, alice, session_repository):
        tokens = await auth_service.login("alice", "CorrectHorse1!")
        alice.is_locked = True

        with pytest.raises(InvalidRefreshTokenError):
            await auth_service.refresh_token(tokens.refresh_token)

        assert next(iter(session_repository.sessions.values())).is_revoked is True

    @pytest.mark.asyncio
    async def test_concurrent_refresh_with_same_token_rotates_once(self, auth_service, alice, session_repository):
        # Arrange
        tokens = await auth_service.login("alice", "CorrectHorse1!")

        # Act
        results = await asyncio.gather(
            auth_service.refresh_token(tokens.refresh_token),
            auth_service.refresh_token(tokens.refresh_token),
            return_exceptions=True,
        )

        # Assert
        winners = [r for r in results if not isinstance(r, Exception)]
        losers = [r for r in results if isinstance(r, Exception)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert isinstance(losers[0], InvalidRefreshTokenError)
        with pytest.raises(InvalidRefreshTokenError):
            await auth_service.refresh_token(tokens.refresh_token)
        assert (await auth_service.refresh_token(winners[0].refresh_token)).refresh_token

    @pytest.mark.asyncio
    async def test_rotation_hash_collision_maps_to_invalid_token(self, auth_service, alice, session_repository):
        tokens = await auth_service.login("alice", "CorrectHorse1!")
        session_repository.fail_next_rotate = True

        with pytest.raises(InvalidRefreshTokenError):
            await auth_service.refresh_token(tokens.refresh_token)


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_creates_user_with_hashed_password(self, auth_service, user_repository, password_hasher):
        user_id = await auth_service.register(" bob ", "Bob@Example.com", "s3cret!")

        assert isinstance(user_id, uuid.UUID)
        user = user_repository.users[user_id]
        assert user.username == "bob"
        assert user.normalized_username == "BOB"
        assert user.normalized_email == "BOB@EXAMPLE.COM"
        assert user.password_hash != "s3cret!"
        assert password_hasher.verify_password("s3cret!", user.password_hash)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "username, email",
        [("ALICE", "other@example.com"), ("someone", "Alice@EXAMPLE.com")],
    )
    async def test_case_insensitive_collision_is_rejected(self, auth_service, alice, username, email):
        with pytest.raises(DuplicateUserError) as exc_info:
            await auth_service.register(username, email, "pw")
        assert exc_info.value.message == "Username or email already exists."

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "username, email, password",
        [("", "a@example.com", "pw"), ("bob", "  ", "pw"), ("bob", "b@example.com", "")],
    )
    async def test_blank_fields_are_rejected(self, auth_service, user_repository, username, email, password):
        with pytest.raises(ValidationError):
            await auth_service.register(username, email, password)
        assert user_repository.users == {}


class TestResetPassword:
    @pytest.mark.asyncio
    async def test_reset_sets_password_and_clears_lockout(self, auth_service, alice, clock, password_hasher):
        # Arrange
        alice.is_locked = True
        alice.access_failed_count = 5
        alice.password_reset_token = "reset-123"
        alice.password_reset_token_expires_at = clock.now() + timedelta(hours=1)

        # Act
        await auth_service.reset_password("alice@example.com", "reset-123", "N3wPassword!")

        # Assert
        assert password_hasher.verify_password("N3wPassword!", alice.password_hash)
        assert alice.is_locked is False
        assert alice.access_failed_count == 0
        assert alice.password_reset_token is None
        assert alice.password_reset_token_expires_at is None
        tokens = await auth_service.login("alice", "N3wPassword!")
        assert tokens.access_token

    @pytest.mark.asyncio
    async def test_reset_token_is_single_use(self, auth_service, alice):
        alice.password_reset_token = "reset-123"
        await auth_service.reset_password("alice@example.com", "reset-123", "first")

        with pytest.raises(PasswordResetError) as exc_info:
            await auth_service.reset_password("alice@example.com", "reset-123", "second")
        assert exc_info.value.message == "Reset token is invalid."

    @pytest.mark.asyncio
    async def test_wrong_token_is_rejected(self, auth_service, alice):
        alice.password_reset_token = "reset-123"
        with pytest.raises(PasswordResetError, match="Reset token is invalid."):
            await auth_service.reset_password("alice@example.com", "reset-999", "pw")

    @pytest.mark.asyncio
    async def test_expired_token_is_rejected(self, auth_service, alice, clock):
        alice.password_reset_token = "reset-123"
        alice.password_reset_token_expires_at = clock.now()
        with pytest.raises(PasswordResetError, match="Reset token has expired."):
            await auth_service.reset_password("alice@example.com", "reset-123", "pw")

    @pytest.mark.asyncio
    async def test_unknown_email_is_rejected(self, auth_service):
        with pytest.raises(PasswordResetError, match="User not found."):
            await auth_service.reset_password("ghost@example.com", "token", "pw")

    @pytest.mark.asyncio
    async def test_blank_input_is_a_validation_error(self, auth_service):
        with pytest.raises(ValidationError):
            await auth_service.reset_password("alice@example.com", "", "pw")
