import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from authlink.core.exceptions import ExternalAccountConflictError
from authlink.domain.entities.external_identity import ExternalIdentity
from authlink.domain.entities.external_token import ExternalToken
from authlink.infrastructure.repositories import ExternalLinkRepository
from tests.utils.db import scalar_result

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _identity(user_id):
    return ExternalIdentity(user_id=user_id, provider="google", subject_id="sub-1", linked_at=NOW)


def _token(user_id):
    return ExternalToken(
        user_id=user_id,
        provider="google",
        access_token="cipher-a",
        refresh_token="cipher-r",
        expires_at=NOW,
        scopes="openid email",
        updated_at=NOW,
    )


@pytest.mark.asyncio
async def test_save_link_writes_identity_and_token_in_one_commit(db_session):
    user_id = uuid.uuid4()
    identity, token = _identity(user_id), _token(user_id)

    await ExternalLinkRepository(db_session).save_link(identity, token)

    assert db_session.add.call_count == 2
    db_session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_save_link_conflict_is_rolled_back(db_session):
    db_session.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))
    user_id = uuid.uuid4()

    with pytest.raises(ExternalAccountConflictError) as exc_info:
        await ExternalLinkRepository(db_session).save_link(_identity(user_id), _token(user_id))

    assert exc_info.value.message == "External account is already linked."
    db_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_delete_link_deletes_present_rows(db_session):
    user_id = uuid.uuid4()
    token = _token(user_id)

    await ExternalLinkRepository(db_session).delete_link(None, token)

    db_session.delete.assert_awaited_once_with(token)
    db_session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_get_identity_by_subject(db_session):
    identity = _identity(uuid.uuid4())
    db_session.execute.return_value = scalar_result(identity)

    assert await ExternalLinkRepository(db_session).get_identity_by_subject("google", "sub-1") is identity


def test_scope_list_splits_on_whitespace():
    assert _token(uuid.uuid4()).scope_list == ["openid", "email"]
