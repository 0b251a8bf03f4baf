from datetime import timedelta
from unittest.mock import ANY, AsyncMock, MagicMock
from uuid import uuid4

import pytest

from crm_auth.app.services.security import hash_token
from crm_auth.app.services.token_manager import TokenManager
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import AuthToken, TokenKind


def make_token(**overrides) -> AuthToken:
    values = dict(
        user_id=uuid4(),
        kind=TokenKind.email_verification,
        token_hash="f" * 64,
        expires_at=utcnow() + timedelta(hours=1),
    )
    values.update(overrides)
    return AuthToken(**values)


@pytest.fixture
def store(mock_uow):
    store = MagicMock()
    store.invalidate_subject = AsyncMock(return_value=1)
    store.insert = AsyncMock(
        side_effect=lambda subject, token_hash, expires_at, **fields: make_token(
            user_id=subject, token_hash=token_hash, expires_at=expires_at
        )
    )
    store.find_by_hash = AsyncMock(return_value=None)
    store.mark_used = AsyncMock(return_value=True)
    store.is_void = MagicMock(return_value=False)
    mock_uow.token_store = MagicMock(return_value=store)
    return store


@pytest.mark.asyncio
async def test_issue_invalidates_previous_tokens_and_stores_only_hash(mock_uow, store):
    # Arrange
    user_id = uuid4()

    # Act
    issued = await TokenManager(mock_uow).issue(
        TokenKind.email_verification, user_id, timedelta(hours=24)
    )

    # Assert
    mock_uow.token_store.assert_called_once_with(TokenKind.email_verification)
    store.invalidate_subject.assert_awaited_once_with(user_id, ANY)
    stored_hash = store.insert.await_args.args[1]
    assert stored_hash == hash_token(issued.raw_token)
    assert stored_hash != issued.raw_token
    assert issued.record.user_id == user_id


@pytest.mark.asyncio
async def test_issue_passes_extra_fields_to_store(mock_uow, store):
    role_id = uuid4()

    await TokenManager(mock_uow).issue(
        TokenKind.invitation, (uuid4(), "new@acme.com"), timedelta(hours=48), role_id=role_id
    )

    assert store.insert.await_args.kwargs == {"role_id": role_id}


@pytest.mark.asyncio
async def test_issued_tokens_are_unique(mock_uow, store):
    manager = TokenManager(mock_uow)

    first = await manager.issue(TokenKind.password_reset, uuid4(), timedelta(hours=1))
    second = await manager.issue(TokenKind.password_reset, uuid4(), timedelta(hours=1))

    assert first.raw_token != second.raw_token


@pytest.mark.asyncio
async def test_consume_unknown_token(mock_uow, store):
    result = await TokenManager(mock_uow).consume(TokenKind.email_verification, "nope")

    assert result.is_err()
    assert result.error.code == "INVALID_TOKEN"
    store.find_by_hash.assert_awaited_once_with(hash_token("nope"))
    store.mark_used.assert_not_awaited()


@pytest.mark.asyncio
async def test_consume_invalidated_token_is_invalid(mock_uow, store):
    store.find_by_hash.return_value = make_token()
    store.is_void.return_value = True

    result = await TokenManager(mock_uow).consume(TokenKind.invitation, "raw")

    assert result.error.code == "INVALID_TOKEN"
    store.mark_used.assert_not_awaited()


@pytest.mark.asyncio
async def test_consume_expired_token(mock_uow, store):
    store.find_by_hash.return_value = make_token(expires_at=utcnow() - timedelta(seconds=1))

    result = await TokenManager(mock_uow).consume(TokenKind.email_verification, "raw")

    assert result.error.code == "TOKEN_EXPIRED"
    store.mark_used.assert_not_awaited()


@pytest.mark.asyncio
async def test_consume_used_token(mock_uow, store):
    store.find_by_hash.return_value = make_token(used_at=utcnow())

    result = await TokenManager(mock_uow).consume(TokenKind.email_verification, "raw")

    assert result.error.code == "TOKEN_ALREADY_USED"
    store.mark_used.assert_not_awaited()


@pytest.mark.asyncio
async def test_consume_loses_race_to_concurrent_consumer(mock_uow, store):
    """The row looked unused when read, but another request marked it first"""
    store.find_by_hash.return_value = make_token()
    store.mark_used.return_value = False

    result = await TokenManager(mock_uow).consume(TokenKind.password_reset, "raw")

    assert result.error.code == "TOKEN_ALREADY_USED"


@pytest.mark.asyncio
async def test_consume_success_marks_token_used(mock_uow, store):
    token = make_token()
    store.find_by_hash.return_value = token

    result = await TokenManager(mock_uow).consume(TokenKind.email_verification, "raw")

    assert result.is_ok()
    assert result.value is token
    store.mark_used.assert_awaited_once_with(token.id, ANY)


@pytest.mark.asyncio
@pytest.mark.parametrize("case", ["unknown", "expired", "used", "lost race", "valid"])
async def test_only_failed_consumption_is_padded(mock_uow, store, monkeypatch, case):
    # Arrange
    delay = AsyncMock()
    monkeypatch.setattr("crm_auth.app.services.token_manager.timing_safe_delay", delay)
    if case == "expired":
        store.find_by_hash.return_value = make_token(expires_at=utcnow() - timedelta(seconds=1))
    elif case == "used":
        store.find_by_hash.return_value = make_token(used_at=utcnow())
    elif case == "lost race":
        store.find_by_hash.return_value = make_token()
        store.mark_used.return_value = False
    elif case == "valid":
        store.find_by_hash.return_value = make_token()

    # Act
    result = await TokenManager(mock_uow).consume(TokenKind.password_reset, "raw")

    # Assert
    assert delay.await_count == (0 if result.is_ok() else 1)
    assert result.is_ok() == (case == "valid")
