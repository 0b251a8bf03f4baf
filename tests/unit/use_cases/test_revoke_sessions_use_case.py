from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from crm_auth.app.use_cases.sessions import RevokeSessionsUseCase
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import Session


def make_session(user_id, **overrides) -> Session:
    now = utcnow()
    values = dict(
        id=uuid4(),
        user_id=user_id,
        organization_id=uuid4(),
        secret_hash="0" * 64,
        created_at=now,
        last_accessed_at=now,
        expires_at=now + timedelta(hours=1),
    )
    values.update(overrides)
    return Session(**values)


@pytest.fixture
def uow(mock_uow):
    mock_uow.sessions.get_by_id = AsyncMock(return_value=None)
    mock_uow.sessions.revoke_by_id = AsyncMock(return_value=True)
    mock_uow.sessions.revoke_all_except_session = AsyncMock(return_value=3)
    return mock_uow


@pytest.mark.asyncio
async def test_revoke_other_session(uow, auth_context, mock_audit):
    # Arrange
    other = make_session(auth_context.user_id)
    uow.sessions.get_by_id.return_value = other

    # Act
    result = await RevokeSessionsUseCase(uow, mock_audit).revoke_specific_session(
        auth_context, other.id
    )

    # Assert
    assert result.is_ok()
    uow.sessions.revoke_by_id.assert_awaited_once()
    assert uow.sessions.revoke_by_id.await_args.args[0] == other.id
    uow.commit.assert_awaited_once()
    mock_audit.emit.assert_called_once()


@pytest.mark.asyncio
async def test_cannot_revoke_another_users_session(uow, auth_context, mock_audit):
    uow.sessions.get_by_id.return_value = make_session(uuid4())

    result = await RevokeSessionsUseCase(uow, mock_audit).revoke_specific_session(
        auth_context, uuid4()
    )

    assert result.error.code == "SESSION_NOT_FOUND"
    uow.sessions.revoke_by_id.assert_not_awaited()


@pytest.mark.asyncio
async def test_current_session_is_not_revoked_here(uow, auth_context, mock_audit):
    uow.sessions.get_by_id.return_value = auth_context.session

    result = await RevokeSessionsUseCase(uow, mock_audit).revoke_specific_session(
        auth_context, auth_context.session_id
    )

    assert result.error.code == "SESSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_revoking_revoked_session_is_noop(uow, auth_context, mock_audit):
    other = make_session(auth_context.user_id, revoked_at=utcnow())
    uow.sessions.get_by_id.return_value = other
    uow.sessions.revoke_by_id.return_value = False

    result = await RevokeSessionsUseCase(uow, mock_audit).revoke_specific_session(
        auth_context, other.id
    )

    assert result.is_ok()
    mock_audit.emit.assert_not_called()


@pytest.mark.asyncio
async def test_revoke_all_except_current(uow, auth_context, mock_audit):
    result = await RevokeSessionsUseCase(uow, mock_audit).revoke_all_except_current(auth_context)

    assert result.value.revoked_count == 3
    user_id, kept_id, _ = uow.sessions.revoke_all_except_session.await_args.args
    assert user_id == auth_context.user_id
    assert kept_id == auth_context.session_id
