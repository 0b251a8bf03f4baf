from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from crm_auth.app.services.security import hash_token
from crm_auth.app.services.session_manager import (
    SessionManager,
    format_session_cookie,
    parse_session_cookie,
)
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import Session, SessionState


def make_session(secret: str = "s3cret", **overrides) -> Session:
    now = utcnow()
    values = dict(
        id=uuid4(),
        user_id=uuid4(),
        organization_id=uuid4(),
        secret_hash=hash_token(secret),
        created_at=now,
        last_accessed_at=now,
        expires_at=now + timedelta(hours=24),
    )
    values.update(overrides)
    return Session(**values)


@pytest.fixture
def sessions(mock_uow):
    mock_uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    mock_uow.sessions.get_by_id = AsyncMock(return_value=None)
    mock_uow.sessions.touch = AsyncMock()
    mock_uow.sessions.revoke_by_id = AsyncMock(return_value=True)
    return mock_uow.sessions


def test_parse_session_cookie():
    session_id = uuid4()

    assert parse_session_cookie(format_session_cookie(session_id, "abc.def")) == (
        session_id,
        "abc.def",
    )
    assert parse_session_cookie(None) is None
    assert parse_session_cookie("") is None
    assert parse_session_cookie("no-dot") is None
    assert parse_session_cookie(f"{session_id}.") is None
    assert parse_session_cookie("not-a-uuid.secret") is None


@pytest.mark.asyncio
async def test_create_session(mock_uow, sessions):
    # Arrange
    user_id, organization_id = uuid4(), uuid4()

    # Act
    issued = await SessionManager(mock_uow).create(
        user_id, organization_id, timedelta(hours=24), ip_address="10.0.0.1", user_agent="pytest"
    )

    # Assert
    session = issued.session
    session_id, secret = parse_session_cookie(issued.cookie_value)
    assert session_id == session.id
    assert session.secret_hash == hash_token(secret)
    assert session.expires_at - session.created_at == timedelta(hours=24)
    assert session.last_accessed_at == session.created_at
    assert session.ip_address == "10.0.0.1"
    sessions.create.assert_awaited_once()


@pytest.mark.asyncio
async def test_validate_rejects_malformed_cookie(mock_uow, sessions):
    check = await SessionManager(mock_uow).validate("garbage")

    assert check.state == SessionState.invalid
    assert not check.is_active
    sessions.get_by_id.assert_not_awaited()


@pytest.mark.asyncio
async def test_validate_unknown_session(mock_uow, sessions):
    check = await SessionManager(mock_uow).validate(format_session_cookie(uuid4(), "s3cret"))

    assert check.state == SessionState.invalid


@pytest.mark.asyncio
async def test_validate_wrong_secret(mock_uow, sessions):
    session = make_session()
    sessions.get_by_id.return_value = session

    check = await SessionManager(mock_uow).validate(format_session_cookie(session.id, "guess"))

    assert check.state == SessionState.invalid
    assert check.session is None


@pytest.mark.asyncio
async def test_validate_revoked_session(mock_uow, sessions):
    session = make_session(revoked_at=utcnow())
    sessions.get_by_id.return_value = session

    check = await SessionManager(mock_uow).validate(format_session_cookie(session.id, "s3cret"))

    assert check.state == SessionState.revoked


@pytest.mark.asyncio
async def test_revoked_wins_over_expired(mock_uow, sessions):
    session = make_session(revoked_at=utcnow(), expires_at=utcnow() - timedelta(hours=1))
    sessions.get_by_id.return_value = session

    check = await SessionManager(mock_uow).validate(format_session_cookie(session.id, "s3cret"))

    assert check.state == SessionState.revoked


@pytest.mark.asyncio
async def test_validate_expired_session(mock_uow, sessions):
    session = make_session(expires_at=utcnow() - timedelta(seconds=1))
    sessions.get_by_id.return_value = session

    check = await SessionManager(mock_uow).validate(format_session_cookie(session.id, "s3cret"))

    assert check.state == SessionState.expired
    sessions.touch.assert_not_awaited()


@pytest.mark.asyncio
async def test_recently_used_session_is_not_touched(mock_uow, sessions):
    session = make_session()
    sessions.get_by_id.return_value = session

    check = await SessionManager(mock_uow, timedelta(minutes=5)).validate(
        format_session_cookie(session.id, "s3cret")
    )

    assert check.is_active
    sessions.touch.assert_not_awaited()


@pytest.mark.asyncio
async def test_stale_session_is_touched_without_extending_expiry(mock_uow, sessions):
    # Arrange
    stale = utcnow() - timedelta(minutes=10)
    session = make_session(last_accessed_at=stale)
    expires_at = session.expires_at
    sessions.get_by_id.return_value = session

    # Act
    check = await SessionManager(mock_uow, timedelta(minutes=5)).validate(
        format_session_cookie(session.id, "s3cret")
    )

    # Assert
    assert check.is_active
    sessions.touch.assert_awaited_once()
    assert check.session.last_accessed_at > stale
    assert check.session.expires_at == expires_at


@pytest.mark.asyncio
async def test_revoke_is_idempotent(mock_uow, sessions):
    sessions.revoke_by_id.side_effect = [True, False]
    manager = SessionManager(mock_uow)
    session_id = uuid4()

    assert await manager.revoke(session_id) is True
    assert await manager.revoke(session_id) is False
