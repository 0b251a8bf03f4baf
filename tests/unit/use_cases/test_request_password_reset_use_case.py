from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from crm_auth.app.use_cases.auth import RequestPasswordResetUseCase
from crm_auth.domain.entities import AuthToken, Organization, TokenKind, User

GENERIC_MESSAGE = "If an account exists, a reset email has been sent"


@pytest.fixture
def user():
    return User(
        id=uuid4(),
        organization_id=uuid4(),
        role_id=uuid4(),
        email="user@acme.com",
        password_hash="$2b$04$hash",
        is_active=True,
    )


@pytest.fixture
def uow(mock_uow, user):
    mock_uow.users.get_by_email = AsyncMock(return_value=user)
    mock_uow.organizations.get_by_id = AsyncMock(
        return_value=Organization(id=user.organization_id, name="Acme", slug="acme")
    )
    mock_uow.profiles.get_by_user_id = AsyncMock(return_value=None)

    tokens = MagicMock()
    tokens.invalidate_subject = AsyncMock(return_value=1)
    tokens.insert = AsyncMock(
        side_effect=lambda subject, token_hash, expires_at, **fields: AuthToken(
            user_id=subject,
            kind=TokenKind.password_reset,
            token_hash=token_hash,
            expires_at=expires_at,
        )
    )
    mock_uow.token_store = MagicMock(return_value=tokens)
    return mock_uow


@pytest.mark.asyncio
async def test_known_account_gets_one_token_and_one_email(uow, user, mock_email_queue, mock_audit):
    # Act
    result = await RequestPasswordResetUseCase(uow, mock_email_queue, mock_audit).execute(
        "user@acme.com"
    )

    # Assert
    assert result.value.message == GENERIC_MESSAGE
    tokens = uow.token_store.return_value
    tokens.invalidate_subject.assert_awaited_once()
    tokens.insert.assert_awaited_once()
    uow.commit.assert_awaited_once()
    mock_email_queue.queue_password_reset_email.assert_called_once()
    assert "/reset-password?token=" in (
        mock_email_queue.queue_password_reset_email.call_args.kwargs["reset_url"]
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("case", ["unknown", "inactive", "password-less"])
async def test_ineligible_accounts_get_same_response_without_side_effects(
    uow, user, mock_email_queue, mock_audit, case
):
    # Arrange
    if case == "unknown":
        uow.users.get_by_email.return_value = None
    elif case == "inactive":
        user.is_active = False
    else:
        user.password_hash = None

    # Act
    result = await RequestPasswordResetUseCase(uow, mock_email_queue, mock_audit).execute(
        "user@acme.com"
    )

    # Assert
    assert result.is_ok()
    assert result.value.message == GENERIC_MESSAGE
    uow.token_store.return_value.insert.assert_not_awaited()
    uow.commit.assert_not_awaited()
    mock_email_queue.queue_password_reset_email.assert_not_called()
    mock_audit.emit.assert_not_called()


@pytest.mark.asyncio
async def test_ineligible_account_is_padded_like_a_real_one(
    uow, mock_email_queue, mock_audit, monkeypatch
):
    # Arrange
    delay = AsyncMock()
    monkeypatch.setattr(
        "crm_auth.app.use_cases.auth.request_password_reset_use_case.timing_safe_delay", delay
    )
    use_case = RequestPasswordResetUseCase(uow, mock_email_queue, mock_audit)

    # Act
    await use_case.execute("user@acme.com")
    uow.users.get_by_email.return_value = None
    await use_case.execute("ghost@acme.com")

    # Assert
    delay.assert_awaited_once()
