from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from crm_auth.app.services.audit import AuditAction
from crm_auth.app.use_cases.invitations import CreateInvitationUseCase, RevokeInvitationUseCase
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import Invitation, Role


@pytest.fixture
def agent_role(auth_context):
    return Role(id=uuid4(), organization_id=auth_context.organization_id, name="Agent")


def make_invitation(auth_context, **overrides) -> Invitation:
    values = dict(
        id=uuid4(),
        organization_id=auth_context.organization_id,
        email="new@acme.com",
        role_id=uuid4(),
        invited_by_id=auth_context.user_id,
        token_hash="a" * 64,
        expires_at=utcnow() + timedelta(hours=48),
    )
    values.update(overrides)
    return Invitation(**values)


@pytest.fixture
def uow(mock_uow, auth_context, agent_role):
    mock_uow.roles.get_by_id = AsyncMock(return_value=agent_role)
    mock_uow.users.email_exists = AsyncMock(return_value=False)
    mock_uow.invitations.get_pending = AsyncMock(return_value=None)
    mock_uow.invitations.get_by_id = AsyncMock(return_value=None)
    mock_uow.invitations.revoke = AsyncMock(return_value=True)
    mock_uow.invitations.invalidate_subject = AsyncMock(return_value=0)
    mock_uow.invitations.insert = AsyncMock(
        side_effect=lambda subject, token_hash, expires_at, **fields: make_invitation(
            auth_context,
            organization_id=subject[0],
            email=subject[1],
            token_hash=token_hash,
            expires_at=expires_at,
            **fields,
        )
    )
    mock_uow.profiles.get_by_user_id = AsyncMock(return_value=None)
    mock_uow.token_store = MagicMock(return_value=mock_uow.invitations)
    return mock_uow


@pytest.mark.asyncio
async def test_create_invitation(uow, auth_context, agent_role, mock_email_queue, mock_audit):
    # Act
    result = await CreateInvitationUseCase(uow, mock_email_queue, mock_audit).execute(
        auth_context, "New@Acme.com", agent_role.id
    )

    # Assert
    assert result.is_ok()
    assert result.value.email == "new@acme.com"
    assert result.value.role.name == "Agent"
    uow.invitations.invalidate_subject.assert_awaited_once()
    assert uow.invitations.invalidate_subject.await_args.args[0] == (
        auth_context.organization_id,
        "new@acme.com",
    )
    assert uow.invitations.insert.await_args.kwargs == {
        "role_id": agent_role.id,
        "invited_by_id": auth_context.user_id,
    }
    uow.commit.assert_awaited_once()
    mock_email_queue.queue_invitation_email.assert_called_once()
    assert mock_audit.emit.call_args.args[1].action == AuditAction.INVITATION_CREATE


@pytest.mark.asyncio
async def test_create_invitation_unknown_role(uow, auth_context, mock_email_queue, mock_audit):
    uow.roles.get_by_id.return_value = None

    result = await CreateInvitationUseCase(uow, mock_email_queue, mock_audit).execute(
        auth_context, "new@acme.com", uuid4()
    )

    assert result.error.code == "ROLE_NOT_FOUND"


@pytest.mark.asyncio
async def test_cannot_invite_to_default_role(uow, auth_context, mock_email_queue, mock_audit):
    uow.roles.get_by_id.return_value = auth_context.role

    result = await CreateInvitationUseCase(uow, mock_email_queue, mock_audit).execute(
        auth_context, "new@acme.com", auth_context.role.id
    )

    assert result.error.code == "FORBIDDEN"
    uow.invitations.insert.assert_not_awaited()


@pytest.mark.asyncio
async def test_cannot_invite_registered_email(
    uow, auth_context, agent_role, mock_email_queue, mock_audit
):
    uow.users.email_exists.return_value = True

    result = await CreateInvitationUseCase(uow, mock_email_queue, mock_audit).execute(
        auth_context, "taken@acme.com", agent_role.id
    )

    assert result.error.code == "EMAIL_ALREADY_EXISTS"
    mock_email_queue.queue_invitation_email.assert_not_called()


@pytest.mark.asyncio
async def test_pending_invitation_blocks_new_one(
    uow, auth_context, agent_role, mock_email_queue, mock_audit
):
    uow.invitations.get_pending.return_value = make_invitation(auth_context)

    result = await CreateInvitationUseCase(uow, mock_email_queue, mock_audit).execute(
        auth_context, "new@acme.com", agent_role.id
    )

    assert result.error.code == "INVITATION_ALREADY_PENDING"
    uow.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_revoke_pending_invitation(uow, auth_context, mock_audit):
    # Arrange
    invitation = make_invitation(auth_context)
    uow.invitations.get_by_id.return_value = invitation

    # Act
    result = await RevokeInvitationUseCase(uow, mock_audit).execute(auth_context, invitation.id)

    # Assert
    assert result.is_ok()
    uow.invitations.get_by_id.assert_awaited_once_with(invitation.id, auth_context.organization_id)
    uow.invitations.revoke.assert_awaited_once()
    uow.commit.assert_awaited_once()
    assert mock_audit.emit.call_args.args[1].action == AuditAction.INVITATION_REVOKE


@pytest.mark.asyncio
async def test_revoke_missing_invitation(uow, auth_context, mock_audit):
    result = await RevokeInvitationUseCase(uow, mock_audit).execute(auth_context, uuid4())

    assert result.error.code == "INVITATION_NOT_FOUND"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"accepted_at": utcnow(), "used_at": utcnow()},
        {"revoked_at": utcnow()},
        {"expires_at": utcnow() - timedelta(minutes=1)},
    ],
    ids=["accepted", "revoked", "expired"],
)
async def test_revoking_finished_invitation_is_noop(uow, auth_context, mock_audit, overrides):
    invitation = make_invitation(auth_context, **overrides)
    uow.invitations.get_by_id.return_value = invitation

    result = await RevokeInvitationUseCase(uow, mock_audit).execute(auth_context, invitation.id)

    assert result.is_ok()
    uow.invitations.revoke.assert_not_awaited()
    mock_audit.emit.assert_not_called()
