"""
Create Invitation Use Case

Invites an email address to join the caller's organization.
"""

import logging
from typing import Optional
from uuid import UUID

from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.email_queue import EmailQueue
from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.settings import FRONTEND_URL, INVITATION_TTL
from crm_auth.app.services.token_manager import TokenManager
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.app.use_cases.auth.dtos import RoleInfo
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import TokenKind
from crm_auth.libs.result import Error, Result, Return
from .dtos import InvitationResponse

logger = logging.getLogger(__name__)


class CreateInvitationUseCase:
    """
    Use case for inviting users to join an organization.

    Business Rules:
    - The role must be a live role of the caller's organization
    - The default (admin) role cannot be granted by invitation
    - Emails that already have an account anywhere cannot be invited
    - At most one pending invitation per (organization, email); revoked
      or expired ones do not block a new invitation
    - The raw token only leaves through the invitation email
    """

    def __init__(self, uow: UnitOfWork, email_queue: EmailQueue, audit: AuditEmitter):
        self.uow = uow
        self.email_queue = email_queue
        self.audit = audit

    async def execute(
        self, ctx: AuthContext, email: str, role_id: UUID, meta: Optional[RequestMeta] = None
    ) -> Result[InvitationResponse]:
        email = email.strip().lower()
        inviter_id, organization_id = ctx.user_id, ctx.organization_id
        organization_name = ctx.organization.name

        async with self.uow:
            role = await self.uow.roles.get_by_id(role_id, organization_id)
            if role is None:
                return Return.err(Error("ROLE_NOT_FOUND", "Role not found"))

            if role.is_default:
                return Return.err(Error("FORBIDDEN", "Cannot invite to admin role"))

            if await self.uow.users.email_exists(email):
                return Return.err(Error("EMAIL_ALREADY_EXISTS", "Email already registered"))

            if await self.uow.invitations.get_pending(organization_id, email, utcnow()):
                return Return.err(
                    Error("INVITATION_ALREADY_PENDING", "Invitation already pending")
                )

            issued = await TokenManager(self.uow).issue(
                TokenKind.invitation,
                (organization_id, email),
                INVITATION_TTL,
                role_id=role.id,
                invited_by_id=inviter_id,
            )
            invitation = issued.record
            inviter_profile = await self.uow.profiles.get_by_user_id(inviter_id)

            await self.uow.commit()

        self.audit.emit(
            AuditContext.from_meta(meta, organization_id, inviter_id),
            AuditEntry(
                AuditAction.INVITATION_CREATE,
                "invitation",
                invitation.id,
                metadata={"email": email, "role_id": str(role.id), "role_name": role.name},
            ),
        )
        inviter_name = (
            f"{inviter_profile.first_name} {inviter_profile.last_name}".strip()
            if inviter_profile
            else ""
        )
        self.email_queue.queue_invitation_email(
            to=email,
            organization_name=organization_name,
            role_name=role.name,
            invite_url=f"{FRONTEND_URL}/accept-invitation?token={issued.raw_token}",
            inviter_name=inviter_name or ctx.user.email,
            expires_in_hours=int(INVITATION_TTL.total_seconds() // 3600),
        )
        logger.info("Invitation %s created in organization %s", invitation.id, organization_id)

        return Return.ok(
            InvitationResponse(
                id=str(invitation.id),
                email=email,
                role=RoleInfo(id=str(role.id), name=role.name),
                expires_at=invitation.expires_at,
            )
        )
