"""
Revoke Invitation Use Case

Cancels a pending invitation.
"""

import logging
from typing import Optional
from uuid import UUID

from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import InvitationStatus
from crm_auth.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class RevokeInvitationUseCase:
    """
    Use case for revoking invitations.

    Business Rules:
    - Invitations of other organizations are reported as not found
    - pending -> revoked is terminal
    - Revoking an accepted, revoked or expired invitation is a no-op
    """

    def __init__(self, uow: UnitOfWork, audit: AuditEmitter):
        self.uow = uow
        self.audit = audit

    async def execute(
        self, ctx: AuthContext, invitation_id: UUID, meta: Optional[RequestMeta] = None
    ) -> Result[None]:
        actor_id, organization_id = ctx.user_id, ctx.organization_id

        async with self.uow:
            invitation = await self.uow.invitations.get_by_id(invitation_id, organization_id)
            if invitation is None:
                return Return.err(Error("INVITATION_NOT_FOUND", "Invitation not found"))

            now = utcnow()
            status = invitation.status(now)
            if status != InvitationStatus.pending:
                logger.debug("Invitation %s already %s, nothing to revoke", invitation_id, status.value)
                return Return.ok(None)

            revoked = await self.uow.invitations.revoke(invitation_id, now)
            await self.uow.commit()

        if revoked:
            self.audit.emit(
                AuditContext.from_meta(meta, organization_id, actor_id),
                AuditEntry(
                    AuditAction.INVITATION_REVOKE,
                    "invitation",
                    invitation_id,
                    metadata={"email": invitation.email},
                ),
            )
            logger.info("Invitation %s revoked", invitation_id)
        return Return.ok(None)
