"""
Change Password Use Case

Authenticated password change that signs out every other device.
"""

import logging
from typing import Optional

from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.email_queue import EmailQueue
from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.security import hash_password, verify_password
from crm_auth.app.services.session_manager import SessionManager
from crm_auth.app.services.settings import SUPPORT_EMAIL
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.base import utcnow
from crm_auth.libs.result import Error, Result, Return
from .dtos import MessageResponse

logger = logging.getLogger(__name__)


class ChangePasswordUseCase:
    """
    Business Rules:
    - The current password must verify
    - All other sessions of the user are revoked in the same transaction;
      the acting session stays valid
    """

    def __init__(self, uow: UnitOfWork, email_queue: EmailQueue, audit: AuditEmitter):
        self.uow = uow
        self.email_queue = email_queue
        self.audit = audit

    async def execute(
        self,
        ctx: AuthContext,
        current_password: str,
        new_password: str,
        meta: Optional[RequestMeta] = None,
    ) -> Result[MessageResponse]:
        user_id, organization_id, session_id = ctx.user_id, ctx.organization_id, ctx.session_id
        organization_name = ctx.organization.name

        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("UNAUTHORIZED", "Authentication required"))

            if not verify_password(current_password, user.password_hash):
                return Return.err(
                    Error("INVALID_CURRENT_PASSWORD", "Current password is incorrect")
                )

            now = utcnow()
            await self.uow.users.set_password(user_id, hash_password(new_password), now)
            revoked = await SessionManager(self.uow).revoke_all_others(user_id, session_id)
            profile = await self.uow.profiles.get_by_user_id(user_id)

            await self.uow.commit()

        audit_ctx = AuditContext.from_meta(meta, organization_id, user_id)
        self.audit.emit(
            audit_ctx,
            AuditEntry(
                AuditAction.AUTH_PASSWORD_CHANGE,
                "user",
                user_id,
                metadata={"revoked_sessions": revoked},
            ),
        )
        self.email_queue.queue_password_changed_email(
            to=user.email,
            first_name=profile.first_name if profile else "User",
            org_name=organization_name,
            changed_at=now.isoformat() + "Z",
            ip_address=audit_ctx.ip_address or "unknown",
            support_email=SUPPORT_EMAIL,
        )
        logger.info("Password changed for user %s, %s other session(s) revoked", user_id, revoked)
        return Return.ok(MessageResponse(message="Password changed successfully"))
