"""
Confirm Password Reset Use Case

Sets a new password from a password-reset token.
"""

import logging
from typing import Optional

from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.email_queue import EmailQueue
from crm_auth.app.services.security import hash_password, timing_safe_delay
from crm_auth.app.services.session_manager import SessionManager
from crm_auth.app.services.settings import SUPPORT_EMAIL
from crm_auth.app.services.token_manager import TokenManager
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import TokenKind
from crm_auth.libs.result import Error, Result, Return
from .dtos import MessageResponse

logger = logging.getLogger(__name__)


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming password reset.

    Business Rules:
    - Token consumption, password change and session revocation commit
      together
    - Tokens of users in a deleted organization are rejected and stay unused
    - Every session of the user is revoked (the caller is not logged in)
    - A password-changed notification is queued
    """

    def __init__(self, uow: UnitOfWork, email_queue: EmailQueue, audit: AuditEmitter):
        self.uow = uow
        self.email_queue = email_queue
        self.audit = audit

    async def execute(
        self, token: str, new_password: str, meta: Optional[RequestMeta] = None
    ) -> Result[MessageResponse]:
        password_hash = hash_password(new_password)

        async with self.uow:
            consumed = await TokenManager(self.uow).consume(TokenKind.password_reset, token)
            if consumed.is_err():
                return Return.err(consumed.error)

            user = await self.uow.users.get_by_id(consumed.value.user_id)
            if user is None or not user.is_active:
                await timing_safe_delay()
                return Return.err(Error("INVALID_TOKEN", "Invalid or unknown token"))

            organization = await self.uow.organizations.get_by_id(user.organization_id)
            if organization is None:
                await timing_safe_delay()
                return Return.err(Error("INVALID_TOKEN", "Invalid or unknown token"))

            now = utcnow()
            await self.uow.users.set_password(user.id, password_hash, now)
            revoked = await SessionManager(self.uow).revoke_all(user.id)

            profile = await self.uow.profiles.get_by_user_id(user.id)

            await self.uow.commit()

        ctx = AuditContext.from_meta(meta, user.organization_id, user.id)
        self.audit.emit(
            ctx,
            AuditEntry(
                AuditAction.AUTH_PASSWORD_RESET_COMPLETE,
                "user",
                user.id,
                metadata={"revoked_sessions": revoked},
            ),
        )
        self.email_queue.queue_password_changed_email(
            to=user.email,
            first_name=profile.first_name if profile else "User",
            org_name=organization.name,
            changed_at=now.isoformat() + "Z",
            ip_address=ctx.ip_address or "unknown",
            support_email=SUPPORT_EMAIL,
        )
        logger.info("Password reset for user %s, %s session(s) revoked", user.id, revoked)
        return Return.ok(
            MessageResponse(message="Password has been reset. Please log in with your new password.")
        )
