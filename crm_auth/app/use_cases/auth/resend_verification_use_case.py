"""
Resend Verification Use Case

Issues a fresh email-verification token, superseding earlier ones.
"""

import logging
from typing import Optional

from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.email_queue import EmailQueue
from crm_auth.app.services.security import timing_safe_delay
from crm_auth.app.services.settings import EMAIL_VERIFICATION_TTL, FRONTEND_URL
from crm_auth.app.services.token_manager import TokenManager
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.entities import TokenKind
from crm_auth.libs.result import Result, Return
from .dtos import MessageResponse

logger = logging.getLogger(__name__)

RESEND_MESSAGE = (
    "If this email is registered and unverified, a verification email has been sent."
)


class ResendVerificationUseCase:
    """
    Business Rules:
    - The response never reveals whether the email is registered
    - Tokens and emails only for live, active, unverified users of live
      organizations
    - Any earlier verification token of the user stops working
    """

    def __init__(self, uow: UnitOfWork, email_queue: EmailQueue, audit: AuditEmitter):
        self.uow = uow
        self.email_queue = email_queue
        self.audit = audit

    async def execute(self, email: str, meta: Optional[RequestMeta] = None) -> Result[MessageResponse]:
        generic = MessageResponse(message=RESEND_MESSAGE)

        async with self.uow:
            user = await self.uow.users.get_by_email(email)
            if user is None or not user.is_active or user.is_email_verified:
                await timing_safe_delay()
                return Return.ok(generic)

            organization = await self.uow.organizations.get_by_id(user.organization_id)
            profile = await self.uow.profiles.get_by_user_id(user.id)

            issued = await TokenManager(self.uow).issue(
                TokenKind.email_verification, user.id, EMAIL_VERIFICATION_TTL
            )
            await self.uow.commit()

        self.audit.emit(
            AuditContext.from_meta(meta, user.organization_id, user.id),
            AuditEntry(AuditAction.AUTH_EMAIL_VERIFY_RESEND, "user", user.id),
        )
        self.email_queue.queue_email_verification_email(
            to=user.email,
            first_name=profile.first_name if profile else "User",
            org_name=organization.name if organization else "",
            verify_url=f"{FRONTEND_URL}/verify-email?token={issued.raw_token}",
            expires_in_hours=int(EMAIL_VERIFICATION_TTL.total_seconds() // 3600),
        )
        logger.info("Verification email re-issued for user %s", user.id)
        return Return.ok(generic)
