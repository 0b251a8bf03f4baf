"""
Request Password Reset Use Case

Handles generating and sending password reset tokens.
"""

import logging
from typing import Optional

from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.email_queue import EmailQueue
from crm_auth.app.services.security import timing_safe_delay
from crm_auth.app.services.settings import FRONTEND_URL, PASSWORD_RESET_TTL
from crm_auth.app.services.token_manager import TokenManager
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.entities import TokenKind
from crm_auth.libs.result import Result, Return
from .dtos import MessageResponse

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account exists, a reset email has been sent"


class RequestPasswordResetUseCase:
    """
    Use case for requesting password reset.

    Business Rules:
    - No email enumeration: identical response for every input
    - Unknown, deleted, inactive and password-less (OAuth-only) accounts,
      and accounts of deleted organizations, get no token and no email
    - An eligible account gets exactly one new token (earlier reset
      tokens stop working) and exactly one email
    """

    def __init__(self, uow: UnitOfWork, email_queue: EmailQueue, audit: AuditEmitter):
        self.uow = uow
        self.email_queue = email_queue
        self.audit = audit

    async def execute(self, email: str, meta: Optional[RequestMeta] = None) -> Result[MessageResponse]:
        generic = MessageResponse(message=RESET_REQUESTED_MESSAGE)

        async with self.uow:
            user = await self.uow.users.get_by_email(email)

            # No email enumeration - same response, same timing, no side effects
            if user is None or not user.is_active or not user.password_hash:
                await timing_safe_delay()
                return Return.ok(generic)

            organization = await self.uow.organizations.get_by_id(user.organization_id)
            profile = await self.uow.profiles.get_by_user_id(user.id)

            issued = await TokenManager(self.uow).issue(
                TokenKind.password_reset, user.id, PASSWORD_RESET_TTL
            )
            await self.uow.commit()

        self.audit.emit(
            AuditContext.from_meta(meta, user.organization_id, user.id),
            AuditEntry(AuditAction.AUTH_PASSWORD_RESET_REQUEST, "user", user.id),
        )
        self.email_queue.queue_password_reset_email(
            to=user.email,
            first_name=profile.first_name if profile else "User",
            org_name=organization.name if organization else "",
            reset_url=f"{FRONTEND_URL}/reset-password?token={issued.raw_token}",
            expires_in_hours=max(1, int(PASSWORD_RESET_TTL.total_seconds() // 3600)),
        )
        logger.info("Password reset requested for user %s", user.id)
        return Return.ok(generic)
