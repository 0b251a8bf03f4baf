"""
Verify Email Use Case

Consumes an email-verification token and marks the address verified.
"""

import logging
from typing import Optional

from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.security import hash_token, timing_safe_delay
from crm_auth.app.services.token_manager import TokenManager
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import TokenKind
from crm_auth.libs.result import Error, Result, Return
from .dtos import MessageResponse

logger = logging.getLogger(__name__)


class VerifyEmailUseCase:
    """
    Business Rules:
    - Token consumption and setting email_verified_at share one transaction
    - A user that is already verified gets a success response, including
      the loser of two concurrent verifications of the same token
    - Tokens of users in a deleted organization are rejected and stay unused
    - Unknown or expired tokens fail with INVALID_TOKEN / TOKEN_EXPIRED
    """

    def __init__(self, uow: UnitOfWork, audit: AuditEmitter):
        self.uow = uow
        self.audit = audit

    async def execute(self, token: str, meta: Optional[RequestMeta] = None) -> Result[MessageResponse]:
        async with self.uow:
            consumed = await TokenManager(self.uow).consume(TokenKind.email_verification, token)

            if consumed.is_err():
                if consumed.error.code == "TOKEN_ALREADY_USED" and await self._already_verified(token):
                    return Return.ok(MessageResponse(message="Email already verified"))
                return Return.err(consumed.error)

            record = consumed.value
            user = await self.uow.users.get_by_id(record.user_id)
            if user is None or await self.uow.organizations.get_by_id(user.organization_id) is None:
                await timing_safe_delay()
                return Return.err(Error("INVALID_TOKEN", "Invalid or unknown token"))

            changed = await self.uow.users.mark_email_verified(user.id, utcnow())
            await self.uow.commit()

        if not changed:
            return Return.ok(MessageResponse(message="Email already verified"))

        self.audit.emit(
            AuditContext.from_meta(meta, user.organization_id, user.id),
            AuditEntry(AuditAction.AUTH_EMAIL_VERIFY, "user", user.id),
        )
        logger.info("Email verified for user %s", user.id)
        return Return.ok(MessageResponse(message="Email verified successfully"))

    async def _already_verified(self, token: str) -> bool:
        record = await self.uow.email_verification_tokens.find_by_hash(hash_token(token))
        if record is None:
            return False
        user = await self.uow.users.get_by_id(record.user_id)
        return user is not None and user.is_email_verified
