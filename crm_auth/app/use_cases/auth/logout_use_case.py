"""
Logout Use Case

Ends the caller's current session and nothing else.
"""

import logging
from typing import Optional

from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.session_manager import SessionManager
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.libs.result import Result, Return

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Business Rules:
    - The current session is soft-revoked; the row stays for audit
    - Other sessions of the same user are untouched
    """

    def __init__(self, uow: UnitOfWork, audit: AuditEmitter):
        self.uow = uow
        self.audit = audit

    async def execute(self, ctx: AuthContext, meta: Optional[RequestMeta] = None) -> Result[None]:
        user_id, organization_id, session_id = ctx.user_id, ctx.organization_id, ctx.session_id

        async with self.uow:
            await SessionManager(self.uow).revoke(session_id)
            await self.uow.commit()

        self.audit.emit(
            AuditContext.from_meta(meta, organization_id, user_id),
            AuditEntry(AuditAction.AUTH_LOGOUT, "session", session_id),
        )
        logger.info("User %s logged out of session %s", user_id, session_id)
        return Return.ok(None)
