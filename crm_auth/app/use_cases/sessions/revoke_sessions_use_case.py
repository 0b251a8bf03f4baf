"""
Revoke Sessions Use Case

Handles session revocation for session management.
"""

import logging
from typing import Optional
from uuid import UUID

from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.session_manager import SessionManager
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.app.use_cases.auth.dtos import RevokeSessionsResponse
from crm_auth.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

SESSION_NOT_FOUND = Error("SESSION_NOT_FOUND", "Session not found")


class RevokeSessionsUseCase:
    """
    Use case for revoking the caller's sessions.

    Business Rules:
    - Users can only revoke their own sessions; another user's session
      is reported as not found
    - The current session is ended through logout, not here
    - Revoking an already revoked session is a harmless no-op
    - Revocation is audit-logged
    """

    def __init__(self, uow: UnitOfWork, audit: AuditEmitter):
        self.uow = uow
        self.audit = audit

    async def revoke_specific_session(
        self, ctx: AuthContext, session_id: UUID, meta: Optional[RequestMeta] = None
    ) -> Result[None]:
        """
        Revoke one of the caller's other sessions.

        Args:
            ctx: Authenticated caller
            session_id: Session to revoke
            meta: Request details for the audit entry

        Returns:
            Result with None, or SESSION_NOT_FOUND
        """
        user_id, organization_id, current_id = ctx.user_id, ctx.organization_id, ctx.session_id

        async with self.uow:
            session = await self.uow.sessions.get_by_id(session_id)
            if session is None or session.user_id != user_id or session.id == current_id:
                return Return.err(SESSION_NOT_FOUND)

            revoked = await SessionManager(self.uow).revoke(session_id)
            await self.uow.commit()

        if revoked:
            self.audit.emit(
                AuditContext.from_meta(meta, organization_id, user_id),
                AuditEntry(AuditAction.SESSION_REVOKE, "session", session_id),
            )
        return Return.ok(None)

    async def revoke_all_except_current(
        self, ctx: AuthContext, meta: Optional[RequestMeta] = None
    ) -> Result[RevokeSessionsResponse]:
        """
        Revoke all sessions for the user except the current session.

        This is a self-service operation (logout other devices).
        """
        user_id, organization_id, current_id = ctx.user_id, ctx.organization_id, ctx.session_id

        async with self.uow:
            count = await SessionManager(self.uow).revoke_all_others(user_id, current_id)
            await self.uow.commit()

        self.audit.emit(
            AuditContext.from_meta(meta, organization_id, user_id),
            AuditEntry(
                AuditAction.SESSION_REVOKE_ALL,
                "session",
                current_id,
                metadata={"kept_session_id": str(current_id), "revoked_count": count},
            ),
        )
        logger.info("User %s revoked %s other session(s)", user_id, count)
        return Return.ok(RevokeSessionsResponse(revoked_count=count))
