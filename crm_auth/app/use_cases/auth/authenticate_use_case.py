"""
Authenticate Use Case

Turns a session cookie into an AuthContext for the request.
"""

import logging
from typing import Optional

from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.session_manager import SessionManager
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.entities import SessionState
from crm_auth.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

SESSION_ERRORS = {
    SessionState.invalid: Error("UNAUTHORIZED", "Authentication required"),
    SessionState.expired: Error("SESSION_EXPIRED", "Session has expired"),
    SessionState.revoked: Error("SESSION_REVOKED", "Session has been revoked"),
}


class AuthenticateUseCase:
    """
    Business Rules:
    - Validity is read from the database on every request, never cached
    - A session whose user or organization is gone, or whose role no
      longer exists, is treated as missing
    - An inactive user is rejected with ACCOUNT_INACTIVE
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, cookie_value: Optional[str]) -> Result[AuthContext]:
        if not cookie_value:
            return Return.err(SESSION_ERRORS[SessionState.invalid])

        async with self.uow:
            check = await SessionManager(self.uow).validate(cookie_value)
            if not check.is_active:
                return Return.err(SESSION_ERRORS[check.state])

            session = check.session
            user = await self.uow.users.get_by_id(session.user_id)
            organization = await self.uow.organizations.get_by_id(session.organization_id)
            if user is None or organization is None:
                logger.info("Session %s belongs to a deleted user or organization", session.id)
                return Return.err(SESSION_ERRORS[SessionState.invalid])

            if not user.is_active:
                return Return.err(Error("ACCOUNT_INACTIVE", "Account has been deactivated"))

            role = await self.uow.roles.get_by_id(user.role_id, organization.id)
            if role is None:
                return Return.err(SESSION_ERRORS[SessionState.invalid])

            permissions = await self.uow.roles.get_permissions(role.id)

            # persists the throttled last_accessed_at touch
            await self.uow.commit()

            return Return.ok(
                AuthContext(
                    user=user,
                    organization=organization,
                    role=role,
                    session=session,
                    permissions=frozenset(p.name for p in permissions),
                )
            )
