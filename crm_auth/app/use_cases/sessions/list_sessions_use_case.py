from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.app.use_cases.auth.dtos import SessionInfo, SessionListResponse
from crm_auth.domain.base import utcnow
from crm_auth.libs.result import Result, Return


class ListSessionsUseCase:
    """Active sessions of the caller, most recently used first"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, ctx: AuthContext) -> Result[SessionListResponse]:
        user_id, current_id = ctx.user_id, ctx.session_id

        async with self.uow:
            sessions = await self.uow.sessions.list_active_by_user(user_id, utcnow())
            return Return.ok(
                SessionListResponse(
                    sessions=[
                        SessionInfo(
                            id=str(s.id),
                            ip_address=s.ip_address,
                            user_agent=s.user_agent,
                            created_at=s.created_at,
                            last_accessed_at=s.last_accessed_at,
                            expires_at=s.expires_at,
                            current=s.id == current_id,
                        )
                        for s in sessions
                    ]
                )
            )
