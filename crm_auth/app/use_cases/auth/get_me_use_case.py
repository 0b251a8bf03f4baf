from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.libs.result import Result, Return
from .dtos import LoginResponse, build_auth_user


class GetMeUseCase:
    """Current user, organization, role and permissions; same shape as login"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, ctx: AuthContext) -> Result[LoginResponse]:
        async with self.uow:
            profile = await self.uow.profiles.get_by_user_id(ctx.user_id)
            return Return.ok(
                LoginResponse(
                    user=build_auth_user(ctx.user, profile, ctx.organization, ctx.role),
                    permissions=sorted(ctx.permissions),
                )
            )
