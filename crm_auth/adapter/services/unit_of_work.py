from sqlmodel.ext.asyncio.session import AsyncSession

from crm_auth.adapter.repositories.audit_log_repository import AuditLogRepository
from crm_auth.adapter.repositories.auth_token_repository import AuthTokenRepository
from crm_auth.adapter.repositories.id_counter_repository import IdCounterRepository
from crm_auth.adapter.repositories.invitation_repository import InvitationRepository
from crm_auth.adapter.repositories.organization_repository import OrganizationRepository
from crm_auth.adapter.repositories.permission_repository import PermissionRepository
from crm_auth.adapter.repositories.profile_repository import ProfileRepository
from crm_auth.adapter.repositories.role_repository import RoleRepository
from crm_auth.adapter.repositories.session_repository import SessionRepository
from crm_auth.adapter.repositories.user_repository import UserRepository
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.entities import TokenKind


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.users = UserRepository(self.session)
        self.profiles = ProfileRepository(self.session)
        self.organizations = OrganizationRepository(self.session)
        self.roles = RoleRepository(self.session)
        self.permissions = PermissionRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.invitations = InvitationRepository(self.session)
        self.email_verification_tokens = AuthTokenRepository(
            self.session, TokenKind.email_verification
        )
        self.password_reset_tokens = AuthTokenRepository(self.session, TokenKind.password_reset)
        self.id_counters = IdCounterRepository(self.session)
        self.audit_logs = AuditLogRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
