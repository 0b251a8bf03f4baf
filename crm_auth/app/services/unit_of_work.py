from abc import ABC, abstractmethod

from crm_auth.app.repositories.audit_log_repository import IAuditLogRepository
from crm_auth.app.repositories.auth_token_repository import IAuthTokenRepository
from crm_auth.app.repositories.id_counter_repository import IIdCounterRepository
from crm_auth.app.repositories.invitation_repository import IInvitationRepository
from crm_auth.app.repositories.organization_repository import IOrganizationRepository
from crm_auth.app.repositories.permission_repository import IPermissionRepository
from crm_auth.app.repositories.profile_repository import IProfileRepository
from crm_auth.app.repositories.role_repository import IRoleRepository
from crm_auth.app.repositories.session_repository import ISessionRepository
from crm_auth.app.repositories.token_store import TokenStore
from crm_auth.app.repositories.user_repository import IUserRepository
from crm_auth.domain.entities import TokenKind


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    profiles: IProfileRepository
    organizations: IOrganizationRepository
    roles: IRoleRepository
    permissions: IPermissionRepository
    sessions: ISessionRepository
    invitations: IInvitationRepository
    email_verification_tokens: IAuthTokenRepository
    password_reset_tokens: IAuthTokenRepository
    id_counters: IIdCounterRepository
    audit_logs: IAuditLogRepository

    def token_store(self, kind: TokenKind) -> TokenStore:
        if kind == TokenKind.email_verification:
            return self.email_verification_tokens
        if kind == TokenKind.password_reset:
            return self.password_reset_tokens
        return self.invitations

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
