from sqlmodel.ext.asyncio.session import AsyncSession

from crm_auth.app.repositories.audit_log_repository import IAuditLogRepository
from crm_auth.domain.entities import AuditLog


class AuditLogRepository(IAuditLogRepository):
    """AuditLog repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, audit_log: AuditLog) -> AuditLog:
        """Create a new audit log entry (immutable)"""
        self.session.add(audit_log)
        await self.session.flush()
        return audit_log
