from abc import ABC, abstractmethod

from crm_auth.domain.entities import AuditLog


class IAuditLogRepository(ABC):
    """AuditLog repository interface - application layer"""

    @abstractmethod
    async def create(self, audit_log: AuditLog) -> AuditLog:
        """Create a new audit log entry (immutable)"""
        pass
