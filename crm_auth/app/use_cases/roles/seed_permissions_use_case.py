import logging
from typing import Dict, Optional

from crm_auth.app.services.permissions import PERMISSION_CATALOGUE
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.libs.result import Result, Return

logger = logging.getLogger(__name__)


class SeedPermissionsUseCase:
    """Insert any catalogue permission that is missing; safe to run on every start"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, catalogue: Optional[Dict[str, str]] = None) -> Result[int]:
        async with self.uow:
            added = await self.uow.permissions.ensure_catalogue(catalogue or PERMISSION_CATALOGUE)
            await self.uow.commit()

        if added:
            logger.info("Seeded %s permission(s)", added)
        return Return.ok(added)
