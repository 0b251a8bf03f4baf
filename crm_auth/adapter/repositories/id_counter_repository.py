from uuid import UUID

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_auth.app.repositories.id_counter_repository import IIdCounterRepository
from crm_auth.domain.entities import IdCounter


class IdCounterRepository(IIdCounterRepository):
    """IdCounter repository implementation using a single upsert statement"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def increment(self, organization_id: UUID, entity_type: str) -> int:
        """
        INSERT ... ON CONFLICT DO UPDATE ... RETURNING, so concurrent
        callers are serialized by the row lock and never see the same value.
        """
        dialect = self.session.bind.dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert

        stmt = insert(IdCounter).values(
            organization_id=organization_id, entity_type=entity_type, last_value=1
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[IdCounter.organization_id, IdCounter.entity_type],
            set_={"last_value": IdCounter.last_value + 1},
        ).returning(IdCounter.last_value)

        result = await self.session.execute(stmt)
        return result.scalar_one()
