"""
Process-wide database handle.

``connect`` builds the async engine and session factory once at
startup; ``close`` disposes the pool at shutdown. Request code never
touches the engine directly, it receives sessions through dependencies.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import crm_auth.domain.entities  # noqa: F401  registers tables on SQLModel.metadata


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


class Database:
    def __init__(self):
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[sessionmaker] = None

    def connect(self, uri: str, echo: bool = False) -> None:
        self.engine = create_async_engine(uri, echo=echo, future=True)
        self.session_factory = create_session_factory(self.engine)

    async def create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
        self.engine = None
        self.session_factory = None


database = Database()
