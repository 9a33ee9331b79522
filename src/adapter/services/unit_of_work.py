"""SQLAlchemy Unit of Work

Commits or rolls back the shared AsyncSession of a request.
"""

from sqlmodel.ext.asyncio.session import AsyncSession
from src.adapter.repositories.storage_errors import translate_storage_errors
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_storage_errors
    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
