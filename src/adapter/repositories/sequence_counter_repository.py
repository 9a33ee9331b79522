"""SQLAlchemy implementation of SequenceCounterRepository

Allocates sequence values from a locked counter row. The counter row,
never an aggregate max over issued numbers, is the source of truth for
the next value; issued numbers only raise its floor.
"""

import logging
from typing import Optional
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.sequence_counter_repository import SequenceCounterRepository
from src.domain.sequence_counter import SequenceCounter, SequenceNamespace
from .storage_errors import translate_storage_errors

logger = logging.getLogger(__name__)


class SqlAlchemySequenceCounterRepository(SequenceCounterRepository):
    """
    SQLAlchemy implementation of SequenceCounterRepository

    Features:
    - SELECT FOR UPDATE serializes allocations per (account, namespace)
    - First-use creation races are resolved inside a savepoint
    - The increment is only visible once the caller commits
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _select(
        self, account_id: str, namespace: SequenceNamespace, for_update: bool = False
    ) -> Optional[SequenceCounter]:
        stmt = (
            select(SequenceCounter)
            .where(SequenceCounter.account_id == account_id)
            .where(SequenceCounter.namespace == namespace)
        )

        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _get_or_create_locked(
        self, account_id: str, namespace: SequenceNamespace
    ) -> SequenceCounter:
        counter = await self._select(account_id, namespace, for_update=True)
        if counter is not None:
            return counter

        try:
            async with self.session.begin_nested():
                counter = SequenceCounter(account_id=account_id, namespace=namespace, last_value=0)
                self.session.add(counter)
        except IntegrityError:
            # Another transaction created the counter first
            logger.debug(f"Sequence counter race for {account_id}/{namespace.value}, retrying")
            counter = await self._select(account_id, namespace, for_update=True)
            if counter is None:
                raise
        return counter

    @translate_storage_errors
    async def get(self, account_id: str, namespace: SequenceNamespace) -> Optional[SequenceCounter]:
        return await self._select(account_id, namespace)

    @translate_storage_errors
    async def increment(self, account_id: str, namespace: SequenceNamespace, floor: int = 0) -> int:
        """
        Lock (or create) the counter row and advance it past the floor

        Args:
            account_id: Account identifier
            namespace: Counter namespace
            floor: Sequence value already consumed by issued numbers

        Returns:
            The new last_value
        """
        counter = await self._get_or_create_locked(account_id, namespace)

        counter.last_value = max(counter.last_value, floor) + 1
        counter.updated_at = datetime.utcnow()
        self.session.add(counter)
        await self.session.flush()

        logger.debug(
            f"Sequence {namespace.value} for account {account_id} advanced to {counter.last_value}"
        )
        return counter.last_value

    @translate_storage_errors
    async def save_template(
        self, account_id: str, namespace: SequenceNamespace, template: Optional[str]
    ) -> SequenceCounter:
        counter = await self._get_or_create_locked(account_id, namespace)

        counter.number_format_template = template
        counter.updated_at = datetime.utcnow()
        self.session.add(counter)
        await self.session.flush()
        await self.session.refresh(counter)
        return counter
