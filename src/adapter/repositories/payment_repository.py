"""SQLAlchemy Payment Repository Implementation

Implements payment persistence using SQLAlchemy async session.
"""

from typing import Optional, List
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.errors import DuplicatePaymentReferenceError
from src.domain.payment import Payment
from .storage_errors import translate_storage_errors, violates


class SqlAlchemyPaymentRepository(PaymentRepository):
    """
    SQLAlchemy implementation of PaymentRepository

    The (invoice_id, reference) unique constraint is the final guard
    against a reference being applied twice by concurrent requests.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_storage_errors
    async def create(self, payment: Payment) -> Payment:
        """
        Create a new payment

        Args:
            payment: Payment entity to persist

        Returns:
            Created Payment with generated ID

        Raises:
            DuplicatePaymentReferenceError: reference already recorded for the invoice
        """
        self.session.add(payment)
        try:
            await self.session.flush()
        except IntegrityError as e:
            if payment.reference and violates(e, "reference"):
                raise DuplicatePaymentReferenceError(payment.reference) from e
            raise
        await self.session.refresh(payment)
        return payment

    @translate_storage_errors
    async def get_by_id(self, payment_id: int, for_update: bool = False) -> Optional[Payment]:
        stmt = select(Payment).where(Payment.id == payment_id)

        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    @translate_storage_errors
    async def update(self, payment: Payment) -> Payment:
        payment.updated_at = datetime.utcnow()
        self.session.add(payment)
        await self.session.flush()
        await self.session.refresh(payment)
        return payment

    @translate_storage_errors
    async def find_by_invoice(self, invoice_id: int) -> List[Payment]:
        statement = (
            select(Payment)
            .where(Payment.invoice_id == invoice_id)
            .order_by(Payment.recorded_at, Payment.id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())
