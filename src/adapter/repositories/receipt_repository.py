"""SQLAlchemy Receipt Repository Implementation

Implements receipt persistence using SQLAlchemy async session.
"""

from typing import Optional, List
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.receipt_repository import ReceiptRepository
from src.domain.errors import DuplicateReceiptError
from src.domain.receipt import Receipt
from .storage_errors import translate_storage_errors


class SqlAlchemyReceiptRepository(ReceiptRepository):
    """
    SQLAlchemy implementation of ReceiptRepository

    Receipts are insert-only; there is no update method.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_storage_errors
    async def create(self, receipt: Receipt) -> Receipt:
        """
        Create a new receipt

        Args:
            receipt: Receipt entity to persist

        Returns:
            Created Receipt with generated ID

        Raises:
            DuplicateReceiptError: payment already has a receipt, or the
                receipt number is taken for the account
        """
        self.session.add(receipt)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateReceiptError(
                f"Receipt {receipt.receipt_number} for payment {receipt.payment_id} already exists",
                reason=str(e.orig),
            ) from e
        await self.session.refresh(receipt)
        return receipt

    @translate_storage_errors
    async def get_by_payment_id(self, payment_id: int) -> Optional[Receipt]:
        statement = select(Receipt).where(Receipt.payment_id == payment_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    @translate_storage_errors
    async def find_by_invoice(self, invoice_id: int) -> List[Receipt]:
        statement = (
            select(Receipt)
            .where(Receipt.invoice_id == invoice_id)
            .order_by(Receipt.issued_at, Receipt.id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    @translate_storage_errors
    async def find_latest_receipt_number(self, account_id: str) -> Optional[str]:
        statement = (
            select(Receipt.receipt_number)
            .where(Receipt.account_id == account_id)
            .order_by(Receipt.issued_at.desc(), Receipt.id.desc())
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()
