"""SQLAlchemy Invoice Charge Repository Implementation"""

from typing import List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_charge_repository import InvoiceChargeRepository
from src.domain.invoice_charge import InvoiceCharge
from .storage_errors import translate_storage_errors


class SqlAlchemyInvoiceChargeRepository(InvoiceChargeRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_storage_errors
    async def get_by_invoice_id(self, invoice_id: int) -> List[InvoiceCharge]:
        statement = (
            select(InvoiceCharge)
            .where(InvoiceCharge.invoice_id == invoice_id)
            .order_by(InvoiceCharge.position)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    @translate_storage_errors
    async def create_many(self, charges: List[InvoiceCharge]) -> List[InvoiceCharge]:
        self.session.add_all(charges)
        await self.session.flush()
        return charges
