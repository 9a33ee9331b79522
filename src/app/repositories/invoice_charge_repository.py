"""Invoice Charge Repository Interface

Defines the contract for additional charge persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.invoice_charge import InvoiceCharge


class InvoiceChargeRepository(ABC):
    """Repository interface for InvoiceCharge persistence"""

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: int) -> List[InvoiceCharge]:
        """Retrieve all additional charges for an invoice, in position order"""
        pass

    @abstractmethod
    async def create_many(self, charges: List[InvoiceCharge]) -> List[InvoiceCharge]:
        """Persist additional charges"""
        pass
