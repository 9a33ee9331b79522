"""Receipt Repository Interface

Defines the contract for receipt persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Optional, List
from src.domain.receipt import Receipt


class ReceiptRepository(ABC):
    """
    Repository interface for Receipt persistence

    Receipts are insert-only. Implementations raise DuplicateReceiptError
    when a payment already has a receipt or a number collides.
    """

    @abstractmethod
    async def create(self, receipt: Receipt) -> Receipt:
        """
        Create a new receipt

        Args:
            receipt: Receipt entity to persist

        Returns:
            Created Receipt with generated ID
        """
        pass

    @abstractmethod
    async def get_by_payment_id(self, payment_id: int) -> Optional[Receipt]:
        """Receipt issued for a payment, if any"""
        pass

    @abstractmethod
    async def find_by_invoice(self, invoice_id: int) -> List[Receipt]:
        """All receipts issued for payments of an invoice"""
        pass

    @abstractmethod
    async def find_latest_receipt_number(self, account_id: str) -> Optional[str]:
        """Number of the most recently issued receipt of an account"""
        pass
