"""Payment Repository Interface

Defines the contract for payment persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Optional, List
from src.domain.payment import Payment


class PaymentRepository(ABC):
    """
    Repository interface for Payment persistence

    Implementations raise DuplicatePaymentReferenceError when the
    (invoice_id, reference) uniqueness constraint is violated.
    """

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        """
        Create a new payment

        Args:
            payment: Payment entity to persist

        Returns:
            Created Payment with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, payment_id: int, for_update: bool = False) -> Optional[Payment]:
        """
        Retrieve payment by ID

        Args:
            payment_id: Payment ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Payment if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, payment: Payment) -> Payment:
        """Persist a payment status change"""
        pass

    @abstractmethod
    async def find_by_invoice(self, invoice_id: int) -> List[Payment]:
        """
        Retrieve all payments of an invoice, any status

        Args:
            invoice_id: Invoice ID

        Returns:
            List of payments ordered by recorded_at
        """
        pass
