"""Invoice Repository Interface

Defines the contract for invoice persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Tuple
from datetime import date
from src.domain.invoice import Invoice


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Implementations raise StorageError on collaborator failure and
    DuplicateInvoiceNumberError when (account_id, invoice_number) collides.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, invoice_id: int, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve invoice by ID

        Args:
            invoice_id: Invoice ID
            for_update: If True, lock the row with SELECT FOR UPDATE until commit

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, invoice: Invoice) -> Invoice:
        """
        Persist changes to an existing invoice

        Args:
            invoice: Invoice entity with updated values

        Returns:
            Updated Invoice
        """
        pass

    @abstractmethod
    async def find_latest_invoice_number(self, account_id: str) -> Optional[str]:
        """
        Number of the most recently created invoice of an account

        Args:
            account_id: Account identifier

        Returns:
            Invoice number, or None when the account has no invoices
        """
        pass

    @abstractmethod
    async def find_overdue_candidates(
        self,
        today: date,
        limit: int = 500,
        after: Optional[Tuple[date, int]] = None,
    ) -> List[Invoice]:
        """
        Sent, non-void invoices with an outstanding balance due before today

        Args:
            today: Reference date
            limit: Maximum number of invoices to return
            after: (due_date, id) of the last invoice of the previous page

        Returns:
            List of invoices ordered by due date, then id
        """
        pass
