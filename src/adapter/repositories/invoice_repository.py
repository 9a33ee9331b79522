"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session.
"""

from typing import Optional, List, Tuple
from datetime import date, datetime
from sqlalchemy import and_, inspect, or_, update as sa_update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.errors import ConcurrentUpdateError, DuplicateInvoiceNumberError
from src.domain.invoice import Invoice
from .storage_errors import translate_storage_errors, violates


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE for ledger mutations
    - (account_id, invoice_number) collisions surface as DuplicateInvoiceNumberError
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_storage_errors
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID
        """
        self.session.add(invoice)
        try:
            await self.session.flush()
        except IntegrityError as e:
            if violates(e, "invoice_number", "uq_invoices_account_number"):
                raise DuplicateInvoiceNumberError(invoice.invoice_number) from e
            raise
        await self.session.refresh(invoice)
        return invoice

    @translate_storage_errors
    async def get_by_id(self, invoice_id: int, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve invoice by ID with optional row-level locking

        Args:
            invoice_id: Invoice ID
            for_update: If True, locks the row with SELECT FOR UPDATE and
                reloads it over any copy already in the session

        Returns:
            Invoice if found, None otherwise
        """
        stmt = select(Invoice).where(Invoice.id == invoice_id)

        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    @translate_storage_errors
    async def update(self, invoice: Invoice) -> Invoice:
        """
        Update an existing invoice

        When the version was bumped since the invoice was loaded, the row is
        only written if it still carries the loaded version.

        Args:
            invoice: Invoice entity with updated values

        Returns:
            Updated Invoice

        Raises:
            ConcurrentUpdateError: another transaction changed the version first
        """
        loaded_version = inspect(invoice).attrs.version.history.deleted
        if loaded_version and loaded_version[0] is not None:
            await self._claim_version(invoice.id, loaded_version[0], invoice.version)

        invoice.updated_at = datetime.utcnow()
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def _claim_version(self, invoice_id: int, expected: int, new: int) -> None:
        table = Invoice.__table__
        statement = (
            sa_update(table)
            .where(table.c.id == invoice_id)
            .where(table.c.version == expected)
            .values(version=new)
        )
        result = await self.session.execute(statement)
        if result.rowcount != 1:
            raise ConcurrentUpdateError(
                f"Invoice {invoice_id} was modified by another transaction",
                reason=f"expected version={expected}",
            )

    @translate_storage_errors
    async def find_latest_invoice_number(self, account_id: str) -> Optional[str]:
        statement = (
            select(Invoice.invoice_number)
            .where(Invoice.account_id == account_id)
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    @translate_storage_errors
    async def find_overdue_candidates(
        self,
        today: date,
        limit: int = 500,
        after: Optional[Tuple[date, int]] = None,
    ) -> List[Invoice]:
        """
        Retrieve sent, non-void invoices past due that still owe money

        Uses the cached total_paid as a coarse filter; callers recompute
        the balance before acting on a candidate.
        Pages by keyset on (due_date, id): pass the last row of a page as
        `after` to read the next one.
        """
        statement = (
            select(Invoice)
            .where(Invoice.sent_at.is_not(None))
            .where(Invoice.voided_at.is_(None))
            .where(Invoice.due_date < today)
            .where(Invoice.total_paid < Invoice.total)
            .order_by(Invoice.due_date, Invoice.id)
            .limit(limit)
        )
        if after is not None:
            due_date, invoice_id = after
            statement = statement.where(
                or_(
                    Invoice.due_date > due_date,
                    and_(Invoice.due_date == due_date, Invoice.id > invoice_id),
                )
            )
        result = await self.session.execute(statement)
        return list(result.scalars().all())
