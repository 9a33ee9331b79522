"""DetectOverdueInvoices Use Case

Periodic sweep: refreshes the cached status of invoices that fell past
their due date and sends a reminder for each.
"""

import logging
from datetime import date, datetime
from typing import Optional
from src.libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.errors import InvoicingError
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_status import reminder_level
from .dtos import DetectOverdueResponseDTO, OverdueReminderDTO
from .invoice_state import InvoiceStateLoader, apply_cached_state

logger = logging.getLogger(__name__)


class DetectOverdueInvoices:
    """
    Use Case: Detect overdue invoices

    Business Rules:
    1. Candidates are sent, non-void invoices past due with a cached balance
    2. Each candidate's balance and status are re-derived before acting
    3. Invoices whose derived status is not overdue are skipped (e.g. partially paid)
    4. Reminder level: gentle up to 7 days late, firm up to 30, final beyond
    5. A failed notification does not stop the sweep or the status refresh
    6. Candidates are read in pages of batch_size ordered by (due_date, id),
       each page committed before the next, until every candidate was seen
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        loader: InvoiceStateLoader,
        notification_service: Optional[NotificationService] = None,
        batch_size: int = 500,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.loader = loader
        self.notification_service = notification_service
        self.batch_size = batch_size

    async def execute(self, today: Optional[date] = None) -> Result[DetectOverdueResponseDTO]:
        """
        Execute the overdue sweep

        Args:
            today: Reference date (defaults to the status machine's clock)

        Returns:
            Result[DetectOverdueResponseDTO]: Sweep summary or error
        """
        try:
            today = today or self.loader.status_machine.today()

            reminders = []
            status_updates = 0
            checked = 0
            after = None
            while True:
                page = await self.invoice_repo.find_overdue_candidates(
                    today, limit=self.batch_size, after=after
                )
                checked += len(page)
                for invoice in page:
                    snapshot = await self.loader.snapshot_of(invoice, today=today)
                    if apply_cached_state(snapshot):
                        await self.invoice_repo.update(invoice)
                        status_updates += 1

                    if snapshot.status != InvoiceStatus.OVERDUE:
                        continue

                    reminders.append(await self._remind(invoice, snapshot, today))

                await self.uow.commit()

                if len(page) < self.batch_size:
                    break
                after = (page[-1].due_date, page[-1].id)

            if reminders:
                logger.info(
                    f"Overdue sweep: {checked} checked, {len(reminders)} overdue, "
                    f"{status_updates} status updates"
                )

            return Return.ok(
                DetectOverdueResponseDTO(
                    checked=checked,
                    status_updates=status_updates,
                    reminders=reminders,
                    checked_at=datetime.utcnow(),
                )
            )

        except InvoicingError as e:
            await self.uow.rollback()
            logger.error(f"Overdue sweep failed: {e.message}")
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.exception("Unexpected error during overdue sweep")
            return Return.err(
                Error(
                    code="OVERDUE_DETECTION_FAILED",
                    message="Failed to detect overdue invoices",
                    reason=str(e),
                )
            )

    async def _remind(self, invoice, snapshot, today: date) -> OverdueReminderDTO:
        days_past_due = self.loader.status_machine.days_past_due(invoice, today=today)
        level = reminder_level(days_past_due)

        notified = False
        if self.notification_service:
            notified = await self.notification_service.send_overdue_reminder(
                invoice, snapshot.position.balance_due, days_past_due, level
            )

        return OverdueReminderDTO(
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            account_id=invoice.account_id,
            balance_due=snapshot.position.balance_due,
            days_past_due=days_past_due,
            reminder_level=level,
            notified=notified,
        )
