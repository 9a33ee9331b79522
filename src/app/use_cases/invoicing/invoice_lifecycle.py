"""Invoice lifecycle use cases

Explicit actions on an invoice: send, record a public view, void. Each
is guarded by InvoiceStatusMachine and refreshes the cached status.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from src.libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.errors import InvoicingError
from src.domain.invoice import Invoice, InvoiceStatus
from .dtos import InvoiceResponseDTO
from .invoice_state import InvoiceStateLoader, apply_cached_state, to_invoice_response

logger = logging.getLogger(__name__)


class InvoiceLifecycleAction(ABC):
    """Lock the invoice, guard the action, stamp its timestamp, re-derive status"""

    action: str

    def __init__(self, uow: UnitOfWork, invoice_repo: InvoiceRepository, loader: InvoiceStateLoader):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.loader = loader

    @abstractmethod
    def _guard(self, status: InvoiceStatus) -> None:
        pass

    @abstractmethod
    def _stamp(self, invoice: Invoice, now: datetime) -> None:
        pass

    async def execute(self, invoice_id: int) -> Result[InvoiceResponseDTO]:
        try:
            snapshot = await self.loader.load(invoice_id, for_update=True)
            invoice = snapshot.invoice
            previous = snapshot.status

            self._guard(previous)
            self._stamp(invoice, datetime.utcnow())

            self.loader.refresh(snapshot, snapshot.payments)
            apply_cached_state(snapshot)
            await self.invoice_repo.update(invoice)
            await self.uow.commit()

            if previous != snapshot.status:
                logger.info(
                    f"Invoice {invoice.invoice_number} status {previous.value} -> "
                    f"{snapshot.status.value} ({self.action})"
                )
            return Return.ok(to_invoice_response(snapshot))

        except InvoicingError as e:
            await self.uow.rollback()
            logger.warning(f"Cannot {self.action} invoice {invoice_id}: {e.message}")
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Unexpected error trying to {self.action} invoice {invoice_id}")
            return Return.err(
                Error(
                    code="INVOICE_LIFECYCLE_FAILED",
                    message=f"Failed to {self.action} invoice",
                    reason=str(e),
                )
            )


class MarkInvoiceSent(InvoiceLifecycleAction):
    """draft -> sent. Re-sending keeps the first sent_at."""

    action = "send"

    def _guard(self, status: InvoiceStatus) -> None:
        self.loader.status_machine.ensure_can_send(status)

    def _stamp(self, invoice: Invoice, now: datetime) -> None:
        if invoice.sent_at is None:
            invoice.sent_at = now


class MarkInvoiceViewed(InvoiceLifecycleAction):
    """Public-access read. Only the first view is recorded; never downgrades a paid invoice."""

    action = "view"

    def _guard(self, status: InvoiceStatus) -> None:
        self.loader.status_machine.ensure_can_mark_viewed(status)

    def _stamp(self, invoice: Invoice, now: datetime) -> None:
        if invoice.viewed_at is None:
            invoice.viewed_at = now


class VoidInvoice(InvoiceLifecycleAction):
    """Administrative void; terminal."""

    action = "void"

    def _guard(self, status: InvoiceStatus) -> None:
        self.loader.status_machine.ensure_can_void(status)

    def _stamp(self, invoice: Invoice, now: datetime) -> None:
        invoice.voided_at = now
