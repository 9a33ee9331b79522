"""GetInvoiceStatus Use Case

Derives the current status of an invoice from its ledger, due date and
lifecycle timestamps.
"""

from src.libs.result import Result, Return, Error
from src.domain.errors import InvoicingError
from .dtos import InvoiceStatusResponseDTO
from .invoice_state import InvoiceStateLoader


class GetInvoiceStatus:
    """
    Use Case: Current status of an invoice

    Status is always derived on read; the cached status column may lag
    until the next ledger mutation or overdue sweep.
    """

    def __init__(self, loader: InvoiceStateLoader):
        self.loader = loader

    async def execute(self, invoice_id: int) -> Result[InvoiceStatusResponseDTO]:
        try:
            snapshot = await self.loader.load(invoice_id)
            invoice = snapshot.invoice
            days_past_due = 0
            if snapshot.position.balance_due > 0 and not invoice.is_void:
                days_past_due = self.loader.status_machine.days_past_due(invoice)

            return Return.ok(
                InvoiceStatusResponseDTO(
                    invoice_id=invoice.id,
                    invoice_number=invoice.invoice_number,
                    status=snapshot.status,
                    total=snapshot.position.total,
                    total_paid=snapshot.position.total_paid,
                    balance_due=snapshot.position.balance_due,
                    days_past_due=days_past_due,
                )
            )

        except InvoicingError as e:
            return Return.err(e.to_error())
        except Exception as e:
            return Return.err(
                Error(
                    code="GET_INVOICE_STATUS_FAILED",
                    message="Failed to derive invoice status",
                    reason=str(e),
                )
            )
