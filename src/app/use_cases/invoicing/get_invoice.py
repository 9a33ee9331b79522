"""GetInvoice Use Case

Returns an invoice summary with derived totals, balance and status.
"""

from typing import Optional
from src.libs.result import Result, Return, Error
from src.app.repositories.receipt_repository import ReceiptRepository
from src.domain.errors import InvoicingError
from .dtos import InvoiceResponseDTO
from .invoice_state import InvoiceStateLoader, to_invoice_response


class GetInvoice:
    """
    Use Case: Read an invoice

    Read-only: derived values are returned, cached columns are not rewritten.
    """

    def __init__(self, loader: InvoiceStateLoader, receipt_repo: Optional[ReceiptRepository] = None):
        self.loader = loader
        self.receipt_repo = receipt_repo

    async def execute(self, invoice_id: int) -> Result[InvoiceResponseDTO]:
        try:
            snapshot = await self.loader.load(invoice_id)
            receipts = []
            if self.receipt_repo is not None:
                receipts = await self.receipt_repo.find_by_invoice(invoice_id)
            return Return.ok(to_invoice_response(snapshot, receipts))

        except InvoicingError as e:
            return Return.err(e.to_error())
        except Exception as e:
            return Return.err(
                Error(
                    code="GET_INVOICE_FAILED",
                    message="Failed to load invoice",
                    reason=str(e),
                )
            )
