"""Invoice API Routes

FastAPI routes for invoice creation, reads, lifecycle actions and payments.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.invoice_request import CreateInvoiceRequestSchema, RecordPaymentRequestSchema
from src.app.use_cases.invoicing.dtos import (
    CreateInvoiceCommandDTO,
    InvoiceResponseDTO,
    InvoiceStatusResponseDTO,
    PaymentResultDTO,
    RecordPaymentCommandDTO,
)
from src.app.use_cases.invoicing.create_invoice import CreateInvoice
from src.app.use_cases.invoicing.get_invoice import GetInvoice
from src.app.use_cases.invoicing.get_invoice_status import GetInvoiceStatus
from src.app.use_cases.invoicing.invoice_lifecycle import (
    MarkInvoiceSent,
    MarkInvoiceViewed,
    VoidInvoice,
)
from src.app.use_cases.invoicing.record_payment import PendingPaymentPolicy, RecordPayment
from src.adapter.repositories import (
    SqlAlchemyInvoiceRepository,
    SqlAlchemyInvoiceLineRepository,
    SqlAlchemyInvoiceChargeRepository,
    SqlAlchemyPaymentRepository,
    SqlAlchemyReceiptRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.invoice_totals import InvoiceAggregator
from src.depends import build_invoice_sequencer, build_receipt_issuer, build_state_loader, get_session
from src.api.error import ClientError

router = APIRouter(prefix="/invoices", tags=["Invoices"])

_ERROR_EXAMPLE = {
    "application/json": {
        "example": {
            "error": {
                "code": "OVERPAYMENT",
                "message": "Payment of 120.00 exceeds balance due of 116.02",
                "details": {"amount": "120.00", "balance_due": "116.02"},
            }
        }
    }
}


@router.post(
    "",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid draft (negative amount, tax rate outside 0-1, no line items)"},
        409: {"description": "Invoice number collision"},
    },
)
async def create_invoice(
    request: CreateInvoiceRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """
    Create a draft invoice.

    Totals are computed from the line items (each line rounded half-up
    before summing), the discount is applied before tax, and the next
    invoice number of the account is assigned.

    **Returns:**
    - 201: Invoice created
    - 400: Validation error
    - 409: Number collision, safe to retry
    """
    use_case = CreateInvoice(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        line_repo=SqlAlchemyInvoiceLineRepository(session),
        charge_repo=SqlAlchemyInvoiceChargeRepository(session),
        sequencer=build_invoice_sequencer(session),
        aggregator=InvoiceAggregator(discount_mode=ApplicationConfig.DISCOUNT_MODE),
        default_currency=ApplicationConfig.DEFAULT_CURRENCY,
        payment_terms_days=ApplicationConfig.DEFAULT_PAYMENT_TERMS_DAYS,
    )
    result = await use_case.execute(CreateInvoiceCommandDTO(**request.model_dump()))

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/{invoice_id}", response_model=InvoiceResponseDTO)
async def get_invoice(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Invoice summary with line items, charges, payments, receipts and derived balance."""
    use_case = GetInvoice(build_state_loader(session), SqlAlchemyReceiptRepository(session))
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/{invoice_id}/status", response_model=InvoiceStatusResponseDTO)
async def get_invoice_status(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Current status derived from balance, due date and lifecycle timestamps."""
    result = await GetInvoiceStatus(build_state_loader(session)).execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


async def _run_lifecycle(action_cls, invoice_id: int, session: AsyncSession):
    use_case = action_cls(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        build_state_loader(session),
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/{invoice_id}/send", response_model=InvoiceResponseDTO)
async def send_invoice(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Mark the invoice as sent to the customer."""
    return await _run_lifecycle(MarkInvoiceSent, invoice_id, session)


@router.post("/{invoice_id}/view", response_model=InvoiceResponseDTO)
async def view_invoice(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Record a public-access read of a sent invoice."""
    return await _run_lifecycle(MarkInvoiceViewed, invoice_id, session)


@router.post("/{invoice_id}/void", response_model=InvoiceResponseDTO)
async def void_invoice(invoice_id: int, session: AsyncSession = Depends(get_session)):
    """Void the invoice. Terminal."""
    return await _run_lifecycle(VoidInvoice, invoice_id, session)


@router.post(
    "/{invoice_id}/payments",
    response_model=PaymentResultDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Invoice not found"},
        409: {"description": "Payment reference already recorded for this invoice"},
        422: {"description": "Amount exceeds the balance due", "content": _ERROR_EXAMPLE},
    },
)
async def record_payment(
    invoice_id: int,
    request: RecordPaymentRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """
    Record a payment against an invoice.

    The amount may not exceed the balance due; the error response
    carries the current balance_due so the client can re-prompt.
    Completed payments return their receipt.

    **Returns:**
    - 201: Payment recorded
    - 400: Invalid amount or void invoice
    - 404: Invoice not found
    - 409: Duplicate reference
    - 422: Overpayment
    """
    use_case = RecordPayment(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
        loader=build_state_loader(session),
        receipt_issuer=build_receipt_issuer(session),
        pending_policy=PendingPaymentPolicy(
            methods=ApplicationConfig.PENDING_PAYMENT_METHODS,
            threshold=ApplicationConfig.PENDING_PAYMENT_THRESHOLD,
        ),
    )
    command = RecordPaymentCommandDTO(invoice_id=invoice_id, **request.model_dump())
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
