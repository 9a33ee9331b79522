"""Payment API Routes"""

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.invoice_request import SettlePaymentRequestSchema
from src.app.use_cases.invoicing.dtos import PaymentResultDTO, SettlePaymentCommandDTO
from src.app.use_cases.invoicing.settle_payment import SettlePayment
from src.adapter.repositories import SqlAlchemyInvoiceRepository, SqlAlchemyPaymentRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import build_receipt_issuer, build_state_loader, get_session
from src.api.error import ClientError

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/{payment_id}/settle", response_model=PaymentResultDTO)
async def settle_payment(
    payment_id: int,
    request: SettlePaymentRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """
    Settle a pending payment.

    `completed` rechecks the balance and issues the receipt; `failed`
    leaves the balance unchanged.
    """
    use_case = SettlePayment(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
        loader=build_state_loader(session),
        receipt_issuer=build_receipt_issuer(session),
    )
    result = await use_case.execute(
        SettlePaymentCommandDTO(payment_id=payment_id, outcome=request.outcome)
    )

    if result.is_err():
        raise ClientError(result.error)

    return result.value
