"""Account API Routes

Invoice number reservation and number template settings.
"""

from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.invoice_request import NextInvoiceNumberRequestSchema, NumberFormatRequestSchema
from src.app.use_cases.invoicing.dtos import (
    ConfigureNumberFormatCommandDTO,
    NextInvoiceNumberCommandDTO,
    NextInvoiceNumberResponseDTO,
    NumberFormatResponseDTO,
)
from src.app.use_cases.invoicing.configure_number_format import ConfigureNumberFormat
from src.app.use_cases.invoicing.next_invoice_number import NextInvoiceNumber
from src.adapter.repositories import SqlAlchemySequenceCounterRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.sequence_counter import SequenceNamespace
from src.depends import build_invoice_sequencer, get_session
from src.api.error import ClientError

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post(
    "/{account_id}/invoice-numbers",
    response_model=NextInvoiceNumberResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def next_invoice_number(
    account_id: str,
    request: Optional[NextInvoiceNumberRequestSchema] = None,
    session: AsyncSession = Depends(get_session),
):
    """
    Reserve the next invoice number of an account.

    Each call consumes a sequence value, so two calls never return the
    same number.
    """
    use_case = NextInvoiceNumber(SqlAlchemyUnitOfWork(session), build_invoice_sequencer(session))
    command = NextInvoiceNumberCommandDTO(
        account_id=account_id,
        template=request.template if request else None,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.put("/{account_id}/number-formats/{namespace}", response_model=NumberFormatResponseDTO)
async def configure_number_format(
    account_id: str,
    namespace: SequenceNamespace,
    request: NumberFormatRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """Set the invoice or receipt number template of an account."""
    use_case = ConfigureNumberFormat(
        SqlAlchemyUnitOfWork(session), SqlAlchemySequenceCounterRepository(session)
    )
    command = ConfigureNumberFormatCommandDTO(
        account_id=account_id, namespace=namespace, template=request.template
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
