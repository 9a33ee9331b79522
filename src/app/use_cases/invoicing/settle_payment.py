"""SettlePayment Use Case

Clears (completes) or fails a pending payment.
"""

import logging
from typing import Optional
from src.libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.receipt_issuer import ReceiptIssuer
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.errors import InvoicingError, PaymentNotFoundError, StorageError
from src.domain.payment_ledger import PaymentLedger
from .dtos import PaymentResultDTO, SettlePaymentCommandDTO, SettlementOutcome
from .invoice_state import (
    InvoiceStateLoader,
    apply_cached_state,
    to_invoice_response,
    to_payment_dto,
    to_receipt_dto,
)

logger = logging.getLogger(__name__)


class SettlePayment:
    """
    Use Case: Settle a pending payment

    Business Rules:
    1. Only pending payments can be settled
    2. Completing rechecks the balance; a payment that no longer fits is
       rejected with OVERPAYMENT and stays pending
    3. Completing issues the receipt; failing issues none
    4. Lock order matches RecordPayment: invoice row first, then payment row
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
        loader: InvoiceStateLoader,
        receipt_issuer: ReceiptIssuer,
        ledger: Optional[PaymentLedger] = None,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo
        self.loader = loader
        self.receipt_issuer = receipt_issuer
        self.ledger = ledger or PaymentLedger()

    async def execute(self, command: SettlePaymentCommandDTO) -> Result[PaymentResultDTO]:
        try:
            found = await self.payment_repo.get_by_id(command.payment_id)
            if found is None:
                raise PaymentNotFoundError(command.payment_id)

            snapshot = await self.loader.load(found.invoice_id, for_update=True)
            invoice = snapshot.invoice
            payment = await self.payment_repo.get_by_id(command.payment_id, for_update=True)
            if payment is None:
                raise PaymentNotFoundError(command.payment_id)
            others = [p for p in snapshot.payments if p.id != payment.id]

            receipt = None
            if command.outcome == SettlementOutcome.COMPLETED:
                self.loader.status_machine.ensure_accepts_payment(snapshot.status)
                position = self.ledger.complete_pending(payment, snapshot.totals.total, others)
                payment = await self.payment_repo.update(payment)
                receipt = await self.receipt_issuer.issue(payment, invoice, position.balance_due)
            else:
                self.ledger.fail_pending(payment)
                payment = await self.payment_repo.update(payment)

            self.loader.refresh(snapshot, others + [payment])
            apply_cached_state(snapshot, bump_version=True)
            await self.invoice_repo.update(invoice)

            await self.uow.commit()

            logger.info(
                f"Payment {payment.id} on invoice {invoice.invoice_number} settled as "
                f"{payment.status.value}: balance_due={snapshot.position.balance_due}, "
                f"status={snapshot.status.value}"
            )

            return Return.ok(
                PaymentResultDTO(
                    payment=to_payment_dto(payment),
                    receipt=to_receipt_dto(receipt) if receipt else None,
                    invoice=to_invoice_response(snapshot),
                )
            )

        except StorageError as e:
            await self.uow.rollback()
            logger.error(f"Storage failure settling payment {command.payment_id}: {e.reason}")
            return Return.err(e.to_error())
        except InvoicingError as e:
            await self.uow.rollback()
            logger.warning(f"Settlement of payment {command.payment_id} rejected: {e.message}")
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Unexpected error settling payment {command.payment_id}")
            return Return.err(
                Error(
                    code="SETTLE_PAYMENT_FAILED",
                    message="Failed to settle payment",
                    reason=str(e),
                )
            )
