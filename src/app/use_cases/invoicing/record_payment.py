"""RecordPayment Use Case

Applies a payment to an invoice under a per-invoice row lock, issues the
receipt and refreshes the invoice's cached balance and status.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional
from src.libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.receipt_issuer import ReceiptIssuer
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.errors import InvoicingError, OverpaymentError, StorageError
from src.domain.money import to_decimal
from src.domain.payment import PaymentMethod, PaymentStatus
from src.domain.payment_ledger import PaymentLedger
from .dtos import PaymentResultDTO, RecordPaymentCommandDTO
from .invoice_state import (
    InvoiceStateLoader,
    apply_cached_state,
    to_invoice_response,
    to_payment_dto,
    to_receipt_dto,
)

logger = logging.getLogger(__name__)


class PendingPaymentPolicy:
    """
    Decides whether a new payment starts pending

    A payment is pending when the caller asks for it, or, absent an
    explicit choice, when its method needs clearance or its amount is at
    or above the review threshold.
    """

    def __init__(
        self,
        methods: Iterable[PaymentMethod] = (),
        threshold: Optional[Decimal] = None,
    ):
        self.methods = {PaymentMethod(m) for m in methods}
        self.threshold = None if threshold is None else to_decimal(threshold, "threshold")

    def initial_status(self, command: RecordPaymentCommandDTO) -> PaymentStatus:
        if command.pending is not None:
            return PaymentStatus.PENDING if command.pending else PaymentStatus.COMPLETED
        if command.method in self.methods:
            return PaymentStatus.PENDING
        if self.threshold is not None and to_decimal(command.amount) >= self.threshold:
            return PaymentStatus.PENDING
        return PaymentStatus.COMPLETED


class RecordPayment:
    """
    Use Case: Record a payment against an invoice

    Business Rules:
    1. Void invoices accept no payments
    2. 0 < amount <= balance due, no sub-cent amounts; never clamped
    3. A reference is applied at most once per invoice
    4. Completed payments get exactly one receipt in the same transaction
    5. Pessimistic locking: SELECT FOR UPDATE on the invoice row

    Flow:
    1. Lock invoice and derive its current state
    2. Validate lifecycle and apply payment through the ledger
    3. Create payment (and receipt if completed)
    4. Refresh cached balance/status, bump version
    5. Commit transaction
    6. Return payment, receipt and invoice
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
        loader: InvoiceStateLoader,
        receipt_issuer: ReceiptIssuer,
        pending_policy: Optional[PendingPaymentPolicy] = None,
        ledger: Optional[PaymentLedger] = None,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo
        self.loader = loader
        self.receipt_issuer = receipt_issuer
        self.pending_policy = pending_policy or PendingPaymentPolicy()
        self.ledger = ledger or PaymentLedger()

    async def execute(self, command: RecordPaymentCommandDTO) -> Result[PaymentResultDTO]:
        """
        Execute payment recording

        Args:
            command: RecordPaymentCommandDTO with invoice_id, amount, method, reference

        Returns:
            Result[PaymentResultDTO]: Payment, receipt and refreshed invoice, or error.
            OVERPAYMENT errors carry balance_due in details.
        """
        try:
            # Step 1: Lock invoice row for the rest of the transaction
            snapshot = await self.loader.load(command.invoice_id, for_update=True)
            invoice = snapshot.invoice

            # Step 2: Lifecycle guard and ledger validation
            self.loader.status_machine.ensure_accepts_payment(snapshot.status)
            status = self.pending_policy.initial_status(command)

            application = self.ledger.apply_payment(
                invoice=invoice,
                payments=snapshot.payments,
                amount=command.amount,
                method=command.method,
                reference=command.reference,
                total=snapshot.totals.total,
                status=status,
                paid_on=command.paid_on,
                notes=command.notes,
            )

            # Step 3: Persist payment, then its receipt
            payment = await self.payment_repo.create(application.payment)
            receipt = None
            if payment.is_completed:
                receipt = await self.receipt_issuer.issue(
                    payment, invoice, application.position.balance_due
                )

            # Step 4: Refresh the invoice cache
            self.loader.refresh(snapshot, snapshot.payments + [payment])
            apply_cached_state(snapshot, bump_version=True)
            await self.invoice_repo.update(invoice)

            # Step 5: Commit transaction
            await self.uow.commit()

            logger.info(
                f"Recorded {payment.status.value} payment {payment.id} of {payment.amount} "
                f"on invoice {invoice.invoice_number}: balance_due={snapshot.position.balance_due}, "
                f"status={snapshot.status.value}"
            )

            return Return.ok(
                PaymentResultDTO(
                    payment=to_payment_dto(payment),
                    receipt=to_receipt_dto(receipt) if receipt else None,
                    invoice=to_invoice_response(snapshot),
                )
            )

        except OverpaymentError as e:
            await self.uow.rollback()
            logger.warning(
                f"Overpayment rejected on invoice {command.invoice_id}: "
                f"amount={e.amount}, balance_due={e.balance_due}"
            )
            return Return.err(e.to_error())
        except StorageError as e:
            await self.uow.rollback()
            logger.error(f"Storage failure recording payment on invoice {command.invoice_id}: {e.reason}")
            return Return.err(e.to_error())
        except InvoicingError as e:
            await self.uow.rollback()
            logger.warning(f"Payment rejected on invoice {command.invoice_id}: {e.message}")
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Unexpected error recording payment on invoice {command.invoice_id}")
            return Return.err(
                Error(
                    code="RECORD_PAYMENT_FAILED",
                    message="Failed to record payment",
                    reason=str(e),
                )
            )
