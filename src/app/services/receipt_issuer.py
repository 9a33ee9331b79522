"""Receipt issuing

Issues exactly one receipt per completed payment.
"""

import logging
from decimal import Decimal
from src.app.repositories.receipt_repository import ReceiptRepository
from src.app.services.number_sequencer import ReceiptNumberSequencer
from src.domain.errors import ValidationError
from src.domain.invoice import Invoice
from src.domain.money import round_money
from src.domain.payment import Payment
from src.domain.receipt import Receipt

logger = logging.getLogger(__name__)


class ReceiptIssuer:
    """
    Creates the immutable receipt for a completed payment

    Idempotent on payment_id: issuing twice returns the first receipt
    and allocates no second number.
    """

    def __init__(self, receipt_repo: ReceiptRepository, sequencer: ReceiptNumberSequencer):
        self.receipt_repo = receipt_repo
        self.sequencer = sequencer

    async def issue(self, payment: Payment, invoice: Invoice, balance_after: Decimal) -> Receipt:
        """
        Issue the receipt for a payment

        Args:
            payment: Completed payment with an ID
            invoice: Invoice the payment was applied to
            balance_after: Invoice balance due right after the payment

        Returns:
            New or previously issued Receipt

        Raises:
            ValidationError: payment is not completed
        """
        if not payment.is_completed:
            raise ValidationError(
                "Receipts are only issued for completed payments",
                reason=f"payment_id={payment.id}, status={payment.status.value}",
            )

        existing = await self.receipt_repo.get_by_payment_id(payment.id)
        if existing:
            return existing

        receipt_number = await self.sequencer.next(payment.account_id)
        receipt = Receipt(
            payment_id=payment.id,
            invoice_id=invoice.id,
            account_id=payment.account_id,
            receipt_number=receipt_number,
            amount=round_money(payment.amount),
            currency=invoice.currency,
            payment_method_label=payment.method.label,
            balance_after=round_money(balance_after),
        )
        created = await self.receipt_repo.create(receipt)

        logger.info(
            f"Issued receipt {created.receipt_number} for payment {payment.id} "
            f"on invoice {invoice.invoice_number}"
        )
        return created
