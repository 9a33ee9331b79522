"""Payment ledger

Computes an invoice's outstanding balance from its completed payments and
validates new payments against it. The ledger never clamps: a payment
larger than the balance due is rejected with the balance attached.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional
from src.domain.errors import (
    DuplicatePaymentReferenceError,
    OverpaymentError,
    ValidationError,
)
from src.domain.invoice import Invoice
from src.domain.money import ZERO, MoneyInput, is_settled, round_money, sum_money, to_decimal
from src.domain.payment import Payment, PaymentMethod, PaymentStatus


@dataclass(frozen=True)
class LedgerPosition:
    """Invoice total, amount paid and balance due, all rounded to the cent"""
    total: Decimal
    total_paid: Decimal
    balance_due: Decimal

    @property
    def is_settled(self) -> bool:
        return self.total_paid > ZERO and is_settled(self.balance_due)


@dataclass(frozen=True)
class PaymentApplication:
    """Outcome of applying a payment: the new payment and the updated position"""
    payment: Payment
    position: LedgerPosition


class PaymentLedger:
    """Balance bookkeeping for a single invoice"""

    def position(self, total: Decimal, payments: Iterable[Payment]) -> LedgerPosition:
        """balance_due = total - sum(completed payments), floored at zero"""
        total = round_money(total)
        total_paid = sum_money(p.amount for p in payments if p.is_completed)
        balance_due = max(round_money(total - total_paid), ZERO)
        return LedgerPosition(total=total, total_paid=total_paid, balance_due=balance_due)

    def validate_amount(self, position: LedgerPosition, amount: MoneyInput) -> Decimal:
        """
        Check a payment amount against the balance due

        Raises:
            ValidationError: amount not positive or finer than a cent
            OverpaymentError: amount exceeds the balance due
        """
        value = to_decimal(amount)
        if value <= 0:
            raise ValidationError("Payment amount must be greater than 0", reason=f"amount={value}")
        if value != round_money(value):
            raise ValidationError(
                "Payment amount cannot have more than 2 decimal places",
                reason=f"amount={value}",
            )
        value = round_money(value)
        if value > position.balance_due:
            raise OverpaymentError(amount=value, balance_due=position.balance_due)
        return value

    def ensure_unique_reference(self, payments: Iterable[Payment], reference: Optional[str]) -> None:
        if reference is None:
            return
        if any(p.reference == reference for p in payments):
            raise DuplicatePaymentReferenceError(reference)

    def after_payment(self, position: LedgerPosition, amount: Decimal) -> LedgerPosition:
        total_paid = round_money(position.total_paid + amount)
        return LedgerPosition(
            total=position.total,
            total_paid=total_paid,
            balance_due=max(round_money(position.total - total_paid), ZERO),
        )

    def apply_payment(
        self,
        invoice: Invoice,
        payments: Iterable[Payment],
        amount: MoneyInput,
        method: PaymentMethod,
        reference: Optional[str] = None,
        total: Optional[Decimal] = None,
        status: PaymentStatus = PaymentStatus.COMPLETED,
        paid_on: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> PaymentApplication:
        """
        Build a payment for the invoice and the resulting ledger position

        Pending payments are validated the same way but do not move the
        balance until they complete.

        Args:
            total: recomputed invoice total (defaults to the cached total)

        Raises:
            ValidationError, OverpaymentError, DuplicatePaymentReferenceError
        """
        if status not in (PaymentStatus.COMPLETED, PaymentStatus.PENDING):
            raise ValidationError(
                "New payments must be completed or pending",
                reason=f"status={status}",
            )
        payments = list(payments)
        self.ensure_unique_reference(payments, reference)

        position = self.position(invoice.total if total is None else total, payments)
        value = self.validate_amount(position, amount)

        payment = Payment(
            invoice_id=invoice.id,
            account_id=invoice.account_id,
            amount=value,
            method=PaymentMethod(method),
            reference=reference,
            status=status,
            paid_on=paid_on or date.today(),
            notes=notes,
        )

        if status == PaymentStatus.COMPLETED:
            position = self.after_payment(position, value)
        return PaymentApplication(payment=payment, position=position)

    def complete_pending(
        self,
        payment: Payment,
        total: Decimal,
        payments: Iterable[Payment],
    ) -> LedgerPosition:
        """
        Move a pending payment to completed, rechecking the balance

        Raises:
            ValidationError: payment is not pending
            OverpaymentError: the balance shrank below the pending amount
        """
        if payment.status != PaymentStatus.PENDING:
            raise ValidationError(
                f"Only pending payments can be completed (status={payment.status.value})",
                reason=f"payment_id={payment.id}",
            )
        others = [p for p in payments if p.id != payment.id]
        position = self.position(total, others)
        self.validate_amount(position, payment.amount)

        payment.status = PaymentStatus.COMPLETED
        payment.updated_at = datetime.utcnow()
        return self.after_payment(position, round_money(payment.amount))

    def fail_pending(self, payment: Payment) -> None:
        if payment.status != PaymentStatus.PENDING:
            raise ValidationError(
                f"Only pending payments can fail (status={payment.status.value})",
                reason=f"payment_id={payment.id}",
            )
        payment.status = PaymentStatus.FAILED
        payment.updated_at = datetime.utcnow()
