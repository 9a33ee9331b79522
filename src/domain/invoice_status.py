"""Invoice status machine

Status is derived, not stored state: it is recomputed from the ledger
position, the due date and the sent/viewed/void timestamps. Precedence,
highest first:

    void > paid > partially_paid > overdue > viewed > sent > draft

so an overdue invoice that receives a partial payment reports
partially_paid, and a paid invoice never drops back to viewed.
"""

from datetime import date
from enum import Enum
from typing import Callable, Optional
from src.domain.errors import InvalidStatusTransitionError
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.money import ZERO
from src.domain.payment_ledger import LedgerPosition


def derive_status(
    position: LedgerPosition,
    due_date: date,
    sent: bool,
    viewed: bool,
    voided: bool,
    today: date,
) -> InvoiceStatus:
    if voided:
        return InvoiceStatus.VOID
    if position.is_settled:
        return InvoiceStatus.PAID
    if position.total_paid > ZERO:
        return InvoiceStatus.PARTIALLY_PAID
    if not sent:
        return InvoiceStatus.DRAFT
    if due_date < today and position.balance_due > ZERO:
        return InvoiceStatus.OVERDUE
    if viewed:
        return InvoiceStatus.VIEWED
    return InvoiceStatus.SENT


class InvoiceStatusMachine:
    """Derives status and guards explicit lifecycle actions"""

    def __init__(self, today: Callable[[], date] = date.today):
        self._today = today

    def today(self) -> date:
        return self._today()

    def derive(
        self,
        invoice: Invoice,
        position: LedgerPosition,
        today: Optional[date] = None,
    ) -> InvoiceStatus:
        return derive_status(
            position=position,
            due_date=invoice.due_date,
            sent=invoice.is_sent,
            viewed=invoice.is_viewed,
            voided=invoice.is_void,
            today=today or self._today(),
        )

    def days_past_due(self, invoice: Invoice, today: Optional[date] = None) -> int:
        return max(0, ((today or self._today()) - invoice.due_date).days)

    def ensure_can_send(self, status: InvoiceStatus) -> None:
        if status == InvoiceStatus.VOID:
            raise InvalidStatusTransitionError(status.value, "send")

    def ensure_can_mark_viewed(self, status: InvoiceStatus) -> None:
        # Public links exist only once an invoice has been sent
        if status in (InvoiceStatus.DRAFT, InvoiceStatus.VOID):
            raise InvalidStatusTransitionError(status.value, "view")

    def ensure_can_void(self, status: InvoiceStatus) -> None:
        if status == InvoiceStatus.VOID:
            raise InvalidStatusTransitionError(status.value, "void")

    def ensure_accepts_payment(self, status: InvoiceStatus) -> None:
        if status == InvoiceStatus.VOID:
            raise InvalidStatusTransitionError(status.value, "record a payment on")


class ReminderLevel(str, Enum):
    """Tone of an overdue payment reminder"""
    GENTLE = "gentle"   # Up to a week late
    FIRM = "firm"       # Up to a month late
    FINAL = "final"     # More than a month late


def reminder_level(days_past_due: int) -> ReminderLevel:
    if days_past_due <= 7:
        return ReminderLevel.GENTLE
    if days_past_due <= 30:
        return ReminderLevel.FIRM
    return ReminderLevel.FINAL
