"""Unit tests for invoice status derivation and lifecycle guards"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from src.domain.errors import InvalidStatusTransitionError, ValidationError
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_status import (
    InvoiceStatusMachine,
    ReminderLevel,
    derive_status,
    reminder_level,
)
from src.domain.payment_ledger import LedgerPosition

DUE = date(2024, 5, 31)
BEFORE_DUE = date(2024, 5, 15)
AFTER_DUE = date(2024, 6, 10)

UNPAID = LedgerPosition(total=Decimal("216.02"), total_paid=Decimal("0.00"), balance_due=Decimal("216.02"))
PARTIAL = LedgerPosition(total=Decimal("216.02"), total_paid=Decimal("100.00"), balance_due=Decimal("116.02"))
PAID = LedgerPosition(total=Decimal("216.02"), total_paid=Decimal("216.02"), balance_due=Decimal("0.00"))


def derive(position=UNPAID, sent=True, viewed=False, voided=False, today=BEFORE_DUE):
    return derive_status(position, DUE, sent=sent, viewed=viewed, voided=voided, today=today)


class TestDeriveStatus:

    def test_unsent_invoice_is_draft(self):
        assert derive(sent=False) == InvoiceStatus.DRAFT

    def test_draft_is_never_overdue(self):
        assert derive(sent=False, today=AFTER_DUE) == InvoiceStatus.DRAFT

    def test_sent(self):
        assert derive() == InvoiceStatus.SENT

    def test_viewed(self):
        assert derive(viewed=True) == InvoiceStatus.VIEWED

    def test_overdue_outranks_viewed(self):
        assert derive(viewed=True, today=AFTER_DUE) == InvoiceStatus.OVERDUE

    def test_not_overdue_on_due_date(self):
        assert derive(today=DUE) == InvoiceStatus.SENT

    def test_partial_payment_outranks_overdue(self):
        assert derive(position=PARTIAL, today=AFTER_DUE) == InvoiceStatus.PARTIALLY_PAID

    def test_paid_outranks_viewed_and_due_date(self):
        assert derive(position=PAID, viewed=True, today=AFTER_DUE) == InvoiceStatus.PAID

    def test_void_outranks_everything(self):
        assert derive(position=PAID, voided=True) == InvoiceStatus.VOID
        assert derive(position=UNPAID, voided=True, today=AFTER_DUE) == InvoiceStatus.VOID


class TestInvoiceStatusMachine:

    @pytest.fixture
    def machine(self):
        return InvoiceStatusMachine(today=lambda: AFTER_DUE)

    @pytest.fixture
    def invoice(self):
        return Invoice(
            id=1,
            account_id="acct_1",
            invoice_number="INV-2024-05-0001",
            customer_id="cust_1",
            issue_date=date(2024, 5, 1),
            due_date=DUE,
            sent_at=datetime(2024, 5, 2, 10, 0),
        )

    def test_derive_uses_clock_and_timestamps(self, machine, invoice):
        assert machine.derive(invoice, UNPAID) == InvoiceStatus.OVERDUE
        assert machine.derive(invoice, UNPAID, today=BEFORE_DUE) == InvoiceStatus.SENT

    def test_days_past_due(self, machine, invoice):
        assert machine.days_past_due(invoice) == 10
        assert machine.days_past_due(invoice, today=BEFORE_DUE) == 0

    def test_void_invoice_rejects_payment(self, machine):
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            machine.ensure_accepts_payment(InvoiceStatus.VOID)

        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.to_error().details == {
            "current_status": "void",
            "action": "record a payment on",
        }

    @pytest.mark.parametrize("status", [InvoiceStatus.DRAFT, InvoiceStatus.OVERDUE, InvoiceStatus.PAID])
    def test_non_void_invoice_accepts_payment_guard(self, machine, status):
        machine.ensure_accepts_payment(status)

    @pytest.mark.parametrize("status", [InvoiceStatus.DRAFT, InvoiceStatus.VOID])
    def test_view_requires_sent_invoice(self, machine, status):
        with pytest.raises(InvalidStatusTransitionError):
            machine.ensure_can_mark_viewed(status)

    def test_cannot_send_or_void_void_invoice(self, machine):
        with pytest.raises(InvalidStatusTransitionError):
            machine.ensure_can_send(InvoiceStatus.VOID)
        with pytest.raises(InvalidStatusTransitionError):
            machine.ensure_can_void(InvoiceStatus.VOID)

    def test_paid_invoice_can_be_voided(self, machine):
        machine.ensure_can_void(InvoiceStatus.PAID)


class TestReminderLevel:

    @pytest.mark.parametrize(
        "days,expected",
        [
            (1, ReminderLevel.GENTLE),
            (7, ReminderLevel.GENTLE),
            (8, ReminderLevel.FIRM),
            (30, ReminderLevel.FIRM),
            (31, ReminderLevel.FINAL),
            (120, ReminderLevel.FINAL),
        ],
    )
    def test_level_by_days_past_due(self, days, expected):
        assert reminder_level(days) == expected
