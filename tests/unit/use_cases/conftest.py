"""Shared fixtures for invoicing use case tests

The invoice fixture is the worked example used throughout: 3 x 33.33 and
7 x 14.29 at 8% tax, total 216.02, due 2024-05-31 and sent on 2024-05-02.
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from src.app.use_cases.invoicing.invoice_state import InvoiceStateLoader
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_line import InvoiceLine
from src.domain.invoice_status import InvoiceStatusMachine
from src.domain.payment import Payment, PaymentMethod, PaymentStatus
from src.domain.receipt import Receipt

BEFORE_DUE = date(2024, 5, 15)


def make_payment(id, amount, status=PaymentStatus.COMPLETED, reference=None, method=PaymentMethod.BANK_TRANSFER):
    return Payment(
        id=id,
        invoice_id=1,
        account_id="acct_1",
        amount=Decimal(amount),
        method=method,
        reference=reference,
        status=status,
        paid_on=date(2024, 5, 10),
        recorded_at=datetime(2024, 5, 10, 9, 0),
    )


@pytest.fixture
def new_payment():
    """Factory for payments on the sample invoice"""
    return make_payment


@pytest.fixture
def invoice():
    return Invoice(
        id=1,
        account_id="acct_1",
        invoice_number="INV-2024-05-0001",
        customer_id="cust_1",
        issue_date=date(2024, 5, 1),
        due_date=date(2024, 5, 31),
        tax_rate=Decimal("0.08"),
        subtotal=Decimal("200.02"),
        tax_amount=Decimal("16.00"),
        total=Decimal("216.02"),
        status=InvoiceStatus.SENT,
        sent_at=datetime(2024, 5, 2, 10, 0),
        version=1,
        created_at=datetime(2024, 5, 1, 8, 0),
    )


@pytest.fixture
def invoice_lines():
    return [
        InvoiceLine(
            id=1, invoice_id=1, position=0, description="Consulting",
            quantity=Decimal("3"), unit_rate=Decimal("33.33"), total=Decimal("99.99"),
        ),
        InvoiceLine(
            id=2, invoice_id=1, position=1, description="Support",
            quantity=Decimal("7"), unit_rate=Decimal("14.29"), total=Decimal("100.03"),
        ),
    ]


@pytest.fixture
def payments():
    """Payments already recorded against the invoice"""
    return []


@pytest.fixture
def mock_invoice_repo(invoice):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=invoice)
    repo.update = AsyncMock(side_effect=lambda inv: inv)
    return repo


@pytest.fixture
def mock_line_repo(invoice_lines):
    repo = MagicMock()
    repo.get_by_invoice_id = AsyncMock(return_value=invoice_lines)
    return repo


@pytest.fixture
def mock_charge_repo():
    repo = MagicMock()
    repo.get_by_invoice_id = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_payment_repo(payments):
    repo = MagicMock()
    repo.find_by_invoice = AsyncMock(return_value=payments)

    async def assign_id(payment):
        payment.id = 100
        return payment

    repo.create = AsyncMock(side_effect=assign_id)
    repo.update = AsyncMock(side_effect=lambda p: p)
    return repo


@pytest.fixture
def status_machine():
    return InvoiceStatusMachine(today=lambda: BEFORE_DUE)


@pytest.fixture
def loader(mock_invoice_repo, mock_line_repo, mock_charge_repo, mock_payment_repo, status_machine):
    return InvoiceStateLoader(
        invoice_repo=mock_invoice_repo,
        line_repo=mock_line_repo,
        charge_repo=mock_charge_repo,
        payment_repo=mock_payment_repo,
        status_machine=status_machine,
    )


@pytest.fixture
def mock_receipt_issuer():
    issuer = MagicMock()

    async def issue(payment, invoice, balance_after):
        return Receipt(
            id=50,
            payment_id=payment.id,
            invoice_id=invoice.id,
            account_id=invoice.account_id,
            receipt_number="REC-202405-0001",
            amount=payment.amount,
            currency=invoice.currency,
            payment_method_label=payment.method.label,
            balance_after=balance_after,
            issued_at=datetime(2024, 5, 10, 9, 0),
        )

    issuer.issue = AsyncMock(side_effect=issue)
    return issuer
