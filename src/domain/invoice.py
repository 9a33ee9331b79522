"""Invoice Domain Entity

Tracks customer invoices and the cached view of their payment status.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Integer, Numeric, String, Date, UniqueConstraint
from src.domain.base import BaseModel, IdType


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status"""
    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"
    VOID = "void"


class Invoice(BaseModel, table=True):
    """
    Invoice - Customer invoice with line items, charges and payments

    Domain Rules:
    - invoice_number is unique per account
    - subtotal, tax_amount, charges_total and total are written only from
      InvoiceAggregator output; they are never edited independently
    - discount is stored as the resolved flat amount applied before tax
    - status and total_paid are caches, refreshed on every ledger mutation
      and re-derivable from payments, due_date and the lifecycle timestamps
    - version increments on every ledger mutation
    """

    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint('account_id', 'invoice_number', name='uq_invoices_account_number'),
        CheckConstraint('tax_rate >= 0 AND tax_rate <= 1', name='tax_rate_fraction'),
        CheckConstraint('total >= 0', name='total_non_negative'),
        CheckConstraint('total_paid >= 0', name='total_paid_non_negative'),
        Index('ix_invoices_account_created', 'account_id', 'created_at'),
        Index('ix_invoices_status_due_date', 'status', 'due_date'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique invoice identifier (auto-increment)"
    )

    account_id: str = Field(
        index=True,
        description="Owning account"
    )

    invoice_number: str = Field(
        sa_column=Column(String(64), nullable=False),
        description="Human-readable number (e.g., INV-2024-05-0042)"
    )

    customer_id: str = Field(
        description="Customer being billed"
    )

    issue_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Date the invoice was issued"
    )

    due_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Payment due date"
    )

    currency: str = Field(
        default="USD",
        sa_column=Column(String(8), nullable=False),
        description="Currency label"
    )

    tax_rate: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(7, 6), nullable=False),
        description="Invoice-level tax rate as a 0-1 fraction"
    )

    discount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Flat discount applied before tax"
    )

    subtotal: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Sum of rounded line totals"
    )

    tax_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Invoice tax plus per-item tax"
    )

    charges_total: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Sum of additional charges"
    )

    total: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Amount payable"
    )

    total_paid: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Cached sum of completed payments"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
        description="Cached derived status"
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(String(1000), nullable=True),
        description="Free-form notes"
    )

    sent_at: Optional[datetime] = Field(
        default=None,
        description="When the invoice was sent to the customer"
    )

    viewed_at: Optional[datetime] = Field(
        default=None,
        description="First public-access read of the invoice"
    )

    voided_at: Optional[datetime] = Field(
        default=None,
        description="When the invoice was voided"
    )

    version: int = Field(
        default=1,
        sa_column=Column(Integer, nullable=False, default=1),
        description="Incremented on every ledger mutation"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Invoice creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    @property
    def is_sent(self) -> bool:
        return self.sent_at is not None

    @property
    def is_viewed(self) -> bool:
        return self.viewed_at is not None

    @property
    def is_void(self) -> bool:
        return self.voided_at is not None
