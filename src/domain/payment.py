"""Payment Domain Entity

Payments recorded against an invoice.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, Date, UniqueConstraint
from src.domain.base import BaseModel, IdType


class PaymentMethod(str, Enum):
    """How the customer paid"""
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    CHEQUE = "cheque"
    CREDIT_CARD = "credit_card"
    ONLINE = "online"

    @property
    def label(self) -> str:
        return _METHOD_LABELS[self]


_METHOD_LABELS = {
    PaymentMethod.BANK_TRANSFER: "Bank Transfer",
    PaymentMethod.CASH: "Cash",
    PaymentMethod.CHEQUE: "Cheque",
    PaymentMethod.CREDIT_CARD: "Credit Card",
    PaymentMethod.ONLINE: "Online Payment",
}


class PaymentStatus(str, Enum):
    """Payment status types"""
    PENDING = "pending"        # Awaiting clearance (e.g., cheque)
    COMPLETED = "completed"    # Counts toward the invoice balance
    FAILED = "failed"          # Never cleared
    REFUNDED = "refunded"      # Reversed by an admin operation


class Payment(BaseModel, table=True):
    """
    Payment - Money received against an invoice

    Domain Rules:
    - amount > 0 and never exceeds the balance due when applied
    - (invoice_id, reference) is unique, so a reference cannot be applied twice
    - Only COMPLETED payments reduce the balance due
    - Immutable once COMPLETED, except for refund transitions
    - Transitions: pending -> completed | failed, completed -> refunded
    """

    __tablename__ = "payments"
    __table_args__ = (
        UniqueConstraint('invoice_id', 'reference', name='uq_payments_invoice_reference'),
        CheckConstraint('amount > 0', name='payment_amount_positive'),
        Index('ix_payments_invoice_id', 'invoice_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique payment identifier (auto-increment)"
    )

    invoice_id: int = Field(
        sa_column=Column(IdType, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Invoice"
    )

    account_id: str = Field(
        index=True,
        description="Owning account (denormalized from the invoice)"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Amount paid"
    )

    method: PaymentMethod = Field(
        description="Payment method"
    )

    reference: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True),
        description="External reference (bank transaction id, cheque number, ...)"
    )

    status: PaymentStatus = Field(
        default=PaymentStatus.COMPLETED,
        description="Payment status"
    )

    paid_on: date = Field(
        default_factory=date.today,
        sa_column=Column(Date, nullable=False),
        description="Date the customer paid"
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True),
    )

    recorded_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the payment was recorded"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last status change"
    )

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED
