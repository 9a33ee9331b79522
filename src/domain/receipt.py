"""Receipt Domain Entity

Immutable record issued once per completed payment.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import ForeignKey, Numeric, String, UniqueConstraint
from src.domain.base import BaseModel, IdType


class Receipt(BaseModel, table=True):
    """
    Receipt - Proof of a completed payment

    Domain Rules:
    - Exactly one receipt per payment (payment_id is unique)
    - receipt_number is sequential and unique per account
    - Never mutated after issue
    - balance_after snapshots the invoice balance due right after the payment
    """

    __tablename__ = "receipts"
    __table_args__ = (
        UniqueConstraint('account_id', 'receipt_number', name='uq_receipts_account_number'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique receipt identifier (auto-increment)"
    )

    payment_id: int = Field(
        sa_column=Column(IdType, ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, unique=True),
        description="Payment this receipt acknowledges"
    )

    invoice_id: int = Field(
        sa_column=Column(IdType, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        description="Invoice the payment was applied to"
    )

    account_id: str = Field(
        index=True,
        description="Owning account"
    )

    receipt_number: str = Field(
        sa_column=Column(String(64), nullable=False),
        description="Sequential receipt number (e.g., REC-202405-0007)"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Amount received"
    )

    currency: str = Field(
        default="USD",
        sa_column=Column(String(8), nullable=False),
    )

    payment_method_label: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Display label of the payment method"
    )

    balance_after: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Invoice balance due after this payment"
    )

    issued_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Issue timestamp"
    )
