"""Invoice Charge Domain Entity

Additional charges (shipping, handling, ...) added after tax.
"""

from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String
from src.domain.base import BaseModel, IdType


class InvoiceCharge(BaseModel, table=True):
    """
    Invoice Charge - Named flat amount added to an invoice total

    Domain Rules:
    - Owned by its invoice, kept in submission order
    - Amount is non-negative and not taxed
    """

    __tablename__ = "invoice_charges"
    __table_args__ = (
        Index('ix_invoice_charges_invoice_id', 'invoice_id'),
        CheckConstraint('amount >= 0', name='charge_amount_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    invoice_id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
    )

    position: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
    )

    name: str = Field(
        sa_column=Column(String(120), nullable=False),
        description="Charge label (e.g., 'Shipping')"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Charge amount"
    )
