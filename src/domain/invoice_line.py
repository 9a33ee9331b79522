"""Invoice Line Domain Entity

Tracks individual line items within an invoice.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String
from src.domain.base import BaseModel, IdType


class InvoiceLine(BaseModel, table=True):
    """
    Invoice Line - One billable row on an invoice

    Domain Rules:
    - Each line belongs to exactly one invoice and is created with it
    - total = round(quantity * unit_rate, 2), half-up
    - tax_amount = round(total * tax_rate, 2) when the line has its own rate
    - Lines keep the order they were submitted in (position)
    """

    __tablename__ = "invoice_lines"
    __table_args__ = (
        Index('ix_invoice_lines_invoice_id', 'invoice_id'),
        CheckConstraint('quantity >= 0', name='quantity_non_negative'),
        CheckConstraint('unit_rate >= 0', name='unit_rate_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique invoice line identifier (auto-increment)"
    )

    invoice_id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Invoice"
    )

    position: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Zero-based order on the invoice"
    )

    description: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Line item description (e.g., 'Consulting hours')"
    )

    quantity: Decimal = Field(
        sa_column=Column(Numeric(18, 4), nullable=False),
        description="Quantity (hours, units, ...)"
    )

    unit_rate: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Price per unit"
    )

    unit: str = Field(
        default="unit",
        sa_column=Column(String(32), nullable=False, default="unit"),
        description="Unit label (e.g., 'hour')"
    )

    tax_rate: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(7, 6), nullable=True),
        description="Optional per-item tax rate as a 0-1 fraction"
    )

    total: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Rounded line total"
    )

    tax_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Per-item tax on the line total"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Line item creation timestamp"
    )
