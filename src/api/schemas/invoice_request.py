"""Request schemas for Invoicing API

Pydantic models for validating incoming HTTP requests. Amount and rate
ranges are enforced by the calculation engine, not here, so that range
violations carry the engine's error codes.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from src.app.use_cases.invoicing.dtos import ChargeDTO, LineItemDTO, SettlementOutcome
from src.domain.payment import PaymentMethod


class CreateInvoiceRequestSchema(BaseModel):
    """
    Request schema for creating an invoice

    Used for POST /invoices endpoint.
    """

    account_id: str = Field(..., min_length=1, description="Owning account")
    customer_id: str = Field(..., min_length=1, description="Customer being billed")
    line_items: List[LineItemDTO] = Field(..., description="At least one line item")
    discount: Decimal = Field(default=Decimal("0"))
    additional_charges: List[ChargeDTO] = Field(default_factory=list)
    tax_rate: Decimal = Field(default=Decimal("0"), description="0-1 fraction (0.08 = 8%)")
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    currency: Optional[str] = Field(default=None, min_length=1, max_length=8)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v):
        return v.upper() if v else v


class RecordPaymentRequestSchema(BaseModel):
    """
    Request schema for recording a payment

    Used for POST /invoices/{invoice_id}/payments endpoint.
    """

    amount: Decimal = Field(..., description="Amount paid")
    method: PaymentMethod = Field(default=PaymentMethod.BANK_TRANSFER)
    reference: Optional[str] = Field(default=None, max_length=100)
    paid_on: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=500)
    pending: Optional[bool] = None

    @field_validator('reference')
    @classmethod
    def blank_reference_is_none(cls, v):
        """A blank reference cannot collide with anything"""
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "116.02",
                "method": "cheque",
                "reference": "CHQ-000981",
                "paid_on": "2024-06-12",
            }
        }


class SettlePaymentRequestSchema(BaseModel):
    outcome: SettlementOutcome = Field(..., description="completed or failed")


class NextInvoiceNumberRequestSchema(BaseModel):
    template: Optional[str] = Field(default=None, min_length=1, max_length=64)


class NumberFormatRequestSchema(BaseModel):
    template: Optional[str] = Field(
        default=None,
        max_length=64,
        description="Template with {YYYY}, {MM} and {SEQ}; null restores the default"
    )
