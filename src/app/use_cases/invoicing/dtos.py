"""Data Transfer Objects for Invoicing Use Cases

Pydantic models for command inputs and response outputs. Numeric inputs
are only typed here; range checks live in the calculation engine so that
every rejection carries the engine's error code.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_status import ReminderLevel
from src.domain.payment import PaymentMethod, PaymentStatus
from src.domain.sequence_counter import SequenceNamespace


class LineItemDTO(BaseModel):
    """Line item of an invoice draft"""

    description: str = Field(..., min_length=1, max_length=255)
    quantity: Decimal = Field(..., description="Non-negative quantity")
    unit_rate: Decimal = Field(..., description="Price per unit")
    unit: str = Field(default="unit", max_length=32)
    tax_rate: Optional[Decimal] = Field(
        default=None,
        description="Optional per-item tax rate as a 0-1 fraction"
    )


class ChargeDTO(BaseModel):
    """Additional charge of an invoice draft"""

    name: str = Field(..., min_length=1, max_length=120)
    amount: Decimal


class CreateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for creating an invoice

    Used as input to CreateInvoice use case.
    """

    account_id: str = Field(..., description="Owning account")
    customer_id: str = Field(..., description="Customer being billed")
    line_items: List[LineItemDTO] = Field(default_factory=list)
    discount: Decimal = Field(
        default=Decimal("0"),
        description="Flat amount, or 0-100 percent when discount mode is percentage"
    )
    additional_charges: List[ChargeDTO] = Field(default_factory=list)
    tax_rate: Decimal = Field(default=Decimal("0"), description="Invoice tax as a 0-1 fraction")
    issue_date: Optional[date] = Field(default=None, description="Defaults to today")
    due_date: Optional[date] = Field(default=None, description="Defaults to issue date + payment terms")
    currency: Optional[str] = Field(default=None, max_length=8)
    notes: Optional[str] = Field(default=None, max_length=1000)

    class Config:
        json_schema_extra = {
            "example": {
                "account_id": "acct_123",
                "customer_id": "cust_456",
                "line_items": [
                    {"description": "Consulting", "quantity": "3", "unit_rate": "33.33", "unit": "hour"},
                    {"description": "Support", "quantity": "7", "unit_rate": "14.29"},
                ],
                "discount": "0",
                "additional_charges": [],
                "tax_rate": "0.08",
                "due_date": "2024-06-30",
            }
        }


class InvoiceLineDTO(BaseModel):
    id: Optional[int]
    position: int
    description: str
    quantity: Decimal
    unit_rate: Decimal
    unit: str
    tax_rate: Optional[Decimal]
    total: Decimal
    tax_amount: Decimal


class InvoiceChargeDTO(BaseModel):
    id: Optional[int]
    position: int
    name: str
    amount: Decimal


class PaymentDTO(BaseModel):
    id: int
    invoice_id: int
    amount: Decimal
    method: PaymentMethod
    method_label: str
    reference: Optional[str]
    status: PaymentStatus
    paid_on: date
    recorded_at: datetime


class ReceiptDTO(BaseModel):
    id: int
    payment_id: int
    invoice_id: int
    receipt_number: str
    amount: Decimal
    currency: str
    payment_method_label: str
    balance_after: Decimal
    issued_at: datetime


class InvoiceResponseDTO(BaseModel):
    """
    Response DTO for invoice reads and writes

    total_paid, balance_due and status are derived from the payments at
    response time, never copied from the cached columns.
    """

    id: int
    account_id: str
    invoice_number: str
    customer_id: str
    issue_date: date
    due_date: date
    currency: str
    status: InvoiceStatus
    subtotal: Decimal
    discount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    charges_total: Decimal
    total: Decimal
    total_paid: Decimal
    balance_due: Decimal
    notes: Optional[str] = None
    sent_at: Optional[datetime] = None
    viewed_at: Optional[datetime] = None
    voided_at: Optional[datetime] = None
    version: int
    created_at: datetime
    line_items: List[InvoiceLineDTO] = Field(default_factory=list)
    additional_charges: List[InvoiceChargeDTO] = Field(default_factory=list)
    payments: List[PaymentDTO] = Field(default_factory=list)
    receipts: List[ReceiptDTO] = Field(default_factory=list)


class RecordPaymentCommandDTO(BaseModel):
    """
    Command DTO for recording a payment

    Used as input to RecordPayment use case.
    """

    invoice_id: int
    amount: Decimal = Field(..., description="Amount paid (> 0, at most the balance due)")
    method: PaymentMethod = Field(default=PaymentMethod.BANK_TRANSFER)
    reference: Optional[str] = Field(
        default=None,
        max_length=100,
        description="External reference; unique per invoice"
    )
    paid_on: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=500)
    pending: Optional[bool] = Field(
        default=None,
        description="Force (True) or skip (False) clearance; None applies the configured policy"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_id": 1,
                "amount": "100.00",
                "method": "bank_transfer",
                "reference": "TRX-2024-0001",
            }
        }


class PaymentResultDTO(BaseModel):
    """Payment, its receipt (once completed) and the refreshed invoice"""

    payment: PaymentDTO
    receipt: Optional[ReceiptDTO] = None
    invoice: InvoiceResponseDTO


class SettlementOutcome(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class SettlePaymentCommandDTO(BaseModel):
    """Command DTO for clearing or failing a pending payment"""

    payment_id: int
    outcome: SettlementOutcome


class NextInvoiceNumberCommandDTO(BaseModel):
    account_id: str
    template: Optional[str] = Field(
        default=None,
        max_length=64,
        description="Explicit template; defaults to the account's or the configured one"
    )


class NextInvoiceNumberResponseDTO(BaseModel):
    account_id: str
    invoice_number: str


class ConfigureNumberFormatCommandDTO(BaseModel):
    """Command DTO for setting an account's number template"""

    account_id: str
    namespace: SequenceNamespace = SequenceNamespace.INVOICE
    template: Optional[str] = Field(
        default=None,
        max_length=64,
        description="Template with {YYYY}, {MM} and {SEQ}; None restores the default"
    )


class NumberFormatResponseDTO(BaseModel):
    account_id: str
    namespace: SequenceNamespace
    template: Optional[str]
    last_value: int


class InvoiceStatusResponseDTO(BaseModel):
    invoice_id: int
    invoice_number: str
    status: InvoiceStatus
    total: Decimal
    total_paid: Decimal
    balance_due: Decimal
    days_past_due: int


class OverdueReminderDTO(BaseModel):
    invoice_id: int
    invoice_number: str
    account_id: str
    balance_due: Decimal
    days_past_due: int
    reminder_level: ReminderLevel
    notified: bool


class DetectOverdueResponseDTO(BaseModel):
    """
    Response DTO for an overdue sweep

    checked counts candidates examined; reminders lists the invoices
    found overdue, whether or not the notification went out.
    """

    checked: int
    status_updates: int
    reminders: List[OverdueReminderDTO] = Field(default_factory=list)
    checked_at: datetime
