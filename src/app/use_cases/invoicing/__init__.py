"""Invoicing domain use cases"""
from .create_invoice import CreateInvoice
from .record_payment import RecordPayment, PendingPaymentPolicy
from .settle_payment import SettlePayment
from .next_invoice_number import NextInvoiceNumber
from .configure_number_format import ConfigureNumberFormat
from .get_invoice import GetInvoice
from .get_invoice_status import GetInvoiceStatus
from .invoice_lifecycle import MarkInvoiceSent, MarkInvoiceViewed, VoidInvoice
from .detect_overdue_invoices import DetectOverdueInvoices
from .invoice_state import InvoiceStateLoader, InvoiceSnapshot
from .dtos import (
    LineItemDTO,
    ChargeDTO,
    CreateInvoiceCommandDTO,
    InvoiceLineDTO,
    InvoiceChargeDTO,
    PaymentDTO,
    ReceiptDTO,
    InvoiceResponseDTO,
    RecordPaymentCommandDTO,
    PaymentResultDTO,
    SettlementOutcome,
    SettlePaymentCommandDTO,
    NextInvoiceNumberCommandDTO,
    NextInvoiceNumberResponseDTO,
    ConfigureNumberFormatCommandDTO,
    NumberFormatResponseDTO,
    InvoiceStatusResponseDTO,
    OverdueReminderDTO,
    DetectOverdueResponseDTO,
)

__all__ = [
    "CreateInvoice",
    "RecordPayment",
    "PendingPaymentPolicy",
    "SettlePayment",
    "NextInvoiceNumber",
    "ConfigureNumberFormat",
    "GetInvoice",
    "GetInvoiceStatus",
    "MarkInvoiceSent",
    "MarkInvoiceViewed",
    "VoidInvoice",
    "DetectOverdueInvoices",
    "InvoiceStateLoader",
    "InvoiceSnapshot",
    "LineItemDTO",
    "ChargeDTO",
    "CreateInvoiceCommandDTO",
    "InvoiceLineDTO",
    "InvoiceChargeDTO",
    "PaymentDTO",
    "ReceiptDTO",
    "InvoiceResponseDTO",
    "RecordPaymentCommandDTO",
    "PaymentResultDTO",
    "SettlementOutcome",
    "SettlePaymentCommandDTO",
    "NextInvoiceNumberCommandDTO",
    "NextInvoiceNumberResponseDTO",
    "ConfigureNumberFormatCommandDTO",
    "NumberFormatResponseDTO",
    "InvoiceStatusResponseDTO",
    "OverdueReminderDTO",
    "DetectOverdueResponseDTO",
]
