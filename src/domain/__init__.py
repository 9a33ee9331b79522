from .base import BaseModel
from .invoice import Invoice, InvoiceStatus
from .invoice_line import InvoiceLine
from .invoice_charge import InvoiceCharge
from .payment import Payment, PaymentMethod, PaymentStatus
from .receipt import Receipt
from .sequence_counter import SequenceCounter, SequenceNamespace

__all__ = [
    "BaseModel",
    "Invoice",
    "InvoiceStatus",
    "InvoiceLine",
    "InvoiceCharge",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "Receipt",
    "SequenceCounter",
    "SequenceNamespace",
]
