from .invoice_repository import InvoiceRepository
from .invoice_line_repository import InvoiceLineRepository
from .invoice_charge_repository import InvoiceChargeRepository
from .payment_repository import PaymentRepository
from .receipt_repository import ReceiptRepository
from .sequence_counter_repository import SequenceCounterRepository

__all__ = [
    "InvoiceRepository",
    "InvoiceLineRepository",
    "InvoiceChargeRepository",
    "PaymentRepository",
    "ReceiptRepository",
    "SequenceCounterRepository",
]
