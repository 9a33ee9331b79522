from .invoice_repository import SqlAlchemyInvoiceRepository
from .invoice_line_repository import SqlAlchemyInvoiceLineRepository
from .invoice_charge_repository import SqlAlchemyInvoiceChargeRepository
from .payment_repository import SqlAlchemyPaymentRepository
from .receipt_repository import SqlAlchemyReceiptRepository
from .sequence_counter_repository import SqlAlchemySequenceCounterRepository

__all__ = [
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyInvoiceLineRepository",
    "SqlAlchemyInvoiceChargeRepository",
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyReceiptRepository",
    "SqlAlchemySequenceCounterRepository",
]
