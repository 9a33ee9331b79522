from .unit_of_work import UnitOfWork
from .notification_service import NotificationService
from .number_sequencer import NumberSequencer, InvoiceNumberSequencer, ReceiptNumberSequencer
from .receipt_issuer import ReceiptIssuer

__all__ = [
    "UnitOfWork",
    "NotificationService",
    "NumberSequencer",
    "InvoiceNumberSequencer",
    "ReceiptNumberSequencer",
    "ReceiptIssuer",
]
