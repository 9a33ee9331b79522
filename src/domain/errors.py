"""Typed error taxonomy for invoice calculation and payment reconciliation

Every error carries a class-level ``code`` so API layers and callers can
branch on type instead of parsing messages:

    InvoicingError
    +-- ValidationError                  never retried, surfaced verbatim
    |   +-- InvalidStatusTransitionError
    +-- OverpaymentError                 carries balance_due for re-prompting
    +-- ConflictError                    safe to retry once with fresh state
    |   +-- DuplicateInvoiceNumberError
    |   +-- DuplicatePaymentReferenceError
    |   +-- DuplicateReceiptError
    |   +-- ConcurrentUpdateError
    +-- NotFoundError
    |   +-- InvoiceNotFoundError
    |   +-- PaymentNotFoundError
    +-- StorageError                     storage collaborator failure, fatal
"""

from decimal import Decimal
from typing import Any, Dict, Optional
from src.libs.result import Error


class InvoicingError(Exception):
    """Base class for all invoicing engine errors"""

    code: str = "INVOICING_ERROR"

    def __init__(self, message: str, reason: Optional[str] = None):
        self.message = message
        self.reason = reason
        super().__init__(message)

    @property
    def details(self) -> Dict[str, Any]:
        return {}

    def to_error(self) -> Error:
        """Convert into the Error value returned by use cases"""
        return Error(
            code=self.code,
            message=self.message,
            reason=self.reason,
            details=self.details,
        )


class ValidationError(InvoicingError):
    """Bad input: negative amounts, out-of-range rates, malformed drafts"""

    code: str = "VALIDATION_ERROR"


class InvalidStatusTransitionError(ValidationError):
    """Requested lifecycle action is not allowed from the current status"""

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: str, action: str):
        self.current = current
        self.action = action
        super().__init__(
            f"Cannot {action} an invoice with status '{current}'",
            reason=f"status={current}, action={action}",
        )

    @property
    def details(self) -> Dict[str, Any]:
        return {"current_status": self.current, "action": self.action}


class OverpaymentError(InvoicingError):
    """Payment amount exceeds the invoice balance due"""

    code: str = "OVERPAYMENT"

    def __init__(self, amount: Decimal, balance_due: Decimal):
        self.amount = amount
        self.balance_due = balance_due
        super().__init__(
            f"Payment of {amount} exceeds balance due of {balance_due}",
            reason=f"amount={amount}, balance_due={balance_due}",
        )

    @property
    def details(self) -> Dict[str, Any]:
        return {"amount": str(self.amount), "balance_due": str(self.balance_due)}


class ConflictError(InvoicingError):
    """Uniqueness or concurrent-update conflict"""

    code: str = "CONFLICT"


class DuplicateInvoiceNumberError(ConflictError):
    code: str = "DUPLICATE_INVOICE_NUMBER"

    def __init__(self, invoice_number: str):
        self.invoice_number = invoice_number
        super().__init__(f"Invoice number {invoice_number} already exists for this account")

    @property
    def details(self) -> Dict[str, Any]:
        return {"invoice_number": self.invoice_number}


class DuplicatePaymentReferenceError(ConflictError):
    code: str = "DUPLICATE_PAYMENT_REFERENCE"

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Payment reference {reference} was already recorded for this invoice")

    @property
    def details(self) -> Dict[str, Any]:
        return {"reference": self.reference}


class DuplicateReceiptError(ConflictError):
    code: str = "DUPLICATE_RECEIPT"


class ConcurrentUpdateError(ConflictError):
    code: str = "CONCURRENT_UPDATE"


class NotFoundError(InvoicingError):
    code: str = "NOT_FOUND"


class InvoiceNotFoundError(NotFoundError):
    code: str = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: int):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice with ID {invoice_id} not found")


class PaymentNotFoundError(NotFoundError):
    code: str = "PAYMENT_NOT_FOUND"

    def __init__(self, payment_id: int):
        self.payment_id = payment_id
        super().__init__(f"Payment with ID {payment_id} not found")


class StorageError(InvoicingError):
    """Storage collaborator failure; propagated unchanged, never retried"""

    code: str = "STORAGE_ERROR"
