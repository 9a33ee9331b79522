"""Invoice state loading shared by the invoicing use cases

Loads an invoice with its lines, charges and payments, recomputes the
totals from the lines, and derives the ledger position and status. The
cached total_paid/status columns on the invoice are refreshed from the
derived values, never the other way around.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional
from src.app.repositories.invoice_charge_repository import InvoiceChargeRepository
from src.app.repositories.invoice_line_repository import InvoiceLineRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.errors import InvoiceNotFoundError
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_charge import InvoiceCharge
from src.domain.invoice_line import InvoiceLine
from src.domain.invoice_status import InvoiceStatusMachine
from src.domain.invoice_totals import DiscountMode, InvoiceAggregator, InvoiceTotals
from src.domain.payment import Payment
from src.domain.payment_ledger import LedgerPosition, PaymentLedger
from src.domain.receipt import Receipt
from .dtos import (
    InvoiceChargeDTO,
    InvoiceLineDTO,
    InvoiceResponseDTO,
    PaymentDTO,
    ReceiptDTO,
)


@dataclass
class InvoiceSnapshot:
    invoice: Invoice
    lines: List[InvoiceLine]
    charges: List[InvoiceCharge]
    payments: List[Payment]
    totals: InvoiceTotals
    position: LedgerPosition
    status: InvoiceStatus


class InvoiceStateLoader:
    """
    Reads an invoice aggregate and derives its financial state

    Stored discounts are already flat amounts, so totals are always
    recomputed in FLAT mode whatever mode the invoice was created with.
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        line_repo: InvoiceLineRepository,
        charge_repo: InvoiceChargeRepository,
        payment_repo: PaymentRepository,
        ledger: Optional[PaymentLedger] = None,
        status_machine: Optional[InvoiceStatusMachine] = None,
    ):
        self.invoice_repo = invoice_repo
        self.line_repo = line_repo
        self.charge_repo = charge_repo
        self.payment_repo = payment_repo
        self.aggregator = InvoiceAggregator(discount_mode=DiscountMode.FLAT)
        self.ledger = ledger or PaymentLedger()
        self.status_machine = status_machine or InvoiceStatusMachine()

    async def load(self, invoice_id: int, for_update: bool = False) -> InvoiceSnapshot:
        """
        Load and derive the state of an invoice

        Args:
            invoice_id: Invoice ID
            for_update: Lock the invoice row until commit (ledger mutations)

        Raises:
            InvoiceNotFoundError: no invoice with this ID
        """
        invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=for_update)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return await self.snapshot_of(invoice)

    async def snapshot_of(self, invoice: Invoice, today: Optional[date] = None) -> InvoiceSnapshot:
        lines = await self.line_repo.get_by_invoice_id(invoice.id)
        charges = await self.charge_repo.get_by_invoice_id(invoice.id)
        payments = await self.payment_repo.find_by_invoice(invoice.id)

        totals = self.aggregator.aggregate(
            line_items=lines,
            discount=invoice.discount,
            additional_charges=charges,
            tax_rate=invoice.tax_rate,
        )
        position = self.ledger.position(totals.total, payments)
        status = self.status_machine.derive(invoice, position, today=today)

        return InvoiceSnapshot(
            invoice=invoice,
            lines=lines,
            charges=charges,
            payments=payments,
            totals=totals,
            position=position,
            status=status,
        )

    def refresh(self, snapshot: InvoiceSnapshot, payments: List[Payment], today: Optional[date] = None) -> InvoiceSnapshot:
        """Re-derive position and status after the payment list changed"""
        position = self.ledger.position(snapshot.totals.total, payments)
        status = self.status_machine.derive(snapshot.invoice, position, today=today)
        snapshot.payments = payments
        snapshot.position = position
        snapshot.status = status
        return snapshot


def apply_cached_state(snapshot: InvoiceSnapshot, bump_version: bool = False) -> bool:
    """
    Copy derived values into the invoice's cache columns

    Returns:
        True if any cached column changed
    """
    invoice = snapshot.invoice
    changed = (
        invoice.status != snapshot.status
        or invoice.total_paid != snapshot.position.total_paid
        or invoice.total != snapshot.totals.total
    )
    invoice.status = snapshot.status
    invoice.total_paid = snapshot.position.total_paid
    invoice.subtotal = snapshot.totals.subtotal
    invoice.tax_amount = snapshot.totals.tax_amount
    invoice.charges_total = snapshot.totals.charges_total
    invoice.total = snapshot.totals.total
    if bump_version:
        invoice.version = (invoice.version or 0) + 1
    return changed


def to_payment_dto(payment: Payment) -> PaymentDTO:
    return PaymentDTO(
        id=payment.id,
        invoice_id=payment.invoice_id,
        amount=payment.amount,
        method=payment.method,
        method_label=payment.method.label,
        reference=payment.reference,
        status=payment.status,
        paid_on=payment.paid_on,
        recorded_at=payment.recorded_at,
    )


def to_receipt_dto(receipt: Receipt) -> ReceiptDTO:
    return ReceiptDTO(
        id=receipt.id,
        payment_id=receipt.payment_id,
        invoice_id=receipt.invoice_id,
        receipt_number=receipt.receipt_number,
        amount=receipt.amount,
        currency=receipt.currency,
        payment_method_label=receipt.payment_method_label,
        balance_after=receipt.balance_after,
        issued_at=receipt.issued_at,
    )


def to_invoice_response(
    snapshot: InvoiceSnapshot, receipts: Optional[List[Receipt]] = None
) -> InvoiceResponseDTO:
    """Build the invoice response from derived state"""
    invoice = snapshot.invoice
    totals = snapshot.totals
    return InvoiceResponseDTO(
        id=invoice.id,
        account_id=invoice.account_id,
        invoice_number=invoice.invoice_number,
        customer_id=invoice.customer_id,
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
        currency=invoice.currency,
        status=snapshot.status,
        subtotal=totals.subtotal,
        discount=totals.discount,
        tax_rate=invoice.tax_rate,
        tax_amount=totals.tax_amount,
        charges_total=totals.charges_total,
        total=totals.total,
        total_paid=snapshot.position.total_paid,
        balance_due=snapshot.position.balance_due,
        notes=invoice.notes,
        sent_at=invoice.sent_at,
        viewed_at=invoice.viewed_at,
        voided_at=invoice.voided_at,
        version=invoice.version,
        created_at=invoice.created_at,
        line_items=[
            InvoiceLineDTO(
                id=line.id,
                position=line.position,
                description=line.description,
                quantity=line.quantity,
                unit_rate=line.unit_rate,
                unit=line.unit,
                tax_rate=line.tax_rate,
                total=line_totals.total,
                tax_amount=line_totals.tax_amount,
            )
            for line, line_totals in zip(snapshot.lines, totals.lines)
        ],
        additional_charges=[
            InvoiceChargeDTO(id=c.id, position=c.position, name=c.name, amount=c.amount)
            for c in snapshot.charges
        ],
        payments=[to_payment_dto(p) for p in snapshot.payments],
        receipts=[to_receipt_dto(r) for r in receipts or []],
    )
