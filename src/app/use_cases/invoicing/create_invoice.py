"""CreateInvoice Use Case

Computes the totals of an invoice draft, assigns the next invoice number
and persists the invoice with its line items and charges.
"""

import logging
from datetime import date, timedelta
from typing import Callable, Optional
from src.libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.number_sequencer import InvoiceNumberSequencer
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_line_repository import InvoiceLineRepository
from src.app.repositories.invoice_charge_repository import InvoiceChargeRepository
from src.domain.errors import InvoicingError, StorageError, ValidationError
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_charge import InvoiceCharge
from src.domain.invoice_line import InvoiceLine
from src.domain.invoice_totals import InvoiceAggregator, validate_rate
from src.domain.money import round_money, to_decimal
from src.domain.payment_ledger import PaymentLedger
from .dtos import CreateInvoiceCommandDTO, InvoiceResponseDTO
from .invoice_state import InvoiceSnapshot, to_invoice_response

logger = logging.getLogger(__name__)


class CreateInvoice:
    """
    Use Case: Create a draft invoice

    Business Rules:
    1. At least one line item
    2. Totals come only from InvoiceAggregator (lines rounded before summing)
    3. Invoice number is allocated from the account's sequence counter
    4. due_date defaults to issue_date + payment terms and may not precede it
    5. Invoice, lines and charges are committed together or not at all

    Flow:
    1. Validate draft and aggregate totals
    2. Allocate invoice number
    3. Create invoice, lines and charges
    4. Commit transaction
    5. Return response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        line_repo: InvoiceLineRepository,
        charge_repo: InvoiceChargeRepository,
        sequencer: InvoiceNumberSequencer,
        aggregator: Optional[InvoiceAggregator] = None,
        default_currency: str = "USD",
        payment_terms_days: int = 30,
        today: Callable[[], date] = date.today,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.line_repo = line_repo
        self.charge_repo = charge_repo
        self.sequencer = sequencer
        self.aggregator = aggregator or InvoiceAggregator()
        self.default_currency = default_currency
        self.payment_terms_days = payment_terms_days
        self._today = today

    async def execute(self, command: CreateInvoiceCommandDTO) -> Result[InvoiceResponseDTO]:
        """
        Execute invoice creation

        Args:
            command: CreateInvoiceCommandDTO with the draft

        Returns:
            Result[InvoiceResponseDTO]: Created invoice or error
        """
        try:
            if not command.line_items:
                raise ValidationError(
                    "Invoice must have at least one line item",
                    reason=f"account_id={command.account_id}",
                )

            # Step 1: Pure calculation, no storage touched yet
            totals = self.aggregator.aggregate(
                line_items=command.line_items,
                discount=command.discount,
                additional_charges=command.additional_charges,
                tax_rate=command.tax_rate,
            )

            issue_date = command.issue_date or self._today()
            due_date = command.due_date or issue_date + timedelta(days=self.payment_terms_days)
            if due_date < issue_date:
                raise ValidationError(
                    "Due date cannot be before the issue date",
                    reason=f"issue_date={issue_date}, due_date={due_date}",
                )

            # Step 2: Allocate invoice number (locks the account's counter)
            invoice_number = await self.sequencer.next(command.account_id)

            # Step 3: Persist invoice with cached totals
            invoice = Invoice(
                account_id=command.account_id,
                invoice_number=invoice_number,
                customer_id=command.customer_id,
                issue_date=issue_date,
                due_date=due_date,
                currency=command.currency or self.default_currency,
                tax_rate=to_decimal(command.tax_rate, "tax_rate"),
                discount=totals.discount,
                subtotal=totals.subtotal,
                tax_amount=totals.tax_amount,
                charges_total=totals.charges_total,
                total=totals.total,
                status=InvoiceStatus.DRAFT,
                notes=command.notes,
            )
            created_invoice = await self.invoice_repo.create(invoice)

            lines = await self.line_repo.create_many([
                InvoiceLine(
                    invoice_id=created_invoice.id,
                    position=position,
                    description=item.description,
                    quantity=to_decimal(item.quantity, "quantity"),
                    unit_rate=round_money(item.unit_rate, "unit_rate"),
                    unit=item.unit,
                    tax_rate=None if item.tax_rate is None else validate_rate(item.tax_rate),
                    total=line_totals.total,
                    tax_amount=line_totals.tax_amount,
                )
                for position, (item, line_totals) in enumerate(zip(command.line_items, totals.lines))
            ])

            charges = []
            if command.additional_charges:
                charges = await self.charge_repo.create_many([
                    InvoiceCharge(
                        invoice_id=created_invoice.id,
                        position=position,
                        name=charge.name,
                        amount=round_money(charge.amount),
                    )
                    for position, charge in enumerate(command.additional_charges)
                ])

            # Step 4: Commit transaction
            await self.uow.commit()

            logger.info(
                f"Created invoice {created_invoice.invoice_number} (id={created_invoice.id}) "
                f"for account {command.account_id}: total={totals.total} {created_invoice.currency}"
            )

            # Step 5: Build response
            snapshot = InvoiceSnapshot(
                invoice=created_invoice,
                lines=lines,
                charges=charges,
                payments=[],
                totals=totals,
                position=PaymentLedger().position(totals.total, []),
                status=InvoiceStatus.DRAFT,
            )
            return Return.ok(to_invoice_response(snapshot))

        except StorageError as e:
            await self.uow.rollback()
            logger.error(f"Storage failure creating invoice for account {command.account_id}: {e.reason}")
            return Return.err(e.to_error())
        except InvoicingError as e:
            await self.uow.rollback()
            logger.warning(f"Invoice creation rejected for account {command.account_id}: {e.message}")
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Unexpected error creating invoice for account {command.account_id}")
            return Return.err(
                Error(
                    code="CREATE_INVOICE_FAILED",
                    message="Failed to create invoice",
                    reason=str(e),
                )
            )
