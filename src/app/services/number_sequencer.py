"""Number sequencers for invoices and receipts

Both sequencers follow the same discipline: read the template (account
override, else configured default), take the trailing sequence of the
most recent number as a floor, atomically advance the counter past it
and render the template.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.receipt_repository import ReceiptRepository
from src.app.repositories.sequence_counter_repository import SequenceCounterRepository
from src.domain.invoice_numbering import render_number, sequence_floor, validate_template
from src.domain.sequence_counter import SequenceNamespace

logger = logging.getLogger(__name__)


class NumberSequencer(ABC):
    namespace: SequenceNamespace

    def __init__(
        self,
        counter_repo: SequenceCounterRepository,
        default_template: str,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.counter_repo = counter_repo
        self.default_template = default_template
        self._clock = clock

    @abstractmethod
    async def _latest_number(self, account_id: str) -> Optional[str]:
        pass

    async def template_for(self, account_id: str) -> str:
        counter = await self.counter_repo.get(account_id, self.namespace)
        if counter is not None and counter.number_format_template:
            return counter.number_format_template
        return self.default_template

    async def next(self, account_id: str, template: Optional[str] = None) -> str:
        """
        Allocate the next number for an account

        Two calls never return the same sequence value, even without an
        intervening invoice or receipt, because the counter is advanced
        on every call.

        Args:
            account_id: Account identifier
            template: Explicit template, overriding the account's own

        Returns:
            Rendered number (e.g., INV-2024-05-0042)

        Raises:
            ValidationError: template without {SEQ}
        """
        template = validate_template(template or await self.template_for(account_id))
        latest = await self._latest_number(account_id)
        floor = sequence_floor(template, latest)

        sequence = await self.counter_repo.increment(account_id, self.namespace, floor=floor)
        number = render_number(template, sequence, self._clock())

        logger.debug(
            f"Allocated {self.namespace.value} number {number} for account {account_id} "
            f"(latest={latest}, floor={floor}, sequence={sequence})"
        )
        return number


class InvoiceNumberSequencer(NumberSequencer):
    """Sequential invoice numbers, unique per account"""

    namespace = SequenceNamespace.INVOICE

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        counter_repo: SequenceCounterRepository,
        default_template: str = "INV-{YYYY}-{MM}-{SEQ}",
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        super().__init__(counter_repo, default_template, clock)
        self.invoice_repo = invoice_repo

    async def _latest_number(self, account_id: str) -> Optional[str]:
        return await self.invoice_repo.find_latest_invoice_number(account_id)


class ReceiptNumberSequencer(NumberSequencer):
    """Sequential receipt numbers in their own counter namespace"""

    namespace = SequenceNamespace.RECEIPT

    def __init__(
        self,
        receipt_repo: ReceiptRepository,
        counter_repo: SequenceCounterRepository,
        default_template: str = "REC-{YYYY}{MM}-{SEQ}",
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        super().__init__(counter_repo, default_template, clock)
        self.receipt_repo = receipt_repo

    async def _latest_number(self, account_id: str) -> Optional[str]:
        return await self.receipt_repo.find_latest_receipt_number(account_id)
