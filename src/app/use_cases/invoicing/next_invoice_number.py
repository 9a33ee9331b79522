"""NextInvoiceNumber Use Case

Allocates the next invoice number of an account without creating an invoice.
"""

import logging
from src.libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.number_sequencer import InvoiceNumberSequencer
from src.domain.errors import InvoicingError
from .dtos import NextInvoiceNumberCommandDTO, NextInvoiceNumberResponseDTO

logger = logging.getLogger(__name__)


class NextInvoiceNumber:
    """
    Use Case: Reserve the next invoice number

    The allocation is committed, so calling this twice in a row returns
    two different numbers even though no invoice was created in between.
    """

    def __init__(self, uow: UnitOfWork, sequencer: InvoiceNumberSequencer):
        self.uow = uow
        self.sequencer = sequencer

    async def execute(self, command: NextInvoiceNumberCommandDTO) -> Result[NextInvoiceNumberResponseDTO]:
        try:
            number = await self.sequencer.next(command.account_id, template=command.template)
            await self.uow.commit()

            logger.info(f"Reserved invoice number {number} for account {command.account_id}")
            return Return.ok(
                NextInvoiceNumberResponseDTO(account_id=command.account_id, invoice_number=number)
            )

        except InvoicingError as e:
            await self.uow.rollback()
            logger.error(f"Failed to allocate invoice number for account {command.account_id}: {e.message}")
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Unexpected error allocating invoice number for account {command.account_id}")
            return Return.err(
                Error(
                    code="NEXT_INVOICE_NUMBER_FAILED",
                    message="Failed to allocate invoice number",
                    reason=str(e),
                )
            )
