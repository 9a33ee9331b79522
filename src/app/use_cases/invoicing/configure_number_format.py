"""ConfigureNumberFormat Use Case

Sets or clears an account's invoice or receipt number template.
"""

import logging
from src.libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.sequence_counter_repository import SequenceCounterRepository
from src.domain.errors import InvoicingError
from src.domain.invoice_numbering import validate_template
from .dtos import ConfigureNumberFormatCommandDTO, NumberFormatResponseDTO

logger = logging.getLogger(__name__)


class ConfigureNumberFormat:
    """
    Use Case: Configure a number template

    Templates must contain {SEQ}; one without it would render the same
    number on every allocation. The counter value is left untouched.
    """

    def __init__(self, uow: UnitOfWork, counter_repo: SequenceCounterRepository):
        self.uow = uow
        self.counter_repo = counter_repo

    async def execute(self, command: ConfigureNumberFormatCommandDTO) -> Result[NumberFormatResponseDTO]:
        try:
            template = command.template.strip() if command.template else None
            if template is not None:
                validate_template(template)

            counter = await self.counter_repo.save_template(
                command.account_id, command.namespace, template
            )
            await self.uow.commit()

            logger.info(
                f"Account {command.account_id} {command.namespace.value} number template "
                f"set to {template or 'default'}"
            )
            return Return.ok(
                NumberFormatResponseDTO(
                    account_id=counter.account_id,
                    namespace=counter.namespace,
                    template=counter.number_format_template,
                    last_value=counter.last_value,
                )
            )

        except InvoicingError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())
        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Unexpected error configuring number format for account {command.account_id}")
            return Return.err(
                Error(
                    code="CONFIGURE_NUMBER_FORMAT_FAILED",
                    message="Failed to configure number format",
                    reason=str(e),
                )
            )
