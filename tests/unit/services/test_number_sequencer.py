"""Unit tests for InvoiceNumberSequencer and ReceiptNumberSequencer

Tests cover:
- Default and account-specific templates
- Floor taken from the latest issued number
- Successive calls never repeating a number
"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from src.app.services.number_sequencer import InvoiceNumberSequencer, ReceiptNumberSequencer
from src.domain.errors import ValidationError
from src.domain.sequence_counter import SequenceCounter, SequenceNamespace

MAY_2024 = datetime(2024, 5, 17, 12, 0)


@pytest.fixture
def mock_counter_repo():
    repo = MagicMock()
    repo.get = AsyncMock(return_value=None)
    repo.increment = AsyncMock(return_value=1)
    return repo


@pytest.fixture
def mock_invoice_repo():
    repo = MagicMock()
    repo.find_latest_invoice_number = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_receipt_repo():
    repo = MagicMock()
    repo.find_latest_receipt_number = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def invoice_sequencer(mock_invoice_repo, mock_counter_repo):
    return InvoiceNumberSequencer(mock_invoice_repo, mock_counter_repo, clock=lambda: MAY_2024)


@pytest.mark.asyncio
class TestInvoiceNumberSequencer:

    async def test_first_number_for_account(self, invoice_sequencer, mock_counter_repo):
        """
        Given: Account with no invoices and no counter
        When: The next number is requested
        Then: Counter starts at 1 and the default template is rendered
        """
        # Act
        number = await invoice_sequencer.next("acct_1")

        # Assert
        assert number == "INV-2024-05-0001"
        mock_counter_repo.increment.assert_called_once_with(
            "acct_1", SequenceNamespace.INVOICE, floor=0
        )

    async def test_latest_number_sets_floor(self, invoice_sequencer, mock_invoice_repo, mock_counter_repo):
        """
        Given: Latest invoice is INV-2024-04-0041
        When: The next number is requested
        Then: The counter is advanced past 41 and 42 is rendered
        """
        # Arrange
        mock_invoice_repo.find_latest_invoice_number.return_value = "INV-2024-04-0041"
        mock_counter_repo.increment.return_value = 42

        # Act
        number = await invoice_sequencer.next("acct_1")

        # Assert
        assert number == "INV-2024-05-0042"
        mock_counter_repo.increment.assert_called_once_with(
            "acct_1", SequenceNamespace.INVOICE, floor=41
        )

    async def test_successive_calls_differ(self, invoice_sequencer, mock_counter_repo):
        # Arrange
        mock_counter_repo.increment.side_effect = [7, 8]

        # Act
        first = await invoice_sequencer.next("acct_1")
        second = await invoice_sequencer.next("acct_1")

        # Assert
        assert first == "INV-2024-05-0007"
        assert second == "INV-2024-05-0008"

    async def test_account_template_overrides_default(self, invoice_sequencer, mock_counter_repo):
        # Arrange
        mock_counter_repo.get.return_value = SequenceCounter(
            account_id="acct_1",
            namespace=SequenceNamespace.INVOICE,
            last_value=3,
            number_format_template="ACME/{YYYY}/{SEQ}",
        )
        mock_counter_repo.increment.return_value = 4

        # Act
        number = await invoice_sequencer.next("acct_1")

        # Assert
        assert number == "ACME/2024/0004"

    async def test_explicit_template_skips_account_lookup(self, invoice_sequencer, mock_counter_repo):
        number = await invoice_sequencer.next("acct_1", template="{SEQ}")

        assert number == "0001"
        mock_counter_repo.get.assert_not_called()

    async def test_non_trailing_template_ignores_latest_number(
        self, invoice_sequencer, mock_invoice_repo, mock_counter_repo
    ):
        # Arrange
        mock_invoice_repo.find_latest_invoice_number.return_value = "0041-2024"

        # Act
        await invoice_sequencer.next("acct_1", template="{SEQ}-{YYYY}")

        # Assert
        mock_counter_repo.increment.assert_called_once_with(
            "acct_1", SequenceNamespace.INVOICE, floor=0
        )

    async def test_template_without_sequence_rejected_before_allocation(
        self, invoice_sequencer, mock_counter_repo
    ):
        with pytest.raises(ValidationError) as exc_info:
            await invoice_sequencer.next("acct_1", template="INV-{YYYY}")

        assert exc_info.value.code == "VALIDATION_ERROR"
        mock_counter_repo.increment.assert_not_called()


@pytest.mark.asyncio
class TestReceiptNumberSequencer:

    async def test_uses_receipt_namespace_and_latest_receipt(self, mock_receipt_repo, mock_counter_repo):
        """
        Given: Latest receipt is REC-202405-0006
        When: The next receipt number is requested
        Then: Receipt counter is advanced past 6, independent of invoices
        """
        # Arrange
        mock_receipt_repo.find_latest_receipt_number.return_value = "REC-202405-0006"
        mock_counter_repo.increment.return_value = 7
        sequencer = ReceiptNumberSequencer(mock_receipt_repo, mock_counter_repo, clock=lambda: MAY_2024)

        # Act
        number = await sequencer.next("acct_1")

        # Assert
        assert number == "REC-202405-0007"
        mock_counter_repo.increment.assert_called_once_with(
            "acct_1", SequenceNamespace.RECEIPT, floor=6
        )
