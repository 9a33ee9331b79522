"""Unit tests for CreateInvoice use case

Tests cover:
- Totals computed from line items, discount, charges and tax
- Invoice number allocated from the sequencer
- Due date defaulting and validation
- Rejections before any number is allocated
- Storage and uniqueness failures rolled back
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.invoicing.create_invoice import CreateInvoice
from src.app.use_cases.invoicing.dtos import ChargeDTO, CreateInvoiceCommandDTO, LineItemDTO
from src.domain.errors import DuplicateInvoiceNumberError, StorageError
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_totals import DiscountMode, InvoiceAggregator


@pytest.fixture
def mock_invoice_repo():
    """Mock invoice repository assigning IDs on create"""
    repo = MagicMock()

    async def assign_id(invoice):
        invoice.id = 1
        return invoice

    repo.create = AsyncMock(side_effect=assign_id)
    return repo


@pytest.fixture
def mock_line_repo():
    repo = MagicMock()
    repo.create_many = AsyncMock(side_effect=lambda lines: lines)
    return repo


@pytest.fixture
def mock_charge_repo():
    repo = MagicMock()
    repo.create_many = AsyncMock(side_effect=lambda charges: charges)
    return repo


@pytest.fixture
def mock_sequencer():
    sequencer = MagicMock()
    sequencer.next = AsyncMock(return_value="INV-2024-05-0001")
    return sequencer


@pytest.fixture
def create_invoice_use_case(mock_uow, mock_invoice_repo, mock_line_repo, mock_charge_repo, mock_sequencer):
    """CreateInvoice use case instance with mocked dependencies"""
    return CreateInvoice(
        uow=mock_uow,
        invoice_repo=mock_invoice_repo,
        line_repo=mock_line_repo,
        charge_repo=mock_charge_repo,
        sequencer=mock_sequencer,
        today=lambda: date(2024, 5, 1),
    )


@pytest.fixture
def sample_command():
    """Two lines at 8% tax: 200.02 + 16.00 = 216.02"""
    return CreateInvoiceCommandDTO(
        account_id="acct_1",
        customer_id="cust_1",
        line_items=[
            LineItemDTO(description="Consulting", quantity=Decimal("3"), unit_rate=Decimal("33.33"), unit="hour"),
            LineItemDTO(description="Support", quantity=Decimal("7"), unit_rate=Decimal("14.29")),
        ],
        tax_rate=Decimal("0.08"),
    )


@pytest.mark.asyncio
class TestCreateInvoiceSuccess:
    """Test successful invoice creation"""

    async def test_create_invoice_success(
        self, create_invoice_use_case, mock_invoice_repo, mock_line_repo, mock_uow, mock_sequencer, sample_command
    ):
        """
        Given: A draft with two line items and 8% tax
        When: create_invoice is called
        Then: Draft invoice is created with computed totals and the next number
        """
        # Act
        result = await create_invoice_use_case.execute(sample_command)

        # Assert
        assert result.is_ok()
        response = result.value

        assert response.id == 1
        assert response.invoice_number == "INV-2024-05-0001"
        assert response.status == InvoiceStatus.DRAFT
        assert response.subtotal == Decimal("200.02")
        assert response.tax_amount == Decimal("16.00")
        assert response.total == Decimal("216.02")
        assert response.total_paid == Decimal("0.00")
        assert response.balance_due == Decimal("216.02")
        assert [line.total for line in response.line_items] == [Decimal("99.99"), Decimal("100.03")]
        assert [line.position for line in response.line_items] == [0, 1]

        mock_sequencer.next.assert_called_once_with("acct_1")
        mock_invoice_repo.create.assert_called_once()
        mock_line_repo.create_many.assert_called_once()
        mock_uow.commit.assert_called_once()

    async def test_persisted_invoice_caches_totals(
        self, create_invoice_use_case, mock_invoice_repo, sample_command
    ):
        # Act
        await create_invoice_use_case.execute(sample_command)

        # Assert
        invoice = mock_invoice_repo.create.call_args[0][0]
        assert invoice.account_id == "acct_1"
        assert invoice.customer_id == "cust_1"
        assert invoice.subtotal == Decimal("200.02")
        assert invoice.total == Decimal("216.02")
        assert invoice.total_paid == Decimal("0.00")
        assert invoice.currency == "USD"

    async def test_default_due_date_uses_payment_terms(self, create_invoice_use_case, sample_command):
        result = await create_invoice_use_case.execute(sample_command)

        assert result.value.issue_date == date(2024, 5, 1)
        assert result.value.due_date == date(2024, 5, 31)

    async def test_charges_persisted_and_added_after_tax(
        self, create_invoice_use_case, mock_charge_repo, sample_command
    ):
        # Arrange
        sample_command.additional_charges = [ChargeDTO(name="Shipping", amount=Decimal("12.50"))]
        sample_command.discount = Decimal("50.00")

        # Act
        result = await create_invoice_use_case.execute(sample_command)

        # Assert
        response = result.value
        assert response.discount == Decimal("50.00")
        assert response.tax_amount == Decimal("12.00")
        assert response.charges_total == Decimal("12.50")
        assert response.total == Decimal("174.52")
        assert response.additional_charges[0].name == "Shipping"
        mock_charge_repo.create_many.assert_called_once()

    async def test_no_charges_skips_charge_repository(
        self, create_invoice_use_case, mock_charge_repo, sample_command
    ):
        await create_invoice_use_case.execute(sample_command)

        mock_charge_repo.create_many.assert_not_called()

    async def test_percentage_discount_stored_as_flat_amount(
        self, mock_uow, mock_invoice_repo, mock_line_repo, mock_charge_repo, mock_sequencer, sample_command
    ):
        # Arrange
        use_case = CreateInvoice(
            uow=mock_uow,
            invoice_repo=mock_invoice_repo,
            line_repo=mock_line_repo,
            charge_repo=mock_charge_repo,
            sequencer=mock_sequencer,
            aggregator=InvoiceAggregator(discount_mode=DiscountMode.PERCENTAGE),
        )
        sample_command.discount = Decimal("10")

        # Act
        result = await use_case.execute(sample_command)

        # Assert
        assert result.value.total == Decimal("194.42")
        assert mock_invoice_repo.create.call_args[0][0].discount == Decimal("20.00")


@pytest.mark.asyncio
class TestCreateInvoiceValidation:
    """Drafts rejected before a number is allocated"""

    async def test_rejects_tax_rate_above_one(
        self, create_invoice_use_case, mock_sequencer, mock_uow, sample_command
    ):
        # Arrange
        sample_command.tax_rate = Decimal("1.5")

        # Act
        result = await create_invoice_use_case.execute(sample_command)

        # Assert
        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        mock_sequencer.next.assert_not_called()
        mock_uow.commit.assert_not_called()
        mock_uow.rollback.assert_called_once()

    async def test_rejects_negative_unit_rate(self, create_invoice_use_case, mock_invoice_repo, sample_command):
        sample_command.line_items[1].unit_rate = Decimal("-14.29")

        result = await create_invoice_use_case.execute(sample_command)

        assert result.error.code == "VALIDATION_ERROR"
        mock_invoice_repo.create.assert_not_called()

    async def test_rejects_empty_draft(self, create_invoice_use_case, sample_command):
        sample_command.line_items = []

        result = await create_invoice_use_case.execute(sample_command)

        assert result.error.code == "VALIDATION_ERROR"
        assert "at least one line item" in result.error.message

    async def test_rejects_due_date_before_issue_date(self, create_invoice_use_case, sample_command):
        sample_command.issue_date = date(2024, 5, 10)
        sample_command.due_date = date(2024, 5, 9)

        result = await create_invoice_use_case.execute(sample_command)

        assert result.error.code == "VALIDATION_ERROR"


@pytest.mark.asyncio
class TestCreateInvoiceFailures:

    async def test_duplicate_invoice_number_is_conflict(
        self, create_invoice_use_case, mock_invoice_repo, mock_uow, sample_command
    ):
        # Arrange
        mock_invoice_repo.create.side_effect = DuplicateInvoiceNumberError("INV-2024-05-0001")

        # Act
        result = await create_invoice_use_case.execute(sample_command)

        # Assert
        assert result.error.code == "DUPLICATE_INVOICE_NUMBER"
        assert result.error.details == {"invoice_number": "INV-2024-05-0001"}
        mock_uow.rollback.assert_called_once()

    async def test_storage_error_propagated(
        self, create_invoice_use_case, mock_line_repo, mock_uow, sample_command
    ):
        # Arrange
        mock_line_repo.create_many.side_effect = StorageError("Storage operation failed", reason="disk full")

        # Act
        result = await create_invoice_use_case.execute(sample_command)

        # Assert
        assert result.error.code == "STORAGE_ERROR"
        assert result.error.reason == "disk full"
        mock_uow.commit.assert_not_called()
        mock_uow.rollback.assert_called_once()

    async def test_unexpected_error(self, create_invoice_use_case, mock_sequencer, sample_command):
        mock_sequencer.next.side_effect = RuntimeError("boom")

        result = await create_invoice_use_case.execute(sample_command)

        assert result.error.code == "CREATE_INVOICE_FAILED"
        assert result.error.reason == "boom"
