"""Unit tests for invoice lifecycle actions (send, view, void)"""

import pytest
from datetime import datetime

from src.app.use_cases.invoicing.invoice_lifecycle import MarkInvoiceSent, MarkInvoiceViewed, VoidInvoice
from src.domain.invoice import InvoiceStatus


@pytest.fixture
def draft_invoice(invoice):
    invoice.sent_at = None
    invoice.status = InvoiceStatus.DRAFT
    return invoice


@pytest.fixture
def actions(mock_uow, mock_invoice_repo, loader):
    return {
        "send": MarkInvoiceSent(mock_uow, mock_invoice_repo, loader),
        "view": MarkInvoiceViewed(mock_uow, mock_invoice_repo, loader),
        "void": VoidInvoice(mock_uow, mock_invoice_repo, loader),
    }


@pytest.mark.asyncio
class TestMarkInvoiceSent:

    async def test_draft_becomes_sent(self, actions, draft_invoice, mock_invoice_repo, mock_uow):
        """
        Given: A draft invoice
        When: It is sent
        Then: sent_at is stamped and the cached status is sent
        """
        # Act
        result = await actions["send"].execute(1)

        # Assert
        assert result.is_ok()
        assert result.value.status == InvoiceStatus.SENT
        assert draft_invoice.sent_at is not None
        assert draft_invoice.status == InvoiceStatus.SENT
        mock_invoice_repo.get_by_id.assert_called_once_with(1, for_update=True)
        mock_invoice_repo.update.assert_called_once_with(draft_invoice)
        mock_uow.commit.assert_called_once()

    async def test_resend_keeps_first_sent_at(self, actions, invoice):
        first_sent = invoice.sent_at

        result = await actions["send"].execute(1)

        assert result.is_ok()
        assert invoice.sent_at == first_sent

    async def test_lifecycle_actions_do_not_bump_version(self, actions, draft_invoice):
        await actions["send"].execute(1)

        assert draft_invoice.version == 1


@pytest.mark.asyncio
class TestMarkInvoiceViewed:

    async def test_sent_becomes_viewed(self, actions, invoice):
        result = await actions["view"].execute(1)

        assert result.value.status == InvoiceStatus.VIEWED
        assert invoice.viewed_at is not None

    async def test_draft_cannot_be_viewed(self, actions, draft_invoice, mock_uow):
        # Act
        result = await actions["view"].execute(1)

        # Assert
        assert result.error.code == "INVALID_STATUS_TRANSITION"
        assert draft_invoice.viewed_at is None
        mock_uow.commit.assert_not_called()
        mock_uow.rollback.assert_called_once()

    async def test_view_never_downgrades_paid_invoice(self, actions, invoice, payments, new_payment):
        """
        Given: A fully paid invoice
        When: The customer opens the public link
        Then: viewed_at is recorded but status stays paid
        """
        # Arrange
        payments.append(new_payment(1, "216.02"))

        # Act
        result = await actions["view"].execute(1)

        # Assert
        assert result.value.status == InvoiceStatus.PAID
        assert invoice.viewed_at is not None

    async def test_first_view_is_kept(self, actions, invoice):
        invoice.viewed_at = datetime(2024, 5, 3, 8, 0)

        await actions["view"].execute(1)

        assert invoice.viewed_at == datetime(2024, 5, 3, 8, 0)


@pytest.mark.asyncio
class TestVoidInvoice:

    async def test_void_is_terminal(self, actions, invoice):
        # Act
        first = await actions["void"].execute(1)
        second = await actions["void"].execute(1)
        send = await actions["send"].execute(1)

        # Assert
        assert first.value.status == InvoiceStatus.VOID
        assert invoice.voided_at is not None
        assert second.error.code == "INVALID_STATUS_TRANSITION"
        assert send.error.code == "INVALID_STATUS_TRANSITION"

    async def test_invoice_not_found(self, actions, mock_invoice_repo):
        mock_invoice_repo.get_by_id.return_value = None

        result = await actions["void"].execute(42)

        assert result.error.code == "INVOICE_NOT_FOUND"
