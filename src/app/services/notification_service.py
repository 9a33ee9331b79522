"""Notification Service Interface

Defines the contract for sending overdue payment reminders.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from src.domain.invoice import Invoice
from src.domain.invoice_status import ReminderLevel


class NotificationService(ABC):
    """
    Abstract notification service for overdue invoices

    Implementations can deliver reminders via:
    - Application log
    - Webhook (HTTP POST)
    """

    @abstractmethod
    async def send_overdue_reminder(
        self,
        invoice: Invoice,
        balance_due: Decimal,
        days_past_due: int,
        level: ReminderLevel,
    ) -> bool:
        """
        Send a reminder for an overdue invoice

        Args:
            invoice: Overdue invoice
            balance_due: Outstanding amount
            days_past_due: Whole days since the due date
            level: Reminder tone derived from days_past_due

        Returns:
            True if the reminder was delivered, False otherwise
        """
        pass
