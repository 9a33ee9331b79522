"""Notification Service Implementations

Provides concrete implementations for delivering overdue reminders.
"""

import logging
from decimal import Decimal
from typing import Optional
import httpx
from src.app.services.notification_service import NotificationService
from src.domain.invoice import Invoice
from src.domain.invoice_status import ReminderLevel

logger = logging.getLogger(__name__)


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs reminders

    Useful for development and testing, or as a fallback.
    """

    async def send_overdue_reminder(
        self,
        invoice: Invoice,
        balance_due: Decimal,
        days_past_due: int,
        level: ReminderLevel,
    ) -> bool:
        logger.warning(
            f"[OVERDUE {level.value.upper()}] Account: {invoice.account_id}, "
            f"Invoice: {invoice.invoice_number}, Customer: {invoice.customer_id}, "
            f"Balance due: {balance_due} {invoice.currency}, "
            f"Due: {invoice.due_date.isoformat()} ({days_past_due} days ago)"
        )
        return True


class WebhookNotificationService(NotificationService):
    """
    Notification service that posts reminders to an HTTP webhook

    Sends a JSON payload to the configured URL.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Initialize webhook notification service

        Args:
            webhook_url: URL to POST reminders to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def send_overdue_reminder(
        self,
        invoice: Invoice,
        balance_due: Decimal,
        days_past_due: int,
        level: ReminderLevel,
    ) -> bool:
        """
        Send an overdue reminder via webhook

        Returns:
            True if the webhook call succeeded, False otherwise
        """
        payload = {
            "type": "overdue_reminder",
            "reminder_level": level.value,
            "invoice_id": invoice.id,
            "invoice_number": invoice.invoice_number,
            "account_id": invoice.account_id,
            "customer_id": invoice.customer_id,
            "currency": invoice.currency,
            "total": str(invoice.total),
            "balance_due": str(balance_due),
            "due_date": invoice.due_date.isoformat(),
            "days_past_due": days_past_due,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.info(
                    f"Overdue reminder for invoice {invoice.invoice_number} sent to {self.webhook_url}"
                )
                return True
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to send overdue reminder for invoice {invoice.invoice_number}: {e}"
            )
            return False


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Useful for sending to multiple channels (e.g., log + webhook).
    """

    def __init__(self, services: list[NotificationService]):
        self.services = services

    async def send_overdue_reminder(
        self,
        invoice: Invoice,
        balance_due: Decimal,
        days_past_due: int,
        level: ReminderLevel,
    ) -> bool:
        """
        Send the reminder through every configured service

        Returns:
            True if at least one service succeeded, False otherwise
        """
        success = False
        for service in self.services:
            if await service.send_overdue_reminder(invoice, balance_due, days_past_due, level):
                success = True
        return success


def create_notification_service(webhook_url: Optional[str] = None) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        webhook_url: Optional webhook URL. If provided, creates composite
                     service with logging + webhook. Otherwise, just logging.

    Returns:
        Configured NotificationService
    """
    services: list[NotificationService] = [LoggingNotificationService()]

    if webhook_url:
        services.append(WebhookNotificationService(webhook_url))

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)
