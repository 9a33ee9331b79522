"""Overdue Invoice Monitor Background Worker

Periodically marks past-due invoices as overdue and sends reminders.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyInvoiceRepository,
    SqlAlchemyInvoiceLineRepository,
    SqlAlchemyInvoiceChargeRepository,
    SqlAlchemyPaymentRepository,
)
from src.adapter.services.notification_service import create_notification_service
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.invoicing import (
    DetectOverdueInvoices,
    DetectOverdueResponseDTO,
    InvoiceStateLoader,
)

logger = logging.getLogger(__name__)


class OverdueMonitorWorker:
    """
    Background worker for overdue invoice detection

    Features:
    - Refreshes the cached status of invoices past their due date
    - Sends gentle / firm / final reminders through the notification service
    - Can run once or continuously
    - Configurable interval (default: hourly)

    Usage:
        # Run once
        worker = OverdueMonitorWorker()
        result = await worker.run_once()

        # Run continuously
        worker = OverdueMonitorWorker()
        await worker.run_forever(interval_seconds=3600)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        webhook_url: Optional[str] = None,
        batch_size: Optional[int] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            webhook_url: Notification webhook URL (defaults to config)
            batch_size: Invoices read per page of a sweep (defaults to config)
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.webhook_url = webhook_url or ApplicationConfig.OVERDUE_NOTIFICATION_WEBHOOK
        self.batch_size = batch_size or ApplicationConfig.OVERDUE_MONITOR_BATCH_SIZE

        # Create engine and session factory
        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        # Create notification service
        self.notification_service = create_notification_service(self.webhook_url)

        logger.info(f"OverdueMonitorWorker initialized with batch_size={self.batch_size}")

    async def run_once(self, today: Optional[date] = None) -> DetectOverdueResponseDTO:
        """
        Run one overdue sweep

        Args:
            today: Reference date (defaults to today)

        Returns:
            DetectOverdueResponseDTO with sweep results
        """
        if not ApplicationConfig.OVERDUE_MONITOR_ENABLED:
            logger.info("Overdue monitor is disabled, skipping")
            return DetectOverdueResponseDTO(
                checked=0,
                status_updates=0,
                reminders=[],
                checked_at=datetime.utcnow(),
            )

        async with self.async_session_factory() as session:
            invoice_repo = SqlAlchemyInvoiceRepository(session)
            loader = InvoiceStateLoader(
                invoice_repo=invoice_repo,
                line_repo=SqlAlchemyInvoiceLineRepository(session),
                charge_repo=SqlAlchemyInvoiceChargeRepository(session),
                payment_repo=SqlAlchemyPaymentRepository(session),
            )

            use_case = DetectOverdueInvoices(
                uow=SqlAlchemyUnitOfWork(session),
                invoice_repo=invoice_repo,
                loader=loader,
                notification_service=self.notification_service,
                batch_size=self.batch_size,
            )

            result = await use_case.execute(today=today)

            if result.is_err():
                logger.error(f"Overdue sweep failed: {result.error.message}")
                raise RuntimeError(f"Overdue sweep failed: {result.error.message}")

            response = result.value

            undelivered = [r for r in response.reminders if not r.notified]
            if undelivered:
                logger.warning(
                    f"{len(undelivered)} overdue reminders could not be delivered: "
                    f"{', '.join(r.invoice_number for r in undelivered)}"
                )

            return response

    async def run_forever(self, interval_seconds: int = 3600):
        """
        Run overdue sweeps continuously at specified interval

        Args:
            interval_seconds: Seconds between sweeps (default: 1 hour)
        """
        logger.info(f"Starting continuous overdue monitoring with {interval_seconds}s interval")

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Overdue sweep complete. Checked {result.checked} invoices, "
                    f"{len(result.reminders)} overdue, {result.status_updates} status updates"
                )
            except Exception as e:
                logger.error(f"Overdue sweep cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("OverdueMonitorWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m src.worker.overdue_monitor --once

        # Run continuously (default: hourly)
        python -m src.worker.overdue_monitor

        # Run continuously with custom interval (in seconds)
        python -m src.worker.overdue_monitor --interval 600
    """
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Overdue Invoice Monitor")
    parser.add_argument(
        "--once", action="store_true", help="Run once and exit"
    )
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.OVERDUE_MONITOR_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: 3600 = 1 hour)"
    )
    args = parser.parse_args()

    worker = OverdueMonitorWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print("Overdue sweep complete:")
            print(f"  Invoices checked: {result.checked}")
            print(f"  Status updates: {result.status_updates}")
            print(f"  Overdue: {len(result.reminders)}")
            for r in result.reminders:
                print(
                    f"  - {r.invoice_number} ({r.account_id}): "
                    f"balance_due={r.balance_due}, {r.days_past_due} days, {r.reminder_level.value}"
                )
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
