"""Unit tests for OverdueMonitorWorker

Tests cover:
- Worker initialization with configuration
- run_once execution of the overdue sweep
- Monitor disabled scenario
- Undelivered reminders
- Error handling and shutdown
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

from src.worker.overdue_monitor import OverdueMonitorWorker
from src.app.use_cases.invoicing.dtos import DetectOverdueResponseDTO, OverdueReminderDTO
from src.domain.invoice_status import ReminderLevel


@pytest.fixture
def sample_sweep_result():
    """Sweep with one delivered and one undelivered reminder"""
    return DetectOverdueResponseDTO(
        checked=3,
        status_updates=2,
        reminders=[
            OverdueReminderDTO(
                invoice_id=1,
                invoice_number="INV-2024-05-0001",
                account_id="acct_1",
                balance_due=Decimal("216.02"),
                days_past_due=10,
                reminder_level=ReminderLevel.FIRM,
                notified=True,
            ),
            OverdueReminderDTO(
                invoice_id=2,
                invoice_number="INV-2024-05-0002",
                account_id="acct_1",
                balance_due=Decimal("50.00"),
                days_past_due=45,
                reminder_level=ReminderLevel.FINAL,
                notified=False,
            ),
        ],
        checked_at=datetime.utcnow(),
    )


def mock_session_factory():
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=session)


class TestOverdueMonitorWorkerInit:
    """Test worker initialization"""

    @patch("src.worker.overdue_monitor.create_notification_service")
    @patch("src.worker.overdue_monitor.ApplicationConfig")
    @patch("src.worker.overdue_monitor.create_async_engine")
    def test_initializes_with_default_config(
        self, mock_create_engine, mock_app_config, mock_create_notification
    ):
        """
        Given: No custom configuration provided
        When: Worker is initialized
        Then: Uses defaults from ApplicationConfig
        """
        # Arrange
        mock_app_config.DB_URI = "postgresql+asyncpg://default@localhost/db"
        mock_app_config.OVERDUE_NOTIFICATION_WEBHOOK = "https://hooks.example.com/overdue"
        mock_app_config.OVERDUE_MONITOR_BATCH_SIZE = 250

        # Act
        worker = OverdueMonitorWorker()

        # Assert
        assert worker.db_uri == "postgresql+asyncpg://default@localhost/db"
        assert worker.batch_size == 250
        mock_create_engine.assert_called_once()
        mock_create_notification.assert_called_once_with("https://hooks.example.com/overdue")

    @patch("src.worker.overdue_monitor.create_notification_service")
    @patch("src.worker.overdue_monitor.ApplicationConfig")
    @patch("src.worker.overdue_monitor.create_async_engine")
    def test_initializes_with_custom_values(
        self, mock_create_engine, mock_app_config, mock_create_notification
    ):
        # Act
        worker = OverdueMonitorWorker(
            db_uri="sqlite+aiosqlite:///./custom.db",
            webhook_url="https://custom.example.com/hook",
            batch_size=10,
        )

        # Assert
        assert worker.db_uri == "sqlite+aiosqlite:///./custom.db"
        assert worker.batch_size == 10
        mock_create_notification.assert_called_once_with("https://custom.example.com/hook")


@pytest.mark.asyncio
class TestOverdueMonitorWorkerRunOnce:
    """Test run_once execution"""

    @patch("src.worker.overdue_monitor.create_notification_service")
    @patch("src.worker.overdue_monitor.ApplicationConfig")
    @patch("src.worker.overdue_monitor.DetectOverdueInvoices")
    @patch("src.worker.overdue_monitor.SqlAlchemyUnitOfWork")
    @patch("src.worker.overdue_monitor.create_async_engine")
    @patch("src.worker.overdue_monitor.sessionmaker")
    async def test_run_once_executes_sweep(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_uow_class,
        mock_use_case_class,
        mock_app_config,
        mock_create_notification,
        sample_sweep_result,
    ):
        """
        Given: The monitor is enabled
        When: run_once is called
        Then: Executes the overdue sweep and returns its result
        """
        # Arrange
        mock_app_config.OVERDUE_MONITOR_ENABLED = True
        mock_app_config.OVERDUE_MONITOR_BATCH_SIZE = 500
        mock_sessionmaker.return_value = mock_session_factory()

        mock_use_case = MagicMock()
        mock_result = MagicMock()
        mock_result.is_err.return_value = False
        mock_result.value = sample_sweep_result
        mock_use_case.execute = AsyncMock(return_value=mock_result)
        mock_use_case_class.return_value = mock_use_case

        # Act
        worker = OverdueMonitorWorker()
        result = await worker.run_once(today=date(2024, 6, 10))

        # Assert
        assert result.checked == 3
        assert len(result.reminders) == 2
        mock_use_case.execute.assert_called_once_with(today=date(2024, 6, 10))
        assert mock_use_case_class.call_args.kwargs["batch_size"] == 500
        assert (
            mock_use_case_class.call_args.kwargs["notification_service"]
            is mock_create_notification.return_value
        )

    @patch("src.worker.overdue_monitor.create_notification_service")
    @patch("src.worker.overdue_monitor.ApplicationConfig")
    @patch("src.worker.overdue_monitor.DetectOverdueInvoices")
    @patch("src.worker.overdue_monitor.create_async_engine")
    async def test_run_once_skips_when_disabled(
        self, mock_create_engine, mock_use_case_class, mock_app_config, mock_create_notification
    ):
        """
        Given: The monitor is disabled
        When: run_once is called
        Then: Returns an empty result without touching the database
        """
        # Arrange
        mock_app_config.OVERDUE_MONITOR_ENABLED = False

        # Act
        worker = OverdueMonitorWorker()
        result = await worker.run_once()

        # Assert
        assert result.checked == 0
        assert result.reminders == []
        mock_use_case_class.assert_not_called()

    @patch("src.worker.overdue_monitor.create_notification_service")
    @patch("src.worker.overdue_monitor.ApplicationConfig")
    @patch("src.worker.overdue_monitor.DetectOverdueInvoices")
    @patch("src.worker.overdue_monitor.SqlAlchemyUnitOfWork")
    @patch("src.worker.overdue_monitor.create_async_engine")
    @patch("src.worker.overdue_monitor.sessionmaker")
    async def test_run_once_raises_on_use_case_error(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_uow_class,
        mock_use_case_class,
        mock_app_config,
        mock_create_notification,
    ):
        """
        Given: The sweep returns an error
        When: run_once is called
        Then: Raises RuntimeError
        """
        # Arrange
        mock_app_config.OVERDUE_MONITOR_ENABLED = True
        mock_sessionmaker.return_value = mock_session_factory()

        mock_error = MagicMock()
        mock_error.message = "Database connection failed"
        mock_result = MagicMock()
        mock_result.is_err.return_value = True
        mock_result.error = mock_error
        mock_use_case = MagicMock()
        mock_use_case.execute = AsyncMock(return_value=mock_result)
        mock_use_case_class.return_value = mock_use_case

        # Act & Assert
        worker = OverdueMonitorWorker()
        with pytest.raises(RuntimeError, match="Overdue sweep failed"):
            await worker.run_once()


@pytest.mark.asyncio
class TestOverdueMonitorWorkerShutdown:

    @patch("src.worker.overdue_monitor.create_notification_service")
    @patch("src.worker.overdue_monitor.create_async_engine")
    async def test_shutdown_disposes_engine(self, mock_create_engine, mock_create_notification):
        # Arrange
        mock_engine = MagicMock()
        mock_engine.dispose = AsyncMock()
        mock_create_engine.return_value = mock_engine

        # Act
        worker = OverdueMonitorWorker(db_uri="sqlite+aiosqlite://")
        await worker.shutdown()

        # Assert
        mock_engine.dispose.assert_called_once()
