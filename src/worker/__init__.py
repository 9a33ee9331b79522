"""Background workers for the invoicing service"""
from .overdue_monitor import OverdueMonitorWorker

__all__ = ["OverdueMonitorWorker"]
