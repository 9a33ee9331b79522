"""Sequence Counter Repository Interface

Defines the contract for per-account sequence allocation.
"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.sequence_counter import SequenceCounter, SequenceNamespace


class SequenceCounterRepository(ABC):
    """
    Repository interface for SequenceCounter persistence

    increment() is the only way last_value changes and must be atomic:
    two concurrent calls for the same account and namespace never return
    the same value.
    """

    @abstractmethod
    async def get(self, account_id: str, namespace: SequenceNamespace) -> Optional[SequenceCounter]:
        """
        Retrieve a counter without locking it

        Args:
            account_id: Account identifier
            namespace: Counter namespace

        Returns:
            SequenceCounter if it exists, None otherwise
        """
        pass

    @abstractmethod
    async def increment(self, account_id: str, namespace: SequenceNamespace, floor: int = 0) -> int:
        """
        Atomically advance a counter, creating it on first use

        Sets last_value = max(last_value, floor) + 1.

        Args:
            account_id: Account identifier
            namespace: Counter namespace
            floor: Sequence value known to be consumed already

        Returns:
            The new last_value
        """
        pass

    @abstractmethod
    async def save_template(
        self, account_id: str, namespace: SequenceNamespace, template: Optional[str]
    ) -> SequenceCounter:
        """Set (or clear) the account's number format template"""
        pass
