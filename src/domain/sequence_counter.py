"""Sequence Counter Domain Entity

Per-account counters backing invoice and receipt numbering.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, Integer, String, UniqueConstraint
from src.domain.base import BaseModel, IdType


class SequenceNamespace(str, Enum):
    """Independent counter namespaces"""
    INVOICE = "invoice"
    RECEIPT = "receipt"


class SequenceCounter(BaseModel, table=True):
    """
    Sequence Counter - Last sequence value handed out for an account

    Domain Rules:
    - One counter per (account_id, namespace)
    - last_value only moves forward, through an atomic increment
    - number_format_template overrides the configured default template
    """

    __tablename__ = "sequence_counters"
    __table_args__ = (
        UniqueConstraint('account_id', 'namespace', name='uq_sequence_counters_account_namespace'),
        CheckConstraint('last_value >= 0', name='last_value_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    account_id: str = Field(
        index=True,
        description="Owning account"
    )

    namespace: SequenceNamespace = Field(
        description="Counter namespace (invoice, receipt)"
    )

    last_value: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Last sequence value handed out"
    )

    number_format_template: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True),
        description="Template with {YYYY}, {MM} and {SEQ} placeholders"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last increment timestamp"
    )
