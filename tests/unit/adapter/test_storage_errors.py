"""Unit tests for SQLAlchemy error translation"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from src.adapter.repositories.storage_errors import translate_storage_errors, violates
from src.domain.errors import ConcurrentUpdateError, ConflictError, StorageError, ValidationError


def failing_with(error):
    @translate_storage_errors
    async def operation():
        raise error

    return operation


def integrity_error(message):
    return IntegrityError("INSERT INTO payments ...", {}, Exception(message))


@pytest.mark.asyncio
class TestTranslateStorageErrors:

    async def test_integrity_error_becomes_conflict(self):
        with pytest.raises(ConflictError) as exc_info:
            await failing_with(integrity_error("UNIQUE constraint failed: payments.reference"))()
        assert "payments.reference" in exc_info.value.reason

    async def test_stale_data_becomes_concurrent_update(self):
        with pytest.raises(ConcurrentUpdateError):
            await failing_with(StaleDataError("expected 1 row"))()

    async def test_other_database_errors_become_storage_error(self):
        with pytest.raises(StorageError):
            await failing_with(OperationalError("SELECT 1", {}, Exception("database is locked")))()

    async def test_typed_errors_pass_through(self):
        with pytest.raises(ValidationError):
            await failing_with(ValidationError("bad input"))()

    async def test_returns_value_on_success(self):
        @translate_storage_errors
        async def operation():
            return 42

        assert await operation() == 42


class TestViolates:

    def test_matches_constraint_or_column_name(self):
        error = integrity_error("duplicate key value violates unique constraint \"uq_invoices_account_number\"")

        assert violates(error, "invoice_number", "uq_invoices_account_number")
        assert not violates(error, "reference")
