"""Translation of SQLAlchemy failures into the invoicing error taxonomy"""

import functools
import logging
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from src.domain.errors import ConcurrentUpdateError, ConflictError, InvoicingError, StorageError

logger = logging.getLogger(__name__)


def violates(error: IntegrityError, *markers: str) -> bool:
    """True when the driver message names one of the given columns or constraints"""
    message = str(error.orig)
    return any(marker in message for marker in markers)


def translate_storage_errors(func):
    """
    Repository method decorator

    Typed invoicing errors raised by the method pass through. Otherwise
    StaleDataError becomes ConcurrentUpdateError, IntegrityError becomes
    ConflictError and any other SQLAlchemyError becomes StorageError.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except InvoicingError:
            raise
        except StaleDataError as e:
            raise ConcurrentUpdateError(
                "Row was modified or deleted by another transaction",
                reason=str(e),
            ) from e
        except IntegrityError as e:
            raise ConflictError("Uniqueness constraint violated", reason=str(e.orig)) from e
        except SQLAlchemyError as e:
            logger.error(f"Storage failure in {func.__qualname__}: {e}")
            raise StorageError(f"Storage operation {func.__qualname__} failed", reason=str(e)) from e

    return wrapper
