"""
Translation of SQLAlchemy failures into repository-level errors.

Repository methods are decorated with ``handle_database_errors``; callers above
the persistence layer only ever see ``DatabaseError`` and its subclasses.
"""

from functools import wraps
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

import structlog
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class DatabaseError(Exception):
    """A repository operation failed in the database."""

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.original_error = original_error
        self.operation = operation
        self.context = context or {}


class DatabaseUnavailableError(DatabaseError):
    """The database could not be reached or the pool is exhausted."""


class DuplicateRecordError(DatabaseError):
    """A unique or foreign key constraint rejected the write."""


class StatementFailedError(DatabaseError):
    """Any other failing statement."""


_ERROR_TYPES = (
    (IntegrityError, DuplicateRecordError),
    ((OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError), DatabaseUnavailableError),
)


def classify_database_error(error: SQLAlchemyError) -> Type[DatabaseError]:
    for sqlalchemy_types, error_type in _ERROR_TYPES:
        if isinstance(error, sqlalchemy_types):
            return error_type
    return StatementFailedError


def handle_database_errors(
    reraise_as: Optional[Type[DatabaseError]] = None,
    context: Optional[Dict[str, Any]] = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorate an async repository method so SQLAlchemy errors become ``DatabaseError``.

    Args:
        reraise_as: Raise this type instead of the classified one
        context: Extra values attached to the raised error
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                owner = type(args[0]).__name__ if args else ""
                operation = f"{owner}.{func.__name__}" if owner else func.__name__
                error_type = reraise_as or classify_database_error(e)
                logger.error(
                    "Database operation failed",
                    operation=operation,
                    error_type=error_type.__name__,
                    error=str(e),
                )
                raise error_type(
                    f"{operation} failed: {e}",
                    original_error=e,
                    operation=operation,
                    context=context,
                ) from e

        return wrapper
    return decorator


__all__ = [
    "DatabaseError",
    "DatabaseUnavailableError",
    "DuplicateRecordError",
    "StatementFailedError",
    "classify_database_error",
    "handle_database_errors",
]
