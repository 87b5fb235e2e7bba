#!/usr/bin/env python3
"""
decorators.py
--------------------
Shared decorators and context managers for database operations.

    log_database_operation: time an operation and log success/failure
    handle_db_errors: translate SQLAlchemy errors into ConflictOrTransientError
    DatabaseOperation: the two above as a context manager
"""
from __future__ import annotations

import time
from functools import wraps
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from friendmap.core.exceptions import ConflictOrTransientError
from friendmap.core.logging_manager import FriendmapLogger, safe_logger


def _translate(error: SQLAlchemyError) -> ConflictOrTransientError:
    if isinstance(error, IntegrityError):
        return ConflictOrTransientError(f"Data integrity violation: {error.orig}")
    if isinstance(error, OperationalError):
        return ConflictOrTransientError(f"Database unavailable: {error.orig}")
    return ConflictOrTransientError(f"Database operation failed: {error}")


def log_database_operation(operation_name: str):
    """
    Decorator to log database operations with timing and context.

    The decorated method's instance must expose a ``logger`` attribute
    (a FriendmapLogger or None).

    Args:
        operation_name: Name of the operation being logged

    Returns:
        Decorator function
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            logger = safe_logger(getattr(self, "logger", None))
            start = time.perf_counter()

            logger.log_debug(
                f"Starting {operation_name}",
                {"args_count": len(args), "kwargs_keys": list(kwargs.keys())},
            )

            try:
                result = function(self, *args, **kwargs)
            except Exception as e:
                logger.log_error(
                    e,
                    {
                        "operation": operation_name,
                        "duration_seconds": round(time.perf_counter() - start, 6),
                    },
                )
                raise

            logger.log_operation(
                f"{operation_name}_completed",
                {
                    "duration_seconds": round(time.perf_counter() - start, 6),
                    "success": True,
                },
            )
            return result

        return wrapper

    return decorator


def handle_db_errors(function: Callable) -> Callable:
    """
    Decorator to translate store errors.

    IntegrityError, OperationalError and any other SQLAlchemyError become
    ConflictOrTransientError (chained to the original). Every other
    exception propagates unchanged.
    """

    @wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except SQLAlchemyError as e:
            raise _translate(e) from e

    return wrapper


class DatabaseOperation:
    """
    Context manager combining error translation and operation logging.

    Usage:
        with DatabaseOperation(self.logger, "create_person"):
            ...

    Args:
        logger: FriendmapLogger or None (NullLogger is used)
        operation_name: Name logged on completion/failure
        log_start: Also log a debug line when entering
        details: Extra details merged into the completion log
    """

    def __init__(
        self,
        logger: Optional[FriendmapLogger],
        operation_name: str,
        log_start: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.logger = safe_logger(logger)
        self.operation_name = operation_name
        self.log_start = log_start
        self.details = details or {}
        self._start = 0.0

    def __enter__(self) -> "DatabaseOperation":
        self._start = time.perf_counter()
        if self.log_start:
            self.logger.log_debug(f"Starting {self.operation_name}", self.details)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        duration = round(time.perf_counter() - self._start, 6)

        if exc_val is None:
            self.logger.log_operation(
                f"{self.operation_name}_completed",
                {**self.details, "duration_seconds": duration, "success": True},
            )
            return False

        self.logger.log_error(
            exc_val, {"operation": self.operation_name, "duration_seconds": duration}
        )
        if isinstance(exc_val, SQLAlchemyError):
            raise _translate(exc_val) from exc_val
        return False
