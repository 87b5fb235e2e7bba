#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the friendmap project.

Exception Hierarchy:
    Exception (built-in)
    ├── ValidationError - Bad input, rejected before any write
    ├── NotFoundError - Target record does not exist
    └── DatabaseError - Base for all store errors
        ├── ConflictOrTransientError - Constraint violations, locks, timeouts
        └── ExportError - Export/import file failures

Usage:
    from friendmap.core.exceptions import ValidationError, NotFoundError

    try:
        db.update_person(person_id, {"name": ""})
    except ValidationError as e:
        logger.error(f"Invalid data: {e}")
    except NotFoundError as e:
        logger.error(f"Missing: {e}")
    except ConflictOrTransientError as e:
        logger.error(f"Try again: {e}")
"""


class ValidationError(Exception):
    """
    Exception for data validation failures.

    Raised when input data fails validation checks, always before anything
    is written:
    - Empty or whitespace-only names
    - Non-boolean star flags
    - Tag or location lists that are not lists of strings
    - Unknown payload fields

    Examples:
        >>> raise ValidationError("Person name cannot be empty")
        >>> raise ValidationError("is_starred must be a boolean")
    """

    pass


class NotFoundError(Exception):
    """
    Exception for lookups of records that do not exist.

    Examples:
        >>> raise NotFoundError("Person not found with id: 42")
    """

    pass


class DatabaseError(Exception):
    """
    Base exception for database-related errors.

    Raised when database operations fail due to connection issues,
    query errors, integrity violations, or other database problems.

    See Also:
        ConflictOrTransientError, ExportError
    """

    pass


class ConflictOrTransientError(DatabaseError):
    """
    Exception for store failures that are safe to retry.

    Raised when the underlying store rejects a unit of work:
    - Unique or foreign key constraint violations
    - "database is locked" / busy timeouts
    - Connection failures

    The enclosing transaction has been rolled back when this reaches
    the caller, so retrying the whole operation is safe.

    Examples:
        >>> raise ConflictOrTransientError("Data integrity violation: UNIQUE constraint failed")
    """

    pass


class ExportError(DatabaseError):
    """
    Exception for export and import file failures.

    Examples:
        >>> raise ExportError("Unsupported export format: csv")
        >>> raise ExportError("Import file must contain a list of people")
    """

    pass
