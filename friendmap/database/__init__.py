#!/usr/bin/env python3
"""
friendmap Database Package
---------------------------
SQLAlchemy storage for people, tags, visited locations and home cities.

This package provides:
- The FriendmapDB facade (engine, sessions, migrations, units of work)
- Entity managers for normalization, mutations and queries
- Cleanup of shared rows no person references any more
- YAML / JSON export and import
"""

from .manager import FriendmapDB
from friendmap.core.exceptions import (
    ConflictOrTransientError,
    DatabaseError,
    ExportError,
    NotFoundError,
    ValidationError,
)
from .cleanup_manager import CleanupManager
from .export_manager import ExportManager
from .payloads import UNSET, PersonPayload
from .decorators import (
    DatabaseOperation,
    handle_db_errors,
    log_database_operation,
)

__all__ = [
    # Main manager
    "FriendmapDB",
    # Exceptions
    "ConflictOrTransientError",
    "DatabaseError",
    "ExportError",
    "NotFoundError",
    "ValidationError",
    # Core modules
    "CleanupManager",
    "ExportManager",
    "PersonPayload",
    "UNSET",
    # Decorators
    "DatabaseOperation",
    "log_database_operation",
    "handle_db_errors",
]
