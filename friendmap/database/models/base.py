"""
Base Classes and Mixins
------------------------

Foundational ORM classes for the friendmap database.

Classes:
    - Base: Declarative base for all SQLAlchemy models
    - TimestampMixin: created_at / updated_at columns
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime, timezone

# --- Third party ---
from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# --- Base ORM class ---
class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Serves as the declarative base for SQLAlchemy models and provides
    access to the metadata object for table creation and migrations.
    """

    pass


# --- Timestamps ---
class TimestampMixin:
    """
    Mixin adding UTC creation and modification timestamps.

    Attributes:
        created_at: Set once on insert
        updated_at: Refreshed on every ORM update
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )
