#!/usr/bin/env python3
"""
base_manager.py
--------------------
Base manager providing common lookup and get-or-create helpers.
All entity managers inherit from this class.

Key Features:
    - Session and logger wiring
    - Race-safe get-or-create inside a SAVEPOINT
    - Lookup by id / by normalized key
    - Full replacement of many-to-many collections

Managers never commit. They flush inside the session they were given and
leave commit/rollback to FriendmapDB.session_scope(), so one request is
always one transaction.

Example:
    class TagManager(BaseManager):
        def get_or_create(self, tag_name: str) -> Tag:
            tag_text = DataValidator.normalize_string(tag_name)
            return self._get_or_create(
                Tag, {"key": tag_text.casefold()}, {"tag": tag_text}
            )
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from abc import ABC
from typing import Any, Dict, Iterable, List, Optional, Protocol, Type, TypeVar

# --- Third party imports ---
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, Session

# --- Local imports ---
from friendmap.core.exceptions import ConflictOrTransientError
from friendmap.core.logging_manager import FriendmapLogger, safe_logger


class HasId(Protocol):
    """Protocol for objects that have an id attribute."""

    id: Mapped[int]


T = TypeVar("T", bound=HasId)


class BaseManager(ABC):
    """
    Abstract base manager.

    Attributes:
        session: SQLAlchemy session for database operations
        logger: Optional logger for operation tracking
    """

    def __init__(self, session: Session, logger: Optional[FriendmapLogger] = None):
        self.session = session
        self.logger = logger

    @property
    def log(self) -> FriendmapLogger:
        return safe_logger(self.logger)

    # -------------------------------------------------------------------------
    # Core Helper Methods
    # -------------------------------------------------------------------------

    def _get_or_create(
        self,
        model_class: Type[T],
        lookup_fields: Dict[str, Any],
        extra_fields: Optional[Dict[str, Any]] = None,
    ) -> T:
        """
        Get a row by its lookup fields or create it.

        The insert runs inside a SAVEPOINT. If another transaction created
        the same row first, the unique constraint fires, only the savepoint
        is rolled back, and the winner's row is returned. The enclosing
        transaction stays usable either way.

        Args:
            model_class: ORM model class to query or create
            lookup_fields: Unique field values to filter/create by
            extra_fields: Additional fields for new object creation only

        Returns:
            ORM instance of the model class

        Raises:
            ConflictOrTransientError: If the row can neither be created nor found
        """
        obj = self.session.query(model_class).filter_by(**lookup_fields).first()
        if obj is not None:
            return obj

        fields = dict(lookup_fields)
        if extra_fields:
            fields.update(extra_fields)

        try:
            with self.session.begin_nested():
                obj = model_class(**fields)
                self.session.add(obj)
            self.log.log_debug(
                f"Created {model_class.__name__}", {"id": obj.id, **lookup_fields}
            )
            return obj
        except IntegrityError:
            obj = self.session.query(model_class).filter_by(**lookup_fields).first()
            if obj is not None:
                self.log.log_debug(
                    f"Reused concurrently created {model_class.__name__}",
                    {"id": obj.id, **lookup_fields},
                )
                return obj
            raise ConflictOrTransientError(
                f"Failed to create {model_class.__name__} {lookup_fields} "
                "even after handling race condition"
            )

    def _get_by_id(self, model_class: Type[T], entity_id: int) -> Optional[T]:
        return self.session.get(model_class, entity_id)

    def _get_by_key(self, model_class: Type[T], key: Optional[str]) -> Optional[T]:
        if not key:
            return None
        return self.session.query(model_class).filter_by(key=key).first()

    # -------------------------------------------------------------------------
    # Generic Relationship Helpers
    # -------------------------------------------------------------------------

    def _replace_collection(
        self, entity: Any, attr_name: str, items: Iterable[Any]
    ) -> None:
        """
        Replace a many-to-many collection with exactly ``items``.

        Args:
            entity: Entity whose collection to replace
            attr_name: Name of the relationship attribute (e.g. 'tags')
            items: Resolved ORM objects, already deduplicated
        """
        new_items: List[Any] = list(items)
        collection = getattr(entity, attr_name)
        for existing in list(collection):
            if existing not in new_items:
                collection.remove(existing)
        for item in new_items:
            if item not in collection:
                collection.append(item)
        self.session.flush()
