#!/usr/bin/env python3
"""
cleanup_manager.py
--------------------
Removal of shared rows that no person references any more.

Tags, visited locations and country/city pairs are created on first use
and must disappear with their last reference. The delete runs as a single
``DELETE ... WHERE NOT EXISTS (<reference>)`` per table, inside the same
transaction as the mutation that may have orphaned them, so reference
counts are evaluated at delete time rather than read earlier and trusted.

Usage:
    cleanup = CleanupManager(session, logger)
    removed = cleanup.cleanup_all()
    # {"tags": 1, "locations": 0, "country_cities": 0}
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple, Type

from sqlalchemy import delete, exists, func, select
from sqlalchemy.orm import Session

from friendmap.core.logging_manager import FriendmapLogger

from .decorators import DatabaseOperation, handle_db_errors, log_database_operation
from .models import (
    Base,
    CountryCity,
    Person,
    Tag,
    VisitedLocation,
    person_tags,
    person_visited_locations,
)


class CleanupManager:
    """
    Deletes unreferenced Tag, VisitedLocation and CountryCity rows.

    Attributes:
        session: SQLAlchemy session (the mutation's session)
        logger: Optional logger for operation tracking
    """

    def __init__(self, session: Session, logger: Optional[FriendmapLogger] = None):
        self.session = session
        self.logger = logger

    @staticmethod
    def _orphan_conditions() -> Dict[str, Tuple[Type[Base], object]]:
        return {
            "tags": (
                Tag,
                ~exists().where(person_tags.c.tag_id == Tag.id),
            ),
            "locations": (
                VisitedLocation,
                ~exists().where(person_visited_locations.c.location_id == VisitedLocation.id),
            ),
            "country_cities": (
                CountryCity,
                ~exists().where(Person.country_city_id == CountryCity.id),
            ),
        }

    def _delete_unreferenced(self, table_name: str) -> int:
        model_class, condition = self._orphan_conditions()[table_name]
        with DatabaseOperation(
            self.logger, f"delete_unreferenced_{table_name}"
        ) as operation:
            result = self.session.execute(
                delete(model_class)
                .where(condition)
                .execution_options(synchronize_session=False)
            )
            deleted = result.rowcount or 0
            operation.details["deleted_count"] = deleted
        return deleted

    def _expire_deleted(self) -> None:
        # Bulk deletes bypass the identity map; drop stale instances
        self.session.expire_all()

    @handle_db_errors
    def delete_unreferenced_tags(self) -> int:
        """Delete tags linked to no person. Returns the number removed."""
        self.session.flush()
        deleted = self._delete_unreferenced("tags")
        self._expire_deleted()
        return deleted

    @handle_db_errors
    def delete_unreferenced_locations(self) -> int:
        """Delete visited locations linked to no person."""
        self.session.flush()
        deleted = self._delete_unreferenced("locations")
        self._expire_deleted()
        return deleted

    @handle_db_errors
    def delete_unreferenced_country_cities(self) -> int:
        """Delete (country, city) pairs with no resident."""
        self.session.flush()
        deleted = self._delete_unreferenced("country_cities")
        self._expire_deleted()
        return deleted

    @handle_db_errors
    @log_database_operation("cleanup_all")
    def cleanup_all(self) -> Dict[str, int]:
        """
        Run every unreferenced-row delete.

        Returns:
            Mapping of table name to number of rows removed
        """
        self.session.flush()
        results = {
            name: self._delete_unreferenced(name) for name in self._orphan_conditions()
        }
        self._expire_deleted()
        return results

    @handle_db_errors
    def count_unreferenced(self) -> Dict[str, int]:
        """Count orphaned rows per table without deleting anything."""
        self.session.flush()
        counts = {}
        for name, (model_class, condition) in self._orphan_conditions().items():
            counts[name] = self.session.scalar(
                select(func.count()).select_from(model_class).where(condition)
            )
        return counts

    @handle_db_errors
    def list_unreferenced(self) -> Dict[str, List[str]]:
        """Display values of orphaned rows per table, for dry runs."""
        self.session.flush()
        listing: Dict[str, List[str]] = {}
        for name, (model_class, condition) in self._orphan_conditions().items():
            rows = self.session.scalars(select(model_class).where(condition)).all()
            listing[name] = [str(row) for row in rows]
        return listing
