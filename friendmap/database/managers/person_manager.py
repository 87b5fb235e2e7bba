#!/usr/bin/env python3
"""
person_manager.py
--------------------
Manages Person rows together with their tags, visited locations and home.

A person mutation is always one unit of work: the person row, its
association rows, any shared rows it creates and the removal of shared
rows it orphans all happen in the caller's transaction. Nothing here
commits; FriendmapDB.session_scope() does.

Key Features:
    - Create / update / delete from a PersonPayload (tri-state fields)
    - All validation happens before the first write
    - Full replacement of tag and visited-location sets
    - Home location linking via LocationManager.resolve_home
    - Garbage collection of orphaned shared rows after update/delete

Usage:
    person_mgr = PersonManager(session, logger)

    ada = person_mgr.create(PersonPayload.from_dict({
        "name": "Ada",
        "country": "UK",
        "city": "London",
        "tags": ["math"],
    }))

    # Omitted fields are left alone; [] clears a set
    person_mgr.update(ada.id, PersonPayload.from_dict({"tags": []}))

    person_mgr.delete(ada.id)
"""
from typing import Any, Dict, List, Optional

from friendmap.core.exceptions import NotFoundError, ValidationError
from friendmap.core.validators import DataValidator
from friendmap.database.cleanup_manager import CleanupManager
from friendmap.database.decorators import handle_db_errors, log_database_operation
from friendmap.database.models import Person
from friendmap.database.models.base import utc_now
from friendmap.database.payloads import PersonPayload
from .base_manager import BaseManager
from .location_manager import LocationManager
from .tag_manager import TagManager


class PersonManager(BaseManager):
    """
    Manages Person table operations and the person's relations.

    Attributes:
        tags: TagManager sharing this session
        locations: LocationManager sharing this session
        cleanup: CleanupManager sharing this session
    """

    def __init__(self, session, logger=None):
        super().__init__(session, logger)
        self.tags = TagManager(session, logger)
        self.locations = LocationManager(session, logger)
        self.cleanup = CleanupManager(session, logger)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    @handle_db_errors
    def exists(self, person_id: int) -> bool:
        return self._get_by_id(Person, person_id) is not None

    @handle_db_errors
    def get(self, person_id: int) -> Optional[Person]:
        """
        Retrieve a person by ID.

        Returns:
            Person if found, None otherwise
        """
        return self._get_by_id(Person, person_id)

    def require(self, person_id: int) -> Person:
        """
        Retrieve a person by ID or fail.

        Raises:
            NotFoundError: If no person has this ID
        """
        person = self.get(person_id)
        if person is None:
            raise NotFoundError(f"Person with id={person_id} not found")
        return person

    @handle_db_errors
    def get_all(self) -> List[Person]:
        return self.session.query(Person).order_by(Person.name, Person.id).all()

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    @staticmethod
    def _clean(payload: PersonPayload, creating: bool) -> Dict[str, Any]:
        """
        Validate and normalize every field the payload sets.

        Returns:
            Dict holding only the set fields, in storage form

        Raises:
            ValidationError: On the first invalid field
        """
        cleaned: Dict[str, Any] = {}

        if payload.is_set("name") or creating:
            name = DataValidator.normalize_string(payload.name or None)
            if not name:
                raise ValidationError("Person name is required and cannot be empty")
            cleaned["name"] = name

        for field in ("country", "city"):
            if payload.is_set(field):
                cleaned[field] = DataValidator.normalize_string(getattr(payload, field))

        for field in ("tags", "visited_locations"):
            if payload.is_set(field):
                cleaned[field] = DataValidator.normalize_string_list(
                    getattr(payload, field), field
                )

        if payload.is_set("is_starred"):
            cleaned["is_starred"] = DataValidator.require_bool(
                payload.is_starred, "is_starred"
            )
        elif creating:
            cleaned["is_starred"] = False

        return cleaned

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("create_person")
    def create(self, payload: PersonPayload) -> Person:
        """
        Create a new person with its relations.

        Args:
            payload: PersonPayload (or a dict accepted by PersonPayload.from_dict)
                Required: name
                Optional: country, city, tags, visited_locations, is_starred

        Returns:
            Created Person, flushed (id assigned)

        Raises:
            ValidationError: If any field is invalid (nothing is written)
        """
        payload = PersonPayload.from_dict(payload)
        cleaned = self._clean(payload, creating=True)

        home = self.locations.resolve_home(cleaned.get("country"), cleaned.get("city"))
        person = Person(
            name=cleaned["name"],
            country=home.country,
            city=home.city,
            country_city=home.country_city,
            is_starred=cleaned["is_starred"],
        )
        person.tags = self.tags.resolve(cleaned.get("tags"))
        person.visited_locations = self.locations.resolve_locations(
            cleaned.get("visited_locations")
        )

        self.session.add(person)
        self.session.flush()

        self.log.log_debug(
            f"Created person {person.name}",
            {"person_id": person.id, "fully_located": person.is_fully_located},
        )
        return person

    @handle_db_errors
    @log_database_operation("update_person")
    def update(self, person_id: int, payload: PersonPayload) -> Person:
        """
        Partially update an existing person.

        Only the fields present in the payload change:
            - name: validated like on create
            - tags / visited_locations: replace the whole set (None or [] clears)
            - is_starred: must be a bool
            - country / city: when either is present, the effective pair
              (request value, else current value) is relinked; a pair with
              a missing part leaves the person unlinked

        Shared rows orphaned by the change are deleted before returning.

        Raises:
            NotFoundError: If the person does not exist
            ValidationError: If any field is invalid (nothing is written)
        """
        payload = PersonPayload.from_dict(payload)
        person = self.require(person_id)
        cleaned = self._clean(payload, creating=False)

        if "name" in cleaned:
            person.name = cleaned["name"]
        if "is_starred" in cleaned:
            person.is_starred = cleaned["is_starred"]

        if payload.touches_home():
            home = self.locations.resolve_home(
                cleaned["country"] if "country" in cleaned else person.country,
                cleaned["city"] if "city" in cleaned else person.city,
            )
            person.country = home.country
            person.city = home.city
            person.country_city = home.country_city

        if "tags" in cleaned:
            self._replace_collection(person, "tags", self.tags.resolve(cleaned["tags"]))
        if "visited_locations" in cleaned:
            self._replace_collection(
                person,
                "visited_locations",
                self.locations.resolve_locations(cleaned["visited_locations"]),
            )
        if "tags" in cleaned or "visited_locations" in cleaned:
            # Relation-only changes leave every people column untouched
            person.updated_at = utc_now()

        self.session.flush()
        self.cleanup.cleanup_all()
        return person

    @handle_db_errors
    @log_database_operation("delete_person")
    def delete(self, person_id: int) -> Dict[str, int]:
        """
        Delete a person and any shared rows only it referenced.

        Returns:
            Cleanup counts per table

        Raises:
            NotFoundError: If the person does not exist
        """
        person = self.require(person_id)
        self.session.delete(person)
        self.session.flush()

        removed = self.cleanup.cleanup_all()
        self.log.log_debug(
            f"Deleted person {person_id}", {"person_id": person_id, "removed": removed}
        )
        return removed
