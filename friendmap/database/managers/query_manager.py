#!/usr/bin/env python3
"""
query_manager.py
--------------------
Read-only queries over people and the shared rows they reference.

All text comparisons use the same case-folded keys as normalization.
Scalar person columns (name, country, city) are compared through the
``casefold()`` SQL function that FriendmapDB registers on every SQLite
connection, so "ÉCOLE" matches "école" the same way Python does.

Usage:
    query_mgr = QueryManager(session, logger)

    query_mgr.search_by_name("ada", limit=5)
    query_mgr.filter(starred=True, tags=["family", "climbing"])
    query_mgr.city_overview("France", "Paris")
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import String, func, select

from friendmap.core.exceptions import NotFoundError, ValidationError
from friendmap.core.validators import DataValidator
from friendmap.database.decorators import handle_db_errors, log_database_operation
from friendmap.database.models import CountryCity, Person, Tag, VisitedLocation
from .base_manager import BaseManager

DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 100


def casefold(column):
    """SQL expression for the case-folded value of a text column."""
    return func.casefold(column, type_=String)


class QueryManager(BaseManager):
    """
    Query operations for the read side of the API.
    """

    @handle_db_errors
    @log_database_operation("search_by_name")
    def search_by_name(
        self, q: Optional[str], limit: int = DEFAULT_SEARCH_LIMIT
    ) -> List[Person]:
        """
        Case-insensitive substring search on person names.

        Args:
            q: Search text; blank or None returns no results
            limit: Maximum number of results (1..100, larger values are capped)

        Returns:
            Matching persons ordered by name

        Raises:
            ValidationError: If limit is not a positive integer
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError(f"'limit' must be a positive integer, got {limit!r}")
        limit = min(limit, MAX_SEARCH_LIMIT)

        text = DataValidator.normalize_string(q)
        if not text:
            return []

        return (
            self.session.query(Person)
            .filter(casefold(Person.name).contains(text.casefold(), autoescape=True))
            .order_by(Person.name, Person.id)
            .limit(limit)
            .all()
        )

    @handle_db_errors
    @log_database_operation("filter_persons")
    def filter(
        self,
        starred: Optional[bool] = None,
        tags: Optional[List[str]] = None,
        country: Optional[str] = None,
        city: Optional[str] = None,
        location: Optional[str] = None,
    ) -> List[Person]:
        """
        Filter persons by any combination of criteria.

        Criteria are ANDed; tags are ORed among themselves (a person
        matches when it has at least one of the given tags). Missing or
        blank criteria are ignored, so no criteria returns everyone.

        Args:
            starred: Only starred (True) or unstarred (False) persons
            tags: Tag strings
            country: Home country
            city: Home city
            location: Visited location

        Returns:
            Matching persons ordered by name
        """
        query = self.session.query(Person)

        if starred is not None:
            query = query.filter(
                Person.is_starred.is_(DataValidator.require_bool(starred, "starred"))
            )

        tag_keys = [t.casefold() for t in DataValidator.normalize_string_list(tags, "tags")]
        if tag_keys:
            query = query.filter(Person.tags.any(Tag.key.in_(tag_keys)))

        country_key = DataValidator.normalize_key(country)
        if country_key:
            query = query.filter(casefold(Person.country) == country_key)

        city_key = DataValidator.normalize_key(city)
        if city_key:
            query = query.filter(casefold(Person.city) == city_key)

        location_key = DataValidator.normalize_key(location)
        if location_key:
            query = query.filter(
                Person.visited_locations.any(VisitedLocation.key == location_key)
            )

        return query.order_by(Person.name, Person.id).all()

    @handle_db_errors
    def get(self, person_id: int) -> Person:
        """
        Fetch one person with relations.

        Raises:
            NotFoundError: If no person has this ID
        """
        person = self._get_by_id(Person, person_id)
        if person is None:
            raise NotFoundError(f"Person with id={person_id} not found")
        return person

    @handle_db_errors
    def list_tags(self) -> List[str]:
        """Distinct tag values, sorted case-insensitively."""
        return list(self.session.scalars(select(Tag.tag).order_by(Tag.key)))

    @handle_db_errors
    def list_locations(self) -> List[str]:
        """Distinct visited location values, sorted case-insensitively."""
        return list(
            self.session.scalars(
                select(VisitedLocation.location).order_by(VisitedLocation.key)
            )
        )

    @handle_db_errors
    @log_database_operation("list_cities")
    def list_cities(self) -> List[Dict[str, Any]]:
        """
        Every normalized (country, city) pair with its resident count.

        Returns:
            List of {id, country, city, residents} dicts
        """
        rows = self.session.execute(
            select(
                CountryCity.id,
                CountryCity.country,
                CountryCity.city,
                func.count(Person.id),
            )
            .outerjoin(Person, Person.country_city_id == CountryCity.id)
            .group_by(CountryCity.id)
            .order_by(CountryCity.country_key, CountryCity.city_key)
        ).all()
        return [
            {"id": cc_id, "country": country, "city": city, "residents": count}
            for cc_id, country, city, count in rows
        ]

    @handle_db_errors
    @log_database_operation("city_overview")
    def city_overview(self, country: str, city: str) -> Dict[str, Any]:
        """
        Who lives in a city and who has been there.

        Residents have the city as their home. Visitors list the city name
        among their visited locations without living there.

        Returns:
            {country, city, residents: [Person], visitors: [Person]}

        Raises:
            ValidationError: If country or city is blank
        """
        country_text = DataValidator.normalize_string(country)
        city_text = DataValidator.normalize_string(city)
        if not country_text or not city_text:
            raise ValidationError("Both country and city are required")

        country_key = country_text.casefold()
        city_key = city_text.casefold()

        is_resident = (casefold(Person.country) == country_key) & (
            casefold(Person.city) == city_key
        )
        residents = (
            self.session.query(Person)
            .filter(is_resident)
            .order_by(Person.name, Person.id)
            .all()
        )
        visitors = (
            self.session.query(Person)
            .filter(Person.visited_locations.any(VisitedLocation.key == city_key))
            .filter(Person.id.not_in([p.id for p in residents]))
            .order_by(Person.name, Person.id)
            .all()
        )

        return {
            "country": country_text,
            "city": city_text,
            "residents": residents,
            "visitors": visitors,
        }
