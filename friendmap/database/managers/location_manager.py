#!/usr/bin/env python3
"""
location_manager.py
--------------------
Manages VisitedLocation and CountryCity rows.

VisitedLocations are free-form place names shared by many people, handled
exactly like tags. CountryCity rows normalize a person's home location and
are upserted on the (country, city) key pair.

Key Features:
    - Get-or-create for visited locations (case-insensitive)
    - Resolution of request location lists
    - Upsert of (country, city) pairs
    - Split of a home location into "fully" vs "partially" located

Usage:
    loc_mgr = LocationManager(session, logger)

    # Visited locations
    paris = loc_mgr.get_or_create_location("Paris")
    visits = loc_mgr.resolve_locations(["Paris", "Lisbon"])

    # Home location
    home = loc_mgr.upsert_country_city("France", "Paris")
    resolved = loc_mgr.resolve_home("France", None)  # partially located
"""
from typing import List, NamedTuple, Optional

from friendmap.core.exceptions import ValidationError
from friendmap.core.validators import DataValidator
from friendmap.database.decorators import handle_db_errors, log_database_operation
from friendmap.database.models import CountryCity, VisitedLocation
from .base_manager import BaseManager


class HomeLocation(NamedTuple):
    """
    Normalized home location of a person.

    country_city is set only when both country and city are present.
    """

    country: Optional[str]
    city: Optional[str]
    country_city: Optional[CountryCity]


class LocationManager(BaseManager):
    """
    Manages VisitedLocation and CountryCity table operations.
    """

    # =========================================================================
    # VISITED LOCATION OPERATIONS
    # =========================================================================

    @handle_db_errors
    def location_exists(self, location_name: str) -> bool:
        if not isinstance(location_name, str):
            return False
        key = DataValidator.normalize_key(location_name)
        return self._get_by_key(VisitedLocation, key) is not None

    @handle_db_errors
    def get_location(
        self, location_name: Optional[str] = None, location_id: Optional[int] = None
    ) -> Optional[VisitedLocation]:
        """
        Retrieve a visited location by text or ID.

        Args:
            location_name: The location text (case-insensitive)
            location_id: The location ID

        Returns:
            VisitedLocation if found, None otherwise

        Notes:
            - If both provided, ID takes precedence
        """
        if location_id is not None:
            return self._get_by_id(VisitedLocation, location_id)
        if isinstance(location_name, str):
            key = DataValidator.normalize_key(location_name)
            return self._get_by_key(VisitedLocation, key)
        return None

    @handle_db_errors
    @log_database_operation("get_all_locations")
    def get_all_locations(self) -> List[VisitedLocation]:
        return self.session.query(VisitedLocation).order_by(VisitedLocation.key).all()

    @handle_db_errors
    @log_database_operation("get_or_create_location")
    def get_or_create_location(self, location_name: str) -> VisitedLocation:
        """
        Get an existing visited location or create it.

        Args:
            location_name: The location text

        Returns:
            VisitedLocation (existing or newly created)

        Raises:
            ValidationError: If location_name is empty after normalization
        """
        text = DataValidator.normalize_string(location_name)
        if not text:
            raise ValidationError("Location cannot be empty")

        return self._get_or_create(
            VisitedLocation, {"key": text.casefold()}, {"location": text}
        )

    @handle_db_errors
    def resolve_locations(self, location_names: List[str]) -> List[VisitedLocation]:
        """
        Resolve a list of location strings, creating missing rows.

        Args:
            location_names: Raw location strings from a request

        Returns:
            VisitedLocation rows in first-seen order without duplicates

        Raises:
            ValidationError: If location_names is not a list of strings
        """
        normalized = DataValidator.normalize_string_list(
            location_names, "visited_locations"
        )
        return [self.get_or_create_location(name) for name in normalized]

    # =========================================================================
    # COUNTRY / CITY OPERATIONS
    # =========================================================================

    @handle_db_errors
    def get_country_city(self, country: str, city: str) -> Optional[CountryCity]:
        """
        Retrieve a normalized (country, city) pair.

        Returns:
            CountryCity if found, None otherwise (also when either part is blank)
        """
        country_key = DataValidator.normalize_key(country)
        city_key = DataValidator.normalize_key(city)
        if not country_key or not city_key:
            return None
        return (
            self.session.query(CountryCity)
            .filter_by(country_key=country_key, city_key=city_key)
            .first()
        )

    @handle_db_errors
    @log_database_operation("get_all_country_cities")
    def get_all_country_cities(self) -> List[CountryCity]:
        return (
            self.session.query(CountryCity)
            .order_by(CountryCity.country_key, CountryCity.city_key)
            .all()
        )

    @handle_db_errors
    @log_database_operation("upsert_country_city")
    def upsert_country_city(self, country: str, city: str) -> CountryCity:
        """
        Find or create the row for a (country, city) pair.

        Args:
            country: Country text
            city: City text

        Returns:
            CountryCity (existing or newly created)

        Raises:
            ValidationError: If either part is empty after normalization
        """
        country_text = DataValidator.normalize_string(country)
        city_text = DataValidator.normalize_string(city)
        if not country_text or not city_text:
            raise ValidationError("Both country and city are required")

        return self._get_or_create(
            CountryCity,
            {"country_key": country_text.casefold(), "city_key": city_text.casefold()},
            {"country": country_text, "city": city_text},
        )

    def resolve_home(self, country: Optional[str], city: Optional[str]) -> HomeLocation:
        """
        Normalize a person's home location.

        Fully located (both parts present): upsert the pair and link it.
        Partially located: keep the scalar values, no CountryCity link.

        Raises:
            ValidationError: If country or city is not a string/None
        """
        country_text = DataValidator.normalize_string(country)
        city_text = DataValidator.normalize_string(city)

        if country_text and city_text:
            return HomeLocation(
                country_text, city_text, self.upsert_country_city(country_text, city_text)
            )
        return HomeLocation(country_text, city_text, None)
