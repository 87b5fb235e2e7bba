#!/usr/bin/env python3
"""
managers package
--------------------
Entity managers for the friendmap database.

Each manager wraps one SQLAlchemy session and handles one concern,
inheriting common helpers from BaseManager.

Available Managers:
    BaseManager: Abstract base class with common utilities
    TagManager: Tag lookup and get-or-create
    LocationManager: VisitedLocation and CountryCity entities
    PersonManager: Person create/update/delete with relations
    QueryManager: Search, filters and listings

Usage:
    from friendmap.database.managers import PersonManager, QueryManager

    person_mgr = PersonManager(session, logger)
    query_mgr = QueryManager(session, logger)
"""
from .base_manager import BaseManager
from .tag_manager import TagManager
from .location_manager import HomeLocation, LocationManager
from .person_manager import PersonManager
from .query_manager import QueryManager

__all__ = [
    "BaseManager",
    "TagManager",
    "LocationManager",
    "HomeLocation",
    "PersonManager",
    "QueryManager",
]
