"""
Database Models Package
------------------------

SQLAlchemy ORM models for the friendmap database.

- base: Base class and mixins
- associations: Many-to-many relationship tables
- entities: Person, Tag
- geography: VisitedLocation, CountryCity

Usage:
    from friendmap.database.models import Person, Tag, CountryCity
"""
# Base classes
from .base import Base, TimestampMixin

# Association tables
from .associations import person_tags, person_visited_locations

# Entity models
from .entities import Person, Tag

# Geography models
from .geography import CountryCity, VisitedLocation

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Association tables
    "person_tags",
    "person_visited_locations",
    # Entities
    "Person",
    "Tag",
    # Geography
    "VisitedLocation",
    "CountryCity",
]
