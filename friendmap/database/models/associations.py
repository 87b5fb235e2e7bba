"""
Association Tables
-------------------

Many-to-many relationship tables for the friendmap database.

    - person_tags: Person <-> Tag
    - person_visited_locations: Person <-> VisitedLocation

These are pure association tables with no additional metadata. Deleting a
person (or, in principle, a shared row) cascades to its association rows.
"""
# --- Third party imports ---
from sqlalchemy import Column, ForeignKey, Integer, Table

# --- Local imports ---
from .base import Base

person_tags = Table(
    "person_tags",
    Base.metadata,
    Column(
        "person_id",
        Integer,
        ForeignKey("people.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)

person_visited_locations = Table(
    "person_visited_locations",
    Base.metadata,
    Column(
        "person_id",
        Integer,
        ForeignKey("people.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "location_id",
        Integer,
        ForeignKey("visited_locations.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)
