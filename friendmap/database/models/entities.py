"""
Entity Models
--------------

Models for people and their tags.

Models:
    - Person: A friend or contact with home location, tags and visits
    - Tag: Free-form label shared by many people

A Person is "fully located" when both country and city are known; only
then is it linked to a normalized CountryCity row. Scalar country/city
columns are always kept so that partially located people stay searchable.
"""

# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import TYPE_CHECKING, Any, Dict, List, Optional

# --- Third party imports ---
from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

# --- Local imports ---
from .associations import person_tags, person_visited_locations
from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .geography import CountryCity, VisitedLocation


class Person(Base, TimestampMixin):
    """
    Represents a friend or contact.

    Attributes:
        id: Primary key
        name: Display name (trimmed, never empty)
        country: Home country as entered (optional)
        city: Home city as entered (optional)
        country_city_id: FK to the normalized (country, city) pair, set only
            when both country and city are present
        is_starred: Favourite flag

    Relationships:
        country_city: Many-to-one with CountryCity (optional)
        tags: Many-to-many with Tag
        visited_locations: Many-to-many with VisitedLocation
    """

    __tablename__ = "people"
    __table_args__ = (CheckConstraint("trim(name) != ''", name="ck_person_non_empty_name"),)

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    country: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    country_city_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("country_cities.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_starred: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0", index=True
    )

    # ---- Relationships ----
    country_city: Mapped[Optional["CountryCity"]] = relationship(
        "CountryCity", back_populates="people"
    )
    tags: Mapped[List["Tag"]] = relationship(
        "Tag", secondary=person_tags, back_populates="people"
    )
    visited_locations: Mapped[List["VisitedLocation"]] = relationship(
        "VisitedLocation",
        secondary=person_visited_locations,
        back_populates="people",
    )

    # ---- Computed properties ----
    @property
    def is_fully_located(self) -> bool:
        """True when the person is linked to a normalized (country, city) pair."""
        return self.country_city_id is not None

    @property
    def tag_names(self) -> List[str]:
        return sorted((t.tag for t in self.tags), key=str.casefold)

    @property
    def location_names(self) -> List[str]:
        return sorted((loc.location for loc in self.visited_locations), key=str.casefold)

    def to_summary(self) -> Dict[str, Any]:
        """Lightweight projection used by name search."""
        return {
            "id": self.id,
            "name": self.name,
            "country": self.country,
            "city": self.city,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Full record including relations."""
        return {
            "id": self.id,
            "name": self.name,
            "country": self.country,
            "city": self.city,
            "country_city_id": self.country_city_id,
            "is_starred": self.is_starred,
            "tags": self.tag_names,
            "visited_locations": self.location_names,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<Person(id={self.id}, name='{self.name}')>"

    def __str__(self) -> str:
        place = ", ".join(p for p in (self.city, self.country) if p)
        return f"{self.name} ({place})" if place else self.name


class Tag(Base):
    """
    Free-form label shared by many people.

    Attributes:
        id: Primary key
        tag: Display text, as first entered
        key: Casefolded lookup key (unique)

    Relationships:
        people: Many-to-many with Person
    """

    __tablename__ = "tags"
    __table_args__ = (CheckConstraint("tag != ''", name="ck_non_empty_tag"),)

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tag: Mapped[str] = mapped_column(String(255), nullable=False)
    key: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )

    # ---- Relationships ----
    people: Mapped[List["Person"]] = relationship(
        "Person", secondary=person_tags, back_populates="tags"
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, tag='{self.tag}')>"

    def __str__(self) -> str:
        return self.tag
