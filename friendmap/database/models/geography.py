"""
Geography Models
-----------------

Models for where people live and where they have been.

Models:
    - VisitedLocation: Free-form place name shared by many people
    - CountryCity: Normalized, unique (country, city) pair

Both are shared rows: they are created on first use and removed once no
person references them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .associations import person_visited_locations
from .base import Base

if TYPE_CHECKING:
    from .entities import Person


class VisitedLocation(Base):
    """
    A place that one or more people have visited.

    Attributes:
        id: Primary key
        location: Display text, as first entered
        key: Casefolded lookup key (unique)

    Relationships:
        people: Many-to-many with Person
    """

    __tablename__ = "visited_locations"
    __table_args__ = (
        CheckConstraint("location != ''", name="ck_non_empty_location"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    key: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )

    people: Mapped[List["Person"]] = relationship(
        "Person", secondary=person_visited_locations, back_populates="visited_locations"
    )

    def __repr__(self) -> str:
        return f"<VisitedLocation(id={self.id}, location='{self.location}')>"

    def __str__(self) -> str:
        return self.location


class CountryCity(Base):
    """
    A normalized home location.

    Only created when a person has both a country and a city. The pair of
    keys is unique, so two people in "France"/"Paris" and "france"/"PARIS"
    share one row.

    Attributes:
        id: Primary key
        country: Country display text
        city: City display text
        country_key: Casefolded country
        city_key: Casefolded city

    Relationships:
        people: One-to-many with Person (residents)
    """

    __tablename__ = "country_cities"
    __table_args__ = (
        UniqueConstraint("country_key", "city_key", name="uq_country_city"),
        CheckConstraint("country != ''", name="ck_non_empty_country"),
        CheckConstraint("city != ''", name="ck_non_empty_city"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    country: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    country_key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    city_key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    people: Mapped[List["Person"]] = relationship("Person", back_populates="country_city")

    def __repr__(self) -> str:
        return f"<CountryCity(id={self.id}, country='{self.country}', city='{self.city}')>"

    def __str__(self) -> str:
        return f"{self.city}, {self.country}"
