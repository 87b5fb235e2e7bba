#!/usr/bin/env python3
"""
payloads.py
--------------------
Explicit input struct for person create/update.

Every field is tri-state:

    UNSET   the caller did not send the field -> leave it alone
    None    the caller sent null              -> clear it (where allowed)
    value   the caller sent a value           -> set it

Update semantics depend on telling the first two apart ("omitting tags
keeps them, sending tags: [] clears them"), so a plain dict with
``.get()`` is not enough.

Usage:
    payload = PersonPayload.from_dict({"name": "Ada", "tags": []})
    payload.is_set("tags")      # True
    payload.is_set("country")   # False
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping

from friendmap.core.exceptions import ValidationError


class _Unset:
    """Sentinel type for fields absent from a request."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

# camelCase wire names used by the HTTP API
_ALIASES = {
    "visitedLocations": "visited_locations",
    "isStarred": "is_starred",
}


@dataclass(frozen=True)
class PersonPayload:
    """
    Settable person fields.

    Attributes:
        name: Display name
        country: Home country
        city: Home city
        tags: Full replacement set of tag strings
        visited_locations: Full replacement set of location strings
        is_starred: Favourite flag
    """

    name: Any = UNSET
    country: Any = UNSET
    city: Any = UNSET
    tags: Any = UNSET
    visited_locations: Any = UNSET
    is_starred: Any = UNSET

    @classmethod
    def field_names(cls) -> frozenset:
        return frozenset(f.name for f in fields(cls))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PersonPayload":
        """
        Build a payload from a request body.

        Both snake_case and the camelCase wire names are accepted.

        Raises:
            ValidationError: If data is not a mapping, contains unknown
                keys, or names the same field twice
        """
        if isinstance(data, PersonPayload):
            return data
        if not isinstance(data, Mapping):
            raise ValidationError("Person data must be an object")

        known = cls.field_names()
        values: Dict[str, Any] = {}
        unknown = []

        for raw_key, value in data.items():
            key = _ALIASES.get(raw_key, raw_key)
            if key not in known:
                unknown.append(raw_key)
                continue
            if key in values:
                raise ValidationError(f"Field '{key}' given more than once")
            values[key] = value

        if unknown:
            raise ValidationError(f"Unknown person fields: {', '.join(sorted(unknown))}")

        return cls(**values)

    def is_set(self, field_name: str) -> bool:
        return getattr(self, field_name) is not UNSET

    def touches_home(self) -> bool:
        """True when the request mentions country or city."""
        return self.is_set("country") or self.is_set("city")

    def to_dict(self) -> Dict[str, Any]:
        """Only the fields that were set."""
        return {
            name: getattr(self, name)
            for name in sorted(self.field_names())
            if self.is_set(name)
        }
