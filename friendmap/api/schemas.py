"""
Request bodies for the HTTP API.

Fields use camelCase on the wire (``visitedLocations``, ``isStarred``)
and snake_case in Python. Types are kept loose enough that the mutation
service, not pydantic, decides what a null or a blank string means.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, StrictBool
from pydantic.alias_generators import to_camel

from friendmap.database.payloads import PersonPayload


class PersonBody(BaseModel):
    """Create/update body. Unknown keys are rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    name: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    tags: Optional[List[str]] = None
    visited_locations: Optional[List[str]] = None
    is_starred: Optional[StrictBool] = None

    def to_payload(self) -> PersonPayload:
        """Only the keys the client actually sent become set fields."""
        return PersonPayload.from_dict(self.model_dump(exclude_unset=True))
