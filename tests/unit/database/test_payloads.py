"""
test_payloads.py
----------------
Unit tests for PersonPayload and the UNSET sentinel.
"""
import pytest

from friendmap.core.exceptions import ValidationError
from friendmap.database.payloads import UNSET, PersonPayload


class TestUnset:
    def test_is_falsy_singleton(self):
        assert not UNSET
        assert type(UNSET)() is UNSET
        assert repr(UNSET) == "UNSET"


class TestFromDict:
    """Test PersonPayload.from_dict()."""

    def test_absent_none_and_value_are_distinct(self):
        """Missing keys stay UNSET; explicit null stays None."""
        payload = PersonPayload.from_dict({"name": "Ada", "tags": None})

        assert payload.name == "Ada"
        assert payload.tags is None
        assert payload.is_set("tags")
        assert payload.country is UNSET
        assert not payload.is_set("country")

    def test_accepts_camel_case_wire_names(self):
        payload = PersonPayload.from_dict(
            {"visitedLocations": ["Paris"], "isStarred": True}
        )
        assert payload.visited_locations == ["Paris"]
        assert payload.is_starred is True

    def test_rejects_unknown_keys(self):
        with pytest.raises(ValidationError, match="nickname"):
            PersonPayload.from_dict({"name": "Ada", "nickname": "A"})

    def test_rejects_same_field_twice(self):
        """snake_case and camelCase spellings of one field conflict."""
        with pytest.raises(ValidationError, match="is_starred"):
            PersonPayload.from_dict({"is_starred": True, "isStarred": False})

    def test_rejects_non_mapping(self):
        with pytest.raises(ValidationError):
            PersonPayload.from_dict(["name", "Ada"])

    def test_payload_passes_through(self):
        payload = PersonPayload(name="Ada")
        assert PersonPayload.from_dict(payload) is payload


class TestHelpers:
    def test_touches_home(self):
        assert PersonPayload(city=None).touches_home()
        assert PersonPayload(country="UK").touches_home()
        assert not PersonPayload(name="Ada").touches_home()

    def test_to_dict_only_set_fields(self):
        payload = PersonPayload.from_dict({"name": "Ada", "tags": []})
        assert payload.to_dict() == {"name": "Ada", "tags": []}
