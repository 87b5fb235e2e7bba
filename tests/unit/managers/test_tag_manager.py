"""
test_tag_manager.py
-------------------
Unit tests for TagManager lookup, get-or-create and list resolution.
"""
import pytest

from friendmap.core.exceptions import ValidationError
from friendmap.database.models import Tag


class TestTagManagerExists:
    """Test TagManager.exists() method."""

    def test_exists_returns_false_when_not_found(self, tag_manager):
        assert tag_manager.exists("nonexistent") is False

    def test_exists_is_case_insensitive(self, tag_manager, db_session):
        """Test exists matches any case and surrounding whitespace."""
        db_session.add(Tag(tag="Python", key="python"))
        db_session.flush()

        assert tag_manager.exists("  PYTHON ") is True

    def test_exists_empty_string_returns_false(self, tag_manager):
        assert tag_manager.exists("") is False

    def test_exists_none_returns_false(self, tag_manager):
        assert tag_manager.exists(None) is False


class TestTagManagerGet:
    """Test TagManager.get() and get_by_id()."""

    def test_get_returns_none_when_not_found(self, tag_manager):
        assert tag_manager.get("nonexistent") is None

    def test_get_returns_display_form(self, tag_manager, db_session):
        db_session.add(Tag(tag="Rock Climbing", key="rock climbing"))
        db_session.flush()

        result = tag_manager.get("rock   CLIMBING")
        assert result is not None
        assert result.tag == "Rock Climbing"

    def test_get_by_id(self, tag_manager):
        tag = tag_manager.get_or_create("python")
        assert tag_manager.get_by_id(tag.id) is tag


class TestTagManagerGetOrCreate:
    """Test TagManager.get_or_create()."""

    def test_creates_new_tag(self, tag_manager):
        tag = tag_manager.get_or_create("Family")

        assert tag.id is not None
        assert tag.tag == "Family"
        assert tag.key == "family"

    def test_case_variants_resolve_to_one_row(self, tag_manager, db_session):
        """First spelling is kept for display."""
        first = tag_manager.get_or_create("Family")
        second = tag_manager.get_or_create("  FAMILY ")

        assert first is second
        assert second.tag == "Family"
        assert db_session.query(Tag).count() == 1

    def test_empty_tag_raises(self, tag_manager):
        with pytest.raises(ValidationError):
            tag_manager.get_or_create("   ")

    def test_non_string_raises(self, tag_manager):
        with pytest.raises(ValidationError):
            tag_manager.get_or_create(7)


class TestTagManagerResolve:
    """Test TagManager.resolve()."""

    def test_resolve_dedupes_and_keeps_order(self, tag_manager):
        tags = tag_manager.resolve(["climbing", "Family", "CLIMBING", "", "family"])

        assert [t.tag for t in tags] == ["climbing", "Family"]

    def test_resolve_reuses_existing_rows(self, tag_manager):
        existing = tag_manager.get_or_create("math")
        tags = tag_manager.resolve(["Math"])

        assert tags == [existing]

    def test_resolve_none_is_empty(self, tag_manager):
        assert tag_manager.resolve(None) == []

    def test_resolve_rejects_non_list(self, tag_manager):
        with pytest.raises(ValidationError, match="tags"):
            tag_manager.resolve("math")


class TestTagManagerListing:
    def test_get_all_ordered_case_insensitively(self, tag_manager):
        for name in ("banana", "Apple", "cherry"):
            tag_manager.get_or_create(name)

        assert [t.tag for t in tag_manager.get_all()] == ["Apple", "banana", "cherry"]

    def test_get_unused(self, tag_manager, person_manager, ada_payload):
        person_manager.create(ada_payload)
        lonely = tag_manager.get_or_create("lonely")

        assert tag_manager.get_unused() == [lonely]
