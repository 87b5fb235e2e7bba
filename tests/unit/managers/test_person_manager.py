"""
test_person_manager.py
----------------------
Unit tests for PersonManager create / update / delete.

Covers:
- Validation before any write
- Tri-state update semantics (absent, null, value)
- Home location relinking with the effective (country, city) pair
- Removal of shared rows orphaned by updates and deletes
"""
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from friendmap.core.exceptions import NotFoundError, ValidationError
from friendmap.database.models import CountryCity, Person, Tag, VisitedLocation


class TestPersonCreate:
    """Test PersonManager.create()."""

    def test_create_full_person(self, person_manager, ada_payload):
        person = person_manager.create(ada_payload)

        assert person.id is not None
        assert person.name == "Ada Lovelace"
        assert person.is_starred is True
        assert person.is_fully_located
        assert person.country_city.city == "London"
        assert person.tag_names == ["Family", "math"]
        assert person.location_names == ["Paris", "Turin"]

    def test_create_accepts_plain_dict(self, person_manager):
        person = person_manager.create({"name": "Grace"})

        assert person.name == "Grace"
        assert person.is_starred is False
        assert person.tags == []
        assert person.country_city is None

    def test_create_normalizes_whitespace(self, person_manager):
        person = person_manager.create({"name": "  Alan   Turing ", "country": " UK "})

        assert person.name == "Alan Turing"
        assert person.country == "UK"

    def test_partially_located_person_has_no_pair(self, person_manager, db_session):
        person = person_manager.create({"name": "Linus", "country": "Finland"})

        assert person.country == "Finland"
        assert person.city is None
        assert not person.is_fully_located
        assert db_session.query(CountryCity).count() == 0

    def test_two_residents_share_a_pair(self, person_manager, db_session):
        a = person_manager.create({"name": "A", "country": "France", "city": "Paris"})
        b = person_manager.create({"name": "B", "country": "FRANCE", "city": "paris"})

        assert a.country_city_id == b.country_city_id
        assert db_session.query(CountryCity).count() == 1

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_create_requires_name(self, person_manager, name):
        with pytest.raises(ValidationError, match="name is required"):
            person_manager.create({"name": name})

    def test_invalid_field_writes_nothing(self, person_manager, db_session):
        """A bad field later in the payload must not leave tags behind."""
        with pytest.raises(ValidationError):
            person_manager.create(
                {"name": "Bad", "tags": ["new-tag"], "is_starred": "yes"}
            )

        assert db_session.query(Tag).count() == 0
        assert db_session.query(Person).count() == 0

    def test_is_starred_must_be_bool(self, person_manager):
        with pytest.raises(ValidationError, match="is_starred"):
            person_manager.create({"name": "X", "is_starred": 1})

    def test_unknown_field_rejected(self, person_manager):
        with pytest.raises(ValidationError):
            person_manager.create({"name": "X", "nickname": "x"})


class TestPersonLookup:
    def test_get_missing_returns_none(self, person_manager):
        assert person_manager.get(999) is None
        assert person_manager.exists(999) is False

    def test_require_missing_raises(self, person_manager):
        with pytest.raises(NotFoundError, match="id=999"):
            person_manager.require(999)

    def test_get_all_sorted_by_name(self, person_manager):
        for name in ("Zoe", "Bob", "Mia"):
            person_manager.create({"name": name})

        assert [p.name for p in person_manager.get_all()] == ["Bob", "Mia", "Zoe"]


class TestPersonUpdate:
    """Test PersonManager.update() tri-state semantics."""

    def test_absent_fields_are_untouched(self, person_manager, ada_payload):
        ada = person_manager.create(ada_payload)

        updated = person_manager.update(ada.id, {"name": "Countess Ada"})

        assert updated.name == "Countess Ada"
        assert updated.is_starred is True
        assert updated.tag_names == ["Family", "math"]
        assert updated.city == "London"

    def test_empty_list_clears_tags_and_removes_orphans(
        self, person_manager, ada_payload, db_session
    ):
        ada = person_manager.create(ada_payload)

        updated = person_manager.update(ada.id, {"tags": []})

        assert updated.tags == []
        assert db_session.query(Tag).count() == 0

    def test_null_clears_visited_locations(self, person_manager, ada_payload, db_session):
        ada = person_manager.create(ada_payload)

        updated = person_manager.update(ada.id, {"visited_locations": None})

        assert updated.visited_locations == []
        assert db_session.query(VisitedLocation).count() == 0

    def test_replaced_tag_shared_by_other_person_survives(
        self, person_manager, ada_payload, db_session
    ):
        ada = person_manager.create(ada_payload)
        person_manager.create({"name": "Grace", "tags": ["math"]})

        person_manager.update(ada.id, {"tags": ["poetry"]})

        remaining = sorted(t.tag for t in db_session.query(Tag).all())
        assert remaining == ["math", "poetry"]

    def test_null_name_rejected(self, person_manager, ada_payload):
        ada = person_manager.create(ada_payload)

        with pytest.raises(ValidationError):
            person_manager.update(ada.id, {"name": None})

    def test_unstar(self, person_manager, ada_payload):
        ada = person_manager.create(ada_payload)

        assert person_manager.update(ada.id, {"is_starred": False}).is_starred is False

    @pytest.mark.parametrize("field", ["tags", "visited_locations"])
    def test_relation_only_update_touches_updated_at(
        self, person_manager, ada_payload, field
    ):
        ada = person_manager.create(ada_payload)
        later = datetime(2030, 1, 1, tzinfo=timezone.utc)

        with patch(
            "friendmap.database.managers.person_manager.utc_now", return_value=later
        ):
            updated = person_manager.update(ada.id, {field: ["Somewhere new"]})

        assert updated.updated_at.replace(tzinfo=None) == datetime(2030, 1, 1)

    def test_scalar_update_leaves_timestamp_to_column_default(
        self, person_manager, ada_payload
    ):
        ada = person_manager.create(ada_payload)

        with patch("friendmap.database.managers.person_manager.utc_now") as clock:
            person_manager.update(ada.id, {"is_starred": False})

        clock.assert_not_called()

    def test_update_missing_person(self, person_manager):
        with pytest.raises(NotFoundError):
            person_manager.update(42, {"name": "Nobody"})


class TestPersonHomeUpdate:
    """Home relinking uses request values merged with current values."""

    def test_city_only_update_uses_current_country(self, person_manager, db_session):
        p = person_manager.create({"name": "P", "country": "France", "city": "Paris"})

        updated = person_manager.update(p.id, {"city": "Lyon"})

        assert (updated.country, updated.city) == ("France", "Lyon")
        assert updated.country_city.city == "Lyon"
        # Paris pair lost its only resident
        pairs = [(cc.country, cc.city) for cc in db_session.query(CountryCity).all()]
        assert pairs == [("France", "Lyon")]

    def test_clearing_city_unlinks_pair(self, person_manager, db_session):
        p = person_manager.create({"name": "P", "country": "France", "city": "Paris"})

        updated = person_manager.update(p.id, {"city": None})

        assert updated.country == "France"
        assert updated.city is None
        assert updated.country_city is None
        assert db_session.query(CountryCity).count() == 0

    def test_completing_partial_location_links_pair(self, person_manager):
        p = person_manager.create({"name": "P", "country": "Chile"})

        updated = person_manager.update(p.id, {"city": "Santiago"})

        assert updated.is_fully_located
        assert str(updated.country_city) == "Santiago, Chile"

    def test_unrelated_update_keeps_link(self, person_manager):
        p = person_manager.create({"name": "P", "country": "Chile", "city": "Arica"})
        pair_id = p.country_city_id

        updated = person_manager.update(p.id, {"tags": ["beach"]})

        assert updated.country_city_id == pair_id


class TestPersonDelete:
    """Test PersonManager.delete() and cleanup of shared rows."""

    def test_delete_removes_exclusive_rows(self, person_manager, ada_payload, db_session):
        ada = person_manager.create(ada_payload)

        removed = person_manager.delete(ada.id)

        assert removed == {"tags": 2, "locations": 2, "country_cities": 1}
        assert db_session.query(Person).count() == 0
        assert db_session.query(Tag).count() == 0
        assert db_session.query(VisitedLocation).count() == 0
        assert db_session.query(CountryCity).count() == 0

    def test_delete_keeps_shared_rows(self, person_manager, ada_payload, db_session):
        ada = person_manager.create(ada_payload)
        person_manager.create(
            {"name": "Grace", "country": "uk", "city": "london", "tags": ["MATH"]}
        )

        removed = person_manager.delete(ada.id)

        assert removed == {"tags": 1, "locations": 2, "country_cities": 0}
        assert [t.tag for t in db_session.query(Tag).all()] == ["math"]

    def test_delete_missing_person(self, person_manager):
        with pytest.raises(NotFoundError):
            person_manager.delete(7)
