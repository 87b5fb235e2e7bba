"""
test_cleanup_manager.py
-----------------------
Unit tests for deletion of shared rows no person references.
"""
from friendmap.database.models import CountryCity, Tag, VisitedLocation


class TestCleanupManager:
    """Test CleanupManager delete / count / list operations."""

    def _orphans(self, tag_manager, location_manager):
        tag_manager.get_or_create("lonely")
        location_manager.get_or_create_location("Atlantis")
        location_manager.upsert_country_city("Nowhere", "Ghost Town")

    def test_cleanup_all_removes_every_orphan(
        self, cleanup_manager, tag_manager, location_manager, db_session
    ):
        self._orphans(tag_manager, location_manager)

        removed = cleanup_manager.cleanup_all()

        assert removed == {"tags": 1, "locations": 1, "country_cities": 1}
        assert db_session.query(Tag).count() == 0
        assert db_session.query(VisitedLocation).count() == 0
        assert db_session.query(CountryCity).count() == 0

    def test_referenced_rows_survive(
        self, cleanup_manager, person_manager, ada_payload, db_session
    ):
        person_manager.create(ada_payload)

        removed = cleanup_manager.cleanup_all()

        assert removed == {"tags": 0, "locations": 0, "country_cities": 0}
        assert db_session.query(Tag).count() == 2

    def test_single_table_deletes(self, cleanup_manager, tag_manager, location_manager):
        self._orphans(tag_manager, location_manager)

        assert cleanup_manager.delete_unreferenced_tags() == 1
        assert cleanup_manager.delete_unreferenced_locations() == 1
        assert cleanup_manager.delete_unreferenced_country_cities() == 1
        assert cleanup_manager.delete_unreferenced_tags() == 0

    def test_count_does_not_delete(
        self, cleanup_manager, tag_manager, location_manager, db_session
    ):
        self._orphans(tag_manager, location_manager)

        counts = cleanup_manager.count_unreferenced()

        assert counts == {"tags": 1, "locations": 1, "country_cities": 1}
        assert db_session.query(Tag).count() == 1

    def test_list_unreferenced(self, cleanup_manager, tag_manager, location_manager):
        self._orphans(tag_manager, location_manager)

        assert cleanup_manager.list_unreferenced() == {
            "tags": ["lonely"],
            "locations": ["Atlantis"],
            "country_cities": ["Ghost Town, Nowhere"],
        }
