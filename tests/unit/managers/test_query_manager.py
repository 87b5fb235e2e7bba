"""
test_query_manager.py
---------------------
Unit tests for QueryManager search, filtering, listings and city overview.
"""
import pytest

from friendmap.core.exceptions import NotFoundError, ValidationError
from friendmap.database.managers.query_manager import MAX_SEARCH_LIMIT


@pytest.fixture
def people(person_manager):
    """A small, varied population."""
    data = [
        {"name": "Ada Lovelace", "country": "UK", "city": "London",
         "tags": ["math", "family"], "visited_locations": ["Paris"], "is_starred": True},
        {"name": "Alan Turing", "country": "uk", "city": "LONDON",
         "tags": ["Math"], "visited_locations": ["Princeton"]},
        {"name": "Marie Curie", "country": "France", "city": "Paris",
         "tags": ["physics"], "visited_locations": ["Warsaw", "London"], "is_starred": True},
        {"name": "Émile Borel", "country": "France", "visited_locations": ["paris"]},
        {"name": "100% Pure", "tags": ["climbing"]},
    ]
    return {d["name"]: person_manager.create(d) for d in data}


class TestSearchByName:
    def test_substring_case_insensitive(self, query_manager, people):
        result = query_manager.search_by_name("LOVE")
        assert [p.name for p in result] == ["Ada Lovelace"]

    def test_matches_several_ordered_by_name(self, query_manager, people):
        result = query_manager.search_by_name("a")
        names = [p.name for p in result]
        assert names == sorted(names)
        assert "Ada Lovelace" in names and "Alan Turing" in names

    def test_unicode_casefold(self, query_manager, people):
        result = query_manager.search_by_name("émile")
        assert [p.name for p in result] == ["Émile Borel"]

    def test_like_wildcards_are_literal(self, query_manager, people):
        """'%' is matched as text, not as a wildcard."""
        result = query_manager.search_by_name("0%")
        assert [p.name for p in result] == ["100% Pure"]

    @pytest.mark.parametrize("q", [None, "", "   "])
    def test_blank_query_returns_nothing(self, query_manager, people, q):
        assert query_manager.search_by_name(q) == []

    def test_limit(self, query_manager, people):
        assert len(query_manager.search_by_name("a", limit=1)) == 1

    def test_limit_is_capped(self, query_manager, person_manager):
        for i in range(MAX_SEARCH_LIMIT + 5):
            person_manager.create({"name": f"Friend {i:03d}"})

        result = query_manager.search_by_name("friend", limit=1000)
        assert len(result) == MAX_SEARCH_LIMIT

    @pytest.mark.parametrize("limit", [0, -1, "5", True])
    def test_invalid_limit(self, query_manager, limit):
        with pytest.raises(ValidationError, match="limit"):
            query_manager.search_by_name("a", limit=limit)


class TestFilter:
    def test_no_criteria_returns_everyone(self, query_manager, people):
        assert len(query_manager.filter()) == len(people)

    def test_starred(self, query_manager, people):
        names = [p.name for p in query_manager.filter(starred=True)]
        assert names == ["Ada Lovelace", "Marie Curie"]

    def test_unstarred(self, query_manager, people):
        names = [p.name for p in query_manager.filter(starred=False)]
        assert "Ada Lovelace" not in names
        assert len(names) == 3

    def test_tags_are_ored(self, query_manager, people):
        names = [p.name for p in query_manager.filter(tags=["PHYSICS", "climbing"])]
        assert names == ["100% Pure", "Marie Curie"]

    def test_tag_match_returns_person_once(self, query_manager, people):
        names = [p.name for p in query_manager.filter(tags=["math", "family"])]
        assert names == ["Ada Lovelace", "Alan Turing"]

    def test_country_and_city_case_insensitive(self, query_manager, people):
        names = [p.name for p in query_manager.filter(country="uk", city="london")]
        assert names == ["Ada Lovelace", "Alan Turing"]

    def test_country_only_includes_partial_locations(self, query_manager, people):
        names = [p.name for p in query_manager.filter(country="FRANCE")]
        assert names == ["Marie Curie", "Émile Borel"]

    def test_visited_location(self, query_manager, people):
        names = [p.name for p in query_manager.filter(location="PARIS")]
        assert names == ["Ada Lovelace", "Émile Borel"]

    def test_criteria_are_anded(self, query_manager, people):
        names = [p.name for p in query_manager.filter(starred=True, tags=["math"])]
        assert names == ["Ada Lovelace"]

    def test_starred_must_be_bool(self, query_manager):
        with pytest.raises(ValidationError):
            query_manager.filter(starred="yes")


class TestListings:
    def test_get(self, query_manager, people):
        ada = people["Ada Lovelace"]
        assert query_manager.get(ada.id) is ada

    def test_get_missing(self, query_manager):
        with pytest.raises(NotFoundError):
            query_manager.get(12345)

    def test_list_tags(self, query_manager, people):
        assert query_manager.list_tags() == ["climbing", "family", "math", "physics"]

    def test_list_locations(self, query_manager, people):
        assert query_manager.list_locations() == ["London", "Paris", "Princeton", "Warsaw"]

    def test_list_cities_with_resident_counts(self, query_manager, people):
        cities = query_manager.list_cities()

        assert [(c["country"], c["city"], c["residents"]) for c in cities] == [
            ("France", "Paris", 1),
            ("UK", "London", 2),
        ]


class TestCityOverview:
    def test_residents_and_visitors(self, query_manager, people):
        overview = query_manager.city_overview("france", "PARIS")

        assert overview["country"] == "france"
        assert [p.name for p in overview["residents"]] == ["Marie Curie"]
        assert [p.name for p in overview["visitors"]] == ["Ada Lovelace", "Émile Borel"]

    def test_resident_who_also_visited_is_not_a_visitor(self, query_manager, person_manager):
        person_manager.create(
            {"name": "Local", "country": "Peru", "city": "Lima", "visited_locations": ["Lima"]}
        )

        overview = query_manager.city_overview("Peru", "Lima")

        assert [p.name for p in overview["residents"]] == ["Local"]
        assert overview["visitors"] == []

    def test_unknown_city_is_empty(self, query_manager, people):
        overview = query_manager.city_overview("Chile", "Arica")
        assert overview["residents"] == [] and overview["visitors"] == []

    @pytest.mark.parametrize("country,city", [("", "Paris"), ("France", None)])
    def test_requires_both_parts(self, query_manager, country, city):
        with pytest.raises(ValidationError):
            query_manager.city_overview(country, city)
