"""
test_export_manager.py
----------------------
Tests for YAML / JSON export and all-or-nothing import.
"""
import json

import pytest
import yaml

from friendmap.core.exceptions import ExportError, ValidationError
from friendmap.database.export_manager import ExportManager


class TestDetectFormat:
    @pytest.mark.parametrize(
        "name,expected",
        [("people.yaml", "yaml"), ("people.YML", "yaml"), ("people.json", "json")],
    )
    def test_from_suffix(self, tmp_dir, name, expected):
        assert ExportManager.detect_format(tmp_dir / name) == expected

    def test_explicit_format_wins(self, tmp_dir):
        assert ExportManager.detect_format(tmp_dir / "people.txt", "JSON") == "json"

    def test_unsupported(self, tmp_dir):
        with pytest.raises(ExportError, match="Unsupported"):
            ExportManager.detect_format(tmp_dir / "people.csv")


class TestExport:
    def test_yaml_export(self, test_db, ada_data, tmp_dir):
        test_db.create_person(ada_data)
        output = tmp_dir / "out" / "people.yaml"

        stats = test_db.export_people(output)

        assert stats == {"people": 1, "format": "yaml", "output_path": str(output)}
        document = yaml.safe_load(output.read_text(encoding="utf-8"))
        assert document["version"] == 1
        assert document["people"] == [
            {
                "name": "Ada Lovelace",
                "country": "UK",
                "city": "London",
                "is_starred": True,
                "tags": ["Family", "math"],
                "visited_locations": ["Paris", "Turin"],
            }
        ]

    def test_json_export_keeps_unicode(self, test_db, tmp_dir):
        test_db.create_person({"name": "Émile"})
        output = tmp_dir / "people.json"

        test_db.export_people(output)

        text = output.read_text(encoding="utf-8")
        assert "Émile" in text
        assert json.loads(text)["people"][0]["name"] == "Émile"


class TestImport:
    def test_round_trip_into_empty_database(self, test_db, ada_data, tmp_dir):
        from friendmap.database.manager import FriendmapDB

        test_db.create_person(ada_data)
        test_db.create_person({"name": "Grace", "country": "USA"})
        exported = tmp_dir / "people.json"
        test_db.export_people(exported)

        with FriendmapDB(db_path=tmp_dir / "copy.db") as copy:
            stats = copy.import_people(exported)

            assert stats == {"people": 2, "format": "json"}
            people = {p["name"]: p for p in copy.list_persons()}
            assert people["Ada Lovelace"]["tags"] == ["Family", "math"]
            assert people["Grace"]["country_city_id"] is None

    def test_bad_record_aborts_whole_import(self, test_db, tmp_dir):
        source = tmp_dir / "people.yaml"
        source.write_text(
            yaml.safe_dump(
                {
                    "version": 1,
                    "people": [
                        {"name": "Fine", "tags": ["kept?"]},
                        {"name": "", "tags": ["never"]},
                    ],
                }
            ),
            encoding="utf-8",
        )

        with pytest.raises(ValidationError, match="Record 2"):
            test_db.import_people(source)

        assert test_db.list_persons() == []
        assert test_db.list_tags() == []

    def test_missing_people_key(self, test_db, tmp_dir):
        source = tmp_dir / "people.json"
        source.write_text(json.dumps({"version": 1}), encoding="utf-8")

        with pytest.raises(ExportError, match="not a friendmap export"):
            test_db.import_people(source)

    def test_invalid_yaml(self, test_db, tmp_dir):
        source = tmp_dir / "people.yaml"
        source.write_text("people: [unclosed", encoding="utf-8")

        with pytest.raises(ExportError, match="Invalid yaml"):
            test_db.import_people(source)

    def test_missing_file(self, test_db, tmp_dir):
        with pytest.raises(ExportError, match="Could not read"):
            test_db.import_people(tmp_dir / "absent.yaml")
