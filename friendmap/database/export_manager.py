#!/usr/bin/env python3
"""
export_manager.py
-----------------
Export and import of the friendmap people list.

Export Formats:
    1. **YAML**: Human-editable list of people (PyYAML, block style)
    2. **JSON**: The same structure for programmatic processing

Both formats share one document shape:

    version: 1
    exported_at: "2026-10-19T12:00:00+00:00"
    people:
      - name: Ada Lovelace
        country: UK
        city: London
        is_starred: true
        tags: [math]
        visited_locations: [Paris]

Only the settable fields are written, so an export can be imported into
an empty database. Import creates every person through PersonManager in
a single transaction: either the whole file lands or nothing does.

Usage:
    from friendmap.database.export_manager import ExportManager

    exporter = ExportManager(logger=db.logger)

    with db.session_scope() as session:
        stats = exporter.export_people(session, Path("exports/people.yaml"))

    with db.session_scope(write=True) as session:
        stats = exporter.import_people(session, Path("exports/people.yaml"))
"""
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from sqlalchemy.orm import Session

from friendmap.core.exceptions import ExportError, ValidationError
from friendmap.core.logging_manager import FriendmapLogger, safe_logger

from .decorators import handle_db_errors, log_database_operation
from .managers import PersonManager
from .models import Person
from .payloads import PersonPayload

EXPORT_VERSION = 1
EXPORT_FIELDS = ("name", "country", "city", "is_starred", "tags", "visited_locations")
YAML_SUFFIXES = {".yaml", ".yml"}


class ExportManager:
    """
    Handles people export to and import from YAML / JSON files.

    The format is chosen from the file suffix unless given explicitly.
    """

    def __init__(self, logger: Optional[FriendmapLogger] = None) -> None:
        self.logger = logger

    @staticmethod
    def detect_format(path: Path, fmt: Optional[str] = None) -> str:
        """
        Resolve the file format.

        Raises:
            ExportError: If the format is neither yaml nor json
        """
        if fmt:
            fmt = fmt.lower()
        else:
            suffix = path.suffix.lower()
            fmt = "yaml" if suffix in YAML_SUFFIXES else suffix.lstrip(".")
        if fmt == "yml":
            fmt = "yaml"
        if fmt not in ("yaml", "json"):
            raise ExportError(f"Unsupported export format: {fmt or path.name}")
        return fmt

    @staticmethod
    def serialize_person(person: Person) -> Dict[str, Any]:
        record = person.to_dict()
        return {field: record[field] for field in EXPORT_FIELDS}

    @handle_db_errors
    @log_database_operation("export_people")
    def export_people(
        self, session: Session, output_file: Union[str, Path], fmt: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Write every person to a YAML or JSON file.

        Args:
            session: Active SQLAlchemy session
            output_file: Destination path (parents are created)
            fmt: 'yaml' or 'json' (default: from suffix)

        Returns:
            {"people": count, "format": fmt, "output_path": str}

        Raises:
            ExportError: If the file cannot be written
        """
        output_path = Path(output_file).expanduser()
        fmt = self.detect_format(output_path, fmt)

        people = session.query(Person).order_by(Person.name, Person.id).all()
        document = {
            "version": EXPORT_VERSION,
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "people": [self.serialize_person(p) for p in people],
        }

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                if fmt == "yaml":
                    yaml.safe_dump(
                        document, f, allow_unicode=True, sort_keys=False
                    )
                else:
                    json.dump(document, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ExportError(f"Could not write {output_path}: {e}") from e

        safe_logger(self.logger).log_info(
            f"Exported {len(people)} people", {"output_path": str(output_path)}
        )
        return {"people": len(people), "format": fmt, "output_path": str(output_path)}

    def load_document(
        self, input_file: Union[str, Path], fmt: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Read and shape-check an export file.

        Returns:
            The list of person records

        Raises:
            ExportError: If the file is unreadable or not an export document
        """
        input_path = Path(input_file).expanduser()
        fmt = self.detect_format(input_path, fmt)

        try:
            with open(input_path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f) if fmt == "yaml" else json.load(f)
        except OSError as e:
            raise ExportError(f"Could not read {input_path}: {e}") from e
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ExportError(f"Invalid {fmt} in {input_path}: {e}") from e

        if not isinstance(document, dict) or not isinstance(document.get("people"), list):
            raise ExportError(f"{input_path} is not a friendmap export (missing 'people')")
        return document["people"]

    @handle_db_errors
    @log_database_operation("import_people")
    def import_people(
        self, session: Session, input_file: Union[str, Path], fmt: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create every person listed in an export file.

        Runs in the caller's transaction, so a bad record aborts the
        whole import when the caller's session_scope rolls back.

        Returns:
            {"people": count, "format": fmt}

        Raises:
            ExportError: If the file is unreadable
            ValidationError: If a record is invalid (message names the record)
        """
        records = self.load_document(input_file, fmt)
        person_mgr = PersonManager(session, self.logger)

        for index, record in enumerate(records, start=1):
            try:
                person_mgr.create(PersonPayload.from_dict(record))
            except ValidationError as e:
                raise ValidationError(f"Record {index}: {e}") from e

        return {"people": len(records), "format": self.detect_format(Path(input_file), fmt)}
