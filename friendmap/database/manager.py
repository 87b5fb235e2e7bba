#!/usr/bin/env python3
"""
manager.py
--------------------
Database manager for the friendmap store.

Provides the FriendmapDB class for interacting with the SQLite database.
Handles:
    - Initialization of the database engine and session factories
    - Per-session entity managers (tags, locations, people, queries, cleanup)
    - Facade methods that run one unit of work and return plain dicts
    - Retry of whole units of work on SQLite lock contention
    - Migration management via Alembic

Core Operations:
    People:
        - create_person / update_person / delete_person
        - get_person / list_persons / search_persons

    Listings:
        - list_tags / list_locations / list_cities / city_overview

    Maintenance:
        - cleanup_orphans: Remove unreferenced shared rows
        - get_stats: Row counts
        - export_people / import_people: YAML or JSON files
        - initialize_schema / upgrade_database / downgrade_database

Notes
==============
- Every mutation runs in one transaction: person row, association rows,
  shared rows created and shared rows orphaned are committed together
- Write transactions start with BEGIN IMMEDIATE so two writers never
  both hold a read lock waiting to upgrade
- Foreign keys are enforced on every connection
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import threading
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar, Union

# --- Third party ---
from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Engine, create_engine, event, func, inspect, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

# --- Local imports ---
from friendmap.core.exceptions import ConflictOrTransientError, DatabaseError
from friendmap.core.logging_manager import FriendmapLogger
from friendmap.core.paths import ALEMBIC_DIR

from .cleanup_manager import CleanupManager
from .decorators import handle_db_errors, log_database_operation
from .export_manager import ExportManager
from .managers import LocationManager, PersonManager, QueryManager, TagManager
from .models import Base, CountryCity, Person, Tag, VisitedLocation
from .payloads import PersonPayload

R = TypeVar("R")

DEFAULT_TIMEOUT = 5.0


def _sql_casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if isinstance(value, str) else value


def _on_connect(dbapi_connection, connection_record) -> None:
    # Hand transaction control to the "begin" listener below
    dbapi_connection.isolation_level = None
    dbapi_connection.create_function("casefold", 1, _sql_casefold, deterministic=True)
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_begin(conn) -> None:
    if conn.get_execution_options().get("sqlite_begin") == "IMMEDIATE":
        conn.exec_driver_sql("BEGIN IMMEDIATE")
    else:
        conn.exec_driver_sql("BEGIN")


def _is_lock_error(error: BaseException) -> bool:
    """True for "database is locked/busy", raw or already translated."""
    cause: Optional[BaseException] = error
    while cause is not None:
        if isinstance(cause, OperationalError):
            message = str(cause).lower()
            return "locked" in message or "busy" in message
        cause = cause.__cause__
    return False


# ----- Main Database Manager -----
class FriendmapDB:
    """
    Main database manager for the friendmap database.

    Attributes:
        - db_path (Path): Filesystem path to the SQLite database file.
        - alembic_dir (Path): Filesystem path to the Alembic directory.
        - timeout (float): Seconds SQLite waits on a locked database.
        - engine (Engine): SQLAlchemy engine instance.
        - SessionLocal (sessionmaker): Read session factory.
        - WriteSession (sessionmaker): Session factory for mutations.

    Usage:
        db = FriendmapDB("~/friendmap.db", log_dir="~/logs")

        # Facade (one transaction per call)
        ada = db.create_person({"name": "Ada", "tags": ["math"]})

        # Managers (several operations in one transaction)
        with db.session_scope(write=True):
            db.people.update(ada["id"], {"tags": []})
            db.people.delete(ada["id"])
    """

    # ---- Initialization ----
    def __init__(
        self,
        db_path: Union[str, Path],
        alembic_dir: Union[str, Path] = ALEMBIC_DIR,
        log_dir: Optional[Union[str, Path]] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """
        Initialize database engine and session factories.

        Args:
            db_path: Path to the SQLite file.
            alembic_dir: Path to the Alembic directory.
            log_dir: Directory for log files (optional)
            timeout: SQLite busy timeout in seconds
        """
        self.db_path = Path(db_path).expanduser().resolve()
        self.alembic_dir = Path(alembic_dir).expanduser().resolve()
        self.timeout = float(timeout)

        # --- Logging ---
        if log_dir:
            self.log_dir = Path(log_dir).expanduser().resolve() / "system"
            self.logger: Optional[FriendmapLogger] = FriendmapLogger(
                self.log_dir, component_name="database"
            )
        else:
            self.logger = None

        self.export_manager = ExportManager(self.logger)

        # Managers are bound per thread in session_scope; one instance
        # serves concurrent requests
        self._scope = threading.local()

        self._setup_engine()

    def _setup_engine(self) -> None:
        """Initialize database engine and session factories."""
        try:
            if self.logger:
                self.logger.log_operation(
                    "database_init_start",
                    {
                        "db_path": str(self.db_path),
                        "alembic_dir": str(self.alembic_dir),
                    },
                )

            is_new_file = not self.db_path.exists()
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                pool_pre_ping=True,
                connect_args={"timeout": self.timeout, "check_same_thread": False},
            )
            event.listen(self.engine, "connect", _on_connect)
            event.listen(self.engine, "begin", _on_begin)

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
            )
            self.WriteSession: sessionmaker = sessionmaker(
                bind=self.engine.execution_options(sqlite_begin="IMMEDIATE"),
                autoflush=True,
                expire_on_commit=False,
            )

            self.alembic_cfg: Config = self._setup_alembic()

            if is_new_file:
                self.initialize_schema()

            if self.logger:
                self.logger.log_operation("database_init_complete", {"success": True})

        except DatabaseError:
            raise
        except Exception as e:
            if self.logger:
                self.logger.log_error(e, {"operation": "database_init"})
            raise DatabaseError(f"Database initialization failed: {e}") from e

    def dispose(self) -> None:
        """Release pooled connections and log handlers."""
        self.engine.dispose()
        if self.logger:
            self.logger.log_debug("database_disposed", {"db_path": str(self.db_path)})
            self.logger.close()

    # ---- Session Management ----
    @contextmanager
    def session_scope(self, write: bool = False) -> Iterator[Session]:
        """
        Provide a transactional scope around operations with logging.

        Commits on success and rolls back on any exception, which is then
        re-raised. Entity managers bound to the session are available via
        properties (db.people, db.tags, ...) for the duration of the scope,
        in the calling thread only.

        Args:
            write: Start the transaction with BEGIN IMMEDIATE

        Usage:
            with db.session_scope(write=True) as session:
                person = db.people.create({"name": "Alice"})
        """
        session = (self.WriteSession if write else self.SessionLocal)()
        session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")

        outer_managers = getattr(self._scope, "managers", None)
        self._scope.managers = {
            "tags": TagManager(session, self.logger),
            "locations": LocationManager(session, self.logger),
            "people": PersonManager(session, self.logger),
            "queries": QueryManager(session, self.logger),
            "cleanup": CleanupManager(session, self.logger),
        }

        if self.logger:
            self.logger.log_debug(
                "session_start", {"session_id": session_id, "write": write}
            )

        try:
            yield session
            session.commit()
            if self.logger:
                self.logger.log_debug("session_commit", {"session_id": session_id})

        except Exception as e:
            session.rollback()
            if self.logger:
                self.logger.log_error(
                    e, {"operation": "session_rollback", "session_id": session_id}
                )
            raise
        finally:
            self._scope.managers = outer_managers

            session.close()
            if self.logger:
                self.logger.log_debug("session_close", {"session_id": session_id})

    def run_in_transaction(
        self,
        operation: Callable[[Session], R],
        write: bool = True,
        max_retries: int = 3,
        retry_delay: float = 0.1,
    ) -> R:
        """
        Run ``operation(session)`` in its own transaction, retrying on lock.

        The whole unit of work is replayed, so the operation must not have
        side effects outside the session.

        Args:
            operation: Callable receiving the session
            write: Use a write (BEGIN IMMEDIATE) transaction
            max_retries: Maximum number of attempts
            retry_delay: Base delay between attempts (exponential backoff)

        Raises:
            ConflictOrTransientError: If the database stays locked
        """
        for attempt in range(max_retries):
            try:
                with self.session_scope(write=write) as session:
                    return operation(session)
            except (OperationalError, ConflictOrTransientError) as e:
                if not _is_lock_error(e):
                    raise
                if attempt == max_retries - 1:
                    if isinstance(e, ConflictOrTransientError):
                        raise
                    raise ConflictOrTransientError(
                        f"Database unavailable: {e.orig}"
                    ) from e

                wait_time = retry_delay * (2**attempt)
                if self.logger:
                    self.logger.log_debug(
                        f"Database locked, retrying in {wait_time}s",
                        {"attempt": attempt + 1, "max_retries": max_retries},
                    )
                time.sleep(wait_time)

        raise DatabaseError("Retry loop completed without success")

    # -------------------------------------------------------------------------
    # Entity Manager Properties
    # -------------------------------------------------------------------------

    def _scoped(self, name: str, manager_name: str) -> Any:
        managers = getattr(self._scope, "managers", None)
        if managers is None:
            raise DatabaseError(
                f"{manager_name} requires active session. Use within session_scope."
            )
        return managers[name]

    @property
    def tags(self) -> TagManager:
        """
        Access TagManager for tag operations.

        Managers belong to the session_scope of the calling thread.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        return self._scoped("tags", "TagManager")

    @property
    def locations(self) -> LocationManager:
        return self._scoped("locations", "LocationManager")

    @property
    def people(self) -> PersonManager:
        """
        Access PersonManager for person mutations.

        Recommended usage:
            with db.session_scope(write=True):
                person = db.people.create({"name": "Alice"})

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        return self._scoped("people", "PersonManager")

    @property
    def queries(self) -> QueryManager:
        return self._scoped("queries", "QueryManager")

    @property
    def cleanup(self) -> CleanupManager:
        return self._scoped("cleanup", "CleanupManager")

    # ---- Alembic setup ----
    def _setup_alembic(self) -> Config:
        """Build the Alembic configuration in memory."""
        try:
            if self.logger:
                self.logger.log_debug("Setting up Alembic configuration...")

            alembic_cfg: Config = Config()
            alembic_cfg.set_main_option("script_location", str(self.alembic_dir))
            alembic_cfg.set_main_option("sqlalchemy.url", f"sqlite:///{self.db_path}")
            alembic_cfg.set_main_option(
                "file_template",
                "%%(year)d%%(month).2d%%(day).2d_%%(hour).2d%%(minute).2d_%%(slug)s",
            )
            return alembic_cfg
        except Exception as e:
            if self.logger:
                self.logger.log_error(e, {"operation": "setup_alembic"})
            raise DatabaseError(f"Alembic configuration failed: {e}") from e

    @handle_db_errors
    @log_database_operation("initialize_schema")
    def initialize_schema(self) -> None:
        """
        Create tables if needed, or run migrations.

        Actions:
            If the database has no tables,
                creates all tables from the ORM models
                stamps the Alembic revision to head
            If not,
                runs pending migrations to update schema
        """
        try:
            with self.engine.connect() as conn:
                table_names = inspect(conn).get_table_names()

            if not table_names:
                Base.metadata.create_all(bind=self.engine)
                command.stamp(self.alembic_cfg, "head")
                if self.logger:
                    self.logger.log_operation(
                        "fresh_database_created",
                        {"tables_created": len(Base.metadata.tables)},
                    )
            else:
                self.upgrade_database()
                if self.logger:
                    self.logger.log_operation(
                        "existing_database_migrated",
                        {"table_count": len(table_names)},
                    )
        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError(f"Could not initialize database: {e}") from e

    @log_database_operation("upgrade_database")
    def upgrade_database(self, revision: str = "head") -> None:
        """
        Upgrade the database schema to the specified Alembic revision.

        Args:
            revision: Target revision (default 'head')
        """
        try:
            command.upgrade(self.alembic_cfg, revision)
        except Exception as e:
            raise DatabaseError(f"Database upgrade failed: {e}") from e

    @log_database_operation("downgrade_database")
    def downgrade_database(self, revision: str) -> None:
        """
        Downgrade the database schema to a specified Alembic revision.

        Args:
            revision: The target revision to downgrade to.
        """
        try:
            command.downgrade(self.alembic_cfg, revision)
        except Exception as e:
            raise DatabaseError(f"Database downgrade to {revision} failed: {e}") from e

    @log_database_operation("create_migration")
    def create_migration(self, message: str) -> str:
        """
        Create a new autogenerated Alembic migration.

        Args:
            message: Description of the migration.

        Returns:
            The new revision id
        """
        try:
            result = command.revision(self.alembic_cfg, message=message, autogenerate=True)
        except Exception as e:
            raise DatabaseError(f"Migration creation failed: {e}") from e

        script = result[0] if isinstance(result, list) and result else result
        if script is None or getattr(script, "revision", None) is None:
            raise DatabaseError("Migration creation returned no script")
        return script.revision

    def get_migration_history(self) -> Dict[str, Optional[str]]:
        """
        Get the current migration status of the database.

        Returns:
            Dictionary with keys:
                - 'current_revision': Current Alembic revision (or None)
                - 'status': 'up_to_date' or 'needs_migration'
                - 'error': Present if an exception occurred
        """
        try:
            with self.engine.connect() as conn:
                context = MigrationContext.configure(conn)
                current_rev = context.get_current_revision()

            return {
                "current_revision": current_rev,
                "status": "up_to_date" if current_rev else "needs_migration",
            }
        except Exception as e:
            if self.logger:
                self.logger.log_error(e, {"operation": "get_migration_history"})
            return {"error": str(e)}

    # -------------------------------------------------------------------------
    # People
    # -------------------------------------------------------------------------

    @handle_db_errors
    def create_person(self, data: Union[Dict[str, Any], PersonPayload]) -> Dict[str, Any]:
        """
        Create a person with tags, visited locations and home.

        Returns:
            The created person as a dict
        """
        payload = PersonPayload.from_dict(data)

        def _do_create(session: Session) -> Dict[str, Any]:
            return PersonManager(session, self.logger).create(payload).to_dict()

        return self.run_in_transaction(_do_create)

    @handle_db_errors
    def update_person(
        self, person_id: int, data: Union[Dict[str, Any], PersonPayload]
    ) -> Dict[str, Any]:
        """
        Partially update a person; orphaned shared rows are removed.

        Returns:
            The updated person as a dict
        """
        payload = PersonPayload.from_dict(data)

        def _do_update(session: Session) -> Dict[str, Any]:
            person = PersonManager(session, self.logger).update(person_id, payload)
            return person.to_dict()

        return self.run_in_transaction(_do_update)

    @handle_db_errors
    def delete_person(self, person_id: int) -> Dict[str, Any]:
        """
        Delete a person; orphaned shared rows are removed.

        Returns:
            {"id": person_id, "removed": {table: count}}
        """
        removed = self.run_in_transaction(
            lambda session: PersonManager(session, self.logger).delete(person_id)
        )
        return {"id": person_id, "removed": removed}

    def _read(self, query: Callable[[QueryManager], R]) -> R:
        """Run ``query`` against a QueryManager bound to a fresh read session."""
        return self.run_in_transaction(
            lambda session: query(QueryManager(session, self.logger)), write=False
        )

    @handle_db_errors
    def get_person(self, person_id: int) -> Dict[str, Any]:
        return self._read(lambda queries: queries.get(person_id).to_dict())

    @handle_db_errors
    def list_persons(
        self,
        starred: Optional[bool] = None,
        tags: Optional[List[str]] = None,
        country: Optional[str] = None,
        city: Optional[str] = None,
        location: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Filtered list of full person records (no criteria: everyone)."""
        return self._read(
            lambda queries: [
                person.to_dict()
                for person in queries.filter(
                    starred=starred,
                    tags=tags,
                    country=country,
                    city=city,
                    location=location,
                )
            ]
        )

    @handle_db_errors
    def search_persons(self, q: Optional[str], limit: int = 10) -> List[Dict[str, Any]]:
        """Name search returning {id, name, country, city} summaries."""
        return self._read(
            lambda queries: [
                person.to_summary() for person in queries.search_by_name(q, limit)
            ]
        )

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    @handle_db_errors
    def list_tags(self) -> List[str]:
        return self._read(lambda queries: queries.list_tags())

    @handle_db_errors
    def list_locations(self) -> List[str]:
        return self._read(lambda queries: queries.list_locations())

    @handle_db_errors
    def list_cities(self) -> List[Dict[str, Any]]:
        return self._read(lambda queries: queries.list_cities())

    @handle_db_errors
    def city_overview(self, country: str, city: str) -> Dict[str, Any]:
        """Residents and visitors of one city, as person summaries."""

        def _overview(queries: QueryManager) -> Dict[str, Any]:
            overview = queries.city_overview(country, city)
            overview["residents"] = [p.to_summary() for p in overview["residents"]]
            overview["visitors"] = [p.to_summary() for p in overview["visitors"]]
            return overview

        return self._read(_overview)

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("cleanup_orphans")
    def cleanup_orphans(self, dry_run: bool = False) -> Dict[str, int]:
        """
        Remove tags, locations and country/city pairs nobody references.

        Mutations already do this; this is for databases edited by hand.

        Args:
            dry_run: Only count what would be removed

        Returns:
            Mapping of table name to number of rows (to be) removed
        """
        if dry_run:
            return self.run_in_transaction(
                lambda session: CleanupManager(session, self.logger).count_unreferenced(),
                write=False,
            )
        return self.run_in_transaction(
            lambda session: CleanupManager(session, self.logger).cleanup_all()
        )

    @handle_db_errors
    def get_stats(self) -> Dict[str, int]:
        """Row counts for the stats command and the health endpoint."""

        def _stats(session: Session) -> Dict[str, int]:
            def count(statement) -> int:
                return session.scalar(statement) or 0

            return {
                "people": count(select(func.count(Person.id))),
                "starred": count(
                    select(func.count(Person.id)).where(Person.is_starred.is_(True))
                ),
                "fully_located": count(
                    select(func.count(Person.id)).where(
                        Person.country_city_id.is_not(None)
                    )
                ),
                "tags": count(select(func.count(Tag.id))),
                "visited_locations": count(select(func.count(VisitedLocation.id))),
                "country_cities": count(select(func.count(CountryCity.id))),
            }

        return self.run_in_transaction(_stats, write=False)

    def export_people(
        self, output_file: Union[str, Path], fmt: Optional[str] = None
    ) -> Dict[str, Any]:
        """Write all people to a YAML or JSON file."""
        return self.run_in_transaction(
            lambda session: self.export_manager.export_people(session, output_file, fmt),
            write=False,
        )

    def import_people(
        self, input_file: Union[str, Path], fmt: Optional[str] = None
    ) -> Dict[str, Any]:
        """Create all people from an export file, all-or-nothing."""
        return self.run_in_transaction(
            lambda session: self.export_manager.import_people(session, input_file, fmt)
        )

    def __enter__(self) -> "FriendmapDB":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()
