"""
conftest.py
-----------
Shared pytest fixtures for friendmap tests.

Provides fixtures for:
- Temporary database setup and teardown
- Sessions and per-session manager instances
- Sample person payloads
"""
import pytest
from pathlib import Path
from tempfile import TemporaryDirectory

from friendmap.database.payloads import PersonPayload


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_db_path(tmp_dir):
    """Create temporary test database path."""
    return tmp_dir / "test.db"


@pytest.fixture
def test_log_dir(tmp_dir):
    return tmp_dir / "logs"


# ----- Database Fixtures -----

@pytest.fixture
def test_db(test_db_path):
    """
    Create test database instance with schema.

    The file does not exist yet, so FriendmapDB creates all tables and
    stamps the Alembic head. Disposed after the test.
    """
    from friendmap.database.manager import FriendmapDB

    db = FriendmapDB(db_path=test_db_path)

    yield db

    db.dispose()


@pytest.fixture
def db_session(test_db):
    """
    Create a write session for tests.

    Provides a session with automatic rollback after test.
    """
    with test_db.session_scope(write=True) as session:
        yield session
        session.rollback()


@pytest.fixture
def tag_manager(db_session):
    """Create TagManager instance for testing."""
    from friendmap.database.managers.tag_manager import TagManager
    return TagManager(db_session)


@pytest.fixture
def location_manager(db_session):
    """Create LocationManager instance for testing."""
    from friendmap.database.managers.location_manager import LocationManager
    return LocationManager(db_session)


@pytest.fixture
def person_manager(db_session):
    """Create PersonManager instance for testing."""
    from friendmap.database.managers.person_manager import PersonManager
    return PersonManager(db_session)


@pytest.fixture
def query_manager(db_session):
    """Create QueryManager instance for testing."""
    from friendmap.database.managers.query_manager import QueryManager
    return QueryManager(db_session)


@pytest.fixture
def cleanup_manager(db_session):
    """Create CleanupManager instance for testing."""
    from friendmap.database.cleanup_manager import CleanupManager
    return CleanupManager(db_session)


# ----- Sample Data Fixtures -----

@pytest.fixture
def ada_data():
    """Fully located person with tags and visits."""
    return {
        "name": "Ada Lovelace",
        "country": "UK",
        "city": "London",
        "tags": ["math", "Family"],
        "visited_locations": ["Paris", "Turin"],
        "is_starred": True,
    }


@pytest.fixture
def ada_payload(ada_data):
    return PersonPayload.from_dict(ada_data)
