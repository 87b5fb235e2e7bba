"""
friendmap
=========

A store of friends and contacts: who they are, where they live, where they
have been, and how they are tagged.

This package keeps a SQLite database of people with normalized tags,
visited locations and (country, city) pairs, and exposes it through a
database facade, a click CLI and a small FastAPI app.

Main Components:
    - core: Logging, validation, paths, exceptions
    - database: SQLAlchemy ORM with entity managers and the FriendmapDB facade
    - api: HTTP surface over the database facade

Primary Interfaces:
    - friendmap.database.cli: Database management CLI (friendmap-db)
    - friendmap.database.manager.FriendmapDB: Main database interface
    - friendmap.api.main: FastAPI application

Example Usage:
    >>> from friendmap.database import FriendmapDB
    >>> from friendmap.core.paths import DB_PATH, LOG_DIR
    >>> db = FriendmapDB(db_path=DB_PATH, log_dir=LOG_DIR)
    >>> db.create_person({"name": "Ada Lovelace", "tags": ["Family"]})
"""

__version__ = "1.0.0"

from friendmap.database.manager import FriendmapDB
from friendmap.core.paths import DATA_DIR, DB_PATH, LOG_DIR

__all__ = [
    "FriendmapDB",
    "DATA_DIR",
    "DB_PATH",
    "LOG_DIR",
]
