#!/usr/bin/env python3
"""
friendmap Database Management CLI
----------------------------------

Command-line interface for the friendmap database.

This module provides the main CLI group and shared context setup
for all database commands.

Command Structure:
    - Setup & Initialization (init, reset)
    - Migration Management (migration)
    - People (people)
    - Listings (tags, locations, cities)
    - Maintenance (cleanup, stats)
    - Export & Import (export, import)

Usage:
    # Get general help
    friendmap-db --help

    # Get help for a specific command group
    friendmap-db people --help

    # Get help for a specific command
    friendmap-db people add --help
"""
import logging
from pathlib import Path

import click

from friendmap.core.paths import ALEMBIC_DIR, DB_PATH, LOG_DIR
from friendmap.database import FriendmapDB


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    default=str(DB_PATH),
    envvar="FRIENDMAP_DB_PATH",
    help="Path to database file",
)
@click.option(
    "--alembic-dir",
    type=click.Path(),
    default=str(ALEMBIC_DIR),
    help="Path to Alembic directory",
)
@click.option(
    "--log-dir",
    type=click.Path(),
    default=str(LOG_DIR),
    envvar="FRIENDMAP_LOG_DIR",
    help="Path to log directory",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show detailed errors and tracebacks",
)
@click.pass_context
def cli(ctx, db_path, alembic_dir, log_dir, verbose):
    """friendmap Database Management CLI"""

    # Suppress Alembic INFO logging by default
    logging.getLogger("alembic").setLevel(logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj["db_path"] = Path(db_path)
    ctx.obj["alembic_dir"] = Path(alembic_dir)
    ctx.obj["log_dir"] = Path(log_dir)
    ctx.obj["verbose"] = verbose
    ctx.call_on_close(lambda: close_db(ctx))


def get_db(ctx) -> FriendmapDB:
    """Get or create database instance from context."""
    if "db" not in ctx.obj:
        ctx.obj["db"] = FriendmapDB(
            db_path=ctx.obj["db_path"],
            alembic_dir=ctx.obj["alembic_dir"],
            log_dir=ctx.obj["log_dir"],
        )
        ctx.obj["logger"] = ctx.obj["db"].logger
    return ctx.obj["db"]


def close_db(ctx) -> None:
    db = ctx.obj.pop("db", None)
    if db is not None:
        db.dispose()


# Import and register command modules
# These imports must come after CLI group definition
from .setup import init, reset  # noqa: E402
from .migration import migration  # noqa: E402
from .people import people  # noqa: E402
from .maintenance import cities, cleanup, locations, stats, tags  # noqa: E402
from .export import export, import_  # noqa: E402

# Register top-level commands
cli.add_command(init)
cli.add_command(reset)
cli.add_command(tags)
cli.add_command(locations)
cli.add_command(cities)
cli.add_command(cleanup)
cli.add_command(stats)
cli.add_command(export)
cli.add_command(import_)

# Register command groups
cli.add_command(migration)
cli.add_command(people)


if __name__ == "__main__":
    cli(obj={})
