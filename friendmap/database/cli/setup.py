"""
Setup & Initialization Commands
--------------------------------

Database initialization commands.

Commands:
    - init: Create the schema (or migrate an existing database)
    - reset: Delete and recreate the database (dangerous!)
"""
import click

from friendmap.core.logging_manager import handle_cli_error
from friendmap.core.exceptions import DatabaseError
from . import close_db, get_db


@click.command()
@click.pass_context
def init(ctx):
    """Initialize the database schema."""
    try:
        click.echo("🚀 Initializing friendmap database...")
        db = get_db(ctx)
        db.initialize_schema()
        status = db.get_migration_history()
        click.echo(f"✅ Database ready at revision {status.get('current_revision')}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "init")


@click.command()
@click.confirmation_option(prompt="⚠️  This will DELETE the database! Are you sure?")
@click.pass_context
def reset(ctx):
    """Reset database (DANGEROUS - deletes all data!)."""
    try:
        db_path = ctx.obj["db_path"]

        click.echo("🗑️  Resetting database...")
        close_db(ctx)

        if db_path.exists():
            db_path.unlink()
            click.echo(f"  Deleted: {db_path}")

        click.echo("🔄 Reinitializing...")
        get_db(ctx)

        click.echo("✅ Database reset complete!")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "reset")
