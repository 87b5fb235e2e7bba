"""
Maintenance & Listing Commands
-------------------------------

Listings of shared rows, cleanup and statistics.

Commands:
    - tags: List all tags
    - locations: List all visited locations
    - cities: List home cities with resident counts
    - cleanup: Remove unreferenced tags, locations and cities
    - stats: Display database statistics
"""
import json

import click

from friendmap.core.logging_manager import handle_cli_error
from friendmap.core.exceptions import DatabaseError, ValidationError
from . import get_db


@click.command()
@click.pass_context
def tags(ctx):
    """List all tags."""
    try:
        db = get_db(ctx)
        values = db.list_tags()

        click.echo(f"\n🏷️  Tags ({len(values)})")
        for value in values:
            click.echo(f"  • {value}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "list_tags")


@click.command()
@click.pass_context
def locations(ctx):
    """List all visited locations."""
    try:
        db = get_db(ctx)
        values = db.list_locations()

        click.echo(f"\n✈️  Visited locations ({len(values)})")
        for value in values:
            click.echo(f"  • {value}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "list_locations")


@click.command()
@click.option("--country", help="With --city: show residents and visitors")
@click.option("--city", help="With --country: show residents and visitors")
@click.pass_context
def cities(ctx, country, city):
    """List home cities, or show one city's residents and visitors."""
    try:
        db = get_db(ctx)

        if country or city:
            overview = db.city_overview(country, city)
            click.echo(f"\n🏙️  {overview['city']}, {overview['country']}")
            click.echo(f"\n  Residents ({len(overview['residents'])}):")
            for person in overview["residents"]:
                click.echo(f"    • #{person['id']} {person['name']}")
            click.echo(f"\n  Visitors ({len(overview['visitors'])}):")
            for person in overview["visitors"]:
                click.echo(f"    • #{person['id']} {person['name']}")
            return

        rows = db.list_cities()
        click.echo(f"\n🏙️  Cities ({len(rows)})")
        for row in rows:
            click.echo(f"  • {row['city']}, {row['country']}: {row['residents']}")

    except (ValidationError, DatabaseError) as e:
        handle_cli_error(ctx, e, "list_cities")


@click.command()
@click.option("--dry-run", is_flag=True, help="Only count unreferenced rows")
@click.pass_context
def cleanup(ctx, dry_run):
    """Clean up tags, locations and cities no person references."""
    try:
        db = get_db(ctx)
        click.echo("🧹 Cleaning up orphaned records...")
        results = db.cleanup_orphans(dry_run=dry_run)

        verb = "would be removed" if dry_run else "removed"
        click.echo("\n✅ Cleanup Complete:")
        total_removed = 0
        for table, count in results.items():
            if count > 0:
                click.echo(f"  • {table}: {count} {verb}")
                total_removed += count

        if total_removed == 0:
            click.echo("  No orphaned records found")
        else:
            click.echo(f"\nTotal {verb}: {total_removed}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "cleanup")


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def stats(ctx, as_json):
    """Display database statistics."""
    try:
        db = get_db(ctx)
        counts = db.get_stats()

        if as_json:
            click.echo(json.dumps(counts, indent=2))
            return

        click.echo("\n📊 Database Statistics")
        click.echo("=" * 50)
        for name, count in counts.items():
            click.echo(f"  {name.replace('_', ' ').title()}: {count}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "stats")
