"""
People Commands
---------------

Create, browse, update and delete people.

Commands:
    - add: Create a person
    - list: List people, optionally filtered
    - search: Search people by name
    - show: Display one person
    - update: Change some fields of a person
    - delete: Delete a person

Usage:
    friendmap-db people add "Ada Lovelace" --country UK --city London -t math
    friendmap-db people list --starred --tag family --tag climbing
    friendmap-db people update 3 --clear-tags --visited Lisbon
    friendmap-db people delete 3 --yes
"""
from typing import Any, Dict

import click

from friendmap.core.logging_manager import handle_cli_error
from friendmap.core.exceptions import DatabaseError, NotFoundError, ValidationError
from . import get_db

CLI_ERRORS = (ValidationError, NotFoundError, DatabaseError)


def echo_person(person: Dict[str, Any]) -> None:
    """Print one full person record."""
    star = "⭐ " if person["is_starred"] else ""
    click.echo(f"\n{star}{person['name']} (#{person['id']})")

    home = ", ".join(p for p in (person["city"], person["country"]) if p)
    if home:
        marker = "📍" if person["country_city_id"] else "📌"
        click.echo(f"  {marker} Home: {home}")
    if person["tags"]:
        click.echo(f"  🏷️  Tags: {', '.join(person['tags'])}")
    if person["visited_locations"]:
        click.echo(f"  ✈️  Visited: {', '.join(person['visited_locations'])}")


def echo_summary(person: Dict[str, Any]) -> None:
    home = ", ".join(p for p in (person["city"], person["country"]) if p)
    suffix = f" ({home})" if home else ""
    click.echo(f"  • #{person['id']} {person['name']}{suffix}")


@click.group()
@click.pass_context
def people(ctx: click.Context) -> None:
    """Manage people."""
    pass


@people.command("add")
@click.argument("name")
@click.option("--country", help="Home country")
@click.option("--city", help="Home city")
@click.option("-t", "--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option(
    "-v", "--visited", "visited", multiple=True, help="Visited location (repeatable)"
)
@click.option("--star", is_flag=True, help="Mark as starred")
@click.pass_context
def add(ctx, name, country, city, tags, visited, star):
    """Create a person."""
    try:
        db = get_db(ctx)
        person = db.create_person(
            {
                "name": name,
                "country": country,
                "city": city,
                "tags": list(tags),
                "visited_locations": list(visited),
                "is_starred": star,
            }
        )
        click.echo(f"✅ Created person #{person['id']}")
        echo_person(person)

    except CLI_ERRORS as e:
        handle_cli_error(ctx, e, "add_person", additional_context={"name": name})


@people.command("list")
@click.option(
    "--starred/--unstarred", default=None, help="Only starred / unstarred people"
)
@click.option("-t", "--tag", "tags", multiple=True, help="Any of these tags")
@click.option("--country", help="Home country")
@click.option("--city", help="Home city")
@click.option("--location", help="Visited location")
@click.pass_context
def list_people(ctx, starred, tags, country, city, location):
    """List people matching all given criteria."""
    try:
        db = get_db(ctx)
        results = db.list_persons(
            starred=starred,
            tags=list(tags) or None,
            country=country,
            city=city,
            location=location,
        )

        click.echo(f"\n👥 People ({len(results)})")
        click.echo("=" * 50)
        for person in results:
            echo_summary(person)

    except CLI_ERRORS as e:
        handle_cli_error(ctx, e, "list_people")


@people.command("search")
@click.argument("query")
@click.option("--limit", type=int, default=10, show_default=True, help="Maximum results")
@click.pass_context
def search(ctx, query, limit):
    """Search people by name (case-insensitive)."""
    try:
        db = get_db(ctx)
        results = db.search_persons(query, limit=limit)

        if not results:
            click.echo(f"No people matching '{query}'")
            return

        click.echo(f"\n🔍 Matches for '{query}' ({len(results)})")
        for person in results:
            echo_summary(person)

    except CLI_ERRORS as e:
        handle_cli_error(ctx, e, "search_people", additional_context={"query": query})


@people.command("show")
@click.argument("person_id", type=int)
@click.pass_context
def show(ctx, person_id):
    """Display one person."""
    try:
        db = get_db(ctx)
        echo_person(db.get_person(person_id))

    except CLI_ERRORS as e:
        handle_cli_error(
            ctx, e, "show_person", additional_context={"person_id": person_id}
        )


@people.command("update")
@click.argument("person_id", type=int)
@click.option("--name", help="New name")
@click.option("--country", help="Home country ('' clears it)")
@click.option("--city", help="Home city ('' clears it)")
@click.option("-t", "--tag", "tags", multiple=True, help="Replace tags (repeatable)")
@click.option("--clear-tags", is_flag=True, help="Remove all tags")
@click.option(
    "-v", "--visited", "visited", multiple=True, help="Replace visited locations"
)
@click.option("--clear-visited", is_flag=True, help="Remove all visited locations")
@click.option("--star/--unstar", default=None, help="Set or unset the star")
@click.pass_context
def update(
    ctx, person_id, name, country, city, tags, clear_tags, visited, clear_visited, star
):
    """Change only the given fields of a person."""
    data: Dict[str, Any] = {}
    if name is not None:
        data["name"] = name
    if country is not None:
        data["country"] = country
    if city is not None:
        data["city"] = city
    if tags or clear_tags:
        data["tags"] = list(tags)
    if visited or clear_visited:
        data["visited_locations"] = list(visited)
    if star is not None:
        data["is_starred"] = star

    if not data:
        click.echo("Nothing to update")
        return

    try:
        db = get_db(ctx)
        person = db.update_person(person_id, data)
        click.echo(f"✅ Updated person #{person_id}")
        echo_person(person)

    except CLI_ERRORS as e:
        handle_cli_error(
            ctx, e, "update_person", additional_context={"person_id": person_id}
        )


@people.command("delete")
@click.argument("person_id", type=int)
@click.confirmation_option(prompt="Delete this person?")
@click.pass_context
def delete(ctx, person_id):
    """Delete a person and any tags/places only they used."""
    try:
        db = get_db(ctx)
        result = db.delete_person(person_id)
        click.echo(f"✅ Deleted person #{person_id}")

        for table, count in result["removed"].items():
            if count > 0:
                click.echo(f"  • {table}: {count} removed")

    except CLI_ERRORS as e:
        handle_cli_error(
            ctx, e, "delete_person", additional_context={"person_id": person_id}
        )
