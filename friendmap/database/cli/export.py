"""
Export & Import Commands
------------------------

People export to and import from YAML or JSON.

Commands:
    - export: Write all people to a file
    - import: Create people from a file (all-or-nothing)
"""
import click

from friendmap.core.logging_manager import handle_cli_error
from friendmap.core.exceptions import DatabaseError, ValidationError
from . import get_db

FORMAT_CHOICE = click.Choice(["yaml", "json"], case_sensitive=False)


@click.command()
@click.argument("output_file", type=click.Path())
@click.option("--format", "fmt", type=FORMAT_CHOICE, help="Default: from file suffix")
@click.pass_context
def export(ctx, output_file, fmt):
    """Export all people to YAML or JSON."""
    try:
        db = get_db(ctx)
        click.echo(f"📤 Exporting to: {output_file}")
        result = db.export_people(output_file, fmt)
        click.echo(f"✅ Exported {result['people']} people ({result['format']})")

    except DatabaseError as e:
        handle_cli_error(
            ctx, e, "export_people", additional_context={"output_file": output_file}
        )


@click.command("import")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "fmt", type=FORMAT_CHOICE, help="Default: from file suffix")
@click.pass_context
def import_(ctx, input_file, fmt):
    """Import people from YAML or JSON."""
    try:
        db = get_db(ctx)
        click.echo(f"📥 Importing from: {input_file}")
        result = db.import_people(input_file, fmt)
        click.echo(f"✅ Imported {result['people']} people")

    except (ValidationError, DatabaseError) as e:
        handle_cli_error(
            ctx, e, "import_people", additional_context={"input_file": input_file}
        )
