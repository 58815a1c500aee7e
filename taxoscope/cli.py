"""Command line interface for taxoscope."""

import logging
import os

import click

from .analyzer import TaxonomyHierarchyAnalyzer
from .database import get_db_session
from .exceptions import InvalidArgumentError, SchemaDefinitionError
from .logging import setup_logging
from .models import Term
from .schema import StaticSchemaRegistry
from .services import ClosureEngine, ReferenceFieldDiscovery

schema_option = click.option(
    "--schema",
    "schema_path",
    default=lambda: os.getenv("TAXOSCOPE_SCHEMA"),
    help="Path to the JSON schema document (defaults to $TAXOSCOPE_SCHEMA)",
)


def load_registry(schema_path):
    """Load the schema registry or exit with an error message."""
    if not schema_path:
        click.echo("❌ No schema document given. Use --schema or set TAXOSCOPE_SCHEMA")
        raise SystemExit(1)
    try:
        return StaticSchemaRegistry.from_file(schema_path)
    except SchemaDefinitionError as e:
        click.echo(f"❌ {e}")
        raise SystemExit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def main(verbose):
    """taxoscope - analyze taxonomy hierarchies and the records referencing them."""
    setup_logging()
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@main.command("descendants")
@click.option("--tid", type=int, default=None, help="Anchor term ID")
@click.option("--vid", default=None, help="Vocabulary ID (required without --tid)")
@click.option("--count", "count_only", is_flag=True, help="Only print the count")
def descendants(tid, vid, count_only):
    """List descendants of a term, or every term of a vocabulary."""
    with get_db_session() as session:
        closure = ClosureEngine(session)
        try:
            if count_only:
                click.echo(closure.count_descendants(tid, vid))
                return
            rows = closure.get_descendants(tid, vid)
        except InvalidArgumentError as e:
            click.echo(f"❌ {e}")
            raise SystemExit(1)

        for row in rows:
            indent = "  " * row.depth
            click.echo(
                f"{indent}{row.term.name} (tid={row.tid}, parent={row.parent_id}, "
                f"depth={row.depth})"
            )


@main.command("fields")
@click.option("--vid", required=True, help="Vocabulary ID")
@click.option(
    "--include-parent", is_flag=True, help="Include the term parent field"
)
@schema_option
def fields(vid, include_parent, schema_path):
    """List reference fields that may target a vocabulary."""
    registry = load_registry(schema_path)
    reference_fields = ReferenceFieldDiscovery(registry).discover(vid, include_parent)

    if not reference_fields:
        click.echo(f"No reference fields target vocabulary {vid}")
        return

    for field in reference_fields:
        click.echo(f"{field.entity_type}.{field.field_name}\t{field.table}.{field.column}")


@main.command("references")
@click.option("--tid", type=int, required=True, help="Anchor term ID")
@click.option(
    "--descendants-only",
    is_flag=True,
    help="Ignore references to the anchor term itself",
)
@click.option("--count", "count_only", is_flag=True, help="Only print the count")
@schema_option
def references(tid, descendants_only, count_only, schema_path):
    """List records referencing a term or any of its descendants."""
    registry = load_registry(schema_path)
    with get_db_session() as session:
        term = session.get(Term, tid)
        if term is None:
            click.echo(f"❌ Term {tid} not found")
            raise SystemExit(1)

        analyzer = TaxonomyHierarchyAnalyzer(session, registry)
        if count_only:
            click.echo(analyzer.count_referencing_records(term, descendants_only))
            return

        records = analyzer.get_referencing_records(term, descendants_only)

    for record in records:
        label = record.label if record.label is not None else "-"
        click.echo(
            f"{record.entity_type}\t{record.entity_id}\t{record.bundle}\t{label}"
        )


if __name__ == "__main__":
    main()
