"""Main CLI entry point for schema-diagram.

Parses Avro JSON and Avro IDL schemas into an entity graph, prints the
layout engine input and applies text edits from the command line.
"""

from pathlib import Path
from typing import Any, Callable
import json
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from schema_diagram import __version__
from schema_diagram.config.loader import load_settings
from schema_diagram.config.settings import DiagramSettings
from schema_diagram.editor import operations
from schema_diagram.graph.models import ParseResult, SchemaFormat, SchemaGraph
from schema_diagram.layout.builder import build_layout_graph
from schema_diagram.parsers.detector import detect_format
from schema_diagram.parsers.parser import SchemaParser, parse_schema_file
from schema_diagram.samples import get_sample, list_samples

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(ctx: click.Context, error: Exception) -> None:
    console.print(f"[red]Error: {error}[/red]")
    if ctx.obj.get("verbose"):
        import traceback
        console.print(traceback.format_exc())
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="schema-diagram")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True), help="Settings YAML file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: str | None) -> None:
    """schema-diagram - Turn Avro schemas into entity diagrams.

    Reads Avro JSON (.avsc/.avpr) and Avro IDL (.avdl) sources, extracts
    records, enums, fixed types and the relationships between them, and
    edits the source text in place.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["settings"] = load_settings(config_path)


def _settings(ctx: click.Context) -> DiagramSettings:
    return ctx.obj.get("settings") or DiagramSettings()


@cli.command()
@click.argument("schema_file", type=click.Path(exists=True))
def detect(schema_file: str) -> None:
    """Print the detected format of SCHEMA_FILE."""
    schema_format = detect_format(Path(schema_file).read_text())
    click.echo(schema_format.value)
    if schema_format == SchemaFormat.UNKNOWN:
        sys.exit(1)


@cli.command()
@click.argument("schema_file", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Print the graph as JSON")
@click.pass_context
def parse(ctx: click.Context, schema_file: str, as_json: bool) -> None:
    """Parse SCHEMA_FILE and show its entities and relationships."""
    try:
        result = parse_schema_file(schema_file)
    except Exception as e:
        _fail(ctx, e)
        return

    if as_json:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        _print_graph(schema_file, result)

    if result.graph.has_errors:
        sys.exit(1)


@cli.command("layout-input")
@click.argument("schema_file", type=click.Path(exists=True))
@click.option("--collapse", multiple=True, help="Entity id to draw collapsed (repeatable)")
@click.pass_context
def layout_input(ctx: click.Context, schema_file: str, collapse: tuple[str, ...]) -> None:
    """Print the layout engine input for SCHEMA_FILE as JSON."""
    try:
        graph = parse_schema_file(schema_file).graph
        layout_graph = build_layout_graph(graph, collapse, _settings(ctx).layout)
    except Exception as e:
        _fail(ctx, e)
        return

    click.echo(json.dumps(layout_graph.to_engine_dict(), indent=2))


@cli.command()
@click.argument("name", required=False)
def samples(name: str | None) -> None:
    """List bundled sample schemas, or print the one called NAME."""
    if name:
        try:
            sample = get_sample(name)
        except KeyError as e:
            console.print(f"[red]{e.args[0]}[/red]")
            sys.exit(1)
        click.echo(sample.content, nl=False)
        return

    table = Table(title="Sample Schemas")
    table.add_column("Name", style="cyan")
    table.add_column("File")
    table.add_column("Description")
    for sample in list_samples():
        table.add_row(sample.name, sample.filename, sample.description)
    console.print(table)


# ----------------------------------------------------------------------
# Edits
# ----------------------------------------------------------------------


@cli.group()
def edit() -> None:
    """Edit a schema file.

    \b
    The new text is printed unless --in-place is given. Avro JSON files are
    re-serialized; Avro IDL files keep their formatting and comments.
    """


def _file_format(path: Path, text: str) -> SchemaFormat:
    schema_format = detect_format(text)
    if schema_format == SchemaFormat.UNKNOWN:
        schema_format = SchemaParser.EXTENSION_FORMATS.get(path.suffix.lower(), SchemaFormat.UNKNOWN)
    return schema_format


def _run_edit(
    ctx: click.Context,
    schema_file: str,
    in_place: bool,
    apply: Callable[[str, SchemaFormat, Any], str],
) -> None:
    path = Path(schema_file)
    try:
        text = path.read_text()
        new_text = apply(text, _file_format(path, text), _settings(ctx).editor)
    except Exception as e:
        _fail(ctx, e)
        return

    if new_text == text:
        console.print("[yellow]Nothing changed: schema, field or symbol not found[/yellow]")
        sys.exit(1)

    if in_place:
        path.write_text(new_text)
        console.print(f"[green]Updated {schema_file}[/green]")
    else:
        click.echo(new_text, nl=not new_text.endswith("\n"))


in_place_option = click.option("--in-place", "-i", is_flag=True, help="Overwrite the file")


@edit.command("add-field")
@click.argument("schema_file", type=click.Path(exists=True))
@click.argument("schema")
@click.argument("field_name", required=False)
@click.option("--type", "-t", "field_type", help="Field type (defaults to the configured default type)")
@in_place_option
@click.pass_context
def add_field(
    ctx: click.Context,
    schema_file: str,
    schema: str,
    field_name: str | None,
    field_type: str | None,
    in_place: bool,
) -> None:
    """Append a field to record SCHEMA.

    Without FIELD_NAME a unique 'new_field' name is generated.
    """
    def apply(text: str, schema_format: SchemaFormat, settings: Any) -> str:
        name = field_name
        if name is None:
            entity = SchemaParser(text, schema_format).parse().graph.find_entity(schema)
            name = operations.unique_field_name(entity.field_names() if entity else [])
        return operations.add_field(text, schema_format, schema, name, field_type, settings=settings)

    _run_edit(ctx, schema_file, in_place, apply)


@edit.command("remove-field")
@click.argument("schema_file", type=click.Path(exists=True))
@click.argument("schema")
@click.argument("field_name")
@in_place_option
@click.pass_context
def remove_field(ctx: click.Context, schema_file: str, schema: str, field_name: str, in_place: bool) -> None:
    """Remove FIELD_NAME from record SCHEMA."""
    _run_edit(ctx, schema_file, in_place, lambda text, fmt, settings: operations.remove_field(
        text, fmt, schema, field_name, settings=settings,
    ))


@edit.command("rename-field")
@click.argument("schema_file", type=click.Path(exists=True))
@click.argument("schema")
@click.argument("old_name")
@click.argument("new_name")
@in_place_option
@click.pass_context
def rename_field(
    ctx: click.Context,
    schema_file: str,
    schema: str,
    old_name: str,
    new_name: str,
    in_place: bool,
) -> None:
    """Rename field OLD_NAME of record SCHEMA to NEW_NAME."""
    _run_edit(ctx, schema_file, in_place, lambda text, fmt, settings: operations.rename_field(
        text, fmt, schema, old_name, new_name, settings=settings,
    ))


@edit.command("set-type")
@click.argument("schema_file", type=click.Path(exists=True))
@click.argument("schema")
@click.argument("field_name")
@click.argument("new_type")
@in_place_option
@click.pass_context
def set_type(
    ctx: click.Context,
    schema_file: str,
    schema: str,
    field_name: str,
    new_type: str,
    in_place: bool,
) -> None:
    """Change the type of FIELD_NAME in record SCHEMA to NEW_TYPE."""
    _run_edit(ctx, schema_file, in_place, lambda text, fmt, settings: operations.update_field_type(
        text, fmt, schema, field_name, new_type, settings=settings,
    ))


def _decode_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


@edit.command("set-default")
@click.argument("schema_file", type=click.Path(exists=True))
@click.argument("schema")
@click.argument("field_name")
@click.argument("value", required=False)
@click.option("--remove", is_flag=True, help="Drop the default instead of setting one")
@in_place_option
@click.pass_context
def set_default(
    ctx: click.Context,
    schema_file: str,
    schema: str,
    field_name: str,
    value: str | None,
    remove: bool,
    in_place: bool,
) -> None:
    """Set the default of FIELD_NAME in record SCHEMA.

    \b
    VALUE is read as JSON when it parses (null, 42, true, "x") and as a
    plain string otherwise.
    """
    if value is None and not remove:
        raise click.UsageError("VALUE is required unless --remove is given")

    decoded = None if remove else _decode_value(value)
    _run_edit(ctx, schema_file, in_place, lambda text, fmt, settings: operations.update_field_default(
        text, fmt, schema, field_name, decoded, remove=remove, settings=settings,
    ))


@edit.command("add-symbol")
@click.argument("schema_file", type=click.Path(exists=True))
@click.argument("schema")
@click.argument("symbol", required=False)
@in_place_option
@click.pass_context
def add_symbol(ctx: click.Context, schema_file: str, schema: str, symbol: str | None, in_place: bool) -> None:
    """Append SYMBOL to enum SCHEMA.

    Without SYMBOL a unique 'NEW_SYMBOL' name is generated.
    """
    def apply(text: str, schema_format: SchemaFormat, settings: Any) -> str:
        name = symbol
        if name is None:
            entity = SchemaParser(text, schema_format).parse().graph.find_entity(schema)
            name = operations.unique_symbol_name((entity.symbols or []) if entity else [])
        return operations.add_symbol(text, schema_format, schema, name, settings=settings)

    _run_edit(ctx, schema_file, in_place, apply)


@edit.command("rename-symbol")
@click.argument("schema_file", type=click.Path(exists=True))
@click.argument("schema")
@click.argument("old_name")
@click.argument("new_name")
@in_place_option
@click.pass_context
def rename_symbol(
    ctx: click.Context,
    schema_file: str,
    schema: str,
    old_name: str,
    new_name: str,
    in_place: bool,
) -> None:
    """Rename symbol OLD_NAME of enum SCHEMA to NEW_NAME."""
    _run_edit(ctx, schema_file, in_place, lambda text, fmt, settings: operations.rename_symbol(
        text, fmt, schema, old_name, new_name, settings=settings,
    ))


def _print_graph(source: str, result: ParseResult) -> None:
    """Print entities, relationships and diagnostics."""
    graph: SchemaGraph = result.graph
    console.print(Panel.fit(
        f"[cyan]Source:[/cyan] {source}\n"
        f"[cyan]Format:[/cyan] {result.format.value}\n"
        f"[cyan]Entities:[/cyan] {len(graph.entities)}\n"
        f"[cyan]Relationships:[/cyan] {len(graph.relationships)}",
        title="Schema Graph",
    ))

    if graph.entities:
        table = Table(title="Entities")
        table.add_column("Id", style="cyan")
        table.add_column("Kind", style="green")
        table.add_column("Members", justify="right")
        table.add_column("Nested In")
        for entity in graph.entities:
            members = len(entity.fields or entity.symbols or [])
            table.add_row(entity.id, entity.kind.value, str(members), entity.parent_schema or "-")
        console.print(table)

    if graph.relationships:
        table = Table(title="Relationships")
        table.add_column("Kind", style="cyan")
        table.add_column("Source")
        table.add_column("Target")
        table.add_column("Cardinality", justify="center")
        for rel in graph.relationships:
            target = f"{rel.target_schema}.{rel.target_field}" if rel.target_field else rel.target_schema
            table.add_row(
                rel.kind.value,
                f"{rel.source_schema}.{rel.source_field}",
                target,
                rel.cardinality.value if rel.cardinality else "-",
            )
        console.print(table)

    for diagnostic in graph.diagnostics:
        color = "red" if diagnostic.severity.value == "error" else "yellow"
        where = f" (line {diagnostic.start_line}, column {diagnostic.start_column})" if diagnostic.start_line else ""
        console.print(f"  [{color}]{diagnostic.severity.value.upper()}[/{color}]: {diagnostic.message}{where}")


if __name__ == "__main__":
    cli()
