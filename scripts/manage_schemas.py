#!/usr/bin/env python3
"""
Command-line interface for the section schema catalog.

Every section type lives in its own directory under the schema types path
(SCRIBE_SCHEMA_TYPES_PATH), holding schema.yaml and an optional role_map.yaml.

Commands:
    list         - List registered section types
    validate     - Load every schema and role map, reporting authoring errors
    instructions - Print the JSON shape instructions sent to the generator
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from scribe.contexts.ai.bridge import AIDataBridge
from scribe.contexts.schema.catalog import discover_schema_dirs, load_section_schema
from scribe.contexts.schema.context_builders import DEFAULT_CONTEXT_BUILDERS, builder_key
from scribe.contexts.schema.exceptions import SchemaDefinitionError
from scribe.contexts.schema.logger import setup_schema_logger
from scribe.contexts.schema.registry import SchemaRegistry
from scribe.contexts.schema.role_maps import load_role_map
from scribe.utils.config import LOGS_PATH, SCHEMA_TYPES_PATH

load_dotenv()

app = typer.Typer(
    add_completion=False,
    help="Inspect and validate the section schema catalog",
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("list")
def list_command(
    types_path: Annotated[
        Optional[Path], typer.Option("--types-path", "-t", help="Schema types directory")
    ] = None,
):
    """
    List registered section types with cardinality and role map status.

    Examples:\n

        $ manage_schemas.py list
    """
    try:
        registry = SchemaRegistry(types_path=types_path or SCHEMA_TYPES_PATH)
    except SchemaDefinitionError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    schemas = registry.get_all_section_schemas()
    typer.secho(f"\n{len(schemas)} section type(s)\n", fg=typer.colors.BLUE, bold=True)
    for schema in schemas:
        role_map = "role map" if registry.get_role_map(schema.id) else "no role map"
        batch = ", batch" if schema.ai_context.batch_improvement_supported else ""
        typer.echo(
            f"  {schema.id:<18} {schema.name:<22} {schema.cardinality.value:<7} "
            f"{len(schema.fields)} fields ({role_map}{batch})"
        )


@app.command("validate")
def validate_command(
    types_path: Annotated[
        Optional[Path], typer.Option("--types-path", "-t", help="Schema types directory")
    ] = None,
):
    """
    Load every schema and role map, reporting all authoring errors.

    Also reports context builder ids that schemas reference but no builder
    provides; those fields produce empty context.

    Examples:\n

        $ manage_schemas.py validate
        $ manage_schemas.py validate --types-path my_types/
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    setup_schema_logger(LOGS_PATH / f"validate_{timestamp}", operation="validate")

    types_path = types_path or SCHEMA_TYPES_PATH
    schema_dirs = discover_schema_dirs(types_path)
    if not schema_dirs:
        typer.secho(f"No schema directories found in {types_path}", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)

    known_builders = {builder_key(builder_id) for builder_id in DEFAULT_CONTEXT_BUILDERS}
    error_count = 0
    warning_count = 0

    for schema_dir in schema_dirs:
        try:
            schema = load_section_schema(schema_dir)
            role_map = load_role_map(schema_dir, schema)
        except SchemaDefinitionError as e:
            typer.secho(f"  ✗ {schema_dir.name}: {e}", fg=typer.colors.RED)
            error_count += 1
            continue

        referenced = [schema.ai_context.section_summary_builder, schema.ai_context.item_summary_builder]
        for f in schema.fields:
            if f.ai_hints:
                referenced.extend(f.ai_hints.context_builders.values())
        missing = sorted({builder_key(b) for b in referenced if b} - known_builders)

        status = "" if role_map else " (no role map)"
        typer.secho(f"  ✓ {schema.id}{status}", fg=typer.colors.GREEN)
        for builder_id in missing:
            typer.secho(f"      unknown context builder '{builder_id}'", fg=typer.colors.YELLOW)
            warning_count += 1

    typer.echo(f"\n{len(schema_dirs) - error_count}/{len(schema_dirs)} valid, {warning_count} warning(s)")
    if error_count:
        raise typer.Exit(code=1)


@app.command("instructions")
def instructions_command(
    schema_id: Annotated[Optional[str], typer.Argument(help="Section type (default: all)")] = None,
    types_path: Annotated[
        Optional[Path], typer.Option("--types-path", "-t", help="Schema types directory")
    ] = None,
):
    """
    Print the item shape instructions used in generation prompts.

    Examples:\n

        $ manage_schemas.py instructions experience
    """
    registry = SchemaRegistry(types_path=types_path or SCHEMA_TYPES_PATH)
    if schema_id is None:
        typer.echo(AIDataBridge.build_schema_instructions(registry))
        return

    instruction = AIDataBridge.build_schema_instruction(registry, schema_id)
    if not instruction:
        typer.secho(f"Unknown section type '{schema_id}'", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.echo(instruction)


if __name__ == "__main__":
    app()
