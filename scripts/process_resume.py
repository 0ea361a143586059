#!/usr/bin/env python3
"""
Resume Document Processing CLI

Command-line interface for working with schema-driven resume documents
(.json or .yaml). Legacy documents are migrated to the current format on load.

Usage:
    # Render a document as markdown
    python process_resume.py render resume.json
    python process_resume.py render resume.yaml --output resume.md

    # Migrate a legacy document (writes the current format)
    python process_resume.py migrate old_resume.json new_resume.json

    # Ask the configured LLM for a review
    python process_resume.py review resume.json --job-title "Data Engineer"
"""

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from omegaconf import OmegaConf
from typing_extensions import Annotated

from scribe.contexts.ai.generation import GenerationError
from scribe.contexts.ai.logger import setup_ai_logger
from scribe.contexts.document.document_data_structure import (
    is_legacy_document,
    load_document,
    save_document,
)
from scribe.contexts.document.exceptions import DocumentFormatError
from scribe.contexts.document.logger import setup_document_logger
from scribe.contexts.rendering.logger import setup_rendering_logger
from scribe.contexts.rendering.markdown_formatter import format_resume_markdown
from scribe.contexts.rendering.transformer import transform_to_renderable_view
from scribe.contexts.schema.registry import SchemaRegistry
from scribe.utils.config import LOGS_PATH, config_summary, load_ai_config
from scribe.utils.timestamp import format_timestamp

load_dotenv()

app = typer.Typer(
    help="Render, migrate and review resume documents",
    add_completion=False,
)


def _session_log_dir(operation: str) -> Path:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return LOGS_PATH / f"{operation}_{timestamp}"


def _load_or_exit(path: Path):
    try:
        return load_document(path)
    except (FileNotFoundError, DocumentFormatError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command("render")
def render_command(
    document_path: Annotated[Path, typer.Argument(help="Resume document (.json, .yaml)")],
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Markdown output file (default: stdout)")
    ] = None,
):
    """Render a document as markdown."""
    setup_rendering_logger(_session_log_dir("render"), operation="render")

    document = _load_or_exit(document_path)
    registry = SchemaRegistry()
    view = transform_to_renderable_view(document, registry)
    markdown = format_resume_markdown(view, registry)

    if output is None:
        typer.echo(markdown)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(markdown, encoding="utf-8")
    typer.secho(f"✓ Wrote {len(view.sections)} section(s) to {output}", fg=typer.colors.GREEN)


@app.command("migrate")
def migrate_command(
    input_path: Annotated[Path, typer.Argument(help="Legacy or current document")],
    output_path: Annotated[Path, typer.Argument(help="Destination (.json, .yaml)")],
    dry_run: Annotated[bool, typer.Option("--dry-run", "-n", help="Report without writing")] = False,
):
    """
    Convert a document to the current schema-driven format.

    Documents already in the current format are rewritten unchanged apart from
    normalisation of missing metadata.
    """
    if not input_path.exists():
        typer.secho(f"Error: {input_path} not found", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    setup_document_logger(_session_log_dir("migrate"), operation="migrate")
    document = _load_or_exit(input_path)

    if input_path.suffix.lower() in (".yaml", ".yml"):
        raw = OmegaConf.to_container(OmegaConf.load(input_path), resolve=False)
    else:
        raw = json.loads(input_path.read_text(encoding="utf-8"))
    was_legacy = isinstance(raw, dict) and is_legacy_document(raw)

    label = "legacy" if was_legacy else "current"
    typer.echo(f"{input_path.name}: {label} format, {len(document.sections)} section(s)")

    if dry_run:
        typer.echo("Dry run: nothing written")
        return

    try:
        save_document(document, output_path)
    except DocumentFormatError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.secho(f"✓ Saved to {output_path}", fg=typer.colors.GREEN)


@app.command("review")
def review_command(
    document_path: Annotated[Path, typer.Argument(help="Resume document (.json, .yaml)")],
    job_title: Annotated[Optional[str], typer.Option("--job-title", help="Target job title")] = None,
    job_info: Annotated[Optional[str], typer.Option("--job-info", help="Target job description")] = None,
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help="AI config YAML")] = None,
    provider: Annotated[Optional[str], typer.Option("--provider", help="openai or anthropic")] = None,
):
    """Ask the configured LLM for an overall review of a document."""
    ai_config = load_ai_config(
        config,
        provider=provider,
        target_job_title=job_title,
        target_job_info=job_info,
    )
    log_file = setup_ai_logger(_session_log_dir("review"), operation="review")
    for key, value in config_summary(ai_config).items():
        typer.echo(f"  {key}: {value}", err=True)

    document = _load_or_exit(document_path)
    registry = SchemaRegistry(config=ai_config)

    try:
        review = asyncio.run(registry.review_document(document))
    except GenerationError as e:
        typer.secho(f"Review failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if review is None:
        typer.secho("No review returned", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)

    typer.secho(f"\nOverall: {review.overall_quality}", bold=True)
    typer.echo(f"Reviewed at {format_timestamp(review.reviewed_at)}\n")
    for index, suggestion in enumerate(review.suggestions, start=1):
        typer.echo(f"  {index}. {suggestion}")
    typer.echo(f"\nLog: {log_file}")


if __name__ == "__main__":
    app()
