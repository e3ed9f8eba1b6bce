"""
CLI Interface
=============
Command-line interface for the question bank parser.

Usage:
    python -m qbank_parser parse <path> [options]
    python -m qbank_parser classify <path>
    python -m qbank_parser serve [options]
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .classifier import classify_line
from .engine import TEXT_SUFFIXES, ParserConfig, ParserEngine
from .extractor import TextExtractor
from .models import LineRole
from .state_machine import ParserState, split_lines

console = Console()

ROLE_STYLES = {
    LineRole.CATEGORY_HEADER: "magenta",
    LineRole.QUESTION_START: "bold cyan",
    LineRole.ANSWER_OPTION: "white",
    LineRole.CORRECT_ANSWER_MARKER: "green",
    LineRole.NONE: "dim",
}


@click.group()
@click.version_option(version=__version__, prog_name="qbank-parser")
def cli():
    """Question Bank Parser — medical quiz question extractor."""
    pass


@cli.command()
@click.argument("path", type=click.Path(exists=True))
@click.option(
    "--output", "-o",
    default="output",
    help="Output directory for parsed data",
)
@click.option(
    "--no-save",
    is_flag=True,
    default=False,
    help="Do not write the JSON result to the output directory",
)
@click.option(
    "--no-ocr",
    is_flag=True,
    default=False,
    help="Disable OCR when a PDF has no text layer",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.option(
    "--log-file",
    default=None,
    help="Path to log file",
)
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output only JSON result to stdout (for programmatic use)",
)
def parse(
    path: str,
    output: str,
    no_save: bool,
    no_ocr: bool,
    log_level: str,
    log_file: str,
    json_output: bool,
):
    """Parse a PDF or text file into quiz questions."""

    if json_output:
        # Suppress console output for JSON mode
        log_level = "ERROR"

    config = ParserConfig(
        output_dir=output,
        save_output=not no_save,
        ocr_fallback=not no_ocr,
        log_level=log_level,
        log_file=log_file,
    )

    if not json_output:
        console.print()
        console.print(
            Panel.fit(
                f"[bold cyan]Question Bank Parser v{__version__}[/]\n"
                f"[dim]Parsing: {os.path.basename(path)}[/]",
                border_style="cyan",
            )
        )
        console.print()

    try:
        engine = ParserEngine(config)
        result = engine.parse_file(path)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)
    except RuntimeError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(
            result.model_dump(mode="json", by_alias=True),
            indent=2,
            ensure_ascii=False,
        ))
        return

    _display_questions(result.questions)
    _display_validation_table(result.validation.model_dump())
    console.print(
        f"[dim]Parser v{result.parser_version} | "
        f"Confidence: {result.confidence} | "
        f"Time: {result.processing_time_ms}ms[/]"
    )
    console.print()


@cli.command()
@click.argument("path", type=click.Path(exists=True))
def classify(path: str):
    """Show the role assigned to every line of a file."""

    if Path(path).suffix.lower() in TEXT_SUFFIXES:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    else:
        try:
            text = TextExtractor().extract(path).text
        except RuntimeError as e:
            console.print(f"[red]Error:[/] {e}")
            sys.exit(1)

    table = Table(title="Line Classification", border_style="cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Role", style="bold")
    table.add_column("Line")

    # Mirrors the accumulator's in-question context for "A."–"D." lines
    state = ParserState.SEEKING_QUESTION
    for i, line in enumerate(split_lines(text), start=1):
        role = classify_line(
            line, in_question=state == ParserState.ACCUMULATING_QUESTION
        )
        if role == LineRole.QUESTION_START:
            state = ParserState.ACCUMULATING_QUESTION
        style = ROLE_STYLES[role]
        table.add_row(str(i), f"[{style}]{role.value}[/]", escape(line))

    console.print(table)


@cli.command()
@click.option("--host", default="0.0.0.0", help="Server host")
@click.option("--port", default=5000, type=int, help="Server port")
@click.option("--debug", is_flag=True, default=False, help="Debug mode")
def serve(host: str, port: int, debug: bool):
    """Start the HTTP service."""
    from .server import run_server

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Question Bank Parser Service[/]\n"
            f"[dim]Starting on {host}:{port}[/]",
            border_style="cyan",
        )
    )
    console.print()

    run_server(host=host, port=port, debug=debug)


# ─── Display Helpers ──────────────────────────────────────────────────────────


def _display_questions(questions):
    """Display parsed questions in a formatted table."""
    table = Table(title="Parsed Questions", border_style="cyan")
    table.add_column("ID", style="bold")
    table.add_column("Category")
    table.add_column("Type")
    table.add_column("Question")
    table.add_column("Options", justify="right")
    table.add_column("Correct Answer")

    for q in questions:
        table.add_row(
            q.id,
            q.category,
            q.type.value,
            escape(q.text),
            str(len(q.options)),
            escape(q.correct_answer),
        )

    console.print(table)
    console.print()


def _display_validation_table(validation: dict):
    """Display validation report as a rich table."""
    table = Table(title="Validation Report", border_style="green")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Status", justify="center")

    def status_icon(count, threshold=0):
        if count <= threshold:
            return "[green]✓[/]"
        return "[red]✗[/]"

    total = validation.get("total_questions", 0)
    rate = validation.get("structured_rate", 0)

    table.add_row(
        "Total Questions",
        str(total),
        "[green]✓[/]" if total > 0 else "[red]✗[/]",
    )
    table.add_row(
        "Structured Rate",
        f"{rate}%",
        "[green]✓[/]" if rate >= 90 else "[yellow]⚠[/]",
    )

    missing = validation.get("questions_missing_answer", [])
    table.add_row(
        "Questions Missing Answer",
        str(len(missing)),
        status_icon(len(missing)),
    )

    placeholders = validation.get("questions_with_placeholder_options", [])
    table.add_row(
        "Placeholder Options",
        str(len(placeholders)),
        status_icon(len(placeholders)),
    )

    fallback = validation.get("fallback_questions", [])
    table.add_row(
        "Fallback Questions",
        str(len(fallback)),
        status_icon(len(fallback)),
    )

    console.print(table)
    console.print()

    if validation.get("low_confidence"):
        console.print(
            "[yellow]⚠ No structure detected — output needs human review[/]"
        )
        console.print()

    breakdown = validation.get("category_breakdown", {})
    if breakdown:
        category_table = Table(
            title="Category Breakdown",
            border_style="yellow",
        )
        category_table.add_column("Category", style="bold")
        category_table.add_column("Count", justify="right")

        for category, count in sorted(breakdown.items()):
            category_table.add_row(category, str(count))

        console.print(category_table)
        console.print()


# ─── Entry point (for python -m qbank_parser.cli) ─────────────────────────────


if __name__ == "__main__":
    cli()
