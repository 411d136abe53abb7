"""Output formatting utilities for CLI."""

import json
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from schema_provision.migrations.models import StepReport
from schema_provision.migrations.verify import SchemaIssue

console = Console()
error_console = Console(stderr=True)


def format_outcome(outcome: str) -> Text:
    """Format an operation outcome with color."""
    colors = {
        "created": "green",
        "exists": "dim",
        "planned": "yellow",
    }
    color = colors.get(outcome.lower(), "white")
    return Text(outcome, style=color)


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    console.print_json(json.dumps(data, default=str, indent=2))


def print_error(message: str, details: dict | None = None) -> None:
    """Print an error message."""
    error_console.print(f"[red]Error:[/red] {message}")
    if details:
        for key, value in details.items():
            error_console.print(f"  [dim]{key}:[/dim] {value}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_report(report: StepReport) -> None:
    """Print the operations of a provisioning step as a table."""
    title = f"Migration {report.version}"
    if report.dry_run:
        title += " (dry run)"

    table = Table(title=title, show_header=True)
    table.add_column("Database", style="cyan")
    table.add_column("Kind", style="white")
    table.add_column("Collection", style="white")
    table.add_column("Field", style="white")
    table.add_column("Outcome")

    for result in report.results:
        table.add_row(
            result.database,
            result.kind.value,
            result.collection,
            result.field or "-",
            format_outcome(result.outcome.value),
        )

    console.print(table)


def print_issues(issues: list[SchemaIssue]) -> None:
    """Print schema verification issues as a table."""
    table = Table(title="Schema Issues", show_header=True)
    table.add_column("Database", style="cyan")
    table.add_column("Collection", style="white")
    table.add_column("Field", style="white")
    table.add_column("Issue", style="red")

    for issue in issues:
        table.add_row(issue.database, issue.collection, issue.field or "-", issue.kind.value)

    console.print(table)
