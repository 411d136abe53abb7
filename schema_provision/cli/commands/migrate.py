"""
Migration CLI commands for provisioning the MongoDB schema.
"""

import asyncio
from typing import Annotated

import typer

from schema_provision.cli.output import (
    console,
    print_error,
    print_issues,
    print_json,
    print_report,
    print_success,
)
from schema_provision.core.database import db_manager
from schema_provision.core.exceptions import MigrationError
from schema_provision.migrations import products_orders
from schema_provision.migrations.models import StepReport
from schema_provision.migrations.verify import SchemaIssue, verify_schema

migrate_app = typer.Typer(name="migrate", help="Database migration commands")

JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Print machine-readable JSON"),
]


async def run_step(dry_run: bool = False) -> StepReport:
    """Run the provisioning step against the configured contexts."""
    try:
        if not dry_run:
            await db_manager.ping()
        return await products_orders.up(db_manager.contexts(), dry_run=dry_run)
    finally:
        await db_manager.close()


async def run_verify() -> list[SchemaIssue]:
    """Verify the provisioned schema against the configured contexts."""
    try:
        await db_manager.ping()
        return await verify_schema(db_manager.contexts())
    finally:
        await db_manager.close()


def _apply(dry_run: bool, as_json: bool) -> None:
    if dry_run and not as_json:
        console.print("[yellow]DRY RUN - No changes will be made[/yellow]")
        console.print()

    try:
        report = asyncio.run(run_step(dry_run=dry_run))
    except MigrationError as e:
        if as_json:
            print_json(e.to_dict())
        else:
            print_error(f"Migration failed: {e.message}", e.details)
        raise typer.Exit(1)

    if as_json:
        print_json(report.to_dict())
        return

    print_report(report)
    console.print()

    if dry_run:
        console.print(f"[yellow]{len(report.results)} operation(s) would be issued.[/yellow]")
    elif not report.created:
        print_success("Schema already up to date.")
    else:
        print_success(products_orders.COMPLETION_MESSAGE)


@migrate_app.command("up")
def up(
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Show what would be done without applying"),
    ] = False,
    as_json: JsonOption = False,
):
    """Create the collections and unique indexes."""
    _apply(dry_run, as_json)


@migrate_app.command("plan")
def plan(as_json: JsonOption = False):
    """Show the operations the migration would issue."""
    _apply(True, as_json)


@migrate_app.command("verify")
def verify(as_json: JsonOption = False):
    """Verify that collections and unique indexes are in place."""
    try:
        issues = asyncio.run(run_verify())
    except MigrationError as e:
        if as_json:
            print_json(e.to_dict())
        else:
            print_error(f"Verification failed: {e.message}", e.details)
        raise typer.Exit(1)

    if as_json:
        print_json({"valid": not issues, "issues": [i.to_dict() for i in issues]})
    elif not issues:
        print_success("Schema matches the expected collections and indexes.")
    else:
        console.print("[red]WARNING: Schema drift detected![/red]")
        console.print()
        print_issues(issues)

    if issues:
        raise typer.Exit(1)
