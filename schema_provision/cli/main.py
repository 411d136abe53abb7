"""CLI entry point for schema provisioning."""

from typing import Annotated, Optional

import typer
from rich.console import Console

from schema_provision import __version__
from schema_provision.cli.commands.migrate import migrate_app

# Create main app
app = typer.Typer(
    name="schema-provision",
    help="Provision MongoDB collections and unique indexes",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register sub-commands
app.add_typer(migrate_app, name="migrate", help="Database migration commands")

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"schema-provision version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    mongodb_uri: Annotated[
        Optional[str],
        typer.Option("--mongodb-uri", "-u", envvar="MONGODB", help="MongoDB connection URI"),
    ] = None,
    common_db: Annotated[
        Optional[str],
        typer.Option("--common-db", envvar="COMMON_DATABASE", help="Common database name"),
    ] = None,
    order_db: Annotated[
        Optional[str],
        typer.Option(
            "--order-db", envvar="ORDER_SERVICE_DATABASE", help="Order service database name"
        ),
    ] = None,
) -> None:
    """
    Schema provisioning CLI.

    [bold]Quick Start:[/bold]

        # Show the operations without touching the database
        schema-provision migrate plan

        # Create collections and unique indexes
        schema-provision migrate up

        # Check that the schema is in place
        schema-provision migrate verify

    [bold]Environment Variables:[/bold]

        MONGODB                 - MongoDB connection URI
        COMMON_DATABASE         - Common database name (pp_common_db_stage)
        ORDER_SERVICE_DATABASE  - Order service database name (order_service_dev)
    """
    from schema_provision.core.config import settings

    # Override settings with CLI options
    if mongodb_uri:
        settings.mongodb = mongodb_uri
    if common_db:
        settings.common_database = common_db
    if order_db:
        settings.order_service_database = order_db


if __name__ == "__main__":
    app()
