"""Command-line interface for AppCanvas.

This module provides the CLI commands for running and managing
the AppCanvas data service.
"""

import asyncio

import click

from appcanvas import __version__
from appcanvas.core.config import get_settings
from appcanvas.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="AppCanvas")
def cli() -> None:
    """AppCanvas - per-tenant data layer and calculation evaluator.

    Settings are loaded from APPCANVAS_* environment variables and .env.
    """


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--reload/--no-reload",
    default=None,
    help="Auto-reload on code changes (default: on in development)",
)
def serve(host: str | None, port: int | None, reload: bool | None) -> None:
    """Start the AppCanvas server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    if reload is None:
        reload = settings.is_development

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting AppCanvas server",
        host=bind_host,
        port=bind_port,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "appcanvas.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command("init-db")
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt and allow running in production",
)
def init_db(force: bool) -> None:
    """Create the metadata tables (databases, db_tables, db_columns)."""
    from appcanvas.infrastructure.persistence.database import close_database, init_database

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo("ERROR: Running in production mode. Pass --force to continue.", err=True)
        raise SystemExit(1)

    if not force:
        click.confirm(
            "This will create the metadata tables. Continue?",
            abort=True,
            default=False,
        )

    async def initialize():
        try:
            await init_database()
            click.echo("Database initialized successfully.")
        finally:
            await close_database()

    asyncio.run(initialize())


@cli.command()
@click.argument("owner_id")
@click.argument("name")
@click.option(
    "--timestamp",
    type=int,
    default=None,
    help="Unix time in milliseconds (default: now)",
)
def namespace(owner_id: str, name: str, timestamp: int | None) -> None:
    """Print the namespace id a database NAME of OWNER_ID would get."""
    from appcanvas.domain.services import NamespaceGenerator

    click.echo(NamespaceGenerator.generate(owner_id, name, timestamp))


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
