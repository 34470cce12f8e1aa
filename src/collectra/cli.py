"""Command-line interface for Collectra.

This module provides the CLI commands for running the API server and for
inspecting and advancing collection sessions from a terminal.
"""

import asyncio
from typing import Awaitable, Callable, NoReturn, TypeVar

import click

from collectra.core.config import get_settings
from collectra.core.logging import LoggingContext, configure_logging, get_logger, new_correlation_id
from collectra.domain.entities import Actor, CollectionSession, SessionStatus
from collectra.domain.errors import DomainError
from collectra.domain.services import CollectionSessionService

T = TypeVar("T")


def run_with_service(operation: Callable[[CollectionSessionService], Awaitable[T]], commit: bool = False) -> T:
    """Run an async operation against a database-backed session service.

    All log events of the run share one correlation ID. Domain errors are
    printed and turn into exit code 1.
    """
    from collectra.infrastructure.api.dependencies import build_session_service
    from collectra.infrastructure.persistence.database import get_db_manager, init_database

    settings = get_settings()

    async def run() -> T:
        db = get_db_manager()
        try:
            await init_database()
            async with db.session() as session:
                result = await operation(build_session_service(session, settings))
                if commit:
                    await session.commit()
                return result
        finally:
            await db.disconnect()

    with LoggingContext(correlation_id=new_correlation_id()):
        try:
            return asyncio.run(run())
        except DomainError as e:
            click.echo(f"Error: {e.message}", err=True)
            raise SystemExit(1)


def format_amount(value: float | None) -> str:
    return "-" if value is None else f"{value:,.1f} kg"


def format_session_line(session: CollectionSession) -> str:
    return (
        f"{session.session_number:<10} {session.status.value:<12} "
        f"{session.supplier_name or session.supplier_id:<24} {session.site_location:<24} "
        f"{format_amount(session.collection_data.actual_amount)}"
    )


@click.group()
@click.version_option(version="0.1.0", prog_name="Collectra")
def cli() -> None:
    """Collectra - Collection session management for recycling operations."""
    configure_logging(get_settings())


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option("--workers", type=int, default=None, help="Number of worker processes (overrides config)")
@click.option(
    "--reload/--no-reload",
    default=None,
    help="Enable auto-reload (default: on in development)",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool | None) -> None:
    """Start the Collectra API server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    if bind_workers > 1 and settings.database_url.startswith("sqlite"):
        click.echo(
            "Error: SQLite does not support multiple worker processes. "
            "Use PostgreSQL or run with --workers 1.",
            err=True,
        )
        raise SystemExit(1)

    if reload is None:
        reload = settings.is_development

    logger = get_logger(__name__)
    logger.info(
        "Starting Collectra server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "collectra.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
def init_db(force: bool) -> None:
    """Create the database tables."""
    from collectra.infrastructure.persistence.database import get_db_manager, init_database

    if not force:
        click.confirm("This will create all database tables. Continue?", abort=True, default=False)

    async def initialize() -> None:
        try:
            await init_database()
            click.echo("Database initialized successfully.")
        finally:
            await get_db_manager().disconnect()

    asyncio.run(initialize())


@cli.command(name="list")
@click.option(
    "--status",
    "status_filter",
    type=click.Choice([s.value for s in SessionStatus]),
    default=None,
    help="Only show sessions in this status",
)
def list_sessions(status_filter: str | None) -> None:
    """List collection sessions, oldest first."""
    sessions = run_with_service(lambda service: service.list_sessions())
    if status_filter:
        sessions = [s for s in sessions if s.status.value == status_filter]

    if not sessions:
        click.echo("No collection sessions found.")
        return

    click.echo(f"{'NUMBER':<10} {'STATUS':<12} {'SUPPLIER':<24} {'SITE':<24} ACTUAL")
    for session in sessions:
        click.echo(format_session_line(session))


@cli.command()
@click.argument("session_id")
def show(session_id: str) -> None:
    """Show one collection session."""
    session = run_with_service(lambda service: service.get_session(session_id))
    data = session.collection_data

    click.echo(f"{session.session_number} ({session.id})")
    click.echo(f"  Status:       {session.status.value}")
    click.echo(f"  Supplier:     {session.supplier_name or session.supplier_id}")
    click.echo(f"  Site:         {session.site_location}")
    click.echo(f"  Coordinator:  {session.coordinator_name or session.coordinator_id}")
    click.echo(f"  Planned:      {session.estimated_start_date.isoformat()} -> {session.estimated_end_date.isoformat()}")
    if session.actual_start_date:
        end = session.actual_end_date.isoformat() if session.actual_end_date else "..."
        click.echo(f"  Actual:       {session.actual_start_date.isoformat()} -> {end}")
    click.echo(f"  Estimated:    {format_amount(data.estimated_amount)}")
    click.echo(f"  Collected:    {format_amount(data.actual_amount)}")
    for name, quantity in data.paper_types.as_dict().items():
        click.echo(f"    {name:<8} {format_amount(quantity)}")
    click.echo(f"  Problems:     {len(session.open_problems)} open / {len(session.problems)} total")
    click.echo(f"  Comments:     {len(session.comments)}")
    click.echo(f"  Version:      {session.version}")


@cli.command()
@click.argument("session_id")
@click.argument("status", type=click.Choice([s.value for s in SessionStatus]))
@click.option("--actor-id", default="cli", show_default=True, help="ID recorded as the acting user")
@click.option("--actor-name", default=None, help="Name recorded as the acting user")
@click.option("--expected-version", type=int, default=None, help="Fail if the session version differs")
def transition(
    session_id: str,
    status: str,
    actor_id: str,
    actor_name: str | None,
    expected_version: int | None,
) -> None:
    """Move a session to STATUS."""
    actor = Actor(id=actor_id, name=actor_name or actor_id)
    with LoggingContext(session_id=session_id, actor_id=actor_id):
        session = run_with_service(
            lambda service: service.transition_session(
                session_id, status, actor, expected_version=expected_version
            ),
            commit=True,
        )
    click.echo(f"{session.session_number} is now {session.status.value} (version {session.version}).")
    if session.performance is not None:
        p = session.performance
        click.echo(
            f"Performance: efficiency {p.efficiency}%, quality {p.quality}%, punctuality {p.punctuality}%"
        )


@cli.command()
@click.argument("session_id")
def report(session_id: str) -> None:
    """Print the execution report of a session."""
    result = run_with_service(lambda service: service.session_report(session_id))

    click.echo(f"Session Report: {result.session_number}")
    click.echo("=" * 40)
    click.echo(f"Status:           {result.status.value}")
    click.echo(f"Time spent:       {'-' if result.total_time_spent is None else f'{result.total_time_spent} h'}")
    click.echo(f"Estimated amount: {format_amount(result.estimated_amount)}")
    click.echo(f"Actual amount:    {format_amount(result.actual_amount)}")
    click.echo(f"Paper-type total: {format_amount(result.paper_type_total)}")
    if result.amount_discrepancy is not None:
        click.echo(f"Discrepancy:      {result.amount_discrepancy:+,.1f} kg")
    click.echo(f"Problems:         {result.total_problems} total, {result.resolved_problems} resolved")
    click.echo(f"Comments:         {result.total_comments}")
    if result.performance is not None:
        p = result.performance
        click.echo(f"Efficiency:       {p.efficiency}%")
        click.echo(f"Quality:          {p.quality}%")
        click.echo(f"Punctuality:      {p.punctuality}%")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `collectra` command is run
    or when using `python -m collectra`.
    """
    cli()


if __name__ == "__main__":
    main()
