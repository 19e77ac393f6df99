"""crm-activity CLI - serve the API and manage users and activity rows."""

import asyncio
import json
import uuid

import typer
from rich.console import Console
from rich.table import Table

from .config import settings

app = typer.Typer(
    name="crm-activity",
    help="CRM activity tracking service",
    no_args_is_help=True,
)
console = Console()


def _run(coro):
    return asyncio.run(coro)


async def _prepare():
    from .database import create_tables

    if "sqlite" in settings.database_url:
        await create_tables()


@app.command("serve")
def serve(
    port: int = typer.Option(8020, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Launch the activity API."""
    import uvicorn

    console.print(f"[bold cyan]Starting CRM activity service at http://{host}:{port}[/bold cyan]")
    uvicorn.run("crm_activity.app:app", host=host, port=port, reload=reload)


@app.command("add-user")
def add_user(
    username: str = typer.Argument(..., help="Login name"),
    email: str = typer.Argument(..., help="Email address"),
    first_name: str = typer.Option(None, "--first-name"),
    last_name: str = typer.Option(None, "--last-name"),
    admin: bool = typer.Option(False, "--admin"),
):
    """Create a user; its id goes in the user header of API calls."""
    from .database import async_session_factory
    from .services import user_svc

    async def _add():
        await _prepare()
        async with async_session_factory() as db:
            return await user_svc.create_user(
                db, username, email,
                first_name=first_name, last_name=last_name, admin=admin,
            )

    user = _run(_add())
    console.print(f"[green]Created {user.username}[/green] {user.id}")


@app.command("users")
def users():
    """List users."""
    from .database import async_session_factory
    from .services import user_svc

    async def _list():
        await _prepare()
        async with async_session_factory() as db:
            return await user_svc.list_users(db)

    table = Table(title="Users")
    table.add_column("ID", style="cyan")
    table.add_column("Username", style="white")
    table.add_column("Name")
    table.add_column("Admin", style="yellow")
    for user in _run(_list()):
        table.add_row(str(user.id), user.username, user.full_name, "yes" if user.admin else "")
    console.print(table)


@app.command("feed")
def feed(
    user_id: str = typer.Option(None, "--user", "-u", help="Only activities by this user id"),
    action: list[str] = typer.Option(None, "--action", "-a", help="Only these actions"),
    exclude: list[str] = typer.Option(None, "--exclude", "-x", help="Skip these actions"),
    limit: int = typer.Option(settings.activity_feed_limit, "--limit", "-n"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Print recent activities, newest first."""
    from .database import async_session_factory
    from .services import activity_svc
    from .services.activity_svc import ActivityFilter

    actor = uuid.UUID(user_id) if user_id else None
    flt = ActivityFilter(
        with_actions=tuple(action or ()),
        without_actions=tuple(exclude or ()),
        limit=limit,
    )

    async def _rows():
        await _prepare()
        async with async_session_factory() as db:
            return await activity_svc.export_rows(db, flt, actor_id=actor)

    rows = _run(_rows())
    if json_output:
        console.print_json(json.dumps(rows, default=str))
        return

    table = Table(title="Activities")
    table.add_column("When", style="dim")
    table.add_column("User", style="cyan")
    table.add_column("Action", style="yellow")
    table.add_column("Subject")
    table.add_column("Info", style="white")
    for row in rows:
        table.add_row(
            str(row["created_at"]), row["user"], row["action"],
            f"{row['subject_type']}:{row['subject_id']}", row["info"],
        )
    console.print(table)


@app.command("purge")
def purge(
    action: list[str] = typer.Option(None, "--action", "-a", help="Only these actions"),
    user_id: str = typer.Option(None, "--user", "-u", help="Only this user's activities"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete matching activity rows."""
    from .database import async_session_factory
    from .services import activity_svc
    from .services.activity_svc import ActivityFilter

    if not yes:
        typer.confirm("Delete matching activities?", abort=True)

    flt = ActivityFilter(with_actions=tuple(action or ()))
    actor = uuid.UUID(user_id) if user_id else None

    async def _purge():
        await _prepare()
        async with async_session_factory() as db:
            return await activity_svc.delete_all_matching(db, flt, actor_id=actor)

    removed = _run(_purge())
    console.print(f"[green]Removed {removed} activities[/green]")


if __name__ == "__main__":
    app()
