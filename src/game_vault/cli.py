"""CLI interface for GameVault."""

import asyncio
import shlex
from pathlib import Path

import pydantic
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from game_vault.api import AuthClient, GameVaultClient
from game_vault.auth import AuthSession
from game_vault.config import DEFAULT_DATA_DIR, ENV_VARS, Settings
from game_vault.errors import GameVaultAPIError, ValidationError
from game_vault.i18n import describe_error, get_text, status_label
from game_vault.logging_setup import setup_logging
from game_vault.models import (
    ALL,
    ALLOWED_LIMITS,
    DEFAULT_LIMIT,
    EntryId,
    GameEntry,
    Platform,
    Status,
    VaultState,
)
from game_vault.storage import Storage
from game_vault.vault import VaultSynchronizer

# Load .env file - try current directory, then the data directory
load_dotenv(Path.cwd() / ".env")
load_dotenv(DEFAULT_DATA_DIR / ".env")

app = typer.Typer(
    name="game-vault",
    help="Track your video-game library",
    no_args_is_help=True,
)
console = Console()

BROWSE_HELP = (
    "[bold]GameVault[/bold] - commands:\n"
    "/next, /prev, /page N, /limit N\n"
    "/status all|backlog|playing|finished, /platform all|PS5|PC|Switch|Xbox\n"
    "/search TEXT (empty to clear), /refresh\n"
    "/add, /edit ID field=value ..., /delete ID, /fav ID\n"
    "/login, /logout, quit"
)

EDITABLE_FIELDS = {
    "title": "title",
    "platform": "platform",
    "status": "status",
    "hours": "hours_played",
    "favorite": "favorite",
}


def _settings() -> Settings:
    try:
        return Settings.from_env()
    except pydantic.ValidationError as e:
        for error in e.errors():
            field = error["loc"][0] if error["loc"] else ""
            console.print(
                f"[bold red]Error:[/bold red] {ENV_VARS.get(field, field)}: {error['msg']}"
            )
        raise typer.Exit(1)


def _session(settings: Settings) -> AuthSession:
    return AuthSession(Storage(settings.data_dir))


def _t(settings: Settings, key: str, **kwargs) -> str:
    return get_text(key, settings.language, **kwargs)


def parse_assignments(args: list[str]) -> dict:
    """Parse ``field=value`` pairs from /edit into GameEntry field updates."""
    updates = {}
    for arg in args:
        field, sep, value = arg.partition("=")
        if not sep or field not in EDITABLE_FIELDS:
            raise typer.BadParameter(
                f"Expected field=value with field in {', '.join(EDITABLE_FIELDS)}: {arg!r}"
            )
        if field == "hours":
            value = int(value)
        elif field == "favorite":
            value = value.lower() in ("1", "true", "yes", "y", "oui")
        updates[EDITABLE_FIELDS[field]] = value
    return updates


def resolve_id(state: VaultState, raw: str) -> EntryId | None:
    """Map an id typed by the user to the id of an entry on the current page."""
    return next((g.id for g in state.games if str(g.id) == raw), None)


def render_state(state: VaultState, language: str) -> None:
    """Print the current page of the vault."""
    filters = state.filters
    subtitle = (
        f"{status_label(filters.status, language)} · "
        f"{get_text('platform.all', language) if filters.platform == ALL else filters.platform.value}"
    )
    if filters.q:
        subtitle += f" · \"{filters.q}\""

    if state.error:
        console.print(f"[bold red]{state.error}[/bold red]")

    if not state.games:
        console.print(f"[dim]{get_text('vault.empty', language)}[/dim]")
    else:
        table = Table(title=get_text("vault.title", language), caption=subtitle)
        table.add_column("ID", style="dim")
        table.add_column("Title", style="bold")
        table.add_column("Platform")
        table.add_column("Status")
        table.add_column("Hours", justify="right")
        table.add_column("★")
        for game in state.games:
            star = "★" if game.favorite else "☆"
            if game.id in state.pending:
                star += " …"
            table.add_row(
                str(game.id),
                game.title,
                game.platform.value,
                status_label(game.status, language),
                str(game.hours_played),
                star,
            )
        console.print(table)

    pagination = state.pagination
    console.print(
        get_text(
            "vault.page_summary",
            language,
            page=pagination.page,
            total_pages=pagination.total_pages,
            total=pagination.total,
        )
    )


def _alert(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")


def _prompt_entry() -> GameEntry:
    """Ask for the fields of a new entry."""
    title = Prompt.ask("Title")
    platform = Prompt.ask(
        "Platform", choices=[p.value for p in Platform], default=Platform.PS5.value
    )
    status = Prompt.ask("Status", choices=[s.value for s in Status], default=Status.BACKLOG.value)
    hours = IntPrompt.ask("Hours played", default=0)
    favorite = Confirm.ask("Favorite?", default=False)
    return GameEntry(
        title=title or "",
        platform=platform,
        status=status,
        hours_played=max(hours, 0),
        favorite=favorite,
    )


# =============================================================================
# Account commands
# =============================================================================


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show log output"),
):
    """Configure logging before any command runs."""
    setup_logging(_settings(), verbose=verbose)


@app.command()
def login(
    email: str = typer.Option(..., prompt=True),
    password: str = typer.Option(..., prompt=True, hide_input=True),
):
    """Log in and remember the session."""
    settings = _settings()

    async def run() -> str:
        async with AuthClient.from_settings(settings) as client:
            return await client.login(email, password)

    try:
        token = asyncio.run(run())
    except (ValidationError, GameVaultAPIError) as e:
        console.print(f"[bold red]Error:[/bold red] {describe_error(e, 'login', settings.language)}")
        raise typer.Exit(1)

    _session(settings).login(token)
    console.print(f"[bold green]{_t(settings, 'vault.logged_in')}[/bold green]")


@app.command()
def signup(
    name: str = typer.Option(..., prompt=True),
    email: str = typer.Option(..., prompt=True),
    password: str = typer.Option(..., prompt=True, hide_input=True),
    password_confirm: str = typer.Option(..., prompt="Confirm password", hide_input=True),
):
    """Create an account, then log in with it."""
    settings = _settings()

    async def run() -> str:
        async with AuthClient.from_settings(settings) as client:
            return await client.sign_up(name, email, password, password_confirm)

    try:
        token = asyncio.run(run())
    except (ValidationError, GameVaultAPIError) as e:
        console.print(f"[bold red]Error:[/bold red] {describe_error(e, 'signup', settings.language)}")
        raise typer.Exit(1)

    _session(settings).login(token)
    console.print(f"[bold green]{_t(settings, 'vault.logged_in')}[/bold green]")


@app.command()
def logout():
    """Forget the saved session."""
    settings = _settings()
    _session(settings).logout()
    console.print(_t(settings, "vault.logged_out"))


# =============================================================================
# Vault commands
# =============================================================================


@app.command("list")
def list_games(
    status: str = typer.Option(ALL, "--status", "-s", help="all, backlog, playing, finished"),
    platform: str = typer.Option(ALL, "--platform", "-p", help="all, PS5, PC, Switch, Xbox"),
    search: str = typer.Option("", "--search", "-q", help="Search in titles"),
    page: int = typer.Option(1, "--page", min=1),
    limit: int = typer.Option(DEFAULT_LIMIT, "--limit", "-l", help="4, 8 or 12"),
):
    """Show one page of your vault."""
    settings = _settings()
    session = _session(settings)

    async def run() -> VaultState:
        async with GameVaultClient.from_settings(settings) as client:
            synchronizer = VaultSynchronizer(
                client, session, limit=limit, alert=_alert, language=settings.language
            )
            try:
                await synchronizer.sync(status=status, platform=platform, q=search, page=page)
            finally:
                synchronizer.close()
            return synchronizer.state

    try:
        state = asyncio.run(run())
    except ValidationError as e:
        console.print(f"[bold red]Error:[/bold red] {describe_error(e, 'load', settings.language)}")
        raise typer.Exit(1)

    if not session.is_authenticated:
        console.print(f"[yellow]{_t(settings, 'vault.anonymous')}[/yellow]")
    render_state(state, settings.language)
    if state.error:
        raise typer.Exit(1)


@app.command()
def add(
    title: str = typer.Argument(..., help="Game title"),
    platform: Platform = typer.Option(Platform.PS5, "--platform", "-p"),
    status: Status = typer.Option(Status.BACKLOG, "--status", "-s"),
    hours: int = typer.Option(0, "--hours", min=0),
    favorite: bool = typer.Option(False, "--favorite", "-f"),
):
    """Add a game to your vault."""
    settings = _settings()
    session = _session(settings)
    entry = GameEntry(
        title=title, platform=platform, status=status, hours_played=hours, favorite=favorite
    )

    async def run() -> tuple[bool, VaultState]:
        async with GameVaultClient.from_settings(settings) as client:
            synchronizer = VaultSynchronizer(
                client, session, alert=_alert, language=settings.language
            )
            try:
                saved = await synchronizer.save(entry)
            finally:
                synchronizer.close()
            return saved, synchronizer.state

    try:
        saved, state = asyncio.run(run())
    except ValidationError as e:
        console.print(f"[bold red]Error:[/bold red] {describe_error(e, 'save', settings.language)}")
        raise typer.Exit(1)

    if not saved:
        raise typer.Exit(1)
    console.print(f"[bold green]{_t(settings, 'vault.saved')}[/bold green]")
    render_state(state, settings.language)


# =============================================================================
# Interactive browsing
# =============================================================================


async def _handle(
    command: str,
    args: list[str],
    synchronizer: VaultSynchronizer,
    session: AuthSession,
    settings: Settings,
) -> None:
    """Run one browse command against the synchronizer."""
    state = synchronizer.state
    language = settings.language

    if command == "/next":
        await synchronizer.next_page()
    elif command == "/prev":
        await synchronizer.previous_page()
    elif command == "/page":
        await synchronizer.set_page(int(args[0]))
    elif command == "/limit":
        await synchronizer.set_limit(int(args[0]))
    elif command == "/status":
        await synchronizer.set_status_filter(args[0] if args else ALL)
    elif command == "/platform":
        await synchronizer.set_platform_filter(args[0] if args else ALL)
    elif command == "/search":
        await synchronizer.set_search(" ".join(args))
    elif command == "/refresh":
        await synchronizer.sync()
    elif command == "/add":
        if await synchronizer.save(_prompt_entry()):
            console.print(f"[green]{get_text('vault.saved', language)}[/green]")
    elif command in ("/edit", "/delete", "/fav"):
        if not args:
            raise typer.BadParameter(f"{command} needs an entry id")
        entry_id = resolve_id(state, args[0])
        if entry_id is None:
            console.print(f"[yellow]{get_text('vault.unknown_entry', language, id=args[0])}[/yellow]")
            return
        entry = state.find(entry_id)
        if command == "/edit":
            edited = GameEntry.model_validate(
                {**entry.model_dump(), **parse_assignments(args[1:])}
            )
            if await synchronizer.save(edited):
                console.print(f"[green]{get_text('vault.saved', language)}[/green]")
        elif command == "/delete":
            confirmed = Confirm.ask(get_text("vault.confirm_delete", language, title=entry.title))
            if await synchronizer.delete(entry_id, confirmed=confirmed):
                console.print(f"[green]{get_text('vault.deleted', language)}[/green]")
        else:
            await synchronizer.toggle_favorite(entry_id)
    elif command == "/login":
        email = Prompt.ask("Email")
        password = Prompt.ask("Password", password=True)
        async with AuthClient.from_settings(settings) as auth_client:
            token = await auth_client.login(email, password)
        session.login(token)
        await synchronizer.wait_idle()
        console.print(f"[green]{get_text('vault.logged_in', language)}[/green]")
    elif command == "/logout":
        session.logout()
        await synchronizer.wait_idle()
        console.print(get_text("vault.logged_out", language))
    else:
        console.print(BROWSE_HELP)
        return

    render_state(synchronizer.state, language)


async def _browse(settings: Settings, limit: int) -> None:
    session = _session(settings)
    async with GameVaultClient.from_settings(settings) as client:
        synchronizer = VaultSynchronizer(
            client, session, limit=limit, alert=_alert, language=settings.language
        )
        async with synchronizer:
            console.print(Panel(BROWSE_HELP, style="blue"))
            if not session.is_authenticated:
                console.print(f"[yellow]{get_text('vault.anonymous', settings.language)}[/yellow]")
            render_state(synchronizer.state, settings.language)

            while True:
                try:
                    line = Prompt.ask("[bold green]vault[/bold green]")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                if not line.strip():
                    continue
                if line.strip().lower() in ("quit", "exit"):
                    console.print("[dim]Goodbye! Happy gaming![/dim]")
                    break

                try:
                    command, *args = shlex.split(line)
                    await _handle(command.lower(), args, synchronizer, session, settings)
                except ValidationError as e:
                    _alert(describe_error(e, "save", settings.language))
                except GameVaultAPIError as e:
                    _alert(describe_error(e, "login", settings.language))
                except (ValueError, IndexError, typer.BadParameter) as e:
                    console.print(f"[yellow]{e}[/yellow]")


@app.command()
def browse(
    limit: int = typer.Option(DEFAULT_LIMIT, "--limit", "-l", help="4, 8 or 12"),
):
    """Browse and edit your vault interactively."""
    settings = _settings()
    if limit not in ALLOWED_LIMITS:
        console.print(f"[bold red]Error:[/bold red] --limit must be one of {ALLOWED_LIMITS}")
        raise typer.Exit(1)
    asyncio.run(_browse(settings, limit))


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
