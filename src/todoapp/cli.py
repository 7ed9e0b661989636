"""Command-line interface for the todo app."""

import asyncio
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from todoapp.app import Services, build_services
from todoapp.auth.models import Session
from todoapp.exceptions import AuthenticationError
from todoapp.logging_config import configure_logging, get_logger
from todoapp.screens import LoginScreen, ReferralScreen, RegisterScreen, Screen, TodoListScreen

logger = get_logger(__name__)

# Create Typer app
app = typer.Typer(
    name="todoapp",
    help="Todo list with accounts and referral codes",
    no_args_is_help=True,
)
todo_app = typer.Typer(help="Manage your todos", no_args_is_help=True)
referral_app = typer.Typer(help="Refer a friend", no_args_is_help=True)
app.add_typer(todo_app, name="todo")
app.add_typer(referral_app, name="referral")

# Rich console for pretty output
console = Console()

_services: Services | None = None


class ConsoleNotifier:
    """Prints screen alerts to the console."""

    STYLES = {"Success": "bold green", "Welcome": "bold green", "Info": "yellow"}

    def alert(self, title: str, message: str) -> None:
        style = self.STYLES.get(title, "bold red")
        console.print(f"[{style}]{title}:[/{style}] {message}")


notifier = ConsoleNotifier()


def get_services() -> Services:
    global _services
    if _services is None:
        _services = build_services()
    return _services


def _require_session(services: Services) -> Session:
    try:
        return services.auth.require_session()
    except AuthenticationError as e:
        console.print(f"[red]{e.message}[/red] Run [bold]todoapp login[/bold].")
        raise typer.Exit(1)


def _finish(screen: Screen) -> None:
    if screen.last_error is not None:
        raise typer.Exit(1)


def _print_todos(todos) -> None:
    if not todos:
        console.print("[yellow]No todos yet[/yellow]")
        return

    table = Table(title="Todo List")
    table.add_column("ID", style="cyan")
    table.add_column("Done", justify="center")
    table.add_column("Title", style="green")
    table.add_column("Description")
    table.add_column("Updated At")

    for todo in todos:
        table.add_row(
            todo.id,
            "✓" if todo.is_completed else "",
            todo.title,
            todo.description or "",
            todo.updated_at.strftime("%Y-%m-%d %H:%M") if todo.updated_at else "",
        )

    console.print(table)


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Configure logging before any command runs."""
    configure_logging(level="DEBUG" if verbose else None)


# ==================== ACCOUNT ====================


@app.command("register")
def register(
    email: Annotated[str, typer.Option("--email", "-e", prompt=True, help="Account email")],
    password: Annotated[str, typer.Option("--password", "-p", prompt=True, hide_input=True, help="Password")],
) -> None:
    """Create a new account."""
    screen = RegisterScreen(get_services().auth, notifier)
    screen.email = email
    screen.password = password
    asyncio.run(screen.handle_register())
    _finish(screen)


@app.command("login")
def login(
    email: Annotated[str, typer.Option("--email", "-e", prompt=True, help="Account email")],
    password: Annotated[str, typer.Option("--password", "-p", prompt=True, hide_input=True, help="Password")],
    referral_code: Annotated[str, typer.Option("--referral-code", "-r", help="Referral code (optional)")] = "",
) -> None:
    """Log in, optionally redeeming a referral code."""
    screen = LoginScreen(get_services().auth, notifier)
    screen.email = email
    screen.password = password
    screen.referral_code = referral_code

    result = asyncio.run(screen.handle_login())
    _finish(screen)
    if result is not None:
        console.print(f"[bold green]✓[/bold green] Logged in as {result.session.email or email}")


@app.command("logout")
def logout() -> None:
    """Forget the stored session."""
    get_services().auth.logout()
    console.print("[bold green]✓[/bold green] Logged out")


@app.command("whoami")
def whoami() -> None:
    """Show the signed-in user."""
    session = _require_session(get_services())
    console.print(f"[bold]User ID:[/bold] {session.user_id}")
    console.print(f"[bold]Email:[/bold] {session.email or 'N/A'}")


# ==================== TODOS ====================


def _todo_screen() -> TodoListScreen:
    services = get_services()
    return TodoListScreen(services.todos, _require_session(services), notifier)


async def _find_todo(screen: TodoListScreen, todo_id: str):
    await screen.load()
    for todo in screen.items:
        if todo.id == todo_id:
            return todo
    return None


@todo_app.command("list")
def list_todos() -> None:
    """List your todos, newest first."""
    screen = _todo_screen()
    asyncio.run(screen.load())
    _finish(screen)
    _print_todos(screen.items)


@todo_app.command("add")
def add_todo(
    title: Annotated[str, typer.Argument(help="Todo title")],
    description: Annotated[str, typer.Option("--description", "-d", help="Description")] = "",
) -> None:
    """Add a todo."""
    screen = _todo_screen()
    screen.title = title
    screen.description = description
    asyncio.run(screen.handle_add_todo())
    _finish(screen)
    _print_todos(screen.items)


@todo_app.command("update")
def update_todo(
    todo_id: Annotated[str, typer.Argument(help="Todo ID")],
    title: Annotated[str | None, typer.Option("--title", "-t", help="New title")] = None,
    description: Annotated[str | None, typer.Option("--description", "-d", help="New description")] = None,
    completed: Annotated[bool | None, typer.Option("--done/--not-done", help="Completion state")] = None,
) -> None:
    """Edit a todo; options left out keep their current value."""
    screen = _todo_screen()

    async def run() -> bool:
        todo = await _find_todo(screen, todo_id)
        if todo is None:
            return False
        screen.start_editing(todo)
        if title is not None:
            screen.editing.title = title
        if description is not None:
            screen.editing.description = description
        if completed is not None:
            screen.editing.is_completed = completed
        await screen.handle_update_todo()
        return True

    found = asyncio.run(run())
    _finish(screen)
    if not found:
        console.print(f"[red]Todo {todo_id} not found[/red]")
        raise typer.Exit(1)
    _print_todos(screen.items)


@todo_app.command("toggle")
def toggle_todo(
    todo_id: Annotated[str, typer.Argument(help="Todo ID")],
) -> None:
    """Flip the completion state of a todo."""
    screen = _todo_screen()

    async def run() -> bool:
        todo = await _find_todo(screen, todo_id)
        if todo is None:
            return False
        await screen.handle_toggle_todo(todo.id, todo.is_completed)
        return True

    found = asyncio.run(run())
    _finish(screen)
    if not found:
        console.print(f"[red]Todo {todo_id} not found[/red]")
        raise typer.Exit(1)
    _print_todos(screen.items)


@todo_app.command("delete")
def delete_todo(
    todo_id: Annotated[str, typer.Argument(help="Todo ID")],
) -> None:
    """Delete a todo."""
    screen = _todo_screen()
    asyncio.run(screen.handle_delete_todo(todo_id))
    _finish(screen)
    console.print(f"[bold green]✓[/bold green] Deleted {todo_id}")


# ==================== REFERRALS ====================


def _referral_screen() -> ReferralScreen:
    services = get_services()
    return ReferralScreen(services.referrals, _require_session(services), notifier)


def _print_referrals(referrals) -> None:
    if not referrals:
        console.print("[yellow]No referrals yet. Start sharing your code![/yellow]")
        return

    table = Table(title="Your Referrals")
    table.add_column("Code", style="cyan")
    table.add_column("Referred ID")

    for referral in referrals:
        table.add_row(referral.referral_code, referral.referred_id or "N/A")

    console.print(table)


@referral_app.command("show")
def show_referral() -> None:
    """Show your referral code and who redeemed it."""
    screen = _referral_screen()
    asyncio.run(screen.load())
    _finish(screen)
    if screen.show_referral_code:
        console.print(f"[bold]Your Referral Code:[/bold] {screen.referral_code}")
    else:
        console.print("[yellow]No referral code yet.[/yellow] Run [bold]todoapp referral generate[/bold].")
    _print_referrals(screen.referrals)


@referral_app.command("generate")
def generate_referral() -> None:
    """Generate your referral code (keeps an existing one)."""
    screen = _referral_screen()
    asyncio.run(screen.handle_generate_referral_code())
    _finish(screen)
    console.print(f"[bold]Your Referral Code:[/bold] {screen.referral_code}")


@referral_app.command("copy")
def copy_referral() -> None:
    """Copy your referral code to the clipboard."""
    screen = _referral_screen()

    async def run() -> None:
        await screen.load()
        await screen.handle_copy()

    asyncio.run(run())
    _finish(screen)


@referral_app.command("share")
def share_referral() -> None:
    """Share your referral code through WhatsApp."""
    screen = _referral_screen()

    async def run() -> None:
        await screen.load()
        await screen.handle_share()

    asyncio.run(run())
    _finish(screen)


if __name__ == "__main__":
    app()
