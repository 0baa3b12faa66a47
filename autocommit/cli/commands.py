"""github-auto-commit CLI."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(help="Keep a GitHub repository updated with periodic auto-commits", no_args_is_help=True)
console = Console()

CONSOLE_PROMPT = "autocommit> "

# Console verbs mapped onto registered command names.
VERBS = {
    "start": "start",
    "stop": "stop",
    "status": "status",
    "commit": "commit-now",
}


def _print_help(registry) -> None:
    from autocommit.main import COMMAND_PREFIX

    verbs = {f"{COMMAND_PREFIX}.{name}": verb for verb, name in VERBS.items()}
    console.print("Commands:")
    for cmd in registry.list_commands():
        verb = verbs.get(cmd.name)
        if verb:
            console.print(f"  {verb:<8} {cmd.description}")
    console.print("  help     show this help")
    console.print("  exit     stop and quit")


def _print_status(status: dict) -> None:
    table = Table(title="Auto-commit")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for key, value in status.items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)


async def _console_loop(workspace: Optional[Path], extension=None) -> None:
    """Read console verbs and run the matching registered commands until exit."""
    from autocommit.host import ConsoleHost
    from autocommit.main import COMMAND_PREFIX, activate, deactivate

    if extension is None:
        extension = activate(ConsoleHost(workspace=workspace, console=console))
    _print_help(extension.registry)
    try:
        while True:
            try:
                line = await asyncio.to_thread(console.input, CONSOLE_PROMPT)
            except EOFError:
                console.print("\nExiting.")
                return
            line = line.strip()
            if not line:
                continue
            if line in ("exit", "quit"):
                console.print("Exiting.")
                return
            if line == "help":
                _print_help(extension.registry)
                continue
            verb = VERBS.get(line)
            if verb is None:
                console.print("[yellow]invalid option[/yellow] (type 'help')")
                continue

            result = await extension.registry.execute(f"{COMMAND_PREFIX}.{verb}")
            if verb == "status":
                _print_status(result)
            elif verb == "stop" and result is False:
                console.print("Auto-commit is not running.")
            elif verb == "commit-now" and result.get("reason") == "not_running":
                console.print("Auto-commit is not running. Use 'start' first.")
    finally:
        await deactivate(extension)


@app.command()
def run(
    workspace: Path = typer.Option(
        None, "--workspace", "-w", help="Directory the repository is cloned into (default: WORKSPACE_ROOT or cwd)",
    ),
) -> None:
    """Open the interactive auto-commit console."""
    from autocommit.config import get_settings
    from autocommit.logging_config import setup_logging

    setup_logging()
    settings = get_settings()
    root = workspace or settings.default_workspace or Path.cwd()

    console.print("\n[bold cyan]github-auto-commit[/bold cyan]")
    console.print(f"  Workspace: [green]{root}[/green]")
    console.print(f"  Interval:  [green]{settings.commit_interval_seconds}s[/green]\n")

    try:
        asyncio.run(_console_loop(root))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")


@app.command("check-name")
def check_name(name: str = typer.Argument(..., help="Repository name to validate")) -> None:
    """Check whether a repository name is accepted."""
    from autocommit.modules.github.validators import repo_name_error

    problem = repo_name_error(name)
    if problem:
        console.print(f"[red]✗[/red] {problem}")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] '{name}' is a valid repository name")


@app.command()
def config() -> None:
    """Show effective settings."""
    from autocommit.config import get_settings

    settings = get_settings()
    table = Table(title="Settings")
    table.add_column("Name", style="cyan")
    table.add_column("Value", style="green")
    for key, value in settings.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
