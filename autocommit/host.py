"""Host integration: how the controller asks for input and reports progress."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Optional, Protocol

from rich.console import Console
from rich.prompt import Prompt

Validator = Callable[[str], Optional[str]]


class Host(Protocol):
    """What the controller needs from whatever application embeds it."""

    async def prompt_token(self) -> Optional[str]:
        """Ask for a personal access token; None or "" means cancelled."""
        ...

    async def prompt_repo_name(self, validate: Validator) -> Optional[str]:
        """Ask for a repository name, re-asking while ``validate`` returns a message."""
        ...

    def workspace_root(self) -> Optional[Path]:
        ...

    def show_info(self, message: str) -> None:
        ...

    def show_error(self, message: str) -> None:
        ...


class ConsoleHost:
    """Terminal host backed by rich prompts.

    Prompts block on stdin, so they run in a worker thread to keep the event
    loop (and any scheduled ticks) alive while the user types.
    """

    def __init__(self, workspace: Optional[Path] = None, console: Optional[Console] = None) -> None:
        self._workspace = workspace
        self._console = console or Console()

    def _ask(self, prompt: str, password: bool = False) -> Optional[str]:
        try:
            return Prompt.ask(prompt, password=password, console=self._console, default="", show_default=False)
        except (EOFError, KeyboardInterrupt):
            self._console.print()
            return None

    async def prompt_token(self) -> Optional[str]:
        value = await asyncio.to_thread(self._ask, "Enter your GitHub Personal Access Token", True)
        return value.strip() if value else value

    async def prompt_repo_name(self, validate: Validator) -> Optional[str]:
        while True:
            value = await asyncio.to_thread(self._ask, "Enter repository name")
            if not value:
                return value
            value = value.strip()
            problem = validate(value)
            if problem is None:
                return value
            self._console.print(f"[yellow]{problem}[/yellow]")

    def workspace_root(self) -> Optional[Path]:
        if self._workspace is None:
            return None
        path = Path(self._workspace).expanduser()
        return path if path.is_dir() else None

    def show_info(self, message: str) -> None:
        self._console.print(f"[green]✓[/green] {message}")

    def show_error(self, message: str) -> None:
        self._console.print(f"[red]✗[/red] {message}")
