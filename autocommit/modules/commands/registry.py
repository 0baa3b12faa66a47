"""Command Registry - the named commands a host can invoke.

The host surface is deliberately small: ``activate()`` registers the
auto-commit commands here and ``deactivate()`` removes them again.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from autocommit.logging_config import get_logger

logger = get_logger(__name__)

CommandHandler = Callable[[], Awaitable[Any]]


@dataclass
class Command:
    """Definition of an invocable command."""
    name: str
    description: str
    handler: CommandHandler


class UnknownCommandError(KeyError):
    """Raised when executing a command that is not registered."""


class CommandRegistry:
    """Registry of commands by name."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        description: str = "",
    ) -> Command:
        """Register a command; an existing command with the same name is replaced."""
        if name in self._commands:
            logger.warning("command_replaced", command=name)
        cmd = Command(name=name, description=description, handler=handler)
        self._commands[name] = cmd
        logger.debug("command_registered", command=name)
        return cmd

    def unregister(self, name: str) -> bool:
        """Remove a command. Returns False if it was not registered."""
        removed = self._commands.pop(name, None) is not None
        if removed:
            logger.debug("command_unregistered", command=name)
        return removed

    async def execute(self, name: str) -> Any:
        """Invoke a registered command's handler."""
        cmd = self._commands.get(name)
        if cmd is None:
            raise UnknownCommandError(name)
        logger.debug("command_executing", command=name)
        return await cmd.handler()

    def list_commands(self) -> list[Command]:
        """Registered commands in registration order."""
        return list(self._commands.values())
