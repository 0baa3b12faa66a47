"""Named commands a host can invoke."""

from autocommit.modules.commands.registry import Command, CommandRegistry, UnknownCommandError

__all__ = ["Command", "CommandRegistry", "UnknownCommandError"]
