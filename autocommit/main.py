"""Host activation: wires the controller into a command registry.

Quick Start:
    $ autocommit run --workspace ~/code     # interactive console
    $ autocommit check-name my-repo_1       # validate a repository name

Environment:
    AUTOCOMMIT_ENV              # development/production (default: development)
    AUTOCOMMIT_LOG_LEVEL        # DEBUG/INFO/WARNING/ERROR (default: INFO)
    COMMIT_INTERVAL_SECONDS     # tick period (default: 60)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from autocommit.config import Settings, get_settings
from autocommit.host import Host
from autocommit.logging_config import get_logger
from autocommit.modules.commands.registry import CommandRegistry
from autocommit.modules.git_manager.auto_commit import AutoCommitController

logger = get_logger(__name__)

COMMAND_PREFIX = "github-auto-commit"
START_COMMAND = f"{COMMAND_PREFIX}.start"
STOP_COMMAND = f"{COMMAND_PREFIX}.stop"
STATUS_COMMAND = f"{COMMAND_PREFIX}.status"
COMMIT_NOW_COMMAND = f"{COMMAND_PREFIX}.commit-now"


@dataclass
class Extension:
    """An activated host integration; pass it back to ``deactivate``."""
    controller: AutoCommitController
    registry: CommandRegistry
    command_names: list[str] = field(default_factory=list)


def activate(
    host: Host,
    settings: Optional[Settings] = None,
    registry: Optional[CommandRegistry] = None,
    controller: Optional[AutoCommitController] = None,
) -> Extension:
    """Create the controller and register its commands with the host."""
    settings = settings or get_settings()
    registry = registry or CommandRegistry()
    controller = controller or AutoCommitController(host, settings=settings)

    async def _status() -> dict:
        return controller.status()

    commands = [
        (START_COMMAND, controller.start, "Prompt for a token and repository, clone it and start auto-committing"),
        (STOP_COMMAND, controller.stop, "Stop auto-committing"),
        (STATUS_COMMAND, _status, "Show the current auto-commit session"),
        (COMMIT_NOW_COMMAND, controller.commit_now, "Run one update/commit/push immediately"),
    ]
    for name, handler, description in commands:
        registry.register(name, handler, description=description)

    logger.info("extension_activated", commands=len(commands))
    return Extension(
        controller=controller,
        registry=registry,
        command_names=[name for name, _, _ in commands],
    )


async def deactivate(extension: Extension) -> None:
    """Unregister the commands and cancel any running session."""
    for name in extension.command_names:
        extension.registry.unregister(name)
    extension.command_names.clear()
    await extension.controller.shutdown()
    logger.info("extension_deactivated")
