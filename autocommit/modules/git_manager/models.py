"""In-memory state for an auto-commit session."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ControllerState(Enum):
    """Lifecycle of the auto-commit controller."""
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class Session:
    """Everything resolved during setup; discarded on stop or exit."""

    auth_token: str = field(repr=False)
    repo_name: str
    owner_login: str
    default_branch: str
    local_path: Path
    remote_url: str = field(repr=False)
    started_at: dt.datetime = field(default_factory=lambda: dt.datetime.now(dt.UTC))

    @property
    def full_name(self) -> str:
        return f"{self.owner_login}/{self.repo_name}"
