"""Git working-copy management and the auto-commit controller."""

from autocommit.modules.git_manager.auto_commit import AutoCommitController, utc_timestamp
from autocommit.modules.git_manager.models import ControllerState, Session
from autocommit.modules.git_manager.service import GitManagerService

__all__ = [
    "AutoCommitController",
    "ControllerState",
    "GitManagerService",
    "Session",
    "utc_timestamp",
]
