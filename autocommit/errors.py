"""Error kinds raised while setting up or running an auto-commit session.

Every error carries a one-line ``user_message`` that the host shows as-is.
"""

from __future__ import annotations

from typing import Optional


class AutoCommitError(Exception):
    """Base class for all auto-commit failures."""

    default_message = "Auto-commit failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def user_message(self) -> str:
        return str(self).splitlines()[0] if str(self) else self.default_message


class MissingCredential(AutoCommitError):
    default_message = "GitHub token is required!"


class InvalidRepoName(AutoCommitError):
    default_message = "Repository name is required!"


class WorkspaceError(AutoCommitError):
    default_message = "Please open a workspace folder first!"


class AuthenticationError(AutoCommitError):
    default_message = "GitHub authentication failed"


class RepositoryLookupError(AutoCommitError):
    """Repository lookup failed for a reason other than "not found"."""

    default_message = "Repository lookup failed"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RepositoryNotFoundError(RepositoryLookupError):
    default_message = "Repository not found"


class RepositoryCreateError(RepositoryLookupError):
    default_message = "Repository could not be created"


class GitCommandError(AutoCommitError):
    """A git subprocess exited with a non-zero status."""

    def __init__(self, command: str, returncode: int, stderr: str = "") -> None:
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else f"exit code {returncode}"
        super().__init__(f"git {command} failed: {detail}")
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class CloneError(AutoCommitError):
    default_message = "Repository clone failed"


class PeriodicTaskError(AutoCommitError):
    """A tick could not update, commit or push the working copy."""

    default_message = "Auto-update failed"
