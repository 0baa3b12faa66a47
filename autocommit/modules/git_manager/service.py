"""Git working-copy manager: clone, stage, commit and push via the git CLI."""

from __future__ import annotations

import asyncio
import base64
from pathlib import Path
from typing import Iterable, Optional

from autocommit.config import get_settings
from autocommit.errors import GitCommandError
from autocommit.logging_config import get_logger

logger = get_logger(__name__)

REDACTED = "***"
AUTH_USERNAME = "x-access-token"


def auth_header(token: str) -> str:
    """HTTP Basic header git sends to the remote for ``token``."""
    raw = f"{AUTH_USERNAME}:{token}".encode("utf-8")
    return "Authorization: Basic " + base64.b64encode(raw).decode("ascii")


class GitManagerService:
    """Runs git commands against an explicit working-copy path.

    Every operation takes the repository path as an argument instead of
    relying on the process working directory, so one service instance can be
    shared by a controller and its tests.

    Credentials are passed per command as ``-c http.extraHeader=...`` and are
    never written to the repository's ``.git/config``.
    """

    def __init__(
        self,
        author_name: Optional[str] = None,
        author_email: Optional[str] = None,
        secrets: Iterable[str] = (),
    ) -> None:
        settings = get_settings()
        self._author_name = author_name if author_name is not None else settings.git_author_name
        self._author_email = author_email if author_email is not None else settings.git_author_email
        self._secrets = [s for s in secrets if s]

    def add_secret(self, secret: str) -> None:
        """Register a value that must never appear in logs or error messages."""
        if secret and secret not in self._secrets:
            self._secrets.append(secret)

    def redact(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, REDACTED)
        return text

    def _identity_args(self) -> list[str]:
        args: list[str] = []
        if self._author_name:
            args += ["-c", f"user.name={self._author_name}"]
        if self._author_email:
            args += ["-c", f"user.email={self._author_email}"]
        return args

    def _auth_args(self, token: Optional[str]) -> list[str]:
        if not token:
            return []
        header = auth_header(token)
        self.add_secret(header.rsplit(" ", 1)[-1])
        self.add_secret(token)
        return ["-c", f"http.extraHeader={header}"]

    async def _run_git(
        self,
        *args: str,
        cwd: Optional[Path] = None,
        check: bool = True,
        token: Optional[str] = None,
    ) -> tuple[int, str, str]:
        """Execute a git command and return (returncode, stdout, stderr)."""
        cmd = ["git", *self._identity_args(), *self._auth_args(token), *args]
        logger.debug("git_executing", command=self.redact(" ".join(args)))

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(cwd) if cwd else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()
        except OSError as exc:
            logger.error("git_execution_error", error=str(exc))
            return 1, "", str(exc)

        stdout_str = self.redact(stdout.decode("utf-8", errors="replace").strip())
        stderr_str = self.redact(stderr.decode("utf-8", errors="replace").strip())

        if check and proc.returncode != 0:
            logger.error(
                "git_command_failed",
                command=args[0] if args else "",
                stderr=stderr_str,
                returncode=proc.returncode,
            )

        return proc.returncode, stdout_str, stderr_str

    async def _checked(
        self, name: str, *args: str, cwd: Optional[Path] = None, token: Optional[str] = None,
    ) -> str:
        code, stdout, stderr = await self._run_git(*args, cwd=cwd, token=token)
        if code != 0:
            raise GitCommandError(name, code, stderr)
        return stdout

    async def is_repo(self, path: Path) -> bool:
        """Check whether ``path`` is inside a git repository."""
        code, _, _ = await self._run_git("rev-parse", "--git-dir", cwd=path, check=False)
        return code == 0

    async def has_changes(self, path: Path) -> bool:
        """Check if there are uncommitted changes."""
        code, stdout, _ = await self._run_git(
            "status", "--porcelain", "--untracked-files=all", cwd=path, check=False
        )
        return code == 0 and bool(stdout.strip())

    async def clone(self, remote_url: str, dest: Path, token: Optional[str] = None) -> None:
        """Clone ``remote_url`` into ``dest`` (which must not exist yet)."""
        await self._checked("clone", "clone", remote_url, str(dest), token=token)
        logger.info("git_clone_success", dest=str(dest))

    async def stage_all(self, path: Path) -> None:
        """Stage all changes including untracked files."""
        await self._checked("add", "add", "-A", cwd=path)
        logger.debug("git_all_staged")

    async def commit(self, path: Path, message: str) -> None:
        await self._checked("commit", "commit", "-m", message, cwd=path)
        logger.info("git_commit_success", message=message.split("\n")[0])

    async def push(self, path: Path, remote: str, branch: str, token: Optional[str] = None) -> None:
        await self._checked("push", "push", remote, branch, cwd=path, token=token)
        logger.info("git_push_success", remote=remote, branch=branch)
