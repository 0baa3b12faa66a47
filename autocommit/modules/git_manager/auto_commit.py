"""Git auto-commit controller - keeps a GitHub repository updated on a timer.

``start()`` runs a one-time setup pipeline (prompt, authenticate, ensure the
repository exists, clone) and then registers a repeating tick that appends a
block to README.md, commits and pushes. ``stop()`` cancels the tick.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import os
import shutil
import stat
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from autocommit.config import Settings, get_settings
from autocommit.errors import (
    AutoCommitError,
    CloneError,
    GitCommandError,
    InvalidRepoName,
    MissingCredential,
    PeriodicTaskError,
    RepositoryNotFoundError,
    WorkspaceError,
)
from autocommit.host import Host
from autocommit.logging_config import get_logger
from autocommit.modules.git_manager.models import ControllerState, Session
from autocommit.modules.git_manager.service import GitManagerService
from autocommit.modules.github.models import GitHubUser, RepositoryInfo
from autocommit.modules.github.service import GitHubService
from autocommit.modules.github.validators import repo_name_error, validate_repo_name
from autocommit.modules.scheduler.service import SchedulerService

logger = get_logger(__name__)

README_BLOCK = "# {repo_name}\nLast updated: {timestamp}\n\nThis repository is automatically updated every minute."
COMMIT_MESSAGE = "Auto-update: {timestamp}"

RemoteFactory = Callable[[str], GitHubService]


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2024-05-01T12:00:00.000Z."""
    return dt.datetime.now(dt.UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class _SetupContext:
    """Values accumulated by the setup pipeline.

    Fields without a default are set by the step that resolves them and read
    only by later steps.
    """
    token: str = ""
    repo_name: str = ""
    remote_url: str = ""
    workspace: Path = field(init=False)
    remote: GitHubService = field(init=False)
    user: GitHubUser = field(init=False)
    repository: RepositoryInfo = field(init=False)
    local_path: Path = field(init=False)


SetupStep = Callable[[_SetupContext], Awaitable[None]]


def _clear_readonly(func, path, exc) -> None:
    """rmtree error handler: make ``path`` and its parent writable, then retry."""
    if isinstance(exc, tuple):
        exc = exc[1]
    if not isinstance(exc, PermissionError):
        raise exc
    for target in (os.path.dirname(path), path):
        os.chmod(target, os.stat(target).st_mode | stat.S_IWRITE)
    func(path)


def _force_rmtree(path: Path) -> None:
    # Packed git objects are read-only on some platforms.
    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_clear_readonly)
    else:
        shutil.rmtree(path, onerror=_clear_readonly)


class AutoCommitController:
    """Owns one auto-commit session, its timer handle and its working copy.

    At most one session and one scheduled job exist at a time: ``start()``
    refuses to run while a session is active or while another setup is in
    progress, and ``stop()`` is a no-op when idle.
    """

    def __init__(
        self,
        host: Host,
        settings: Optional[Settings] = None,
        remote_factory: Optional[RemoteFactory] = None,
        git: Optional[GitManagerService] = None,
        scheduler: Optional[SchedulerService] = None,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        self._host = host
        self._settings = settings or get_settings()
        self._remote_factory = remote_factory or (lambda token: GitHubService(token))
        self._git = git or GitManagerService()
        self._scheduler = scheduler or SchedulerService()
        self._clock = clock

        self._state = ControllerState.IDLE
        self._session: Optional[Session] = None
        self._job_id: Optional[str] = None
        self._setup_lock = asyncio.Lock()
        self._tick_lock = asyncio.Lock()
        self._previous_cwd: Optional[str] = None

        self._tick_count = 0
        self._last_tick_at: Optional[str] = None
        self._last_error: Optional[str] = None

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is ControllerState.RUNNING

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def job_id(self) -> Optional[str]:
        return self._job_id

    # ── start / stop ─────────────────────────────────────────────────

    async def start(self) -> bool:
        """Run the setup pipeline and begin ticking.

        Returns True when the controller ended up RUNNING. Every failure is
        logged and reported to the host; the controller then stays IDLE.
        """
        if self.is_running or self._setup_lock.locked():
            logger.warning("auto_commit_already_running")
            self._host.show_info("Auto-commit is already running.")
            return False

        async with self._setup_lock:
            ctx = _SetupContext()
            for step in self._setup_steps():
                try:
                    await step(ctx)
                except AutoCommitError as exc:
                    logger.error("auto_commit_start_failed", step=step.__name__.lstrip("_"), error=exc.user_message)
                    self._host.show_error(exc.user_message)
                    return False
                except Exception as exc:
                    logger.error("auto_commit_start_error", step=step.__name__.lstrip("_"), error=str(exc))
                    self._host.show_error(f"Error: {exc}")
                    return False

        self._host.show_info("Auto-commit started successfully!")
        return True

    def _setup_steps(self) -> list[SetupStep]:
        return [
            self._collect_token,
            self._collect_repo_name,
            self._resolve_workspace,
            self._authenticate,
            self._ensure_repository,
            self._fetch_default_branch,
            self._prepare_local_path,
            self._clone,
            self._enter_working_copy,
            self._begin_ticking,
        ]

    async def stop(self) -> bool:
        """Cancel the repeating action. Safe to call when idle."""
        if not self.is_running:
            return False

        if self._job_id:
            self._scheduler.cancel_task(self._job_id)
        self._job_id = None
        self._restore_working_directory()
        session, self._session = self._session, None
        self._state = ControllerState.IDLE

        logger.info("auto_commit_stopped", repo=session.full_name if session else None)
        self._host.show_info("Auto-commit stopped!")
        return True

    async def shutdown(self) -> None:
        """Stop the session and the scheduler; used when the host deactivates."""
        await self.stop()
        await self._scheduler.stop()

    # ── setup pipeline ───────────────────────────────────────────────

    async def _collect_token(self, ctx: _SetupContext) -> None:
        token = await self._host.prompt_token()
        if not token:
            raise MissingCredential()
        ctx.token = token
        self._git.add_secret(token)
        logger.info("auto_commit_token_received")

    async def _collect_repo_name(self, ctx: _SetupContext) -> None:
        name = await self._host.prompt_repo_name(repo_name_error)
        if not name:
            raise InvalidRepoName()
        if not validate_repo_name(name):
            raise InvalidRepoName(repo_name_error(name))
        ctx.repo_name = name
        logger.info("auto_commit_repo_name_received", repo=name)

    async def _resolve_workspace(self, ctx: _SetupContext) -> None:
        workspace = self._host.workspace_root()
        if workspace is None:
            raise WorkspaceError()
        ctx.workspace = Path(workspace)
        logger.info("auto_commit_workspace", path=str(ctx.workspace))

    async def _authenticate(self, ctx: _SetupContext) -> None:
        ctx.remote = self._remote_factory(ctx.token)
        ctx.user = await ctx.remote.get_authenticated_user()

    async def _ensure_repository(self, ctx: _SetupContext) -> None:
        try:
            repo = await ctx.remote.get_repository(ctx.user.login, ctx.repo_name)
            logger.info("auto_commit_repo_exists", repo=repo.full_name)
        except RepositoryNotFoundError:
            logger.info("auto_commit_creating_repo", repo=ctx.repo_name)
            await ctx.remote.create_repository(ctx.repo_name, auto_init=True)

    async def _fetch_default_branch(self, ctx: _SetupContext) -> None:
        ctx.repository = await ctx.remote.get_repository(ctx.user.login, ctx.repo_name)
        logger.info("auto_commit_default_branch", branch=ctx.repository.default_branch)

    async def _prepare_local_path(self, ctx: _SetupContext) -> None:
        path = ctx.workspace / ctx.repo_name
        try:
            if path.is_dir() and not path.is_symlink():
                _force_rmtree(path)
                logger.warning("auto_commit_local_dir_removed", path=str(path))
            elif path.exists() or path.is_symlink():
                path.unlink()
                logger.warning("auto_commit_local_path_removed", path=str(path))
        except OSError as exc:
            raise CloneError(f"Could not clear {path}: {exc}") from exc
        ctx.local_path = path

    async def _clone(self, ctx: _SetupContext) -> None:
        ctx.remote_url = ctx.remote.clone_url(ctx.user.login, ctx.repo_name)
        logger.info("auto_commit_cloning", url=ctx.remote_url)
        try:
            await self._git.clone(ctx.remote_url, ctx.local_path, token=ctx.token)
        except GitCommandError as exc:
            raise CloneError(f"Clone failed: {exc}") from exc

    async def _enter_working_copy(self, ctx: _SetupContext) -> None:
        if not self._settings.change_working_directory:
            return
        self._previous_cwd = os.getcwd()
        os.chdir(ctx.local_path)
        logger.info("auto_commit_chdir", path=str(ctx.local_path))

    async def _begin_ticking(self, ctx: _SetupContext) -> None:
        session = Session(
            auth_token=ctx.token,
            repo_name=ctx.repo_name,
            owner_login=ctx.user.login,
            default_branch=ctx.repository.default_branch,
            local_path=ctx.local_path,
            remote_url=ctx.remote_url,
        )
        self._tick_count = 0
        self._last_tick_at = None
        self._last_error = None

        await self._scheduler.start()
        self._job_id = self._scheduler.schedule_interval(
            f"auto_commit:{session.full_name}",
            self._tick,
            seconds=self._settings.commit_interval_seconds,
        )
        self._session = session
        self._state = ControllerState.RUNNING
        logger.info(
            "auto_commit_started",
            repo=session.full_name,
            branch=session.default_branch,
            interval=self._settings.commit_interval_seconds,
        )

    def _restore_working_directory(self) -> None:
        if self._previous_cwd is None:
            return
        try:
            os.chdir(self._previous_cwd)
        except OSError as exc:
            logger.warning("auto_commit_chdir_restore_failed", error=str(exc))
        self._previous_cwd = None

    # ── repeating action ─────────────────────────────────────────────

    def _append_readme(self, session: Session, timestamp: str) -> Path:
        readme = session.local_path / self._settings.readme_filename
        with open(readme, "a", encoding="utf-8") as fh:
            fh.write(README_BLOCK.format(repo_name=session.repo_name, timestamp=timestamp))
        return readme

    async def _tick(self) -> dict[str, Any]:
        """Append, commit and push once. Never raises."""
        session = self._session
        if session is None:
            return {"committed": False, "pushed": False, "reason": "not_running"}
        if self._tick_lock.locked():
            logger.warning("auto_commit_tick_skipped_busy")
            return {"committed": False, "pushed": False, "reason": "busy"}

        async with self._tick_lock:
            timestamp = self._clock()
            result: dict[str, Any] = {"timestamp": timestamp, "committed": False, "pushed": False}
            try:
                readme = self._append_readme(session, timestamp)
                logger.debug("auto_commit_readme_updated", path=str(readme))
                await self._git.stage_all(session.local_path)
                await self._git.commit(session.local_path, COMMIT_MESSAGE.format(timestamp=timestamp))
                result["committed"] = True
                await self._git.push(
                    session.local_path,
                    self._settings.git_remote_name,
                    session.default_branch,
                    token=session.auth_token,
                )
                result["pushed"] = True
            except Exception as exc:
                error = PeriodicTaskError(str(exc))
                self._last_error = error.user_message
                result["error"] = error.user_message
                logger.error("auto_commit_tick_failed", repo=session.full_name, error=error.user_message)
                self._host.show_error(f"Error updating repository: {error.user_message}")
            else:
                self._last_error = None
                logger.info("auto_commit_pushed", repo=session.full_name, timestamp=timestamp)
                self._host.show_info("Successfully pushed changes!")
            finally:
                self._tick_count += 1
                self._last_tick_at = timestamp

        return result

    async def commit_now(self) -> dict[str, Any]:
        """Run one tick immediately, outside the timer."""
        if not self.is_running:
            return {"committed": False, "pushed": False, "reason": "not_running"}
        return await self._tick()

    def status(self) -> dict[str, Any]:
        """Snapshot of the controller; never includes credentials."""
        session = self._session
        return {
            "state": self._state.value,
            "repo": session.full_name if session else None,
            "branch": session.default_branch if session else None,
            "local_path": str(session.local_path) if session else None,
            "interval_seconds": self._settings.commit_interval_seconds,
            "tick_count": self._tick_count,
            "last_tick_at": self._last_tick_at,
            "last_error": self._last_error,
        }
