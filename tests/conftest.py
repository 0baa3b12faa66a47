"""Shared test fixtures and configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

os.environ.setdefault("AUTOCOMMIT_ENV", "test")
os.environ.setdefault("AUTOCOMMIT_LOG_LEVEL", "WARNING")

from autocommit.config import Settings
from autocommit.errors import GitCommandError, RepositoryNotFoundError
from autocommit.modules.github.models import GitHubUser, RepositoryInfo

TEST_TOKEN = "ghp_testtoken1234567890"
TEST_LOGIN = "octocat"
TEST_REPO = "auto-repo"


class FakeHost:
    """Scripted host: returns canned prompt answers and records notifications."""

    def __init__(
        self,
        token: Optional[str] = TEST_TOKEN,
        repo_name: Optional[str] = TEST_REPO,
        workspace: Optional[Path] = None,
    ) -> None:
        self.token = token
        self.repo_name = repo_name
        self.workspace = workspace
        self.token_prompts = 0
        self.validator = None
        self.infos: list[str] = []
        self.errors: list[str] = []

    async def prompt_token(self) -> Optional[str]:
        self.token_prompts += 1
        return self.token

    async def prompt_repo_name(self, validate) -> Optional[str]:
        self.validator = validate
        return self.repo_name

    def workspace_root(self) -> Optional[Path]:
        return self.workspace

    def show_info(self, message: str) -> None:
        self.infos.append(message)

    def show_error(self, message: str) -> None:
        self.errors.append(message)


class FakeGit:
    """Stands in for GitManagerService; clone writes a one-line README."""

    def __init__(self) -> None:
        self.secrets: list[str] = []
        self.clones: list[tuple[str, Path]] = []
        self.tokens: list[Optional[str]] = []
        self.commits: list[str] = []
        self.pushes: list[tuple[str, str]] = []
        self.push_attempts = 0
        self.fail_clone = False
        self.fail_push = False
        self.push_gate = None  # optional asyncio.Event awaited before pushing

    def add_secret(self, secret: str) -> None:
        self.secrets.append(secret)

    async def clone(self, remote_url: str, dest: Path, token: Optional[str] = None) -> None:
        self.tokens.append(token)
        if self.fail_clone:
            raise GitCommandError("clone", 128, "fatal: repository not found")
        dest.mkdir(parents=True)
        (dest / "README.md").write_text(f"# {dest.name}\n", encoding="utf-8")
        self.clones.append((remote_url, dest))

    async def stage_all(self, path: Path) -> None:
        pass

    async def commit(self, path: Path, message: str) -> None:
        self.commits.append(message)

    async def push(self, path: Path, remote: str, branch: str, token: Optional[str] = None) -> None:
        self.push_attempts += 1
        self.tokens.append(token)
        if self.push_gate is not None:
            await self.push_gate.wait()
        if self.fail_push:
            raise GitCommandError("push", 128, "fatal: unable to access remote: Could not resolve host")
        self.pushes.append((remote, branch))


def make_repo_info(name: str = TEST_REPO, branch: str = "main") -> RepositoryInfo:
    return RepositoryInfo(
        name=name,
        full_name=f"{TEST_LOGIN}/{name}",
        owner_login=TEST_LOGIN,
        default_branch=branch,
    )


def make_remote(found: bool = True, branch: str = "main") -> MagicMock:
    """Mock GitHubService; when ``found`` is False the first lookup is a 404."""
    info = make_repo_info(branch=branch)
    remote = MagicMock()
    remote.get_authenticated_user = AsyncMock(return_value=GitHubUser(login=TEST_LOGIN, id=1))
    if found:
        remote.get_repository = AsyncMock(return_value=info)
    else:
        remote.get_repository = AsyncMock(
            side_effect=[RepositoryNotFoundError("not found", status_code=404), info]
        )
    remote.create_repository = AsyncMock(return_value=info)

    def _clone_url(owner: str, name: str) -> str:
        return f"https://github.com/{owner}/{name}.git"

    remote.clone_url = MagicMock(side_effect=_clone_url)
    return remote


def make_clock():
    """Deterministic timestamps: 2024-01-01T00:00:00.000Z, ...:01.000Z, ..."""
    counter = {"n": 0}

    def _clock() -> str:
        value = f"2024-01-01T00:00:{counter['n']:02d}.000Z"
        counter["n"] += 1
        return value

    return _clock


@pytest.fixture
def settings() -> Settings:
    """Return test settings."""
    return Settings(
        _env_file=None,
        autocommit_env="test",
        autocommit_log_level="WARNING",
        commit_interval_seconds=60,
    )


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def host(workspace: Path) -> FakeHost:
    return FakeHost(workspace=workspace)


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def remote() -> MagicMock:
    return make_remote()
