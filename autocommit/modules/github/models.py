"""Models for GitHub API payloads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class GitHubUser:
    """The identity behind a personal access token."""

    login: str
    id: Optional[int] = None
    name: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "GitHubUser":
        return cls(login=data["login"], id=data.get("id"), name=data.get("name"))


@dataclass(frozen=True)
class RepositoryInfo:
    """Repository metadata as returned by ``GET /repos/{owner}/{repo}``."""

    name: str
    full_name: str
    owner_login: str
    default_branch: str
    clone_url: str = ""
    html_url: str = ""
    private: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RepositoryInfo":
        owner = data.get("owner") or {}
        full_name = data.get("full_name") or f"{owner.get('login', '')}/{data['name']}"
        return cls(
            name=data["name"],
            full_name=full_name,
            owner_login=owner.get("login") or full_name.split("/")[0],
            # Freshly auto-initialised repositories always report a branch;
            # "main" only covers payloads that omit it.
            default_branch=data.get("default_branch") or "main",
            clone_url=data.get("clone_url", ""),
            html_url=data.get("html_url", ""),
            private=bool(data.get("private", False)),
        )
