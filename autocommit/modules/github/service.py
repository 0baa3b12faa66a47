"""GitHub REST client for identity lookup and repository create-if-absent."""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import httpx

from autocommit import __version__
from autocommit.config import get_settings
from autocommit.errors import (
    AuthenticationError,
    RepositoryCreateError,
    RepositoryLookupError,
    RepositoryNotFoundError,
)
from autocommit.logging_config import get_logger
from autocommit.modules.github.models import GitHubUser, RepositoryInfo

logger = get_logger(__name__)


def _error_detail(response: httpx.Response) -> str:
    """Pull GitHub's ``message`` field out of an error response."""
    try:
        message = response.json().get("message", "")
    except (ValueError, AttributeError):
        message = ""
    return f"{response.status_code} {message}".strip()


class GitHubService:
    """Thin async wrapper over the endpoints the auto-commit session needs."""

    def __init__(
        self,
        token: str,
        api_url: Optional[str] = None,
        host: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self._token = token
        self._api_url = (api_url or settings.github_api_url).rstrip("/")
        self._host = host or settings.github_host
        self._timeout = timeout if timeout is not None else settings.github_timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self._token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": f"github-auto-commit/{__version__}",
        }

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self._api_url,
            headers=self._headers(),
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            return await client.request(method, path, json=json)

    async def get_authenticated_user(self) -> GitHubUser:
        """Resolve the token to a user; any non-200 answer is an auth failure."""
        try:
            response = await self._request("GET", "/user")
        except httpx.HTTPError as exc:
            logger.error("github_auth_request_failed", error=str(exc))
            raise AuthenticationError(f"GitHub authentication failed: {exc}") from exc

        if response.status_code != 200:
            detail = _error_detail(response)
            logger.error("github_auth_failed", status=response.status_code)
            raise AuthenticationError(f"GitHub authentication failed ({detail})")

        user = GitHubUser.from_api(response.json())
        logger.info("github_authenticated", login=user.login)
        return user

    async def get_repository(self, owner: str, name: str) -> RepositoryInfo:
        """Fetch repository metadata.

        Raises:
            RepositoryNotFoundError: GitHub answered 404.
            RepositoryLookupError: any other failure.
        """
        path = f"/repos/{quote(owner, safe='')}/{quote(name, safe='')}"
        try:
            response = await self._request("GET", path)
        except httpx.HTTPError as exc:
            logger.error("github_repo_request_failed", repo=f"{owner}/{name}", error=str(exc))
            raise RepositoryLookupError(f"Repository lookup failed: {exc}") from exc

        if response.status_code == 404:
            logger.info("github_repo_not_found", repo=f"{owner}/{name}")
            raise RepositoryNotFoundError(f"Repository {owner}/{name} not found", status_code=404)
        if response.status_code != 200:
            detail = _error_detail(response)
            logger.error("github_repo_lookup_failed", repo=f"{owner}/{name}", status=response.status_code)
            raise RepositoryLookupError(
                f"Repository lookup failed ({detail})", status_code=response.status_code
            )

        return RepositoryInfo.from_api(response.json())

    async def create_repository(
        self,
        name: str,
        auto_init: bool = True,
        private: bool = False,
    ) -> RepositoryInfo:
        """Create a repository for the authenticated user."""
        payload = {"name": name, "auto_init": auto_init, "private": private}
        try:
            response = await self._request("POST", "/user/repos", json=payload)
        except httpx.HTTPError as exc:
            logger.error("github_repo_create_request_failed", repo=name, error=str(exc))
            raise RepositoryCreateError(f"Repository creation failed: {exc}") from exc

        if response.status_code not in (200, 201):
            detail = _error_detail(response)
            logger.error("github_repo_create_failed", repo=name, status=response.status_code)
            raise RepositoryCreateError(
                f"Repository creation failed ({detail})", status_code=response.status_code
            )

        repo = RepositoryInfo.from_api(response.json())
        logger.info("github_repo_created", repo=repo.full_name)
        return repo

    def clone_url(self, owner: str, name: str) -> str:
        """HTTPS remote URL without credentials; git authenticates per command."""
        return f"https://{self._host}/{owner}/{name}.git"
