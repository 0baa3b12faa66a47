"""GitHub remote repository service."""

from autocommit.modules.github.models import GitHubUser, RepositoryInfo
from autocommit.modules.github.service import GitHubService
from autocommit.modules.github.validators import repo_name_error, validate_repo_name

__all__ = [
    "GitHubService",
    "GitHubUser",
    "RepositoryInfo",
    "repo_name_error",
    "validate_repo_name",
]
