"""Centralized configuration loaded from environment variables.

Credentials and the target repository are never configured here; they are
collected interactively for every session.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide settings sourced from .env / environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── General ──────────────────────────────────────────────────────
    autocommit_env: str = "development"
    autocommit_log_level: str = "INFO"

    # ── GitHub ───────────────────────────────────────────────────────
    github_api_url: str = "https://api.github.com"
    github_host: str = "github.com"
    github_timeout: float = 30.0

    # ── Auto-commit ──────────────────────────────────────────────────
    commit_interval_seconds: int = 60
    readme_filename: str = "README.md"
    git_remote_name: str = "origin"
    git_author_name: str = ""
    git_author_email: str = ""
    change_working_directory: bool = False

    # ── Host ─────────────────────────────────────────────────────────
    workspace_root: str = ""

    @field_validator("commit_interval_seconds")
    @classmethod
    def _interval_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("commit_interval_seconds must be positive")
        return value

    @field_validator("github_api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    # ── Derived ──────────────────────────────────────────────────────
    @property
    def default_workspace(self) -> Optional[Path]:
        """Return the configured workspace root, if any."""
        if not self.workspace_root:
            return None
        return Path(self.workspace_root).expanduser()


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the singleton Settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
