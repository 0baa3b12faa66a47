"""Validation for user-supplied repository names."""

from __future__ import annotations

import re
from typing import Optional

REPO_NAME_PATTERN = re.compile(r"[a-zA-Z0-9_-]+")
REPO_NAME_ERROR = "Repository name can only contain letters, numbers, hyphens, and underscores"


def validate_repo_name(name: Optional[str]) -> bool:
    """Return True when ``name`` consists only of letters, digits, ``-`` and ``_``."""
    if not name:
        return False
    return REPO_NAME_PATTERN.fullmatch(name) is not None


def repo_name_error(name: Optional[str]) -> Optional[str]:
    """Prompt-style validator: ``None`` when valid, otherwise the message to show."""
    return None if validate_repo_name(name) else REPO_NAME_ERROR
