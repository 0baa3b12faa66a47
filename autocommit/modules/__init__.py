"""Collaborator services used by the auto-commit controller."""
