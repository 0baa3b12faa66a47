"""github-auto-commit: keep a GitHub repository ticking with periodic README commits."""

__version__ = "0.1.0"
