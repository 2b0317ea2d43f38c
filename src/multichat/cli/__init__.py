"""Command line interface for multichat."""

from multichat.cli.main import app

__all__ = ["app"]
