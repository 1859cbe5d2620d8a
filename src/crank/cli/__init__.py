"""Command-line interface."""

from crank.cli.main import app, main

__all__ = ["app", "main"]
