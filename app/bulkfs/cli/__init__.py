"""CLI package for bulkfs.

This package contains the Typer application.
"""

from bulkfs.cli.main import app

__all__ = ["app"]
