"""
CLI layer for scatter.

Provides a Typer application that drives the dispatcher against live HTTP
targets. All dispatch logic lives in ``scatter.execution``; this package
handles only terminal transport: argument parsing, coloured output, and
table formatting.

Entry point::

    scatter --help
"""

from scatter.cli.app import app

__all__ = ["app"]
