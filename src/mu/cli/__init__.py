"""
CLI layer for mu.

Typer application whose commands build a workflow from ``mu.workflows``
and run it. This package handles only terminal transport: argument
parsing, provider selection and coloured output.

Entry point::

    mu --help
"""

from mu.cli.app import app

__all__ = ["app"]
