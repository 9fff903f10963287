"""
CLI utility helpers — state, provider loading and workflow output.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from mu.config import Config, load_config
from mu.core.errors import MuError
from mu.core.settings import MuSettings
from mu.stacks.dry_run import DryRunStackProvider
from mu.stacks.protocols import StackProvider
from mu.workflows.executor import Workflow

console = Console()
err_console = Console(stderr=True)

# Exit codes
EXIT_WORKFLOW_FAILED = 1
EXIT_USAGE = 2


@dataclass
class CliState:
    """Global options, stored on the typer context object."""

    settings: MuSettings
    config_file: Path
    dry_run: bool = False


def get_state(ctx: typer.Context) -> CliState:
    return ctx.obj


# ── Config / provider ────────────────────────────────────────────────────


def load_cli_config(state: CliState) -> Config:
    """Load the configuration file or exit with a usage error."""
    try:
        return load_config(state.config_file)
    except MuError as e:
        err_console.print(f"[bold red]Error[/bold red]: {escape(str(e))}")
        raise typer.Exit(code=EXIT_USAGE) from e


def resolve_factory_ref(ref: str) -> Any:
    """Import and return the callable identified by ``'module:qualname'``."""
    module_path, _, attr_path = ref.partition(":")
    if not attr_path:
        raise ValueError(f"Invalid provider ref (missing ':'): {ref!r}")
    obj: Any = importlib.import_module(module_path)
    for part in attr_path.split("."):
        obj = getattr(obj, part)
    if not callable(obj):
        raise TypeError(f"{ref!r} resolved to non-callable: {type(obj)}")
    return obj


def load_provider(state: CliState) -> StackProvider:
    """The dry-run provider, or the one configured by ``MU_STACK_PROVIDER``.

    The dry-run provider treats every stack it has not touched as deployed,
    so the plan shows the calls a run against a live environment would make.
    Exits with code 2 when neither is available.
    """
    if state.dry_run:
        return DryRunStackProvider(assume_existing=True)

    ref = state.settings.stack_provider
    if not ref:
        err_console.print(
            "[bold red]Error[/bold red]: no stack provider configured. "
            "Set MU_STACK_PROVIDER=module:factory or pass --dry-run."
        )
        raise typer.Exit(code=EXIT_USAGE)

    try:
        factory = resolve_factory_ref(ref)
    except (ImportError, AttributeError, ValueError, TypeError) as e:
        err_console.print(
            f"[bold red]Error[/bold red]: cannot load stack provider {escape(repr(ref))}: "
            f"{escape(str(e))}"
        )
        raise typer.Exit(code=EXIT_USAGE) from e
    return factory()


# ── Running ──────────────────────────────────────────────────────────────


def run_workflow(workflow: Workflow, provider: StackProvider, *, title: str) -> None:
    """Run ``workflow``, print its outcome, and exit 1 on failure."""
    result = workflow()

    if isinstance(provider, DryRunStackProvider):
        console.print(f"[bold]Plan[/bold] ({title}, dry run)")
        for line in provider.plan():
            console.print(f"  [cyan]{escape(line)}[/cyan]")

    if result.is_err():
        err_console.print(f"[bold red]Error[/bold red]: {escape(str(result.error))}")
        raise typer.Exit(code=EXIT_WORKFLOW_FAILED)

    console.print(f"[green]✓[/green] {title}")
