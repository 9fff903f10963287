"""
Root Typer application for the mu CLI.

Global options are resolved once in the callback and handed to the
sub-commands through ``ctx.obj``. Command-line flags win over ``MU_*``
settings.
"""

from __future__ import annotations

from pathlib import Path

import typer
from typer import Typer

from mu.cli.utils import CliState
from mu.core.logging import configure_logging
from mu.core.settings import get_settings

app = Typer(
    name="mu",
    help="mu — reconcile environment and service stacks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from mu import __version__

        typer.echo(f"mu {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to the mu configuration file."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print the plan using an in-memory provider."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level."),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """mu CLI — manage environments and services."""
    settings = get_settings()
    configure_logging(
        level=(log_level or settings.log_level).upper(),
        json_format=settings.log_json,
    )
    ctx.obj = CliState(
        settings=settings,
        config_file=config or settings.config_file,
        dry_run=dry_run or settings.dry_run,
    )


# ── Sub-command registration ─────────────────────────────────────────────

from mu.cli.environment import app as environment_app  # noqa: E402
from mu.cli.service import app as service_app  # noqa: E402

app.add_typer(environment_app, name="environment", help="Environment management.")
app.add_typer(service_app, name="service", help="Service deployment.")
