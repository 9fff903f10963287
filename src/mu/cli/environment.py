"""
CLI: ``mu environment`` — list, upsert and terminate environments.
"""

from __future__ import annotations

import typer
from rich.table import Table

from mu.cli.utils import console, get_state, load_cli_config, load_provider, run_workflow

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_environments(ctx: typer.Context) -> None:
    """List the environments defined in the configuration."""
    config = load_cli_config(get_state(ctx))

    if not config.environments:
        console.print("[dim]No environments.[/dim]")
        return

    table = Table(title="Environments", pad_edge=False)
    table.add_column("name")
    table.add_column("network")
    table.add_column("vpc")
    for env in config.environments:
        vpc = env.vpc_target.vpc_id if env.is_network_unmanaged else ""
        table.add_row(env.name, "unmanaged" if env.is_network_unmanaged else "managed", vpc)
    console.print(table)


@app.command("upsert")
def upsert_environment(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Environment name"),
) -> None:
    """Create or update an environment's network and cluster."""
    from mu.workflows.environment import new_environment_upserter

    state = get_state(ctx)
    config = load_cli_config(state)
    provider = load_provider(state)
    run_workflow(
        new_environment_upserter(config, name, provider),
        provider,
        title=f"Environment '{name}' upserted",
    )


@app.command("terminate")
def terminate_environment(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Environment name"),
) -> None:
    """Delete an environment's cluster and network."""
    from mu.workflows.environment import new_environment_terminator

    state = get_state(ctx)
    config = load_cli_config(state) if state.config_file.exists() else None
    provider = load_provider(state)
    run_workflow(
        new_environment_terminator(config, name, provider),
        provider,
        title=f"Environment '{name}' terminated",
    )
