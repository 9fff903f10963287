"""
CLI: ``mu service`` — deploy and undeploy the service.
"""

from __future__ import annotations

import typer

from mu.cli.utils import get_state, load_cli_config, load_provider, run_workflow

app = typer.Typer(no_args_is_help=True)


@app.command("deploy")
def deploy_service(
    ctx: typer.Context,
    environment: str = typer.Argument(..., help="Environment to deploy into"),
    tag: str = typer.Option("latest", "--tag", "-t", help="Image tag to deploy"),
    service: str | None = typer.Option(None, "--service", "-s", help="Override service.name"),
) -> None:
    """Deploy the service into an environment."""
    from mu.workflows.service import new_service_deployer

    state = get_state(ctx)
    config = load_cli_config(state)
    provider = load_provider(state)
    run_workflow(
        new_service_deployer(config, environment, provider, tag=tag, service_name=service),
        provider,
        title=f"Service deployed to '{environment}'",
    )


@app.command("undeploy")
def undeploy_service(
    ctx: typer.Context,
    environment: str = typer.Argument(..., help="Environment to remove the service from"),
    service: str | None = typer.Option(None, "--service", "-s", help="Override service.name"),
) -> None:
    """Remove the service from an environment."""
    from mu.workflows.service import new_service_undeployer

    state = get_state(ctx)
    config = load_cli_config(state)
    provider = load_provider(state)
    run_workflow(
        new_service_undeployer(config, environment, provider, service_name=service),
        provider,
        title=f"Service undeployed from '{environment}'",
    )
