"""Service workflows: deploy and undeploy a service in an environment.

A service stack (``mu-service-<service>-<env>``) runs on the cluster of
its environment. Deploying reads the cluster stack's outputs (cluster
name, listener, VPC) into the Parameter Mapping, then reconciles the
service stack with those plus the service definition from ``mu.yml``.

Workflow shape::

    deploy:    service_input → service_environment_loader → upsert:service
    undeploy:  service_input → undeploy:service
"""

from __future__ import annotations

from mu.config.models import Config
from mu.core.errors import MissingConfigError, StackNotFoundError
from mu.core.logging import get_logger
from mu.stacks.models import Stack, StackType, create_stack_name, stack_exists
from mu.stacks.protocols import StackProvider, StackWaiter
from mu.workflows.context import WorkflowContext
from mu.workflows.executor import Step, Workflow, new_workflow
from mu.workflows.reconciler import StackStrategy, await_stack, stack_undeployer, stack_upserter

logger = get_logger(__name__)

# Cluster outputs the service stack consumes
CLUSTER_INPUT_KEYS = ("EcsCluster", "EcsElbHttpListenerArn", "VpcId")


def service_input(ctx: WorkflowContext, config: Config, service_name: str | None = None) -> Step:
    """Set the service being acted on; explicit name wins over ``service.name``."""

    def resolve() -> None:
        name = service_name or config.service.name
        if not name:
            raise MissingConfigError(
                "service.name", "No service name given and none set in configuration"
            )
        ctx.service_name = name
        logger.debug("service.resolved", service=name)

    return Step(name="service-input", action=resolve)


def service_environment_loader(
    ctx: WorkflowContext,
    environment_name: str,
    waiter: StackWaiter,
) -> Step:
    """Copy the environment's cluster outputs into the Parameter Mapping."""

    def load() -> None:
        cluster_name = create_stack_name(StackType.CLUSTER, environment_name)
        cluster = await_stack(waiter, cluster_name)
        if not stack_exists(cluster):
            raise StackNotFoundError(
                cluster_name,
                f"Environment '{environment_name}' has no cluster stack '{cluster_name}'; "
                "upsert the environment first",
            ).with_context(environment=environment_name)
        ctx.set_params(cluster.outputs)
        logger.info("service.environment_loaded", stack=cluster_name, outputs=sorted(cluster.outputs))

    return Step(name="environment-loader", action=load)


def service_strategy(config: Config, environment_name: str, tag: str) -> StackStrategy:
    service = config.service

    def naming(ctx: WorkflowContext) -> tuple[str, ...]:
        return (ctx.service_name, environment_name)

    def parameters(ctx: WorkflowContext, stack_name: str) -> dict[str, str]:
        if not service.image_repository:
            raise MissingConfigError("service.imageRepository").with_context(
                service=ctx.service_name, stack_name=stack_name
            )
        params = {
            "ServiceName": ctx.service_name,
            "ImageUrl": f"{service.image_repository}:{tag}",
        }
        params.update({key: ctx.params[key] for key in CLUSTER_INPUT_KEYS if key in ctx.params})

        sizing = {
            "ServicePort": service.port,
            "ServiceHealthEndpoint": service.health_endpoint,
            "ServiceCpu": service.cpu,
            "ServiceMemory": service.memory,
            "ServiceDesiredCount": service.desired_count,
        }
        params.update({key: str(value) for key, value in sizing.items() if value})
        if service.path_patterns:
            params["PathPattern"] = ",".join(service.path_patterns)
        return params

    def outputs(ctx: WorkflowContext, stack: Stack) -> dict[str, str]:
        return dict(stack.outputs)

    def tags(ctx: WorkflowContext) -> dict[str, str]:
        return {"mu:environment": environment_name, "mu:service": ctx.service_name}

    return StackStrategy(
        stack_type=StackType.SERVICE,
        naming=naming,
        parameters=parameters,
        outputs=outputs,
        tags=tags,
    )


def new_service_deployer(
    config: Config,
    environment_name: str,
    provider: StackProvider,
    *,
    tag: str = "latest",
    service_name: str | None = None,
) -> Workflow:
    """Deploy image ``tag`` of the service into ``environment_name``."""
    ctx = WorkflowContext.create("service-deploy")
    return new_workflow(
        service_input(ctx, config, service_name),
        service_environment_loader(ctx, environment_name, provider),
        stack_upserter(ctx, service_strategy(config, environment_name, tag), provider, provider),
        name=ctx.workflow_name,
        context=ctx,
    )


def new_service_undeployer(
    config: Config,
    environment_name: str,
    provider: StackProvider,
    *,
    service_name: str | None = None,
) -> Workflow:
    """Remove the service stack from ``environment_name``."""
    ctx = WorkflowContext.create("service-undeploy")

    def naming(ctx: WorkflowContext) -> tuple[str, ...]:
        return (ctx.service_name, environment_name)

    return new_workflow(
        service_input(ctx, config, service_name),
        stack_undeployer(ctx, StackType.SERVICE, naming, provider, provider),
        name=ctx.workflow_name,
        context=ctx,
    )


__all__ = [
    "CLUSTER_INPUT_KEYS",
    "new_service_deployer",
    "new_service_undeployer",
    "service_environment_loader",
    "service_input",
    "service_strategy",
]
