"""Environment workflows: resolve, upsert and terminate an environment.

An environment is two stacks reconciled in dependency order:

    mu-vpc-<env>       network (skipped when the network is unmanaged)
    mu-cluster-<env>   container cluster, consumes the network's outputs

Parameter flow::

    vpc reconciler ──► params[VpcId], params[PublicSubnetAZ<N>Id]
                                 │
    cluster reconciler ◄─────────┘ (+ image id, sizing) ──► cluster outputs

For an unmanaged network the same keys are filled from
``vpcTarget.vpcId`` / ``vpcTarget.publicSubnetIds`` instead, so the
cluster reconciler cannot tell the difference.
"""

from __future__ import annotations

from mu.config.models import Config, Environment
from mu.core.errors import EnvironmentNotFoundError, ImageNotFoundError, StackProviderError
from mu.core.logging import get_logger
from mu.stacks.models import Stack, StackType
from mu.stacks.protocols import ImageFinder, StackProvider
from mu.workflows.context import WorkflowContext
from mu.workflows.executor import Step, Workflow, new_workflow
from mu.workflows.reconciler import (
    StackStrategy,
    provider_call,
    stack_undeployer,
    stack_upserter,
)

logger = get_logger(__name__)

VPC_ID_KEY = "VpcId"
MANAGED_SUBNET_SLOTS = 3
ECS_IMAGE_PATTERN = "amzn-ami-*-amazon-ecs-optimized"


def subnet_key(slot: int) -> str:
    """Parameter key for the public subnet in availability-zone slot ``slot`` (1-based)."""
    return f"PublicSubnetAZ{slot}Id"


NETWORK_KEYS: tuple[str, ...] = (VPC_ID_KEY,) + tuple(
    subnet_key(slot) for slot in range(1, MANAGED_SUBNET_SLOTS + 1)
)


def find_environment(config: Config, environment_name: str) -> Environment | None:
    for env in config.environments:
        if env.name == environment_name:
            return env
    return None


def environment_finder(ctx: WorkflowContext, config: Config, environment_name: str) -> Step:
    """Resolve ``environment_name`` in ``config`` and store it on the context.

    On a miss the context's environment is left untouched and the step
    fails with ``EnvironmentNotFoundError``.
    """

    def find() -> None:
        env = find_environment(config, environment_name)
        if env is None:
            raise EnvironmentNotFoundError(environment_name)
        ctx.environment = env
        logger.debug("environment.resolved", environment=env.name)

    return Step(name="environment-finder", action=find)


def _environment_naming(ctx: WorkflowContext) -> tuple[str, ...]:
    return (ctx.require_environment().name,)


def _environment_tags(ctx: WorkflowContext) -> dict[str, str]:
    return {"mu:environment": ctx.require_environment().name}


# =============================================================================
# Network (VPC)
# =============================================================================


def _unmanaged_network(ctx: WorkflowContext) -> dict[str, str] | None:
    env = ctx.require_environment()
    if not env.is_network_unmanaged:
        return None
    target = env.vpc_target
    params = {VPC_ID_KEY: target.vpc_id}
    for slot, subnet_id in enumerate(target.public_subnet_ids, start=1):
        params[subnet_key(slot)] = subnet_id
    return params


def _network_outputs(ctx: WorkflowContext, stack: Stack) -> dict[str, str]:
    # Missing outputs fall back to the export name the network stack publishes
    return {key: stack.outputs.get(key, f"{stack.name}-{key}") for key in NETWORK_KEYS}


def vpc_strategy() -> StackStrategy:
    return StackStrategy(
        stack_type=StackType.VPC,
        naming=_environment_naming,
        outputs=_network_outputs,
        unmanaged=_unmanaged_network,
        tags=_environment_tags,
    )


# =============================================================================
# Cluster
# =============================================================================


def _cluster_parameters(image_finder: ImageFinder):
    def derive(ctx: WorkflowContext, stack_name: str) -> dict[str, str]:
        env = ctx.require_environment()
        cluster = env.cluster

        params = {key: ctx.params[key] for key in NETWORK_KEYS if key in ctx.params}

        if cluster.image_id:
            params["ImageId"] = cluster.image_id
        else:
            try:
                params["ImageId"] = provider_call(
                    stack_name,
                    "find_image",
                    lambda: image_finder.find_latest_image_id(ECS_IMAGE_PATTERN),
                )
            except StackProviderError as e:
                # A lookup miss is reported as such; anything else stays a provider failure
                if isinstance(e.cause, LookupError):
                    raise ImageNotFoundError(stack_name, ECS_IMAGE_PATTERN, cause=e.cause) from e.cause
                raise
            if not params["ImageId"]:
                raise ImageNotFoundError(stack_name, ECS_IMAGE_PATTERN)

        optional = {
            "InstanceTenancy": cluster.instance_tenancy,
            "KeyName": cluster.key_name,
            "SshAllow": cluster.ssh_allow,
            "ElbHostName": env.loadbalancer.hostname,
            "DesiredCapacity": cluster.desired_capacity,
            "MaxSize": cluster.max_size,
            "ScaleOutThreshold": cluster.scale_out_threshold,
            "ScaleInThreshold": cluster.scale_in_threshold,
        }
        params.update({key: str(value) for key, value in optional.items() if value})
        return params

    return derive


def _cluster_outputs(ctx: WorkflowContext, stack: Stack) -> dict[str, str]:
    return dict(stack.outputs)


def cluster_strategy(image_finder: ImageFinder) -> StackStrategy:
    return StackStrategy(
        stack_type=StackType.CLUSTER,
        naming=_environment_naming,
        parameters=_cluster_parameters(image_finder),
        outputs=_cluster_outputs,
        tags=_environment_tags,
    )


# =============================================================================
# Workflows
# =============================================================================


def new_environment_upserter(
    config: Config,
    environment_name: str,
    provider: StackProvider,
) -> Workflow:
    """Create or update the network and cluster stacks of an environment."""
    ctx = WorkflowContext.create("environment-upsert")
    return new_workflow(
        environment_finder(ctx, config, environment_name),
        stack_upserter(ctx, vpc_strategy(), provider, provider),
        stack_upserter(ctx, cluster_strategy(provider), provider, provider),
        name=ctx.workflow_name,
        context=ctx,
    )


def new_environment_terminator(
    config: Config | None,
    environment_name: str,
    provider: StackProvider,
) -> Workflow:
    """Delete the cluster, then the network, of an environment.

    Works from the name alone, so an environment already removed from the
    configuration can still be torn down. The network is left alone only
    when the configuration is known and says it is unmanaged.
    """
    ctx = WorkflowContext.create("environment-terminate")
    env = find_environment(config, environment_name) if config is not None else None
    if env is not None:
        ctx.environment = env
    else:
        logger.warning("environment.not_configured", environment=environment_name)

    def naming(ctx: WorkflowContext) -> tuple[str, ...]:
        return (environment_name,)

    def network_unmanaged(ctx: WorkflowContext) -> bool:
        return env is not None and env.is_network_unmanaged

    return new_workflow(
        stack_undeployer(ctx, StackType.CLUSTER, naming, provider, provider),
        stack_undeployer(
            ctx,
            StackType.VPC,
            naming,
            provider,
            provider,
            unmanaged=network_unmanaged,
        ),
        name=ctx.workflow_name,
        context=ctx,
    )


__all__ = [
    "ECS_IMAGE_PATTERN",
    "NETWORK_KEYS",
    "VPC_ID_KEY",
    "cluster_strategy",
    "environment_finder",
    "find_environment",
    "new_environment_terminator",
    "new_environment_upserter",
    "subnet_key",
    "vpc_strategy",
]
