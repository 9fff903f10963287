"""
mu.workflows - executors, the workflow composer and the stack reconcilers.

- executor:    Executor protocol, Step, Workflow, new_workflow
- context:     WorkflowContext (per-run mutable state)
- reconciler:  StackStrategy, stack_upserter, stack_undeployer
- environment: environment resolver + environment upsert/terminate
- service:     service deploy/undeploy
"""

from mu.workflows.context import WorkflowContext
from mu.workflows.environment import (
    cluster_strategy,
    environment_finder,
    new_environment_terminator,
    new_environment_upserter,
    vpc_strategy,
)
from mu.workflows.executor import Executor, Step, Workflow, new_workflow
from mu.workflows.reconciler import StackStrategy, stack_undeployer, stack_upserter
from mu.workflows.service import (
    new_service_deployer,
    new_service_undeployer,
    service_environment_loader,
    service_input,
    service_strategy,
)

__all__ = [
    # executor
    "Executor",
    "Step",
    "Workflow",
    "new_workflow",
    # context
    "WorkflowContext",
    # reconciler
    "StackStrategy",
    "stack_undeployer",
    "stack_upserter",
    # environment
    "cluster_strategy",
    "environment_finder",
    "new_environment_terminator",
    "new_environment_upserter",
    "vpc_strategy",
    # service
    "new_service_deployer",
    "new_service_undeployer",
    "service_environment_loader",
    "service_input",
    "service_strategy",
]
