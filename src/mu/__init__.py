"""
mu - reconcile environment and service stacks against an orchestration backend.

An environment is a network stack plus a container cluster stack; a service
is a stack running on that cluster. mu derives deterministic stack names,
upserts each stack, waits for it to settle, and feeds its outputs into the
next stack's parameters.

Quick start::

    from mu import load_config, new_environment_upserter
    from mu.stacks import DryRunStackProvider

    config = load_config("mu.yml")
    provider = DryRunStackProvider()
    result = new_environment_upserter(config, "dev", provider)()
    result.unwrap()
"""

__version__ = "0.1.0"

from mu.config import Config, Environment, Service, load_config, parse_config
from mu.core import Err, MuError, Ok, Result
from mu.stacks import Stack, StackStatus, StackType, create_stack_name
from mu.workflows import (
    Workflow,
    WorkflowContext,
    new_environment_terminator,
    new_environment_upserter,
    new_service_deployer,
    new_service_undeployer,
    new_workflow,
)

__all__ = [
    "__version__",
    "Config",
    "Environment",
    "Err",
    "MuError",
    "Ok",
    "Result",
    "Service",
    "Stack",
    "StackStatus",
    "StackType",
    "Workflow",
    "WorkflowContext",
    "create_stack_name",
    "load_config",
    "new_environment_terminator",
    "new_environment_upserter",
    "new_service_deployer",
    "new_service_undeployer",
    "new_workflow",
    "parse_config",
]
