"""mu.stacks - stack model, naming convention and Stack Provider contracts."""

from mu.stacks.dry_run import DryRunStackProvider, ProviderCall
from mu.stacks.models import (
    Stack,
    StackStatus,
    StackType,
    create_stack_name,
    is_success,
    is_terminal,
    needs_recreate,
    stack_exists,
)
from mu.stacks.protocols import (
    ImageFinder,
    StackDeleter,
    StackProvider,
    StackUpserter,
    StackWaiter,
)
from mu.stacks.templates import get_template

__all__ = [
    "DryRunStackProvider",
    "ImageFinder",
    "ProviderCall",
    "Stack",
    "StackDeleter",
    "StackProvider",
    "StackStatus",
    "StackType",
    "StackUpserter",
    "StackWaiter",
    "create_stack_name",
    "get_template",
    "is_success",
    "is_terminal",
    "needs_recreate",
    "stack_exists",
]
