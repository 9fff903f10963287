"""Stack model, status vocabulary and the stack naming convention.

A *stack* is a named group of remote resources managed as a unit by the
orchestration backend. mu never builds or inspects the resources itself;
it only needs to know a stack's status and outputs.

Key Concepts:
    StackType: the kinds of stack mu manages. ``VPC`` is the network stack.
    StackStatus: the backend's lifecycle vocabulary. Classification is done
        with explicit status sets (``TERMINAL_STATUSES`` and friends), not by
        matching on the ``_IN_PROGRESS`` suffix.
    Stack: a read-only snapshot returned by a Stack Provider. ``None`` is
        the snapshot of a stack that does not exist.
    create_stack_name(): deterministic naming. The same inputs always
        address the same remote stack, which is what makes upserts
        idempotent across runs.

Examples:
    >>> create_stack_name(StackType.VPC, "dev")
    'mu-vpc-dev'
    >>> create_stack_name(StackType.SERVICE, "billing", "dev")
    'mu-service-billing-dev'
    >>> is_terminal(StackStatus.UPDATE_IN_PROGRESS)
    False

Tags:
    stacks, status, naming, cloudformation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from mu.core.errors import InvalidConfigError

STACK_NAME_PREFIX = "mu"


class StackType(str, Enum):
    """Supported stack types."""

    VPC = "vpc"
    CLUSTER = "cluster"
    REPO = "repo"
    SERVICE = "service"
    PIPELINE = "pipeline"


class StackStatus(str, Enum):
    """Lifecycle states reported by the orchestration backend."""

    CREATE_IN_PROGRESS = "CREATE_IN_PROGRESS"
    CREATE_FAILED = "CREATE_FAILED"
    CREATE_COMPLETE = "CREATE_COMPLETE"
    ROLLBACK_IN_PROGRESS = "ROLLBACK_IN_PROGRESS"
    ROLLBACK_FAILED = "ROLLBACK_FAILED"
    ROLLBACK_COMPLETE = "ROLLBACK_COMPLETE"
    DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"
    DELETE_FAILED = "DELETE_FAILED"
    DELETE_COMPLETE = "DELETE_COMPLETE"
    UPDATE_IN_PROGRESS = "UPDATE_IN_PROGRESS"
    UPDATE_COMPLETE_CLEANUP_IN_PROGRESS = "UPDATE_COMPLETE_CLEANUP_IN_PROGRESS"
    UPDATE_COMPLETE = "UPDATE_COMPLETE"
    UPDATE_ROLLBACK_IN_PROGRESS = "UPDATE_ROLLBACK_IN_PROGRESS"
    UPDATE_ROLLBACK_FAILED = "UPDATE_ROLLBACK_FAILED"
    UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS = "UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS"
    UPDATE_ROLLBACK_COMPLETE = "UPDATE_ROLLBACK_COMPLETE"
    REVIEW_IN_PROGRESS = "REVIEW_IN_PROGRESS"


IN_PROGRESS_STATUSES: frozenset[StackStatus] = frozenset(
    {
        StackStatus.CREATE_IN_PROGRESS,
        StackStatus.ROLLBACK_IN_PROGRESS,
        StackStatus.DELETE_IN_PROGRESS,
        StackStatus.UPDATE_IN_PROGRESS,
        StackStatus.UPDATE_COMPLETE_CLEANUP_IN_PROGRESS,
        StackStatus.UPDATE_ROLLBACK_IN_PROGRESS,
        StackStatus.UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS,
        StackStatus.REVIEW_IN_PROGRESS,
    }
)

TERMINAL_STATUSES: frozenset[StackStatus] = frozenset(StackStatus) - IN_PROGRESS_STATUSES

SUCCESS_STATUSES: frozenset[StackStatus] = frozenset(
    {StackStatus.CREATE_COMPLETE, StackStatus.UPDATE_COMPLETE}
)

# Create/update failed or rolled back; the next upsert must repair or replace
RECREATE_STATUSES: frozenset[StackStatus] = frozenset(
    {
        StackStatus.CREATE_FAILED,
        StackStatus.ROLLBACK_FAILED,
        StackStatus.ROLLBACK_COMPLETE,
        StackStatus.UPDATE_ROLLBACK_FAILED,
        StackStatus.UPDATE_ROLLBACK_COMPLETE,
    }
)


def is_terminal(status: StackStatus) -> bool:
    """True when the stack is not mid-transition."""
    return status in TERMINAL_STATUSES


def is_success(status: StackStatus) -> bool:
    """True when the last create/update finished cleanly."""
    return status in SUCCESS_STATUSES


def needs_recreate(status: StackStatus) -> bool:
    """True for create/update failure and rollback states."""
    return status in RECREATE_STATUSES


@dataclass(frozen=True)
class Stack:
    """Snapshot of a remote stack as reported by a Stack Provider."""

    name: str
    status: StackStatus
    id: str = ""
    status_reason: str = ""
    last_update_time: datetime | None = None
    tags: dict[str, str] = field(default_factory=dict)
    outputs: dict[str, str] = field(default_factory=dict)
    parameters: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Providers may hand back the raw status string
        if not isinstance(self.status, StackStatus):
            object.__setattr__(self, "status", StackStatus(self.status))

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    @property
    def is_success(self) -> bool:
        return is_success(self.status)

    @property
    def is_deleted(self) -> bool:
        return self.status is StackStatus.DELETE_COMPLETE


def stack_exists(stack: Stack | None) -> bool:
    """A stack exists unless the provider reported it absent or fully deleted."""
    return stack is not None and not stack.is_deleted


def create_stack_name(stack_type: StackType, *names: str) -> str:
    """Build the deterministic stack name ``mu-<type>-<name>[-<name>...]``.

    Environment-scoped stacks pass ``(type, environment)``; service-scoped
    stacks pass ``(type, service, environment)``.

    Raises
    ------
    InvalidConfigError
        If no name is given or any name is empty.
    """
    if not names or any(not name for name in names):
        raise InvalidConfigError(
            "stack_name", names, f"Stack name parts must be non-empty, got {names!r}"
        )
    return "-".join([STACK_NAME_PREFIX, StackType(stack_type).value, *names])


__all__ = [
    "IN_PROGRESS_STATUSES",
    "RECREATE_STATUSES",
    "STACK_NAME_PREFIX",
    "SUCCESS_STATUSES",
    "TERMINAL_STATUSES",
    "Stack",
    "StackStatus",
    "StackType",
    "create_stack_name",
    "is_success",
    "is_terminal",
    "needs_recreate",
    "stack_exists",
]
