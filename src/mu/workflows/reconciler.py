"""Stack reconciler — the upsert / await / propagate protocol.

Every stack type (network, cluster, service) is reconciled by the same
fixed algorithm. What differs per type is supplied by a ``StackStrategy``:
how the stack is named, which parameters it takes, which of its outputs
later stacks need, and, for the network, whether the stack is owned by
someone else entirely.

Upsert protocol::

    name   = create_stack_name(type, *strategy.naming(ctx))
    bypass = strategy.unmanaged(ctx)            ── network only
      └── not None → params.update(bypass); done (no provider calls)
    await_final_status(name)                    ── learn current state
    params = strategy.parameters(ctx, name)     ── may look up images
    upsert_stack(name, body, params, tags)      ── always; provider no-ops
    await_final_status(name)                    ── block until settled
      └── absent or not CREATE/UPDATE_COMPLETE → StackFailedError
    ctx.params.update(strategy.outputs(ctx, stack))

Undeploy protocol::

    await_final_status(name)
      └── absent → done (already deleted)
    delete_stack(name)
    await_final_status(name)
      └── still present (DELETE_FAILED) → StackFailedError

Provider failures of any kind are re-raised as ``StackProviderError``
carrying the stack name and the provider's own retryability; nothing is
retried here.

Tags:
    mu, workflows, reconciler, upsert, idempotent, parameter-propagation
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TextIO, TypeVar

from mu.core.errors import MuError, StackFailedError, StackProviderError
from mu.core.logging import get_logger
from mu.stacks.models import Stack, StackType, create_stack_name, needs_recreate, stack_exists
from mu.stacks.protocols import StackDeleter, StackUpserter, StackWaiter
from mu.stacks.templates import get_template
from mu.workflows.context import WorkflowContext
from mu.workflows.executor import Step

logger = get_logger(__name__)

T = TypeVar("T")

Naming = Callable[[WorkflowContext], tuple[str, ...]]
ParameterDeriver = Callable[[WorkflowContext, str], dict[str, str]]
OutputExtractor = Callable[[WorkflowContext, Stack], dict[str, str]]
UnmanagedCheck = Callable[[WorkflowContext], dict[str, str] | None]
TagDeriver = Callable[[WorkflowContext], dict[str, str]]


def _no_parameters(ctx: WorkflowContext, stack_name: str) -> dict[str, str]:
    return {}


def _no_outputs(ctx: WorkflowContext, stack: Stack) -> dict[str, str]:
    return {}


def _no_tags(ctx: WorkflowContext) -> dict[str, str]:
    return {}


@dataclass(frozen=True)
class StackStrategy:
    """Per-stack-type inputs to the reconciler.

    Attributes:
        stack_type: Kind of stack, first component of its name
        naming: Logical name parts after the type (environment, or
            service + environment)
        parameters: Derive the stack's input parameters
        outputs: Pick the settled stack's outputs to publish into params
        unmanaged: When it returns a mapping, the stack is externally
            managed: publish that mapping and skip all provider calls
        tags: Extra tags beyond ``mu:type``
        template: Produce the stack body
    """

    stack_type: StackType
    naming: Naming
    parameters: ParameterDeriver = _no_parameters
    outputs: OutputExtractor = _no_outputs
    unmanaged: UnmanagedCheck | None = None
    tags: TagDeriver = _no_tags
    template: Callable[[], TextIO] | None = None

    def stack_name(self, ctx: WorkflowContext) -> str:
        return create_stack_name(self.stack_type, *self.naming(ctx))

    def body(self) -> TextIO:
        if self.template is not None:
            return self.template()
        return get_template(self.stack_type)


def provider_call(stack_name: str, operation: str, call: Callable[[], T]) -> T:
    """Run one provider method, re-raising its failure with the stack name.

    A boolean ``retryable`` attribute on the provider's exception is carried
    over to the ``StackProviderError``.
    """
    try:
        return call()
    except MuError:
        raise
    except Exception as e:
        retryable = getattr(e, "retryable", None)
        raise StackProviderError(
            stack_name,
            operation,
            cause=e,
            retryable=retryable if isinstance(retryable, bool) else None,
        ) from e


def await_stack(waiter: StackWaiter, stack_name: str) -> Stack | None:
    """``await_final_status`` with provider failures wrapped."""
    return provider_call(stack_name, "await", lambda: waiter.await_final_status(stack_name))


def stack_upserter(
    ctx: WorkflowContext,
    strategy: StackStrategy,
    waiter: StackWaiter,
    upserter: StackUpserter,
) -> Step:
    """Build the executor that reconciles one stack."""

    def upsert() -> None:
        stack_name = strategy.stack_name(ctx)

        if strategy.unmanaged is not None:
            external = strategy.unmanaged(ctx)
            if external is not None:
                logger.info("stack.unmanaged", stack=stack_name, published=sorted(external))
                ctx.set_params(external)
                return

        current = await_stack(waiter, stack_name)
        if not stack_exists(current):
            logger.info("stack.create", stack=stack_name)
        elif needs_recreate(current.status):
            logger.warning(
                "stack.repair",
                stack=stack_name,
                status=current.status.value,
                reason=current.status_reason,
            )
        else:
            logger.info("stack.update", stack=stack_name, status=current.status.value)

        parameters = strategy.parameters(ctx, stack_name)
        tags = {"mu:type": strategy.stack_type.value, **strategy.tags(ctx)}

        provider_call(
            stack_name,
            "upsert",
            lambda: upserter.upsert_stack(stack_name, strategy.body(), parameters, tags),
        )

        final = await_stack(waiter, stack_name)
        if not stack_exists(final) or not final.is_success:
            status = final.status.value if final is not None else None
            reason = final.status_reason if final is not None else ""
            raise StackFailedError(stack_name, status, reason)

        published = strategy.outputs(ctx, final)
        ctx.set_params(published)
        logger.info(
            "stack.ready",
            stack=stack_name,
            status=final.status.value,
            published=sorted(published),
        )

    return Step(name=f"upsert:{strategy.stack_type.value}", action=upsert)


def stack_undeployer(
    ctx: WorkflowContext,
    stack_type: StackType,
    naming: Naming,
    deleter: StackDeleter,
    waiter: StackWaiter,
    *,
    unmanaged: Callable[[WorkflowContext], bool] | None = None,
) -> Step:
    """Build the executor that deletes one stack, if it exists."""

    def undeploy() -> None:
        stack_name = create_stack_name(stack_type, *naming(ctx))

        if unmanaged is not None and unmanaged(ctx):
            logger.info("stack.unmanaged", stack=stack_name)
            return

        current = await_stack(waiter, stack_name)
        if not stack_exists(current):
            logger.info("stack.already_deleted", stack=stack_name)
            return

        logger.info("stack.delete", stack=stack_name, status=current.status.value)
        provider_call(stack_name, "delete", lambda: deleter.delete_stack(stack_name))

        final = await_stack(waiter, stack_name)
        if stack_exists(final):
            raise StackFailedError(stack_name, final.status.value, final.status_reason)
        logger.info("stack.deleted", stack=stack_name)

    return Step(name=f"undeploy:{stack_type.value}", action=undeploy)


__all__ = [
    "StackStrategy",
    "await_stack",
    "provider_call",
    "stack_undeployer",
    "stack_upserter",
]
