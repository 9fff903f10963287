"""Executors and the workflow composer.

Manifesto:
    A deployment is a short, ordered list of side-effecting steps: find the
    environment, reconcile the network, reconcile the cluster. Each step is
    an *executor*: a pending unit of work with its inputs already bound,
    run with no arguments, reporting success or a typed error. The composer
    runs executors in order and stops at the first error.

ARCHITECTURE
────────────
::

    Executor (protocol)  name + __call__() -> Result[None]
      ├── Step           wraps a zero-argument action; MuError → Err
      └── Workflow       runs executors in order, first Err wins

    new_workflow(*executors, name=...) → Workflow

Short-circuit contract:
    - Executors run strictly in sequence.
    - The first ``Err`` is returned verbatim as the workflow's result.
    - Later executors are never invoked.
    - Nothing is rolled back; every reconciler is safe to re-run, so
      re-running the whole workflow is the recovery path.

Only ``MuError`` becomes an ``Err``. Any other exception escaping an action
is a bug and propagates to the caller.

Example::

    wf = new_workflow(
        environment_finder(ctx, config, "dev"),
        stack_upserter(ctx, vpc_strategy(), provider, provider),
        name="environment-upsert",
    )
    result = wf()
    if result.is_err():
        print(result.error)

Tags:
    mu, workflows, executor, composer, short-circuit
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from mu.core.errors import WorkflowError
from mu.core.logging import LogContext, get_logger
from mu.core.result import Ok, Result, try_result
from mu.workflows.context import WorkflowContext

logger = get_logger(__name__)


@runtime_checkable
class Executor(Protocol):
    """A pending unit of work, run with no arguments."""

    name: str

    def __call__(self) -> Result[None]: ...


@dataclass(frozen=True)
class Step:
    """Leaf executor: runs ``action`` and reports its outcome.

    ``action`` signals failure by raising a ``MuError``; its return value
    is ignored.
    """

    name: str
    action: Callable[[], object]

    def __call__(self) -> Result[None]:
        started = time.monotonic()
        logger.debug("executor.start", executor=self.name)

        result = try_result(self.action).map(lambda _: None)

        duration = round(time.monotonic() - started, 3)
        result.inspect_err(
            lambda error: logger.debug(
                "executor.failed",
                executor=self.name,
                error=str(error),
                duration_seconds=duration,
            )
        )
        if result.is_ok():
            logger.debug("executor.complete", executor=self.name, duration_seconds=duration)
        return result


@dataclass
class Workflow:
    """Composite executor running its executors in order.

    Attributes:
        name: Workflow name (log events, error context)
        executors: The ordered executors
        context: The run's shared context, when the factory created one
    """

    name: str
    executors: list[Executor] = field(default_factory=list)
    context: WorkflowContext | None = None

    @property
    def run_id(self) -> str | None:
        return self.context.run_id if self.context else None

    def __call__(self) -> Result[None]:
        return self.run()

    def run(self) -> Result[None]:
        """Run every executor in order; return the first error unchanged."""
        with LogContext(workflow=self.name, run_id=self.run_id):
            logger.info("workflow.start", executor_count=len(self.executors))
            started = time.monotonic()

            for index, executor in enumerate(self.executors):
                result = executor()
                if result.is_err():
                    logger.error(
                        "workflow.failed",
                        failed_executor=executor.name,
                        executed=index + 1,
                        skipped=len(self.executors) - index - 1,
                        error=str(result.error),
                    )
                    return result

            logger.info(
                "workflow.complete",
                executed=len(self.executors),
                duration_seconds=round(time.monotonic() - started, 3),
            )
        return Ok(None)


def new_workflow(
    *executors: Executor,
    name: str = "workflow",
    context: WorkflowContext | None = None,
) -> Workflow:
    """Compose executors into a single runnable workflow.

    Raises
    ------
    WorkflowError
        If no executors are given.
    """
    if not executors:
        raise WorkflowError(f"Workflow '{name}' has no executors").with_context(workflow=name)
    return Workflow(name=name, executors=list(executors), context=context)


__all__ = ["Executor", "Step", "Workflow", "new_workflow"]
