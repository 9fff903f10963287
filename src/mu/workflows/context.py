"""
Workflow Context - mutable state shared by the executors of one run.

One ``WorkflowContext`` is created per workflow run and handed to every
executor factory of that run. Executors read what earlier executors wrote
and write what later ones need:

- the environment resolver stores the resolved ``Environment``
- the service input step stores the service name
- each stack reconciler reads ``params`` for its inputs and writes its
  stack's outputs back into ``params``

Unlike a checkpointed, immutable context, this one is mutated in place:
executors run strictly one after another and the context never leaves the
run that created it. Concurrent runs (different environments, say) each
get their own instance.

Example:
    ctx = WorkflowContext.create("environment-upsert")
    finder = environment_finder(ctx, config, "dev")
    finder()
    ctx.require_environment().name  # 'dev'

Tags:
    mu, workflows, context, shared-state, parameter-propagation
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from mu.config.models import Environment
from mu.core.errors import WorkflowError


@dataclass
class WorkflowContext:
    """
    State that flows through the executors of a single workflow run.

    Attributes:
        workflow_name: Name of the workflow being executed
        run_id: Identifier for this run, bound into every log event
        environment: Resolved environment; ``None`` until resolved
        service_name: Logical service being acted on (service workflows)
        params: Parameter Mapping; later writes overwrite earlier ones
        started_at: When this run was created
    """

    workflow_name: str = ""
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    environment: Environment | None = None
    service_name: str = ""
    params: dict[str, str] = field(default_factory=dict)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        workflow_name: str,
        *,
        service_name: str = "",
        params: Mapping[str, str] | None = None,
        run_id: str | None = None,
    ) -> WorkflowContext:
        """Create the context for a new run."""
        ctx = cls(workflow_name=workflow_name, service_name=service_name, params=dict(params or {}))
        if run_id:
            ctx.run_id = run_id
        return ctx

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def has_environment(self) -> bool:
        return self.environment is not None

    def require_environment(self) -> Environment:
        """Return the resolved environment or fail if resolution has not run."""
        if self.environment is None:
            raise WorkflowError(
                f"Workflow '{self.workflow_name}' has no resolved environment"
            ).with_context(workflow=self.workflow_name, run_id=self.run_id)
        return self.environment

    def get_param(self, key: str, default: str | None = None) -> str | None:
        return self.params.get(key, default)

    # =========================================================================
    # Mutation (in place)
    # =========================================================================

    def set_params(self, updates: Mapping[str, str]) -> None:
        """Merge ``updates`` into the Parameter Mapping."""
        self.params.update(updates)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging and CLI output."""
        return {
            "workflow_name": self.workflow_name,
            "run_id": self.run_id,
            "environment": self.environment.name if self.environment else None,
            "service_name": self.service_name or None,
            "params": dict(self.params),
            "started_at": self.started_at.isoformat(),
        }

    def __repr__(self) -> str:
        env = self.environment.name if self.environment else None
        return (
            f"WorkflowContext(run_id={self.run_id!r}, "
            f"workflow={self.workflow_name!r}, "
            f"environment={env!r}, "
            f"params={sorted(self.params)})"
        )


__all__ = ["WorkflowContext"]
