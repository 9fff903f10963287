"""Dry-run Stack Provider — preview what a workflow would do.

``DryRunStackProvider`` keeps stacks in memory and settles every change
immediately, so a full environment or service workflow can run end to end
without touching the orchestration backend. Every call is recorded; the CLI
prints the recorded calls as the plan.

Simulation rules:
    - upsert of an unknown stack → ``CREATE_COMPLETE``
    - upsert of an existing stack → ``UPDATE_COMPLETE``
    - outputs are synthesised from the body's ``Outputs`` section as
      ``<stack-name>-<OutputName>``
    - delete removes the stack; awaiting it afterwards reports absent
    - image lookups return ``images[pattern]`` when an image table is
      given, otherwise a fixed placeholder id
    - with ``assume_existing=True`` a stack that was never upserted or
      deleted here reads as ``CREATE_COMPLETE`` with the outputs its type's
      template declares, so teardown and service deploys preview the calls
      they would make against a live environment

Example::

    from mu.stacks.dry_run import DryRunStackProvider

    provider = DryRunStackProvider()
    result = new_environment_upserter(config, "dev", provider)()
    for call in provider.calls:
        print(call)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TextIO

from mu.core.logging import get_logger
from mu.stacks.models import STACK_NAME_PREFIX, Stack, StackStatus, StackType
from mu.stacks.templates import get_template, template_outputs

logger = get_logger(__name__)

PLACEHOLDER_IMAGE_ID = "ami-00000000"


def _declared_outputs(stack_name: str) -> list[str]:
    """Outputs of the bundled template for the type encoded in ``stack_name``."""
    prefix, _, rest = stack_name.partition("-")
    type_value = rest.partition("-")[0]
    if prefix != STACK_NAME_PREFIX or type_value not in {t.value for t in StackType}:
        return []
    try:
        return template_outputs(get_template(StackType(type_value)).read())
    except FileNotFoundError:
        return []


def _assumed_stack(stack_name: str) -> Stack:
    return Stack(
        id=f"dry-run/{stack_name}",
        name=stack_name,
        status=StackStatus.CREATE_COMPLETE,
        outputs={key: f"{stack_name}-{key}" for key in _declared_outputs(stack_name)},
    )


@dataclass(frozen=True)
class ProviderCall:
    """One recorded Stack Provider call."""

    method: str
    target: str
    parameters: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        if self.parameters:
            params = ", ".join(f"{k}={v}" for k, v in sorted(self.parameters.items()))
            return f"{self.method}({self.target}; {params})"
        return f"{self.method}({self.target})"


class DryRunStackProvider:
    """In-memory Stack Provider that settles every change instantly."""

    def __init__(
        self,
        stacks: dict[str, Stack] | None = None,
        images: dict[str, str] | None = None,
        *,
        assume_existing: bool = False,
    ) -> None:
        self.stacks: dict[str, Stack] = dict(stacks or {})
        self.images = images
        self.assume_existing = assume_existing
        self.calls: list[ProviderCall] = []
        self._deleted: set[str] = set()

    def await_final_status(self, stack_name: str) -> Stack | None:
        self.calls.append(ProviderCall("await_final_status", stack_name))
        if self.assume_existing and stack_name not in self.stacks and stack_name not in self._deleted:
            self.stacks[stack_name] = _assumed_stack(stack_name)
        return self.stacks.get(stack_name)

    def upsert_stack(
        self,
        stack_name: str,
        body: TextIO,
        parameters: dict[str, str],
        tags: dict[str, str],
    ) -> None:
        self.calls.append(ProviderCall("upsert_stack", stack_name, dict(parameters)))
        existing = self.stacks.get(stack_name)
        status = StackStatus.UPDATE_COMPLETE if existing else StackStatus.CREATE_COMPLETE
        outputs = {key: f"{stack_name}-{key}" for key in template_outputs(body.read())}

        self.stacks[stack_name] = Stack(
            id=f"dry-run/{stack_name}",
            name=stack_name,
            status=status,
            last_update_time=datetime.now(UTC),
            tags=dict(tags),
            outputs=outputs,
            parameters=dict(parameters),
        )
        logger.debug("dry_run.upsert", stack=stack_name, status=status.value)

    def delete_stack(self, stack_name: str) -> None:
        self.calls.append(ProviderCall("delete_stack", stack_name))
        self.stacks.pop(stack_name, None)
        self._deleted.add(stack_name)
        logger.debug("dry_run.delete", stack=stack_name)

    def find_latest_image_id(self, pattern: str) -> str:
        self.calls.append(ProviderCall("find_latest_image_id", pattern))
        if self.images is None:
            return PLACEHOLDER_IMAGE_ID
        if pattern not in self.images:
            raise LookupError(f"no image matches '{pattern}'")
        return self.images[pattern]

    def plan(self) -> list[str]:
        """Recorded calls as printable lines."""
        return [str(call) for call in self.calls]


__all__ = ["DryRunStackProvider", "PLACEHOLDER_IMAGE_ID", "ProviderCall"]
