"""Test Harness — doubles and helpers for testing mu workflows.

Manifesto:
Workflow tests care about two things: which Stack Provider calls were
made, in what order, and what ended up in the Parameter Mapping. This
module provides a scripted provider that records every call, small
config factories, and assertions over workflow results.

ARCHITECTURE
────────────
::

    Test doubles:
      RecordingStackProvider   → scripted await responses per stack name,
                                 optional failures, full call log

    Factories:
      make_environment(name, ...)  → Environment
      make_config(*envs, ...)      → Config
      make_stack(name, status, ...) → Stack

    Assertion helpers:
      assert_workflow_ok(result)
      assert_workflow_err(result, error_type=None, contains=None)
      assert_calls(provider, expected)

Example::

    from mu.testing import RecordingStackProvider, make_config, make_environment

    provider = RecordingStackProvider(
        responses={"mu-cluster-dev": [None, make_stack("mu-cluster-dev")]},
    )
    result = new_environment_upserter(make_config(make_environment("dev")), "dev", provider)()
    assert_workflow_ok(result)

Tags:
    mu, testing, harness, doubles, assertions
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TextIO

from mu.config.models import ClusterConfig, Config, Environment, Service, VpcTarget
from mu.core.result import Result
from mu.stacks.dry_run import ProviderCall
from mu.stacks.models import Stack, StackStatus

# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class RecordingStackProvider:
    """Stack Provider double with scripted responses.

    Parameters
    ----------
    responses
        Mapping of ``stack name → list of await responses``. Each
        ``await_final_status`` call pops the next entry; once a list is
        exhausted its last entry is repeated. Stacks not listed are absent.
    image_id
        Value returned by ``find_latest_image_id``.
    fail_on
        Mapping of ``method name → exception`` to raise from that method.

    Example::

        provider = RecordingStackProvider(
            responses={"mu-vpc-dev": [None, make_stack("mu-vpc-dev")]},
            fail_on={"delete_stack": RuntimeError("throttled")},
        )
    """

    def __init__(
        self,
        responses: dict[str, list[Stack | None]] | None = None,
        *,
        image_id: str = "ami-12345678",
        fail_on: dict[str, Exception] | None = None,
    ) -> None:
        self._responses = {name: list(seq) for name, seq in (responses or {}).items()}
        self._image_id = image_id
        self._fail_on = fail_on or {}
        self.calls: list[ProviderCall] = []
        self.bodies: dict[str, str] = {}
        self.tags: dict[str, dict[str, str]] = {}

    def _record(self, method: str, target: str, parameters: dict[str, str] | None = None) -> None:
        self.calls.append(ProviderCall(method, target, dict(parameters or {})))
        if method in self._fail_on:
            raise self._fail_on[method]

    def await_final_status(self, stack_name: str) -> Stack | None:
        self._record("await_final_status", stack_name)
        seq = self._responses.get(stack_name)
        if not seq:
            return None
        if len(seq) > 1:
            return seq.pop(0)
        return seq[0]

    def upsert_stack(
        self,
        stack_name: str,
        body: TextIO,
        parameters: dict[str, str],
        tags: dict[str, str],
    ) -> None:
        self.bodies[stack_name] = body.read()
        self.tags[stack_name] = dict(tags)
        self._record("upsert_stack", stack_name, parameters)

    def delete_stack(self, stack_name: str) -> None:
        self._record("delete_stack", stack_name)

    def find_latest_image_id(self, pattern: str) -> str:
        self._record("find_latest_image_id", pattern)
        return self._image_id

    # Inspection

    def methods(self) -> list[str]:
        return [call.method for call in self.calls]

    def calls_to(self, method: str) -> list[ProviderCall]:
        return [call for call in self.calls if call.method == method]

    def upserted_parameters(self, stack_name: str) -> dict[str, str]:
        for call in self.calls_to("upsert_stack"):
            if call.target == stack_name:
                return call.parameters
        raise AssertionError(f"No upsert recorded for '{stack_name}'")


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def make_environment(
    name: str = "dev",
    *,
    vpc_id: str = "",
    subnet_ids: Iterable[str] = (),
    hostname: str = "",
    **cluster: Any,
) -> Environment:
    """Create an Environment; a ``vpc_id`` makes its network unmanaged."""
    subnets = list(subnet_ids)
    vpc_target = VpcTarget(vpc_id=vpc_id, public_subnet_ids=subnets) if vpc_id or subnets else None
    return Environment(
        name=name,
        loadbalancer={"hostname": hostname},
        cluster=ClusterConfig(**cluster),
        vpc_target=vpc_target,
    )


def make_config(*environments: Environment, **service: Any) -> Config:
    """Create a Config holding ``environments`` and a Service built from ``service``."""
    return Config(environments=list(environments), service=Service(**service))


def make_stack(
    name: str,
    status: StackStatus | str = StackStatus.CREATE_COMPLETE,
    *,
    outputs: dict[str, str] | None = None,
    reason: str = "",
) -> Stack:
    return Stack(name=name, status=status, status_reason=reason, outputs=dict(outputs or {}))


# ---------------------------------------------------------------------------
# Assertion helpers
# ---------------------------------------------------------------------------


def assert_workflow_ok(result: Result[None]) -> None:
    """Assert that a workflow returned ``Ok``."""
    if result.is_err():
        raise AssertionError(f"Expected Ok, got Err: {result.error!r}")


def assert_workflow_err(
    result: Result[None],
    error_type: type[Exception] | None = None,
    contains: str | None = None,
) -> Exception:
    """Assert that a workflow returned ``Err``; return the error for further checks."""
    if result.is_ok():
        raise AssertionError("Expected Err, got Ok")
    error = result.error
    if error_type is not None and not isinstance(error, error_type):
        raise AssertionError(f"Expected {error_type.__name__}, got {type(error).__name__}: {error}")
    if contains is not None and contains not in str(error):
        raise AssertionError(f"Expected error containing {contains!r}, got {error}")
    return error


def assert_calls(provider: RecordingStackProvider, expected: list[tuple[str, str]]) -> None:
    """Assert the exact ``(method, target)`` call sequence."""
    actual = [(call.method, call.target) for call in provider.calls]
    if actual != expected:
        raise AssertionError(f"Call sequence mismatch:\n  expected: {expected}\n  actual:   {actual}")


__all__ = [
    "RecordingStackProvider",
    "assert_calls",
    "assert_workflow_err",
    "assert_workflow_ok",
    "make_config",
    "make_environment",
    "make_stack",
]
