"""
Stack Provider protocols.

The Stack Provider is the remote-API client that actually creates, updates,
deletes and describes stacks. mu depends only on its shape, split into one
narrow capability per operation so each reconciler asks for exactly what it
uses and test doubles stay small.

Architecture:
    ::

        StackWaiter     await_final_status(name) -> Stack | None
        StackUpserter   upsert_stack(name, body, parameters, tags) -> None
        StackDeleter    delete_stack(name) -> None
        ImageFinder     find_latest_image_id(pattern) -> str

        StackProvider   all four (what a real client implements)

Contract:
    - Failures are raised. mu wraps them in ``StackProviderError`` with the
      stack name attached.
    - ``await_final_status`` polls until the stack is in a terminal status
      and returns it, or returns ``None`` when no stack by that name exists.
      Polling interval, retries and timeouts belong to the provider; mu has
      no timeout of its own.
    - ``find_latest_image_id`` returns the most recently created image whose
      name matches ``pattern`` and raises when none match.

Guardrails:
    ❌ DON'T: Return a failed status from upsert_stack instead of raising
    ✅ DO: Raise; the status of the stack is reported by await_final_status

Tags:
    protocol, stack-provider, contracts, mu-stacks
"""

from __future__ import annotations

from typing import Protocol, TextIO, runtime_checkable

from mu.stacks.models import Stack


@runtime_checkable
class StackWaiter(Protocol):
    """Block until a stack is in a terminal status."""

    def await_final_status(self, stack_name: str) -> Stack | None:
        """Return the settled stack, or ``None`` if it does not exist."""
        ...


@runtime_checkable
class StackUpserter(Protocol):
    """Create a stack, or update it in place when it already exists."""

    def upsert_stack(
        self,
        stack_name: str,
        body: TextIO,
        parameters: dict[str, str],
        tags: dict[str, str],
    ) -> None:
        """Start the create/update; does not wait for it to finish."""
        ...


@runtime_checkable
class StackDeleter(Protocol):
    """Delete a stack."""

    def delete_stack(self, stack_name: str) -> None:
        """Start the delete; does not wait for it to finish."""
        ...


@runtime_checkable
class ImageFinder(Protocol):
    """Look up machine images by name pattern."""

    def find_latest_image_id(self, pattern: str) -> str:
        """Return the newest image id whose name matches ``pattern``."""
        ...


@runtime_checkable
class StackProvider(StackWaiter, StackUpserter, StackDeleter, ImageFinder, Protocol):
    """Everything a complete remote-API client provides."""


__all__ = [
    "ImageFinder",
    "StackDeleter",
    "StackProvider",
    "StackUpserter",
    "StackWaiter",
]
