"""
Structured error types for mu.

Every failure the reconciliation engine can report is a ``MuError``. Each
error carries a category (what kind of failure), a retryable flag, an
``ErrorContext`` with the stack, environment and workflow it concerns, and
the underlying cause when one exception wraps another.

Manifesto:
    - **Typed Error Hierarchy:** Resolution, configuration and stack errors
      are distinct types so callers can react to each
    - **Explicit Retry Semantics:** Each error knows if re-running helps
    - **Rich Context:** Errors name the stack they concern
    - **Error Chaining:** Provider exceptions are kept as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                          MuError                                 │
        │  (category, retryable, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ConfigError          ResolutionError       StackError           │
        │  (CONFIG)             (RESOLUTION)          (STACK, stack_name)  │
        │       │                    │                     │               │
        │  MissingConfigError   EnvironmentNotFound   StackProviderError   │
        │  InvalidConfigError                         StackFailedError     │
        │                                             StackNotFoundError   │
        │                                             ImageNotFoundError   │
        │                                                                  │
        │  WorkflowError (WORKFLOW)                                        │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> err = StackProviderError("mu-vpc-dev", "throttled", retryable=True)
    >>> err.stack_name
    'mu-vpc-dev'
    >>> err.retryable
    True

    >>> err = EnvironmentNotFoundError("staging")
    >>> str(err)
    "Unable to find environment named 'staging' in configuration"

Tags:
    error-handling, exception-hierarchy, error-context, mu-core

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    CONFIG = "CONFIG"  # Missing or invalid configuration
    RESOLUTION = "RESOLUTION"  # Named entity not found
    STACK = "STACK"  # Stack provider or stack status failure
    WORKFLOW = "WORKFLOW"  # Composition errors
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set end up in ``to_dict()``, so the same context
    type serves resolution errors (no stack yet) and stack errors alike.

    Attributes:
        workflow: Name of the workflow that was running
        run_id: Workflow run identifier
        step: Executor name within the workflow
        stack_name: Remote stack the error concerns
        environment: Environment name
        service: Service name
        metadata: Additional key-value pairs
    """

    workflow: str | None = None
    run_id: str | None = None
    step: str | None = None
    stack_name: str | None = None
    environment: str | None = None
    service: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["workflow", "run_id", "step", "stack_name", "environment", "service"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class MuError(Exception):
    """
    Base exception for all mu errors.

    Subclasses set ``default_category`` and ``default_retryable`` so call
    sites only pass what differs from the defaults.

    Usage:
        raise MuError("unexpected state").with_context(step="vpc")
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> MuError:
        """
        Add context to this error (fluent API).

        Known ``ErrorContext`` fields are set directly, anything else lands
        in ``context.metadata``.
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context = self.context.to_dict()
        if context:
            result["context"] = context
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(MuError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingConfigError(ConfigError):
    """Required configuration is missing."""

    def __init__(self, key: str, message: str | None = None, **kwargs: Any):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}", **kwargs)


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None, **kwargs: Any):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}", **kwargs)


# =============================================================================
# RESOLUTION ERRORS
# =============================================================================


class ResolutionError(MuError):
    """A named entity could not be resolved."""

    default_category = ErrorCategory.RESOLUTION
    default_retryable = False


class EnvironmentNotFoundError(ResolutionError):
    """No environment with the requested name exists in the configuration."""

    def __init__(self, environment_name: str):
        self.environment_name = environment_name
        super().__init__(
            f"Unable to find environment named '{environment_name}' in configuration",
            context=ErrorContext(environment=environment_name),
        )


# =============================================================================
# STACK ERRORS
# =============================================================================


class StackError(MuError):
    """Base class for errors concerning a single remote stack."""

    default_category = ErrorCategory.STACK
    default_retryable = False

    def __init__(self, stack_name: str, message: str, **kwargs: Any):
        self.stack_name = stack_name
        super().__init__(message, **kwargs)
        self.context.stack_name = stack_name


class StackProviderError(StackError):
    """
    A Stack Provider call failed.

    Wraps whatever the provider raised with the name of the stack that was
    being acted on. ``retryable`` is copied from the provider exception's
    own ``retryable`` flag when it has one, and is False otherwise.
    """

    def __init__(
        self,
        stack_name: str,
        operation: str,
        *,
        cause: Exception | None = None,
        retryable: bool | None = None,
    ):
        self.operation = operation
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            stack_name,
            f"Stack '{stack_name}' {operation} failed{detail}",
            cause=cause,
            retryable=retryable,
        )


class StackFailedError(StackError):
    """A stack settled in a non-success terminal status."""

    def __init__(self, stack_name: str, status: str | None, reason: str = ""):
        self.status = status
        self.reason = reason
        shown = status or "absent"
        message = f"Stack '{stack_name}' finished in status {shown}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(stack_name, message)


class StackNotFoundError(StackError):
    """A stack that the workflow depends on does not exist."""

    def __init__(self, stack_name: str, message: str | None = None):
        super().__init__(stack_name, message or f"Stack '{stack_name}' does not exist")


class ImageNotFoundError(StackError):
    """No machine image matches the requested name pattern."""

    def __init__(self, stack_name: str, pattern: str, *, cause: Exception | None = None):
        self.pattern = pattern
        super().__init__(
            stack_name,
            f"No image matching '{pattern}' found for stack '{stack_name}'",
            cause=cause,
        )


# =============================================================================
# WORKFLOW ERRORS
# =============================================================================


class WorkflowError(MuError):
    """Workflow composition error (e.g. an empty workflow)."""

    default_category = ErrorCategory.WORKFLOW
    default_retryable = False


def is_retryable(error: Exception) -> bool:
    """Check whether re-running after ``error`` may succeed."""
    if isinstance(error, MuError):
        return error.retryable
    return False


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "MuError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "ResolutionError",
    "EnvironmentNotFoundError",
    "StackError",
    "StackProviderError",
    "StackFailedError",
    "StackNotFoundError",
    "ImageNotFoundError",
    "WorkflowError",
    "is_retryable",
]
