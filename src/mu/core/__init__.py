"""
mu.core - primitives shared by every mu module.

- errors:   typed error hierarchy (MuError and friends)
- result:   Ok/Err outcome envelope
- logging:  structlog configuration and helpers
- settings: MU_* runtime settings
"""

from mu.core.errors import (
    ConfigError,
    EnvironmentNotFoundError,
    ErrorCategory,
    ErrorContext,
    ImageNotFoundError,
    InvalidConfigError,
    MissingConfigError,
    MuError,
    ResolutionError,
    StackError,
    StackFailedError,
    StackNotFoundError,
    StackProviderError,
    WorkflowError,
    is_retryable,
)
from mu.core.logging import LogContext, configure_logging, get_logger
from mu.core.result import Err, Ok, Result, try_result

__all__ = [
    # errors
    "ConfigError",
    "EnvironmentNotFoundError",
    "ErrorCategory",
    "ErrorContext",
    "ImageNotFoundError",
    "InvalidConfigError",
    "MissingConfigError",
    "MuError",
    "ResolutionError",
    "StackError",
    "StackFailedError",
    "StackNotFoundError",
    "StackProviderError",
    "WorkflowError",
    "is_retryable",
    # logging
    "LogContext",
    "configure_logging",
    "get_logger",
    # result
    "Err",
    "Ok",
    "Result",
    "try_result",
]
