"""Runtime settings for mu.

Settings that change per invocation or per machine (where the config file
lives, how verbose to log, which Stack Provider to talk to) come from
``MU_*`` environment variables or a ``.env`` file. The stack definitions
themselves live in the YAML config file, see :mod:`mu.config`.

Fields
──────
config_file     : Path to the mu YAML configuration
log_level       : Structlog log level
log_json        : Force JSON (True) or console (False) logs; None = auto
stack_provider  : ``"module:attr"`` reference to a Stack Provider factory
dry_run         : Use the in-memory dry-run provider instead

Examples:
    >>> import os
    >>> os.environ["MU_LOG_LEVEL"] = "DEBUG"
    >>> MuSettings().log_level
    'DEBUG'

Tags:
    settings, configuration, pydantic, environment, mu-core
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MuSettings(BaseSettings):
    """Settings shared by the CLI and programmatic callers."""

    model_config = SettingsConfigDict(
        env_prefix="MU_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_file: Path = Field(
        default=Path("mu.yml"),
        description="Path to the mu configuration file",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None

    # ── Stack provider ───────────────────────────────────────────
    stack_provider: str | None = Field(
        default=None,
        description="Factory reference ('module:attr') returning a Stack Provider",
    )
    dry_run: bool = False


_settings_cache: dict[str, MuSettings] = {}


def get_settings(*, _force_reload: bool = False) -> MuSettings:
    """Load, validate, and cache a :class:`MuSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = MuSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop the cached settings (tests, reloads)."""
    _settings_cache.clear()


__all__ = ["MuSettings", "get_settings", "clear_settings_cache"]
