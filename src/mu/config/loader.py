"""Load ``mu.yml`` into a validated :class:`~mu.config.models.Config`."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from mu.config.models import Config
from mu.core.errors import InvalidConfigError, MissingConfigError
from mu.core.logging import get_logger

logger = get_logger(__name__)


def parse_config(yaml_content: str, *, basedir: Path | None = None) -> Config:
    """Parse and validate YAML content.

    Parameters
    ----------
    yaml_content
        Raw YAML string.
    basedir
        Directory relative paths in the config resolve against.

    Raises
    ------
    InvalidConfigError
        If the YAML is malformed or does not match the schema.
    """
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise InvalidConfigError("yaml", None, f"Invalid YAML: {e}", cause=e) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidConfigError("yaml", type(data).__name__, "Configuration must be a mapping")

    if basedir is not None:
        data["basedir"] = basedir

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise InvalidConfigError("config", None, f"Invalid configuration: {e}", cause=e) from e


def load_config(path: str | Path) -> Config:
    """Load and validate a configuration file.

    The directory holding the file becomes ``Config.basedir``.
    """
    path = Path(path)
    if not path.is_file():
        raise MissingConfigError("config_file", f"Configuration file not found: {path}")

    logger.debug("config.loading", path=str(path))
    config = parse_config(path.read_text(encoding="utf-8"), basedir=path.resolve().parent)
    logger.debug("config.loaded", path=str(path), environments=config.environment_names())
    return config
