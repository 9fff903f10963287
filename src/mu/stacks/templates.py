"""Bundled stack bodies, one per stack type.

The engine treats a body as an opaque text stream handed to the Stack
Provider. Only the dry-run provider looks inside, to learn which outputs a
stack declares.
"""

from __future__ import annotations

import io
from importlib import resources
from typing import TextIO

import yaml

from mu.stacks.models import StackType


def _template_text(stack_type: StackType) -> str:
    resource = resources.files("mu.stacks").joinpath("templates", f"{StackType(stack_type).value}.yml")
    if not resource.is_file():
        raise FileNotFoundError(f"No bundled template for stack type '{StackType(stack_type).value}'")
    return resource.read_text(encoding="utf-8")


def get_template(stack_type: StackType) -> TextIO:
    """Return a fresh text stream over the bundled body for ``stack_type``."""
    return io.StringIO(_template_text(stack_type))


def template_outputs(body: str) -> list[str]:
    """Names of the outputs a template body declares, in declaration order."""
    data = yaml.safe_load(body) or {}
    outputs = data.get("Outputs") or {}
    return list(outputs.keys())


__all__ = ["get_template", "template_outputs"]
