"""
Shared pytest fixtures for mu tests.

This module provides:
- Settings/log-context cleanup for test isolation
- Sample configurations (managed and unmanaged network)
- A recording Stack Provider

Usage:
    Fixtures are auto-discovered by pytest.

    def test_something(sample_config, provider):
        ...
"""

from __future__ import annotations

from collections.abc import Generator

import pytest

from mu.config.models import Config
from mu.core.logging import clear_context
from mu.core.settings import clear_settings_cache
from mu.testing import RecordingStackProvider, make_config, make_environment

SAMPLE_YAML = """\
region: us-west-2
environments:
  - name: dev
    loadbalancer:
      hostname: dev.example.com
    cluster:
      keyName: ops
      desiredCapacity: 2
      maxSize: 4
  - name: prod
    vpcTarget:
      vpcId: vpc-0a1b2c
      publicSubnetIds:
        - subnet-1
        - subnet-2
service:
  name: billing
  imageRepository: registry.example.com/billing
  port: 8080
  pathPatterns:
    - /billing/*
"""


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear cached settings and bound log context around every test."""
    for key in ("MU_CONFIG_FILE", "MU_LOG_LEVEL", "MU_LOG_JSON", "MU_STACK_PROVIDER", "MU_DRY_RUN"):
        monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    clear_context()
    yield
    clear_settings_cache()
    clear_context()


# =============================================================================
# Configurations
# =============================================================================


@pytest.fixture
def sample_config() -> Config:
    """One managed (dev) and one unmanaged (prod) environment, plus a service."""
    return make_config(
        make_environment("dev", hostname="dev.example.com", key_name="ops", desired_capacity=2),
        make_environment("prod", vpc_id="vpc-0a1b2c", subnet_ids=["subnet-1", "subnet-2"]),
        name="billing",
        image_repository="registry.example.com/billing",
        port=8080,
        path_patterns=["/billing/*"],
    )


@pytest.fixture
def config_file(tmp_path):
    """The sample configuration written to ``mu.yml`` in a temp directory."""
    path = tmp_path / "mu.yml"
    path.write_text(SAMPLE_YAML)
    return path


@pytest.fixture
def provider() -> RecordingStackProvider:
    """A recording provider where every stack starts absent."""
    return RecordingStackProvider()
