"""Configuration models for mu.

Pydantic v2 models for the ``mu.yml`` file. Field names are snake_case in
Python and camelCase in YAML (``vpcTarget.publicSubnetIds``)::

    environments:
      - name: dev
        cluster:
          keyName: ops
          desiredCapacity: 2
      - name: prod
        vpcTarget:
          vpcId: vpc-0a1b2c
          publicSubnetIds: [subnet-1, subnet-2]
    service:
      name: billing
      port: 8080

Key Concepts:
    Environment: a named deployment target. Parsed once, read-only for the
        rest of the run (models are frozen).
    VpcTarget: the externally-managed network descriptor. When it is set,
        the environment's network stack is never touched by mu.
    Service: the service this repository deploys into environments.
    Config: the whole file. Environment order is preserved.

Architecture Decisions:
    - Unknown keys are ignored so newer config files still load.
    - Duplicate environment names are rejected at load time; the resolver
      can then rely on names being unique.

Tags:
    config, pydantic, environment, service, yaml
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Loadbalancer(_ConfigModel):
    """Load balancer settings for an environment."""

    hostname: str = ""


class ClusterConfig(_ConfigModel):
    """Sizing and scaling of the container cluster in an environment."""

    image_id: str = Field(default="", description="Pinned machine image; empty = latest ECS image")
    instance_tenancy: str = ""
    desired_capacity: int = 0
    max_size: int = 0
    key_name: str = ""
    ssh_allow: str = ""
    scale_out_threshold: int = 0
    scale_in_threshold: int = 0


class VpcTarget(_ConfigModel):
    """Externally-managed network descriptor.

    A descriptor that lists subnets must also name their VPC.
    """

    vpc_id: str = ""
    public_subnet_ids: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _subnets_need_vpc(self) -> VpcTarget:
        if self.public_subnet_ids and not self.vpc_id:
            raise ValueError("vpcTarget.publicSubnetIds requires vpcTarget.vpcId")
        return self

    @property
    def is_empty(self) -> bool:
        return not self.vpc_id and not self.public_subnet_ids


class Environment(_ConfigModel):
    """A named deployment target."""

    name: str = Field(..., min_length=1)
    loadbalancer: Loadbalancer = Field(default_factory=Loadbalancer)
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
    vpc_target: VpcTarget | None = None

    @property
    def is_network_unmanaged(self) -> bool:
        """True when the network is owned by someone else and must not be touched."""
        return self.vpc_target is not None and not self.vpc_target.is_empty


class Service(_ConfigModel):
    """The service definition deployed by ``mu service deploy``."""

    name: str = ""
    desired_count: int = 0
    dockerfile: str = "Dockerfile"
    image_repository: str = ""
    port: int = 0
    health_endpoint: str = ""
    cpu: int = 0
    memory: int = 0
    path_patterns: list[str] = Field(default_factory=list)


class Config(_ConfigModel):
    """Root of a mu configuration file."""

    basedir: Path | None = None
    region: str = ""
    environments: list[Environment] = Field(default_factory=list)
    service: Service = Field(default_factory=Service)

    @model_validator(mode="after")
    def _unique_environment_names(self) -> Config:
        seen: set[str] = set()
        for env in self.environments:
            if env.name in seen:
                raise ValueError(f"duplicate environment name '{env.name}'")
            seen.add(env.name)
        return self

    def environment_names(self) -> list[str]:
        return [env.name for env in self.environments]


__all__ = [
    "ClusterConfig",
    "Config",
    "Environment",
    "Loadbalancer",
    "Service",
    "VpcTarget",
]
