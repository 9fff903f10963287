"""mu.config - configuration file models and loader."""

from mu.config.loader import load_config, parse_config
from mu.config.models import (
    ClusterConfig,
    Config,
    Environment,
    Loadbalancer,
    Service,
    VpcTarget,
)

__all__ = [
    "ClusterConfig",
    "Config",
    "Environment",
    "Loadbalancer",
    "Service",
    "VpcTarget",
    "load_config",
    "parse_config",
]
