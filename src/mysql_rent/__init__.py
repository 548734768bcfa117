"""Ephemeral MySQL containers for test suites."""

from mysql_rent.builder import RentBuilder
from mysql_rent.config.models import RentConfig, RuntimeConfig, WaitConfig
from mysql_rent.errors import (
    ConfigError,
    ConnectionPollError,
    LaunchError,
    ReadinessTimeoutError,
    RentError,
    SeedScriptError,
)
from mysql_rent.provisioner import RentProvisioner
from mysql_rent.rent import Rent

__all__ = [
    "ConfigError",
    "ConnectionPollError",
    "LaunchError",
    "ReadinessTimeoutError",
    "Rent",
    "RentBuilder",
    "RentConfig",
    "RentError",
    "RentProvisioner",
    "RuntimeConfig",
    "SeedScriptError",
    "WaitConfig",
]
