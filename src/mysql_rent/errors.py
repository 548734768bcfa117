"""Exception hierarchy for renting ephemeral MySQL containers."""

from __future__ import annotations


class RentError(Exception):
    """Base class for every provisioning failure."""


class ConfigError(RentError, ValueError):
    """Raised when the requested settings do not form a valid rent config."""


class LaunchError(RentError):
    """Raised when the container runtime could not start the container."""


class ReadinessTimeoutError(RentError):
    """Raised when the published port never accepted a TCP connection."""

    def __init__(self, host: str, port: int, timeout: float) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        super().__init__(
            f"timeout waiting for MySQL instance at {host}:{port} "
            f"after {timeout}s"
        )


class ConnectionPollError(RentError):
    """Raised when no login succeeded before the connection deadline."""


class SeedScriptError(RentError):
    """Raised when a seed script fails; later scripts are not executed."""

    def __init__(self, index: int, error: BaseException) -> None:
        self.index = index
        self.error = error
        super().__init__(f"failed to execute script #{index}: {error}")
