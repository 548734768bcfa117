"""Pydantic configuration models for rented MySQL containers.

These models are the single defaults table: every field carries the value
used when the caller does not override it, so ``RentConfig()`` is always a
valid configuration.
"""

from __future__ import annotations

import uuid
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, SecretStr


def unique_name() -> str:
    """Fresh container name so concurrent test runs never collide."""
    return str(uuid.uuid4())


class WaitConfig(BaseModel):
    """Timings for the readiness and login waits, in seconds."""

    model_config = ConfigDict(frozen=True)

    wait_before: float = Field(default=0.0, ge=0)
    # startup of a mysql 5.7 container takes ~14s
    wait_after: float = Field(default=15.0, ge=0)
    global_timeout: float = Field(default=30.0, gt=0)
    poll_interval: float = Field(default=1.0, ge=0)
    tcp_connect_timeout: float = Field(default=1.0, gt=0)
    connect_poll_interval: float = Field(default=2.0, ge=0)
    # None polls the login forever; only set it when an outer timeout exists.
    connect_timeout: float | None = Field(default=120.0, gt=0)


class RuntimeConfig(BaseModel):
    """How the container runtime and the MySQL service are addressed."""

    model_config = ConfigDict(frozen=True)

    binary: str = "docker"
    image_repository: str = "mysql"
    service_port: int = Field(default=3306, ge=1, le=65535)
    database_env: str = "MYSQL_DATABASE"
    password_env: str = "MYSQL_ROOT_PASSWORD"
    readiness_host: str = "localhost"
    host: str = "127.0.0.1"
    scheme: str = "mysql"
    user: str = "root"


class RentConfig(BaseModel):
    """Frozen configuration of one rented container."""

    model_config = ConfigDict(frozen=True)

    database: str = "oc3"
    root_password: SecretStr = SecretStr("4NRRKHMjd6SU83Ce")
    local_port: int = Field(default=3306, ge=1, le=65535)
    image: str = "mysql:latest"
    container_name: str = Field(default_factory=unique_name)
    scripts: tuple[str, ...] = ()
    avoid_cleanup: bool = False
    wait: WaitConfig = Field(default_factory=WaitConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)

    def mysql_url(self) -> str:
        """Connection endpoint; recomputed on every call."""
        rt = self.runtime
        password = quote(self.root_password.get_secret_value(), safe="")
        return (
            f"{rt.scheme}://{rt.user}:{password}"
            f"@{rt.host}:{self.local_port}/{self.database}"
        )
