"""Fluent builder that collects overrides and rents a container."""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator
from typing import Any, Self

from pydantic import ValidationError

from mysql_rent.config.models import RentConfig, RuntimeConfig, WaitConfig
from mysql_rent.errors import ConfigError
from mysql_rent.provisioner import RentProvisioner
from mysql_rent.rent import Rent


class RentBuilder:
    """Accumulates overrides; unset fields fall back to RentConfig defaults.

    Setters only record values. ``config()`` snapshots the draft, so the
    builder can be reused: every ``rent()`` call provisions an independent
    container, with a freshly generated name unless one was set.
    """

    def __init__(self, provisioner: RentProvisioner | None = None) -> None:
        self._provisioner = provisioner
        self._draft: dict[str, Any] = {}
        self._version: str | None = None
        self._scripts: list[str] = []

    def container_name(self, value: str) -> Self:
        self._draft["container_name"] = value
        return self

    def local_port(self, value: int) -> Self:
        self._draft["local_port"] = value
        return self

    def database(self, value: str) -> Self:
        self._draft["database"] = value
        return self

    def root_password(self, value: str) -> Self:
        self._draft["root_password"] = value
        return self

    def version(self, value: str) -> Self:
        """Use the ``<repository>:<value>`` image, e.g. ``mysql:5.7``."""
        self._version = value
        self._draft.pop("image", None)
        return self

    def image(self, value: str) -> Self:
        self._draft["image"] = value
        self._version = None
        return self

    def script(self, value: str) -> Self:
        """Append a seed script; scripts run in the order they were added."""
        self._scripts.append(value)
        return self

    def wait(self, value: WaitConfig) -> Self:
        self._draft["wait"] = value
        return self

    def runtime(self, value: RuntimeConfig) -> Self:
        self._draft["runtime"] = value
        return self

    def config(self) -> RentConfig:
        data = dict(self._draft)
        if self._version is not None:
            runtime = data.get("runtime") or RuntimeConfig()
            data["image"] = f"{runtime.image_repository}:{self._version}"
        data["scripts"] = tuple(self._scripts)
        try:
            return RentConfig.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid rent configuration:\n{exc}") from exc

    async def rent(self) -> Rent:
        provisioner = self._provisioner or RentProvisioner()
        return await provisioner.provision(self.config())

    @contextlib.asynccontextmanager
    async def renting(self) -> AsyncIterator[Rent]:
        """Rent for the duration of an ``async with`` block."""
        rent = await self.rent()
        async with rent:
            yield rent
