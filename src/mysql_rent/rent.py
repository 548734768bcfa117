"""Live handle of a rented MySQL container and its teardown guard."""

from __future__ import annotations

import asyncio
import weakref
from typing import TYPE_CHECKING, Any, Self

import structlog

from mysql_rent.config.models import RentConfig
from mysql_rent.runtime.docker import ContainerRuntime

if TYPE_CHECKING:
    from mysql_rent.builder import RentBuilder

logger = structlog.get_logger()


class _TeardownGuard:
    """Holds what teardown needs without referencing the Rent itself.

    ``weakref.finalize`` keeps a strong reference to ``release``; a
    reference back to the Rent would keep it alive forever.
    """

    def __init__(
        self,
        runtime: ContainerRuntime,
        container_name: str,
        container_id: str | None,
        avoid_cleanup: bool,
    ) -> None:
        self.runtime = runtime
        self.container_name = container_name
        self.container_id = container_id
        self.avoid_cleanup = avoid_cleanup

    def release(self) -> None:
        logger.info(
            "rent.removing",
            container_name=self.container_name,
            container_id=self.container_id,
        )
        if self.avoid_cleanup:
            logger.warning(
                "rent.cleanup_avoided",
                container_name=self.container_name,
                container_id=self.container_id,
                hint="remove the container manually",
            )
            return

        container_id, self.container_id = self.container_id, None
        if container_id is None:
            return
        try:
            removed = self.runtime.remove(container_id)
        except Exception as exc:
            logger.error(
                "rent.remove_failed",
                container_name=self.container_name,
                container_id=container_id,
                error=str(exc),
            )
            return
        if not removed:
            logger.warning(
                "rent.remove_unconfirmed",
                container_name=self.container_name,
                container_id=container_id,
            )
            return
        logger.info(
            "rent.removed",
            container_name=self.container_name,
            container_id=container_id,
        )


class Rent:
    """A running MySQL container owned by the caller.

    Teardown (forced removal of the container and its volumes) happens once,
    when the handle is closed: explicitly through ``close``/``aclose``, on
    leaving a ``with``/``async with`` block, or when an abandoned handle is
    garbage collected or the interpreter exits. ``avoid_cleanup`` turns the
    teardown into a warning and leaves the container running.

    Obtain instances through ``Rent.builder().rent()`` or ``Rent.new()``.
    """

    def __init__(
        self,
        config: RentConfig,
        container_id: str,
        runtime: ContainerRuntime,
    ) -> None:
        self._config = config
        self._guard = _TeardownGuard(
            runtime=runtime,
            container_name=config.container_name,
            container_id=container_id,
            avoid_cleanup=config.avoid_cleanup,
        )
        self._finalizer = weakref.finalize(self, self._guard.release)

    @classmethod
    def builder(cls) -> RentBuilder:
        from mysql_rent.builder import RentBuilder

        return RentBuilder()

    @classmethod
    async def new(cls) -> Rent:
        """Rent a container with every setting at its default."""
        return await cls.builder().rent()

    @property
    def config(self) -> RentConfig:
        return self._config

    @property
    def container_name(self) -> str:
        return self._config.container_name

    @property
    def container_id(self) -> str | None:
        return self._guard.container_id

    @property
    def cleanup_avoided(self) -> bool:
        return self._guard.avoid_cleanup

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def mysql_url(self) -> str:
        return self._config.mysql_url()

    def avoid_cleanup(self) -> None:
        """Leave the container running after the handle goes away."""
        self._guard.avoid_cleanup = True

    def close(self) -> None:
        """Tear the container down; later calls are no-ops."""
        self._finalizer()

    async def aclose(self) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._finalizer)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return (
            f"Rent(container_name={self.container_name!r}, "
            f"container_id={self.container_id!r}, "
            f"local_port={self._config.local_port})"
        )

    def __getstate__(self) -> Any:
        msg = "Rent maps to a single container and cannot be copied or pickled"
        raise TypeError(msg)
