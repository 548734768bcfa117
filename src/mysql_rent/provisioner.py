"""Provisioner — launch, wait for readiness, wait for login, seed."""

from __future__ import annotations

import structlog

from mysql_rent.client import AioMySQLClient, DatabaseClient
from mysql_rent.config.models import RentConfig
from mysql_rent.errors import SeedScriptError
from mysql_rent.rent import Rent
from mysql_rent.runtime.docker import ContainerRuntime, DockerRuntime
from mysql_rent.waiting.connection import wait_for_connection
from mysql_rent.waiting.readiness import wait_for_port

logger = structlog.get_logger()


class RentProvisioner:
    """Turns a frozen RentConfig into a live, seeded container.

    Steps run strictly in order and the first failure aborts the rest. Once
    the container was launched, a later failure removes it again (unless the
    config avoids cleanup) before the error propagates, so a failed
    provision leaves nothing behind for the caller to clean up.
    """

    def __init__(
        self,
        runtime: ContainerRuntime | None = None,
        client: DatabaseClient | None = None,
    ) -> None:
        self._runtime = runtime
        self._client = client or AioMySQLClient()

    async def provision(self, config: RentConfig) -> Rent:
        runtime = self._runtime or DockerRuntime(binary=config.runtime.binary)

        logger.info(
            "rent.launching",
            container_name=config.container_name,
            image=config.image,
            local_port=config.local_port,
        )
        container_id = await runtime.launch(config)
        logger.info(
            "rent.launched",
            container_name=config.container_name,
            container_id=container_id,
        )

        rent = Rent(config, container_id, runtime)
        try:
            await self._prepare(config)
        except BaseException as exc:
            logger.error(
                "rent.provision_failed",
                container_name=config.container_name,
                container_id=container_id,
                error=repr(exc),
            )
            await rent.aclose()
            raise

        logger.info(
            "rent.ready",
            container_name=config.container_name,
            container_id=container_id,
            local_port=config.local_port,
            database=config.database,
        )
        return rent

    async def _prepare(self, config: RentConfig) -> None:
        await wait_for_port(
            config.runtime.readiness_host, config.local_port, config.wait
        )

        conn = await wait_for_connection(
            self._client,
            config.mysql_url(),
            interval=config.wait.connect_poll_interval,
            timeout=config.wait.connect_timeout,
        )
        try:
            for index, script in enumerate(config.scripts):
                try:
                    await conn.execute(script)
                except Exception as exc:
                    raise SeedScriptError(index, exc) from exc
                logger.debug(
                    "rent.script_executed",
                    container_name=config.container_name,
                    index=index,
                )
        finally:
            conn.close()
