"""Container runtime adapter — launch and forced removal via the docker CLI."""

from __future__ import annotations

import asyncio
import subprocess
from typing import Protocol, runtime_checkable

import structlog

from mysql_rent.config.models import RentConfig
from mysql_rent.errors import LaunchError
from mysql_rent.runtime.command import run_command

logger = structlog.get_logger()


@runtime_checkable
class ContainerRuntime(Protocol):
    """Starts and force-removes the container backing a rent."""

    async def launch(self, config: RentConfig) -> str:
        """Start a detached container and return its runtime identifier."""
        ...

    def remove(self, container_id: str) -> bool:
        """Force-remove the container and its volumes; True on success.

        Failures are reported through the return value and logs, never raised.
        """
        ...


def build_run_args(config: RentConfig, *, redact: bool = False) -> list[str]:
    """Argument vector for ``docker run`` publishing the MySQL port."""
    rt = config.runtime
    password = "******" if redact else config.root_password.get_secret_value()
    return [
        rt.binary,
        "run",
        "-d",
        "-p",
        f"{config.local_port}:{rt.service_port}",
        "--name",
        config.container_name,
        "-e",
        f"{rt.database_env}={config.database}",
        "-e",
        f"{rt.password_env}={password}",
        config.image,
    ]


class DockerRuntime:
    """Drives the docker CLI as a black-box subprocess."""

    def __init__(
        self,
        binary: str = "docker",
        launch_timeout: float | None = None,
    ) -> None:
        self._binary = binary
        self._launch_timeout = launch_timeout

    async def launch(self, config: RentConfig) -> str:
        args = build_run_args(config)
        args[0] = self._binary
        display = build_run_args(config, redact=True)
        display[0] = self._binary

        try:
            result = await run_command(
                args, timeout=self._launch_timeout, display=display
            )
        except asyncio.CancelledError:
            # the daemon may have created it before the client was killed
            loop = asyncio.get_running_loop()
            await asyncio.shield(
                loop.run_in_executor(None, self.remove, config.container_name)
            )
            raise
        lines = result.stdout.splitlines()
        container_id = lines[0].strip() if lines else ""
        if not container_id:
            raise LaunchError(
                f"Container runtime returned no identifier for '{config.container_name}'"
            )
        return container_id

    def remove(self, container_id: str) -> bool:
        try:
            result = subprocess.run(
                [self._binary, "rm", "-f", "-v", container_id],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            logger.error(
                "runtime.remove_failed",
                container_id=container_id,
                error=str(exc),
            )
            return False

        if result.returncode == 0:
            logger.debug("runtime.removed", container_id=container_id)
            return True
        logger.warning(
            "runtime.remove_exit_status",
            container_id=container_id,
            returncode=result.returncode,
            stderr=(result.stderr or "").strip(),
        )
        return False
