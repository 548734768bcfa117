"""TCP readiness waiter for a freshly launched container.

The wait runs in three phases: a fixed pre-wait, a polling loop that tries
a TCP connect until it succeeds or the global timeout elapses, and a fixed
post-wait once the port is reachable. Docker publishes the port before the
service inside the container listens, so the post-wait covers the cold
start of the server itself.
"""

from __future__ import annotations

import asyncio
import contextlib
import time

import structlog

from mysql_rent.config.models import WaitConfig
from mysql_rent.errors import ReadinessTimeoutError

logger = structlog.get_logger()


async def check_tcp(host: str, port: int, timeout: float) -> bool:
    """Return True when a TCP connection to host:port opens within *timeout*."""
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), timeout
        )
    except (OSError, TimeoutError):
        return False
    writer.close()
    with contextlib.suppress(OSError):
        await writer.wait_closed()
    return True


async def wait_for_port(host: str, port: int, config: WaitConfig) -> None:
    """Block (without stalling the event loop) until host:port is reachable.

    Raises:
        ReadinessTimeoutError: no connect succeeded within
            ``config.global_timeout`` seconds of polling.
    """
    if config.wait_before > 0:
        await asyncio.sleep(config.wait_before)

    started = time.monotonic()
    attempts = 0
    while True:
        attempts += 1
        if await check_tcp(host, port, config.tcp_connect_timeout):
            break
        elapsed = time.monotonic() - started
        if elapsed > config.global_timeout:
            logger.error(
                "readiness.timeout",
                host=host,
                port=port,
                attempts=attempts,
                timeout=config.global_timeout,
            )
            raise ReadinessTimeoutError(host, port, config.global_timeout)
        await asyncio.sleep(config.poll_interval)

    logger.debug(
        "readiness.port_open",
        host=host,
        port=port,
        attempts=attempts,
        elapsed=round(time.monotonic() - started, 3),
    )

    if config.wait_after > 0:
        await asyncio.sleep(config.wait_after)
