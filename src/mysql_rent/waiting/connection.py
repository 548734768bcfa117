"""Login poller — retries the MySQL handshake at a constant interval."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_delay,
    stop_never,
    wait_fixed,
)

from mysql_rent.errors import ConnectionPollError

if TYPE_CHECKING:
    from mysql_rent.client import Connection, DatabaseClient

logger = structlog.get_logger()


def _log_attempt(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    logger.debug(
        "connection.attempt_failed",
        attempt=retry_state.attempt_number,
        error=repr(outcome.exception()) if outcome is not None else None,
    )


async def wait_for_connection(
    client: DatabaseClient,
    url: str,
    *,
    interval: float,
    timeout: float | None,
) -> Connection:
    """Return the first connection *client* manages to open against *url*.

    Only OSError (a refused or dropped login) is retried; anything else,
    such as a malformed endpoint, propagates from the first attempt. There
    is no backoff growth and no attempt cap. With ``timeout=None`` the poll
    only ends on success or when the calling task is cancelled.
    """
    retrying = AsyncRetrying(
        retry=retry_if_exception_type(OSError),
        wait=wait_fixed(interval),
        stop=stop_never if timeout is None else stop_after_delay(timeout),
        before_sleep=_log_attempt,
    )
    try:
        return await retrying(client.connect, url)
    except RetryError as exc:
        last = exc.last_attempt.exception()
        raise ConnectionPollError(
            f"failed to wait for connection after {timeout}s: {last}"
        ) from last
