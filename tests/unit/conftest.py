"""In-memory stand-ins for the container runtime and the MySQL client."""

from __future__ import annotations

import asyncio
import contextlib
import socket
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager

import pytest

from mysql_rent.config.models import RentConfig, WaitConfig


class FakeRuntime:
    def __init__(self) -> None:
        self.launch_error: Exception | None = None
        self.launched: list[RentConfig] = []
        self.removed: list[str] = []
        self.remove_result = True

    async def launch(self, config: RentConfig) -> str:
        if self.launch_error is not None:
            raise self.launch_error
        self.launched.append(config)
        return f"id-{config.container_name}"

    def remove(self, container_id: str) -> bool:
        self.removed.append(container_id)
        return self.remove_result


class FakeConnection:
    def __init__(self, client: FakeClient) -> None:
        self._client = client

    async def execute(self, sql: str) -> None:
        if "INVALID" in sql:
            raise RuntimeError(f"You have an error in your SQL syntax near {sql!r}")
        self._client.executed.append(sql)

    def close(self) -> None:
        self._client.closed += 1


class FakeClient:
    """Refuses the first ``failures`` logins, then accepts."""

    def __init__(self) -> None:
        self.failures = 0
        self.attempts = 0
        self.urls: list[str] = []
        self.executed: list[str] = []
        self.closed = 0

    async def connect(self, url: str) -> FakeConnection:
        self.attempts += 1
        self.urls.append(url)
        if self.attempts <= self.failures:
            raise ConnectionRefusedError("Can't connect to MySQL server")
        return FakeConnection(self)


@contextlib.asynccontextmanager
async def _listening() -> AsyncIterator[int]:
    async def _handle(
        reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        writer.close()

    server = await asyncio.start_server(_handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    async with server:
        yield port


@pytest.fixture
def runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def fast_wait() -> WaitConfig:
    """No sleeping anywhere; tests that exercise the timings set their own."""
    return WaitConfig(
        wait_before=0,
        wait_after=0,
        global_timeout=2,
        poll_interval=0.01,
        tcp_connect_timeout=0.5,
        connect_poll_interval=0,
        connect_timeout=2,
    )


@pytest.fixture
def free_port() -> Callable[[], int]:
    """Factory for local ports nothing is listening on."""

    def _free_port() -> int:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind(("127.0.0.1", 0))
            return int(sock.getsockname()[1])

    return _free_port


@pytest.fixture
def listening() -> Callable[[], AbstractAsyncContextManager[int]]:
    """Accepts TCP connections on an ephemeral port for a block's duration."""
    return _listening
