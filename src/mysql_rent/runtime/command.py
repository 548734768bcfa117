"""Async subprocess execution for the container runtime binary."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from mysql_rent.errors import LaunchError

logger = structlog.get_logger()


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str


async def _reap(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        proc.kill()
    await proc.wait()


async def run_command(
    args: list[str],
    *,
    timeout: float | None = None,
    display: list[str] | None = None,
) -> CommandResult:
    """Run *args* to completion and return its decoded output.

    Raises LaunchError when the binary is missing, the command times out or
    exits non-zero. *display* replaces *args* in logs and error messages.
    """
    cmd_str = " ".join(display or args)
    logger.debug("command.executing", command=cmd_str)

    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise LaunchError(
            f"Required command not found: {args[0]}. Please install it and try again."
        ) from exc
    except OSError as exc:
        raise LaunchError(f"Failed to execute command: {cmd_str}. {exc}") from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
    except TimeoutError as exc:
        await _reap(proc)
        raise LaunchError(f"Command timed out after {timeout}s: {cmd_str}") from exc
    except BaseException:
        # cancelled: a detached `run` left behind would start an unowned container
        await asyncio.shield(_reap(proc))
        raise

    result = CommandResult(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode(errors="replace") if stdout else "",
        stderr=stderr.decode(errors="replace") if stderr else "",
    )
    if result.returncode != 0:
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if result.stderr.strip():
            message = f"{message}\n{result.stderr.strip()}"
        raise LaunchError(message)
    return result
