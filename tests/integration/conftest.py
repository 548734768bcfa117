"""Skip docker-backed tests when no docker daemon is reachable."""

from __future__ import annotations

import shutil
import subprocess

import pytest


def _docker_available() -> bool:
    if shutil.which("docker") is None:
        return False
    result = subprocess.run(["docker", "info"], capture_output=True, check=False)
    return result.returncode == 0


def pytest_collection_modifyitems(config, items):
    if _docker_available():
        return
    skip = pytest.mark.skip(reason="docker daemon not available")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)
