"""
Local binary detection and version probing.

The probe is a small capability interface so tests (and future binaries)
can substitute their own: given an executable path, return the version the
binary reports about itself, or None.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from typing import Protocol

logger = logging.getLogger(__name__)

PROBE_TIMEOUT_SECONDS = 5

DOCKER_VERSION_RE = re.compile(r"^Docker version ([^,]*),")


class VersionProbe(Protocol):
    """Capability: report the version an executable declares."""

    def probe(self, binary_path: str) -> str | None:
        ...


class DockerVersionProbe:
    """
    Probe a Docker client by running ``<binary> -v``.

    Expected output: ``Docker version 1.10.0, build 590d5108``
    """

    def __init__(self, timeout: float = PROBE_TIMEOUT_SECONDS):
        self.timeout = timeout

    def probe(self, binary_path: str) -> str | None:
        try:
            proc = subprocess.run(
                [binary_path, "-v"],
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
                text=True,
                timeout=self.timeout,
                check=False,
                env={**os.environ, "TERM": "dumb"},
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"Unable to run {binary_path} -v: {e}")
            return None

        output = proc.stdout or ""
        logger.debug(f"{binary_path} -v output: {output.strip()}")
        return parse_docker_version(output)


def parse_docker_version(output: str) -> str | None:
    """Extract the version from the first line of ``docker -v`` output."""
    lines = output.splitlines()
    if not lines:
        return None

    match = DOCKER_VERSION_RE.match(lines[0].strip())
    if not match:
        return None
    return match.group(1).strip() or None


def find_binary(name: str, search_path: str) -> str | None:
    """
    Locate an executable on an explicit PATH string.

    Args:
        name: Binary name (with extension on Windows)
        search_path: PATH value to search

    Returns:
        Absolute path to the executable, or None
    """
    if not search_path:
        return None

    found = shutil.which(name, path=search_path)
    return os.path.abspath(found) if found else None
