"""Configuration loader.

The code runner reads its configuration from environment variables so the
same installation can be launched by different MCP clients without extra
files.  Reasonable defaults are provided so that local development works out
of the box.

Environment variables:

``CODERUNNER_DOCKER_HOST``
    URL of the Docker daemon, e.g. ``unix:///var/run/docker.sock`` or
    ``tcp://127.0.0.1:2375``.  When unset, the control socket is chosen from
    the host operating system.

``CODERUNNER_EXECUTION_TIMEOUT``
    Wall‑clock timeout (in seconds) for a single execution.  ``0`` disables
    the deadline.  Default is 60.

``CODERUNNER_IMAGE_POLL_ATTEMPTS``
    How many times the local image list is polled after a pull before the
    image is declared unusable.  Default is 10.

``CODERUNNER_IMAGE_POLL_INTERVAL``
    Initial delay (in seconds) between those polls.  The delay doubles after
    every attempt.  Default is 0.5.

``CODERUNNER_LOG_LEVEL``
    Logging level name.  Defaults to ``INFO``.

Container resource limits (memory, swap, CPU shares, network) are fixed and
deliberately absent from this list.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional


def _int_var(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        parsed = int(val)
    except ValueError:
        raise ValueError(f"Invalid integer for {name}: {val}")
    if parsed < 0:
        raise ValueError(f"{name} must not be negative: {val}")
    return parsed


def _float_var(name: str, default: float) -> float:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        parsed = float(val)
    except ValueError:
        raise ValueError(f"Invalid number for {name}: {val}")
    if parsed < 0:
        raise ValueError(f"{name} must not be negative: {val}")
    return parsed


@dataclass
class Config:
    """Centralised configuration object."""

    docker_host: Optional[str]
    execution_timeout: int
    image_poll_attempts: int
    image_poll_interval: float
    log_level: str

    @classmethod
    def load(cls) -> "Config":
        docker_host = os.getenv("CODERUNNER_DOCKER_HOST") or None

        log_level = os.getenv("CODERUNNER_LOG_LEVEL", "INFO").strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"Invalid CODERUNNER_LOG_LEVEL: {log_level}")

        image_poll_attempts = _int_var("CODERUNNER_IMAGE_POLL_ATTEMPTS", 10)
        if image_poll_attempts < 1:
            raise ValueError("CODERUNNER_IMAGE_POLL_ATTEMPTS must be at least 1")

        return cls(
            docker_host=docker_host,
            execution_timeout=_int_var("CODERUNNER_EXECUTION_TIMEOUT", 60),
            image_poll_attempts=image_poll_attempts,
            image_poll_interval=_float_var("CODERUNNER_IMAGE_POLL_INTERVAL", 0.5),
            log_level=log_level,
        )

    @classmethod
    def from_env(cls) -> "Config":
        """
        Alternate constructor used by the server to load configuration.

        This wrapper calls :meth:`load` to construct the configuration.
        """
        return cls.load()

    @property
    def timeout(self) -> Optional[int]:
        """Execution deadline in seconds, or ``None`` when disabled."""
        return self.execution_timeout or None
