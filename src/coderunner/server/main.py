"""
FastMCP server for the code runner.

This module builds the MCP server, registers the single ``run`` tool and
wires it to a :class:`~coderunner.executor.ContainerExecutor`.  The server
talks MCP over stdio, so stdout belongs to the protocol: all logging goes to
stderr.

:func:`create_server` takes the executor as an argument so tests can drive
the tool against a fake runtime; :func:`main` is the process entry point and
owns the one Docker client shared by every execution.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from .. import __version__
from ..config import Config
from ..executor import CodeExecutor, ContainerExecutor
from ..languages import Language
from ..models import RunResponse
from ..runtime import DockerRuntime, create_docker_client


logger = logging.getLogger("coderunner")


def configure_logging(level: str = "INFO") -> None:
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("[coderunner] %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)


def create_server(executor: CodeExecutor) -> FastMCP:
    """Build the MCP server around ``executor``."""
    server = FastMCP(name="coder runner", version=__version__)

    async def run(
        code: Annotated[str, Field(description="code to run")],
        language: Annotated[Language, Field(description="language of the code")],
    ) -> str:
        logger.info("[run] Received %s snippet (%d chars)", language.value, len(code))

        result = await executor.run(code, language)

        logger.info("[run] Finished: success=%s, code=%s", result.success, result.code)
        return RunResponse.from_result(result).model_dump_json()

    server.tool(run, name="run", description="run code and return the result")
    return server


def main() -> None:
    config = Config.from_env()
    configure_logging(config.log_level)

    logger.info(
        "Loaded config: docker_host=%s, execution_timeout=%s, image_poll_attempts=%s",
        config.docker_host or "<platform default>",
        config.execution_timeout,
        config.image_poll_attempts,
    )

    runtime = DockerRuntime(create_docker_client(config))
    executor = ContainerExecutor(
        runtime,
        timeout=config.timeout,
        image_poll_attempts=config.image_poll_attempts,
        image_poll_interval=config.image_poll_interval,
    )
    server = create_server(executor)

    logger.info("starting server")
    try:
        server.run(transport="stdio")
    finally:
        runtime.close()
