"""
Executor that runs each snippet in its own throwaway Docker container.

One call to :meth:`ContainerExecutor.execute` owns exactly one container
from creation to forced removal:

1. resolve image, command and source file from the language registry
2. make sure the image is present locally, pulling it if needed
3. create the container with fixed resource limits and no network
4. copy the source file in, attach to stdout/stderr, start
5. wait for the exit status (optionally bounded by a deadline)
6. build the :class:`ExecutionResult`
7. force-remove the container, whatever happened before

Failures in steps 2-6 surface as :class:`ExecutionError` subclasses.  A
failing removal is logged and never hides the result or the original
error.  Cancelling a call also removes its container, including one whose
creation was still in flight.  Calls share no per-execution state, so
concurrent calls on the same instance are independent.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set, Union

from ..errors import (
    CleanupFailure,
    ContainerLifecycleFailure,
    ExecutionError,
    ExecutionTimeout,
    ImageEnsureFailure,
)
from ..languages import Language, command_for, image_for, resolve, source_for
from .base import CodeExecutor, ExecutionResult

if TYPE_CHECKING:
    from docker.models.containers import Container

    from ..runtime import DockerRuntime, Stream

logger = logging.getLogger(__name__)

MEMORY_LIMIT = 256 * 1024 * 1024
MEMORY_SWAP_LIMIT = 512 * 1024 * 1024
CPU_SHARES = 512

CONTAINER_OPTIONS: Dict[str, Any] = {
    "mem_limit": MEMORY_LIMIT,
    "memswap_limit": MEMORY_SWAP_LIMIT,
    "cpu_shares": CPU_SHARES,
    "network_mode": "none",
    "tty": False,
    "stdin_open": False,
    "auto_remove": False,
}


def _decode(chunks: List[bytes]) -> str:
    return b"".join(chunks).decode("utf-8", errors="replace")


def _consume_result(task: "asyncio.Future[Any]") -> None:
    # The drain thread fails once the attach socket is torn down on error paths.
    if not task.cancelled() and task.exception() is not None:
        logger.debug("Output stream closed with error: %s", task.exception())


class ContainerExecutor(CodeExecutor):
    """Execute code snippets in isolated, single-use containers."""

    def __init__(
        self,
        runtime: DockerRuntime,
        timeout: Optional[float] = 60,
        image_poll_attempts: int = 10,
        image_poll_interval: float = 0.5,
    ) -> None:
        """
        Parameters
        ----------
        runtime: DockerRuntime
            Shared container runtime client.  Anything with the same
            coroutine methods works, which is how the tests substitute a
            fake.
        timeout: float, optional
            Wall‑clock seconds a container may run before it is killed
            and :class:`ExecutionTimeout` is raised.  ``None`` or ``0``
            waits forever.
        image_poll_attempts: int, optional
            How often the local image list is checked after a pull.
        image_poll_interval: float, optional
            Delay before the second check; doubles after each miss.
        """
        self.runtime = runtime
        self.timeout = timeout or None
        self.image_poll_attempts = max(1, image_poll_attempts)
        self.image_poll_interval = image_poll_interval
        # removals of containers whose creation outlived a cancelled call
        self._orphan_cleanups: Set["asyncio.Task[None]"] = set()

    async def execute(self, code: str, language: Union[Language, str]) -> ExecutionResult:
        lang = resolve(language)
        image = image_for(lang)
        command = command_for(lang, code)
        source = source_for(lang, code)

        container = None
        stream = None
        drain_task = None
        start_time = time.perf_counter()
        try:
            await self._ensure_image(image)
            try:
                container = await self._create(image, command)
                logger.info("Created container %s for %s (%s)", container.id, lang.value, image)
                if source is not None:
                    await self.runtime.copy_source(container, source)
                stream = await self.runtime.attach_streams(container)
                drain_task = asyncio.ensure_future(self.runtime.drain(stream))
                await self.runtime.start_container(container)
                status = await self._await_exit(container)
                stdout, stderr = await drain_task
            except ExecutionError:
                raise
            except Exception as exc:
                raise ContainerLifecycleFailure(exc) from exc

            result = ExecutionResult(code=status, stdout=_decode(stdout), stderr=_decode(stderr))
            logger.info(
                "Execution finished: container=%s, exit_code=%s, duration_ms=%s",
                container.id,
                result.code,
                int((time.perf_counter() - start_time) * 1000),
            )
            return result
        finally:
            if drain_task is not None:
                drain_task.add_done_callback(_consume_result)
                if not drain_task.done():
                    drain_task.cancel()
                    self._close_stream(stream)
            if container is not None:
                await self._cleanup(container)

    async def _create(self, image: str, command: List[str]) -> Container:
        """Create the container, removing it later if the caller gives up meanwhile."""
        create = asyncio.ensure_future(
            self.runtime.create_container(image, command, **CONTAINER_OPTIONS)
        )
        try:
            return await asyncio.shield(create)
        except asyncio.CancelledError:
            create.add_done_callback(self._remove_orphan)
            raise

    def _remove_orphan(self, create: "asyncio.Future[Container]") -> None:
        if create.cancelled() or create.exception() is not None:
            return
        container = create.result()
        logger.warning("Removing container %s created after its execution was cancelled", container.id)
        task = asyncio.ensure_future(self._cleanup(container))
        self._orphan_cleanups.add(task)
        task.add_done_callback(self._orphan_cleanups.discard)

    async def _ensure_image(self, image: str) -> None:
        try:
            if image in await self.runtime.list_local_images():
                return
            logger.info("Image %s not found locally; pulling", image)
            await self.runtime.pull_image(image)
            await self._wait_for_image(image)
            logger.info("Image %s pulled", image)
        except ImageEnsureFailure:
            raise
        except Exception as exc:
            raise ImageEnsureFailure(f"Failed to ensure image {image}: {exc}") from exc

    async def _wait_for_image(self, image: str) -> None:
        """Poll the local image list until a freshly pulled image shows up."""
        delay = self.image_poll_interval
        for attempt in range(1, self.image_poll_attempts + 1):
            if image in await self.runtime.list_local_images():
                return
            if attempt < self.image_poll_attempts:
                logger.debug("Image %s not listed yet (attempt %s); retrying in %ss", image, attempt, delay)
                await asyncio.sleep(delay)
                delay *= 2
        raise ImageEnsureFailure(
            f"Failed to ensure image {image}: not available after {self.image_poll_attempts} checks"
        )

    async def _await_exit(self, container: Container) -> int:
        if self.timeout is None:
            return await self.runtime.wait_for_exit(container)
        try:
            return await asyncio.wait_for(self.runtime.wait_for_exit(container), self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Container %s exceeded %ss; killing it", container.id, self.timeout)
            try:
                await self.runtime.kill_container(container)
            except Exception as exc:
                logger.warning("Failed to kill container %s: %s", container.id, exc)
            raise ExecutionTimeout(self.timeout) from None

    def _close_stream(self, stream: Optional[Stream]) -> None:
        if stream is None:
            return
        try:
            self.runtime.close_stream(stream)
        except Exception as exc:
            logger.debug("Failed to close output stream: %s", exc)

    async def _cleanup(self, container: Container) -> None:
        try:
            await self.runtime.remove_container(container, force=True)
            logger.debug("Removed container %s", container.id)
        except Exception as exc:
            logger.error("%s", CleanupFailure(container.id, exc))
