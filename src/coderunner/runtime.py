"""
Container runtime client.

Thin asynchronous facade over the Docker SDK.  The SDK is blocking, so every
call runs in a worker thread; the executor only ever awaits these coroutines
and never sees a raw SDK call.

Two thread pools keep the calls apart.  Short control-plane requests (image
listing and pulls, create, copy, start, kill, remove) use one pool.  Calls that
block for the whole life of a container (draining the attach stream, waiting
for the exit status) use the other.  However many containers are running,
kill and remove therefore always find a free thread.

One :class:`DockerRuntime` (and one ``docker.DockerClient``) is created per
process and shared by all in-flight executions.  The client keeps its own
HTTP connection pool and holds no per-execution state, so concurrent use
needs no locking here.
"""

from __future__ import annotations

import asyncio
import io
import logging
import posixpath
import sys
import tarfile
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple, TypeVar

import docker
from docker.models.containers import Container

from .config import Config
from .errors import UnsupportedPlatform
from .languages import SourceFile

logger = logging.getLogger(__name__)

T = TypeVar("T")

DOCKER_SOCKET_URLS: Dict[str, str] = {
    "darwin": "unix:///var/run/docker.sock",
    "linux": "unix:///var/run/docker.sock",
    "win32": "npipe:////./pipe/docker_engine",
}

# Demultiplexed attach stream: one (stdout, stderr) pair per frame, the other side is None.
Stream = Iterable[Tuple[Optional[bytes], Optional[bytes]]]


def docker_base_url(platform: Optional[str] = None) -> str:
    """Return the daemon control socket URL for ``platform`` (default: this host)."""
    platform = platform or sys.platform
    family = "linux" if platform.startswith("linux") else platform
    try:
        return DOCKER_SOCKET_URLS[family]
    except KeyError:
        raise UnsupportedPlatform(platform) from None


def create_docker_client(config: Config) -> docker.DockerClient:
    """Build the process-wide Docker client."""
    base_url = config.docker_host or docker_base_url()
    logger.info("Connecting to Docker daemon at %s", base_url)
    return docker.DockerClient(base_url=base_url)


def build_archive(source: SourceFile) -> Tuple[str, bytes]:
    """Pack ``source`` into an in-memory tar for ``put_archive``.

    Returns the destination directory and the archive bytes.
    """
    directory, name = posixpath.split(source.path)
    data = source.content.encode("utf-8")
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        info = tarfile.TarInfo(name=name)
        info.size = len(data)
        info.mode = 0o644
        tar.addfile(info, io.BytesIO(data))
    return directory or "/", buffer.getvalue()


def drain(stream: Stream) -> Tuple[List[bytes], List[bytes]]:
    """Consume a demultiplexed attach stream until the container closes it."""
    stdout: List[bytes] = []
    stderr: List[bytes] = []
    for out, err in stream:
        if out:
            stdout.append(out)
        if err:
            stderr.append(err)
    return stdout, stderr


class DockerRuntime:
    """Async wrapper around a shared ``docker.DockerClient``."""

    def __init__(
        self,
        client: docker.DockerClient,
        control_workers: int = 8,
        stream_workers: int = 64,
    ) -> None:
        """
        Parameters
        ----------
        client: docker.DockerClient
            The process-wide Docker client.
        control_workers: int, optional
            Threads for short control-plane calls.
        stream_workers: int, optional
            Threads for calls that block until a container exits.  Two are
            held per running container, so this bounds how many containers
            make progress at once; the rest queue without starving cleanup.
        """
        self.client = client
        self._control = ThreadPoolExecutor(max_workers=control_workers, thread_name_prefix="docker-control")
        self._streams = ThreadPoolExecutor(max_workers=stream_workers, thread_name_prefix="docker-stream")

    async def _call(self, func: Callable[[], T]) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._control, func)

    async def _blocking(self, func: Callable[[], T]) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._streams, func)

    async def list_local_images(self) -> Set[str]:
        images = await self._call(self.client.images.list)
        tags: Set[str] = set()
        for image in images:
            tags.update(image.tags)
        return tags

    async def pull_image(self, image: str) -> None:
        await self._call(lambda: self.client.images.pull(image))

    async def create_container(self, image: str, command: List[str], **options: Any) -> Container:
        return await self._call(
            lambda: self.client.containers.create(image, command=command, **options)
        )

    async def copy_source(self, container: Container, source: SourceFile) -> None:
        directory, archive = build_archive(source)
        ok = await self._call(lambda: container.put_archive(directory, archive))
        if not ok:
            raise RuntimeError(f"Could not copy {source.path} into container {container.short_id}")

    async def attach_streams(self, container: Container) -> Stream:
        return await self._call(
            lambda: container.attach(stdout=True, stderr=True, stream=True, logs=True, demux=True)
        )

    async def drain(self, stream: Stream) -> Tuple[List[bytes], List[bytes]]:
        return await self._blocking(lambda: drain(stream))

    def close_stream(self, stream: Stream) -> None:
        close = getattr(stream, "close", None)
        if close is not None:
            close()

    async def start_container(self, container: Container) -> None:
        await self._call(container.start)

    async def wait_for_exit(self, container: Container) -> int:
        status = await self._blocking(container.wait)
        return int(status["StatusCode"])

    async def kill_container(self, container: Container) -> None:
        await self._call(container.kill)

    async def remove_container(self, container: Container, force: bool = True) -> None:
        await self._call(lambda: container.remove(force=force))

    def close(self) -> None:
        """Stop the worker pools and close the Docker client."""
        self._streams.shutdown(wait=False, cancel_futures=True)
        self._control.shutdown(wait=False, cancel_futures=True)
        self.client.close()
