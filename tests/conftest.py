"""
Shared fixtures for the code runner tests.

``FakeRuntime`` stands in for :class:`coderunner.runtime.DockerRuntime`.
It records every call in order so tests can assert on the container
lifecycle without a Docker daemon, and individual steps can be made to
fail by name.
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Set, Tuple

import pytest


class FakeContainer:
    def __init__(self, container_id: str) -> None:
        self.id = container_id
        self.short_id = container_id[:12]


class FakeRuntime:
    def __init__(
        self,
        images: Optional[Set[str]] = None,
        exit_code: int = 0,
        stdout: Tuple[bytes, ...] = (),
        stderr: Tuple[bytes, ...] = (),
    ) -> None:
        self.images = set(images or ())
        self.exit_code = exit_code
        self.stdout = list(stdout)
        self.stderr = list(stderr)
        self.calls: List[tuple] = []
        self.failures: Dict[str, Exception] = {}
        # images that only show up after this many list calls following a pull
        self.listing_delay = 0
        self.wait_forever = False
        self.create_delay = 0.0
        self.closed_streams = 0
        self._created = 0

    def fail(self, step: str, exc: Exception) -> None:
        self.failures[step] = exc

    def _record(self, step: str, *args) -> None:
        self.calls.append((step,) + args)
        if step in self.failures:
            raise self.failures[step]

    @property
    def steps(self) -> List[str]:
        return [call[0] for call in self.calls]

    async def list_local_images(self) -> Set[str]:
        self._record("list_local_images")
        if self.listing_delay:
            self.listing_delay -= 1
            return set()
        return set(self.images)

    async def pull_image(self, image: str) -> None:
        self._record("pull_image", image)
        self.images.add(image)

    async def create_container(self, image, command, **options) -> FakeContainer:
        self._record("create_container", image, command, options)
        if self.create_delay:
            await asyncio.sleep(self.create_delay)
        self._created += 1
        return FakeContainer(f"container{self._created:020d}")

    async def copy_source(self, container, source) -> None:
        self._record("copy_source", container.id, source)

    async def attach_streams(self, container):
        self._record("attach_streams", container.id)
        return [(chunk, None) for chunk in self.stdout] + [(None, chunk) for chunk in self.stderr]

    async def drain(self, stream):
        self._record("drain")
        stdout = [out for out, _ in stream if out]
        stderr = [err for _, err in stream if err]
        return stdout, stderr

    def close_stream(self, stream) -> None:
        self.closed_streams += 1

    async def start_container(self, container) -> None:
        self._record("start_container", container.id)

    async def wait_for_exit(self, container) -> int:
        self._record("wait_for_exit", container.id)
        if self.wait_forever:
            await asyncio.sleep(3600)
        return self.exit_code

    async def kill_container(self, container) -> None:
        self._record("kill_container", container.id)

    async def remove_container(self, container, force: bool = True) -> None:
        self._record("remove_container", container.id, force)


@pytest.fixture
def runtime() -> FakeRuntime:
    return FakeRuntime(images={"python:3.12-slim", "gcc:12", "golang:1.22"})
