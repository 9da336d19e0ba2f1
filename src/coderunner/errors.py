"""Exceptions raised by the code runner.

Two families matter to callers.  :class:`UnsupportedLanguage` is an input
problem and is raised before any container is touched.  Everything that goes
wrong while a container is being prepared, run or awaited is an
:class:`ExecutionError`; its subclasses only say which step failed, the
message always reads ``Execution failed: <cause>``.

A program that runs and exits nonzero is *not* an error: it produces an
``ExecutionResult`` with ``success=False``.
"""

from __future__ import annotations


class CodeRunnerError(Exception):
    """Base class for all code runner errors."""


class UnsupportedLanguage(CodeRunnerError, ValueError):
    def __init__(self, language: object) -> None:
        super().__init__(f"Unsupported language: {language}")
        self.language = language


class UnsupportedPlatform(CodeRunnerError, RuntimeError):
    def __init__(self, platform: str) -> None:
        super().__init__(f"Unsupported platform: {platform}")
        self.platform = platform


class ExecutionError(CodeRunnerError):
    """The execution machinery failed; no result is available."""

    def __init__(self, cause: object) -> None:
        super().__init__(f"Execution failed: {cause}")


class ImageEnsureFailure(ExecutionError):
    """Listing, pulling or waiting for the image failed."""


class ContainerLifecycleFailure(ExecutionError):
    """Creating, preparing, attaching, starting or awaiting the container failed."""


class ExecutionTimeout(ExecutionError):
    def __init__(self, timeout: float) -> None:
        super().__init__(f"timed out after {timeout} seconds")
        self.timeout = timeout


class CleanupFailure(CodeRunnerError):
    """Removing a container failed.  Logged, never raised to callers."""

    def __init__(self, container_id: str, cause: object) -> None:
        super().__init__(f"Cleanup failed for container {container_id}: {cause}")
        self.container_id = container_id
