"""
Base interfaces and dataclasses for code execution backends.

All concrete executors should inherit from :class:`CodeExecutor` and
implement the :meth:`execute` coroutine.  Executors are responsible for
running arbitrary code snippets in an isolated environment.  The
returned :class:`ExecutionResult` captures the outcome of the
execution.

Resource limitations (memory, CPU share, network access) are enforced
by the container engine, not by Python code.  Executors only choose the
limits and make sure every container they create is removed again.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Union

from ..languages import Language


@dataclass(frozen=True)
class ExecutionResult:
    """Result of running a code snippet.

    Attributes
    ----------
    code: int
        Exit status of the program.  Zero indicates success.
    stdout: str
        Standard output captured from the execution.
    stderr: str
        Standard error captured from the execution.
    success: bool
        ``True`` exactly when ``code`` is zero.  Derived, never passed in.
    """

    code: int
    stdout: str
    stderr: str
    success: bool = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "success", self.code == 0)


class CodeExecutor(abc.ABC):
    """
    Abstract base class defining the interface for code executors.

    Executors run user‑supplied code and return the captured output.
    Subclasses should override the :meth:`execute` method to provide
    concrete implementations.
    """

    @abc.abstractmethod
    async def execute(self, code: str, language: Union[Language, str]) -> ExecutionResult:
        """Run the provided code snippet.

        Parameters
        ----------
        code: str
            The user supplied code to run.
        language: Language or str
            Language of ``code``.  Strings are resolved through the
            language registry.

        Returns
        -------
        ExecutionResult
            Captures stdout, stderr and exit status.

        Raises
        ------
        UnsupportedLanguage
            ``language`` is not in the registry.
        ExecutionError
            The execution machinery failed.
        """
        raise NotImplementedError

    async def run(self, code: str, language: Union[Language, str]) -> ExecutionResult:
        """Alias of :meth:`execute` matching the tool name."""
        return await self.execute(code, language)
