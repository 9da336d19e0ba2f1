"""Pydantic model for the tool's response payload.

The response is what the ``run`` tool serialises into its single text
content block.  Its four keys are fixed; MCP clients parse them as JSON.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .executor.base import ExecutionResult


class RunResponse(BaseModel):
    """Outcome of one execution."""

    model_config = ConfigDict(frozen=True)

    success: bool
    code: int
    stdout: str
    stderr: str

    @classmethod
    def from_result(cls, result: ExecutionResult) -> "RunResponse":
        return cls(
            success=result.success,
            code=result.code,
            stdout=result.stdout,
            stderr=result.stderr,
        )
