"""
Execution backends for the code runner.

Only one backend exists: :class:`ContainerExecutor`, which runs every
snippet in a fresh Docker container.  Additional backends can be added by
implementing the ``CodeExecutor`` interface from ``base.py``.
"""

from .base import ExecutionResult, CodeExecutor
from .container_executor import ContainerExecutor

__all__ = [
    "ExecutionResult",
    "CodeExecutor",
    "ContainerExecutor",
]
