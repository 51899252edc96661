"""Group tagged tasks/targets of a task configuration into runnable group tasks.

Provides the GroupCollector, a minimal TaskRegistry to bind it to, and a Typer CLI.
"""

from .core import Registry, TaskRegistry, TaskSpec
from .errors import InvalidArgument
from .groups import GroupCollector, GroupOptions, initialize

__all__ = [
    "GroupCollector",
    "GroupOptions",
    "InvalidArgument",
    "Registry",
    "TaskRegistry",
    "TaskSpec",
    "initialize",
]
