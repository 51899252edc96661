from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Protocol, Union

from .errors import InvalidArgument
from .logging import get_logger


# A task body is either an alias list of other task names or a callable
TaskBody = Union[List[str], Callable[[], None]]


class Registry(Protocol):
    """Capabilities the grouping utility needs from its host task runner."""

    def exists(self, name: str) -> bool: ...

    def register_task(self, name: str, body: TaskBody) -> None: ...

    def fatal(self, message: str) -> None: ...


@dataclass
class TaskSpec:
    name: str
    body: TaskBody

    @property
    def is_alias(self) -> bool:
        return not callable(self.body)


class TaskRegistry:
    """Minimal in-process task registry.

    Tasks are either aliases (ordered lists of other task names) or
    zero-argument callables. Registering an existing name replaces it.
    """

    def __init__(self, name: str = "registry"):
        self.name = name
        self.tasks: Dict[str, TaskSpec] = {}
        self.logger = get_logger(f"taskgroups.{self.name}")

    def exists(self, name: str) -> bool:
        return name in self.tasks

    def register_task(self, name: str, body: TaskBody) -> None:
        if not callable(body):
            body = list(body)
        self.tasks[name] = TaskSpec(name=name, body=body)

    def fatal(self, message: str) -> None:
        self.logger.error(message)
        raise InvalidArgument(message)

    def get(self, name: str) -> TaskSpec:
        if name not in self.tasks:
            raise KeyError(f"Unknown task: {name}")
        return self.tasks[name]

    def names(self) -> list[str]:
        return sorted(self.tasks)

    def task(self, name: str):
        """Decorator registering a function as a callable task."""

        def deco(fn: Callable[[], None]):
            self.register_task(name, fn)
            return fn

        return deco

    def run(self, name: str) -> list[str]:
        """Run a task, expanding aliases depth-first. Returns executed leaf names."""
        executed: list[str] = []
        self._run(name, stack=[], executed=executed)
        return executed

    def _resolve(self, name: str) -> TaskSpec:
        if name in self.tasks:
            return self.tasks[name]
        # "task:target" falls back to the task itself, which receives no target
        task_name, sep, _ = name.partition(":")
        if sep and task_name in self.tasks:
            return self.tasks[task_name]
        raise KeyError(f"Unknown task: {name}")

    def _run(self, name: str, stack: list[str], executed: list[str]) -> None:
        if name in stack:
            raise ValueError(f"Cycle detected in task aliases: {' -> '.join(stack + [name])}")
        spec = self._resolve(name)
        if spec.is_alias:
            for sub in spec.body:
                self._run(sub, stack + [name], executed)
            return
        self.logger.info("Run: %s", name)
        spec.body()
        executed.append(name)
