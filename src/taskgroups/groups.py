"""Collect tagged tasks/targets into group tasks and register them.

A task configuration maps task names to definitions. A definition holding the
tag key directly is a flat task; any other definition is scanned as a mapping
of targets, each of which may hold the tag key. The tag value is a group name
or a list of group names.

Note that a flat task without the tag key whose values happen to be mappings
cannot be told apart from a multi task, so its values are scanned as targets.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, List, Optional, Union

from .core import Registry
from .errors import InvalidArgument, type_name
from .logging import get_logger


Names = Union[str, List[str]]


@dataclass(frozen=True)
class GroupOptions:
    prefix: str = "group-"
    tag: str = "__groups"

    def __post_init__(self):
        # a falsy prefix turns prefixing off
        if not self.prefix:
            object.__setattr__(self, "prefix", "")

    @classmethod
    def from_mapping(cls, mapping: Mapping) -> "GroupOptions":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in mapping.items() if k in known})


def _as_list(names: Any) -> Any:
    return [names] if isinstance(names, str) else names


class GroupCollector:
    """Groups tasks/targets sharing a tag value and registers the group tasks."""

    def __init__(self, registry: Registry, options: GroupOptions | None = None):
        self.registry = registry
        self.options = options or GroupOptions()
        self.collected_groups: list[str] = []
        self.logger = get_logger("taskgroups.groups")

    @property
    def verbose(self) -> bool:
        return self.logger.isEnabledFor(logging.DEBUG)

    def _fatal(self, message: str) -> None:
        self.registry.fatal(message)
        # the host may only report; the call must still abort
        raise InvalidArgument(message)

    def prefixed(self, name: str) -> str:
        return self.options.prefix + name

    def collect(self, config: Mapping) -> list[str]:
        """Collect groups from a task configuration and register them.

        Returns the prefixed group names in the order they were discovered.
        """
        if not isinstance(config, Mapping):
            self._fatal(
                "collect() expects argument #1 to be a task configuration mapping. "
                f'Provided type: "{type_name(config)}".'
            )

        groups = self._collect_groups(config)
        self.collected_groups.extend(groups)
        return groups

    def _collect_groups(self, config: Mapping) -> list[str]:
        tag = self.options.tag
        self.logger.debug("Collect groups from tasks/targets.")

        group_tasks: Dict[str, List[str]] = {}

        def push(member: str, group_names: Names) -> None:
            group_names = _as_list(group_names)
            if not isinstance(group_names, (list, tuple)) or not all(
                isinstance(g, str) for g in group_names
            ):
                self._fatal(
                    f'collect() expects "{tag}" of "{member}" to be a string '
                    f"or a list of strings. Provided value: {group_names!r}."
                )
            for group_name in group_names:
                group_tasks.setdefault(self.prefixed(group_name), []).append(member)

        for task_name, task_def in config.items():
            if not isinstance(task_def, Mapping):
                continue
            if tag in task_def:
                push(task_name, task_def[tag])
                continue
            for target_name, target_def in task_def.items():
                if isinstance(target_def, Mapping) and tag in target_def:
                    push(f"{task_name}:{target_name}", target_def[tag])

        if self.verbose:
            self.logger.debug("Found %d group(s) tagged with %s.", len(group_tasks), tag)
            if group_tasks:
                if self.options.prefix:
                    self.logger.debug("Registering tasks with prefix %s:", self.options.prefix)
                else:
                    self.logger.debug("Registering tasks:")

        for group, members in group_tasks.items():
            self.registry.register_task(group, members)
            self.logger.debug("+ %s: [%s]", group, ", ".join(members))

        return list(group_tasks)

    def _ensure_group_tasks_exist(self, groups: Iterable[str]) -> None:
        """Register an empty placeholder for every prefixed group name not yet known."""
        for group in groups:
            if self.registry.exists(group):
                continue
            self.logger.debug("+ %s (empty group)", group)
            self.registry.register_task(group, self._placeholder(group))

    def _placeholder(self, group: str):
        tag = self.options.tag
        logger = self.logger

        def run() -> None:
            logger.warning(
                'Group task "%s" is empty. To add tasks, tag them with "%s: %s".',
                group,
                tag,
                group,
            )

        run.__name__ = f"empty_group[{group}]"
        return run

    def _validate_names(self, method: str, names: Any) -> list[str]:
        names = _as_list(names)
        if not isinstance(names, (list, tuple)):
            self._fatal(
                f"{method}() expects argument to be a string or a list of strings. "
                f'Provided type: "{type_name(names)}".'
            )
        for index, name in enumerate(names):
            if not isinstance(name, str):
                self._fatal(
                    f"{method}() expects argument to be a string or a list of strings. "
                    f'Item #{index} is of type: "{type_name(name)}".'
                )
        return list(names)

    def register_task(self, task: str, subtasks: Names) -> None:
        """Register a task, making sure every group it references exists.

        Subtasks starting with the prefix are group references; missing ones
        are registered as empty placeholders first.
        """
        if not isinstance(task, str):
            self._fatal(
                "register_task() expects argument #1 to be a string. "
                f'Provided type: "{type_name(task)}".'
            )
        subtasks = self._validate_names("register_task", subtasks)

        prefix = self.options.prefix
        group_tasks = [name for name in subtasks if name.startswith(prefix)]
        if group_tasks:
            self._ensure_group_tasks_exist(group_tasks)

        self.registry.register_task(task, subtasks)

    def ensure_groups_exist(self, groups: Names) -> None:
        """Ensure all these groups exist. Names are given without their prefix."""
        groups = self._validate_names("ensure_groups_exist", groups)
        self._ensure_group_tasks_exist([self.prefixed(g) for g in groups])


def initialize(
    registry: Registry, options: Optional[Union[GroupOptions, Mapping]] = None
) -> GroupCollector:
    """Build a GroupCollector bound to ``registry`` and attach it as ``registry.groups``."""
    if not all(callable(getattr(registry, attr, None)) for attr in ("exists", "register_task")):
        message = (
            "initialize() expects argument #1 to be a task registry. "
            f'Provided type: "{type_name(registry)}".'
        )
        fatal = getattr(registry, "fatal", None)
        if callable(fatal):
            fatal(message)
        raise InvalidArgument(message)

    if options is not None and not isinstance(options, (GroupOptions, Mapping)):
        message = (
            "initialize() expects argument #2 to be an options mapping. "
            f'Provided type: "{type_name(options)}".'
        )
        registry.fatal(message)
        raise InvalidArgument(message)

    if isinstance(options, Mapping):
        options = GroupOptions.from_mapping(options)

    collector = GroupCollector(registry, options)
    registry.groups = collector
    return collector
