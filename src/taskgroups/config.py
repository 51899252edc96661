"""Helpers for loading task configurations and grouping options."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Dict

import yaml

from .errors import InvalidArgument, type_name
from .groups import GroupOptions


# Config section holding grouping options; never scanned for tags
OPTIONS_SECTION = "taskgroups"


def _get(d: Dict, *keys, default=None):
    cur = d
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
        if cur is None:
            return default
    return cur


def load_config(path: str | Path) -> dict:
    p = Path(path)
    with open(p, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def options_from_config(params: Dict, **overrides) -> GroupOptions:
    defaults = GroupOptions()
    prefix = _get(params, OPTIONS_SECTION, "prefix", default=defaults.prefix)
    tag = _get(params, OPTIONS_SECTION, "tag", default=defaults.tag)
    opts = {"prefix": prefix, "tag": tag}
    opts.update({k: v for k, v in overrides.items() if v is not None})
    return GroupOptions(**opts)


def task_config(params: Dict) -> dict:
    if not isinstance(params, Mapping):
        raise InvalidArgument(
            "Task configuration must be a mapping of task names to definitions. "
            f'Provided type: "{type_name(params)}".'
        )
    return {k: v for k, v in params.items() if k != OPTIONS_SECTION}
