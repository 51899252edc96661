from __future__ import annotations


class InvalidArgument(ValueError):
    """Raised when a grouping call receives an argument of the wrong shape."""


def type_name(value: object) -> str:
    return type(value).__name__
