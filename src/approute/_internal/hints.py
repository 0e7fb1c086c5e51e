"""Annotation helpers shared by the query codec and dataclass routes."""

import types
from typing import Any, Union, get_args, get_origin

_NONE_TYPE = type(None)


def is_optional(hint: Any) -> bool:
    """Return True for ``X | None`` and ``Optional[X]``."""
    if get_origin(hint) in (Union, types.UnionType):
        return _NONE_TYPE in get_args(hint)
    return False


def unwrap_optional(hint: Any) -> Any:
    """Extract the inner type from ``X | None``, or return *hint* unchanged.

    Only single-type optionals are unwrapped; ``int | str | None``
    keeps its remaining union so callers can reject it.
    """
    if not is_optional(hint):
        return hint
    args = tuple(a for a in get_args(hint) if a is not _NONE_TYPE)
    if len(args) == 1:
        return args[0]
    return Union[args]  # noqa: UP007
