"""Typed decoding: query tree -> dataclass instance.

Conversion is driven by the dataclass's type hints:

- ``str``, ``int``, ``float``, ``bool``, ``Enum``: from a single value,
  using the same parsers as path parameters
- ``T | None``: ``None`` when the key is absent
- ``list[T]`` / ``tuple[T, ...]``: from ``key[]=`` appends or
  ``key[n]=`` indexes (ordered by index, not by position in the input)
- ``dict[str, T]``: from ``key[name]=`` children
- nested dataclasses: from ``key[field]=`` children

Missing fields fall back to ``None`` for optionals, then to the
dataclass default. Anything else missing is an error, and so is any
value that fails conversion. Keys the dataclass does not declare are
ignored.
"""

import dataclasses
import functools
from enum import Enum
from typing import Any, get_args, get_origin, get_type_hints

from approute._internal.hints import is_optional, unwrap_optional
from approute.errors import ConfigurationError, QueryDecodeError
from approute.qs.keys import QueryNode
from approute.routing.params import converter_for

_SCALARS = (str, int, float, bool)


@functools.lru_cache(maxsize=256)
def field_hints(cls: type) -> tuple[tuple[dataclasses.Field[Any], Any], ...]:
    """Return ``(field, resolved_hint)`` for each init field of *cls*."""
    hints = get_type_hints(cls)
    return tuple((f, hints[f.name]) for f in dataclasses.fields(cls) if f.init)


def check_type(hint: Any, where: str = "", *, group: bool = False) -> None:
    """Reject annotations the decoder cannot handle.

    Called once when a route shape is declared so that unsupported
    query field types fail at definition time, not on first request.
    With *group*, *hint* must also be a whole query group: a dataclass
    or ``dict[str, T]``.

    Raises ``ConfigurationError``.
    """
    where = where or _type_name(hint)
    inner = unwrap_optional(hint)
    if group and not (_is_dataclass_type(inner) or get_origin(inner) is dict):
        msg = f"Query field {where} must be a dataclass or dict[str, T], got {inner!r}"
        raise ConfigurationError(msg)
    _check(hint, where, set())


def _check(hint: Any, where: str, seen: set[type]) -> None:
    hint = unwrap_optional(hint)
    origin = get_origin(hint)
    args = get_args(hint)

    if _is_dataclass_type(hint):
        if hint in seen:
            return
        seen.add(hint)
        for f, field_hint in field_hints(hint):
            _check(field_hint, f"{where}.{f.name}", seen)
        return
    if origin is list and len(args) == 1:
        _check(args[0], f"{where}[]", seen)
        return
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        _check(args[0], f"{where}[]", seen)
        return
    if origin is dict and len(args) == 2 and args[0] is str:
        _check(args[1], f"{where}[]", seen)
        return
    if isinstance(hint, type) and origin is None and issubclass(hint, (Enum, *_SCALARS)):
        return

    msg = f"Unsupported query field type {hint!r} at {where}"
    raise ConfigurationError(msg)


def decode(node: QueryNode | None, hint: Any, where: str) -> Any:
    """Convert a query tree node to *hint*.

    *where* is a dotted location used in error messages.
    Raises ``QueryDecodeError``.
    """
    if is_optional(hint):
        if node is None:
            return None
        hint = unwrap_optional(hint)
    if node is None:
        msg = f"missing field `{where}`"
        raise QueryDecodeError(msg)

    origin = get_origin(hint)
    if _is_dataclass_type(hint):
        return _decode_dataclass(node, hint, where)
    if origin is list:
        return _decode_sequence(node, get_args(hint)[0], where)
    if origin is tuple:
        return tuple(_decode_sequence(node, get_args(hint)[0], where))
    if origin is dict:
        return _decode_mapping(node, get_args(hint)[1], where)
    return _decode_scalar(node, hint, where)


def _decode_dataclass(node: QueryNode, cls: type, where: str) -> Any:
    if not isinstance(node, dict):
        msg = f"invalid type at `{where}`: expected a struct, found {_describe(node)}"
        raise QueryDecodeError(msg)

    kwargs: dict[str, Any] = {}
    for f, hint in field_hints(cls):
        location = f"{where}.{f.name}" if where else f.name
        if f.name in node:
            kwargs[f.name] = decode(node[f.name], hint, location)
        elif f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
            continue
        elif is_optional(hint):
            kwargs[f.name] = None
        else:
            msg = f"missing field `{location}`"
            raise QueryDecodeError(msg)

    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as exc:
        msg = f"could not build `{where or cls.__name__}`: {exc}"
        raise QueryDecodeError(msg) from exc


def _decode_sequence(node: QueryNode, item_hint: Any, where: str) -> list[Any]:
    if isinstance(node, list):
        items: list[QueryNode] = list(node)
    elif isinstance(node, dict):
        items = _indexed_items(node, where)
    else:
        msg = f"invalid type at `{where}`: expected a sequence, found {_describe(node)}"
        raise QueryDecodeError(msg)
    return [decode(item, item_hint, f"{where}[{i}]") for i, item in enumerate(items)]


def _indexed_items(node: dict[str, Any], where: str) -> list[QueryNode]:
    indexed: dict[int, QueryNode] = {}
    for key, value in node.items():
        if not (key.isascii() and key.isdigit()):
            msg = f"invalid index {key!r} at `{where}`: expected a sequence"
            raise QueryDecodeError(msg)
        index = int(key)
        if index in indexed:
            msg = f"duplicate index {index} at `{where}`"
            raise QueryDecodeError(msg)
        indexed[index] = value
    return [indexed[i] for i in sorted(indexed)]


def _decode_mapping(node: QueryNode, value_hint: Any, where: str) -> dict[str, Any]:
    if not isinstance(node, dict):
        msg = f"invalid type at `{where}`: expected a map, found {_describe(node)}"
        raise QueryDecodeError(msg)
    return {key: decode(value, value_hint, f"{where}[{key}]") for key, value in node.items()}


def _decode_scalar(node: QueryNode, hint: Any, where: str) -> Any:
    if not isinstance(node, str):
        msg = f"invalid type at `{where}`: expected a value, found {_describe(node)}"
        raise QueryDecodeError(msg)
    parse = converter_for(hint).parse
    try:
        return parse(node)
    except ValueError as exc:
        msg = f"invalid value at `{where}`: {exc}"
        raise QueryDecodeError(msg) from exc


def _is_dataclass_type(hint: Any) -> bool:
    return isinstance(hint, type) and dataclasses.is_dataclass(hint)


def _describe(node: QueryNode) -> str:
    if isinstance(node, str):
        return "a string"
    if isinstance(node, list):
        return "a sequence"
    return "a map"


def _type_name(hint: Any) -> str:
    return getattr(hint, "__name__", repr(hint))
