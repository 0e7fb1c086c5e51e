"""Encoding: dataclass instance -> query string.

Fields are written in declaration order. ``None`` is skipped, nested
dataclasses and mappings become ``outer[inner]=``, and sequences are
index-addressed (``ids[0]=1&ids[1]=2``) so that decoding restores the
original order.
"""

import dataclasses
from collections.abc import Mapping
from enum import Enum
from typing import Any
from urllib.parse import quote_plus

from approute.config import QueryConfig
from approute.qs.keys import format_key


def encode(value: Any, config: QueryConfig) -> str:
    """Encode a dataclass instance or mapping. Returns ``""`` when empty."""
    if not (_is_dataclass_instance(value) or isinstance(value, Mapping)):
        msg = f"Query values must be dataclass instances or mappings, got {type(value).__name__}"
        raise TypeError(msg)
    pairs: list[str] = []
    _encode_into(value, [], pairs, config)
    return "&".join(pairs)


def _encode_into(value: Any, path: list[str], pairs: list[str], config: QueryConfig) -> None:
    if value is None:
        return
    if _is_dataclass_instance(value):
        for f in dataclasses.fields(value):
            _encode_into(getattr(value, f.name), [*path, f.name], pairs, config)
    elif isinstance(value, Mapping):
        for key, item in value.items():
            _encode_into(item, [*path, str(key)], pairs, config)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _encode_into(item, [*path, str(index)], pairs, config)
    else:
        pairs.append(f"{format_key(path, config)}={quote_plus(format_scalar(value), safe='')}")


def format_scalar(value: Any) -> str:
    """Text form of a single query value, the inverse of the decoder's parsers."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _is_dataclass_instance(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)
