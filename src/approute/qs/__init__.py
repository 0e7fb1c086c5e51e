"""Query codec: nested, array-capable query strings <-> dataclasses.

Usage::

    from dataclasses import dataclass

    from approute import qs

    @dataclass(frozen=True)
    class Building:
        name: str
        number: int | None = None

    @dataclass(frozen=True)
    class Address:
        street_name: str | None = None
        building: Building | None = None

    qs.from_str("building[name]=Cool%20Building", Address)
    # Address(street_name=None, building=Building(name='Cool Building', number=None))

    qs.to_str(Address(building=Building(name="Tower", number=9)))
    # 'building[name]=Tower&building[number]=9'

Built on ``urllib.parse`` for percent-encoding; bracket nesting and
typed conversion live in ``qs.keys`` and ``qs.de``.
"""

from typing import Any

from approute.config import DEFAULT_CONFIG, QueryConfig
from approute.errors import QueryDecodeError
from approute.qs.de import check_type, decode
from approute.qs.keys import parse_query
from approute.qs.ser import encode

__all__ = [
    "QueryDecodeError",
    "check_type",
    "from_str",
    "to_str",
]


def from_str[T](query: str, cls: type[T], config: QueryConfig | None = None) -> T:
    """Decode *query* (without the leading ``?``) into an instance of *cls*.

    *cls* is a dataclass, or ``dict[str, T]`` for free-form groups.

    Raises ``QueryDecodeError`` for malformed structure, values that do
    not convert, or missing required fields.
    """
    tree = parse_query(query, config or DEFAULT_CONFIG)
    return decode(tree, cls, "")


def to_str(value: Any, config: QueryConfig | None = None) -> str:
    """Encode a dataclass instance (or mapping) as a query string.

    Returns ``""`` when every field is ``None`` or empty.
    """
    return encode(value, config or DEFAULT_CONFIG)
