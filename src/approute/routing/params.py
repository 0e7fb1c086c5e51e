"""Path parameter parsing and formatting.

Built-in converters for ``:name`` segments. Each converter pairs a
parser (raw captured text -> value) with a formatter (value -> path
text) so a route value can be rendered back to the same path it was
parsed from.

Parsers raise ``ValueError`` on bad input; route shapes turn that into
``ParamParseError``.
"""

import functools
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, get_origin

from approute._internal.types import Formatter, Parser
from approute.errors import ConfigurationError

_INT = re.compile(r"[+-]?[0-9]+")
_FLOAT = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[+-]?(?:inf|infinity|nan)",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class Converter:
    """A parser/formatter pair for one path parameter type."""

    parse: Parser
    format: Formatter = str


def parse_int(value: str) -> int:
    """Parse a decimal integer: optional sign, then ASCII digits only.

    Stricter than ``int()``: whitespace, underscores, and non-ASCII
    digits are rejected.
    """
    if _INT.fullmatch(value) is None:
        msg = f"invalid digit found in string: {value!r}"
        raise ValueError(msg)
    return int(value)


def bounded_int(lo: int, hi: int) -> Parser:
    """Return a parser for integers in the closed range ``[lo, hi]``."""

    def parse(value: str) -> int:
        if lo >= 0 and value.startswith("-"):
            msg = f"invalid digit found in string: {value!r}"
            raise ValueError(msg)
        number = parse_int(value)
        if number < lo:
            msg = f"number too small to fit in target type: {value!r} < {lo}"
            raise ValueError(msg)
        if number > hi:
            msg = f"number too large to fit in target type: {value!r} > {hi}"
            raise ValueError(msg)
        return number

    return parse


def parse_float(value: str) -> float:
    """Parse a decimal or exponent float, or ``inf`` / ``nan``.

    Stricter than ``float()``: surrounding whitespace and underscores are
    rejected.
    """
    if _FLOAT.fullmatch(value) is None:
        msg = f"invalid float literal: {value!r}"
        raise ValueError(msg)
    return float(value)


def parse_bool(value: str) -> bool:
    """Parse ``true`` / ``false`` exactly."""
    if value == "true":
        return True
    if value == "false":
        return False
    msg = f"provided string was not `true` or `false`: {value!r}"
    raise ValueError(msg)


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def parse_str(value: str) -> str:
    return value


@functools.lru_cache(maxsize=128)
def enum_converter(enum_type: type[Enum]) -> Converter:
    """Converter for an ``Enum`` whose values are strings (or ints)."""
    members = {str(member.value): member for member in enum_type}

    def parse(value: str) -> Enum:
        try:
            return members[value]
        except KeyError:
            expected = ", ".join(sorted(members))
            msg = f"unknown variant {value!r}, expected one of {expected}"
            raise ValueError(msg) from None

    def format_(value: Enum) -> str:
        return str(value.value)

    return Converter(parse=parse, format=format_)


# (parser, formatter) for each named converter
CONVERTERS: dict[str, Converter] = {
    "str": Converter(parse_str),
    "int": Converter(parse_int),
    "float": Converter(parse_float),
    "bool": Converter(parse_bool, format_bool),
    "u8": Converter(bounded_int(0, 2**8 - 1)),
    "u16": Converter(bounded_int(0, 2**16 - 1)),
    "u32": Converter(bounded_int(0, 2**32 - 1)),
    "u64": Converter(bounded_int(0, 2**64 - 1)),
    "i8": Converter(bounded_int(-(2**7), 2**7 - 1)),
    "i16": Converter(bounded_int(-(2**15), 2**15 - 1)),
    "i32": Converter(bounded_int(-(2**31), 2**31 - 1)),
    "i64": Converter(bounded_int(-(2**63), 2**63 - 1)),
}

_BY_TYPE: dict[type, str] = {str: "str", int: "int", float: "float", bool: "bool"}


def converter_for(annotation: Any) -> Converter:
    """Pick the converter for a path field's type annotation.

    Accepts the built-in scalar types and ``Enum`` subclasses.
    Raises ``ConfigurationError`` for anything else.
    """
    if isinstance(annotation, type) and get_origin(annotation) is None:
        if issubclass(annotation, Enum):
            return enum_converter(annotation)
        # bool before int: bool is an int subclass but must not use parse_int
        for base in (bool, str, int, float):
            if issubclass(annotation, base):
                return CONVERTERS[_BY_TYPE[base]]
    msg = (
        f"No path parameter converter for {annotation!r}. "
        "Use str, int, float, bool, an Enum, or path_field(converter=...)."
    )
    raise ConfigurationError(msg)


def resolve_converter(converter: str | Converter) -> Converter:
    """Look up a named converter, passing ``Converter`` instances through."""
    if isinstance(converter, Converter):
        return converter
    try:
        return CONVERTERS[converter]
    except KeyError:
        known = ", ".join(CONVERTERS)
        msg = f"Unknown path parameter converter {converter!r} (known: {known})"
        raise ConfigurationError(msg) from None
