"""Field descriptors and the generic route value."""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class FieldKind(Enum):
    """Where a route field's value comes from."""

    PATH = "path"
    QUERY = "query"


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Capability descriptor for one route field.

    Path:   ``parse`` takes the raw capture, ``format`` returns path text.
    Query:  ``parse`` takes the whole query string, ``format`` returns a
            query fragment. ``optional`` fields resolve to ``None`` when
            the query is absent or does not decode.
    """

    name: str
    kind: FieldKind
    parse: Callable[[str], Any]
    format: Callable[[Any], str]
    optional: bool = False
    value_type: Any = None


class RouteValue(Mapping[str, Any]):
    """Immutable field name -> value mapping for builder-made shapes.

    Values are also reachable as attributes::

        value = shape.parse("/users/42")
        value["user_id"] == value.user_id == 42
    """

    __slots__ = ("_data",)

    def __init__(self, **values: Any) -> None:
        object.__setattr__(self, "_data", values)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __getattr__(self, name: str) -> Any:
        if name == "_data":
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        msg = "RouteValue is immutable"
        raise AttributeError(msg)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __reduce__(self) -> tuple[Any, ...]:
        return (_rebuild, (dict(self._data),))

    def __repr__(self) -> str:
        items = ", ".join(f"{k}={v!r}" for k, v in self._data.items())
        return f"RouteValue({items})"


def _rebuild(data: dict[str, Any]) -> RouteValue:
    return RouteValue(**data)
