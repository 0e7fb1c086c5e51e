"""Route shapes declared as dataclasses.

Decorate a dataclass with ``@route(template)``; every field is a path
field unless it is declared with ``query_field()``::

    @dataclass(frozen=True, slots=True)
    class UserListQuery:
        limit: int | None = None
        keyword: str | None = None
        friends_only: bool = False

    @route("/users/:user_id")
    @dataclass(frozen=True, slots=True)
    class UserDetail:
        user_id: int = path_field(converter="u32")
        query: UserListQuery | None = query_field(default=None)

    UserDetail.parse("/users/8?limit=55")
    # UserDetail(user_id=8, query=UserListQuery(limit=55, keyword=None, friends_only=False))
    str(UserDetail(user_id=8, query=None))
    # '/users/8'

Resolution rules:

- **Path fields**: converter picked from the annotation (``str``,
  ``int``, ``float``, ``bool``, ``Enum``) unless given explicitly with
  ``path_field(converter=...)``.
- **Query fields**: the annotation is the query group type; ``T | None``
  makes the group optional.

The shape is built when the decorator runs, so a template that does not
compile or does not match the path fields fails at import time.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, get_type_hints

from approute._internal.hints import is_optional, unwrap_optional
from approute.config import QueryConfig
from approute.errors import ConfigurationError
from approute.routing.params import Converter
from approute.routing.route import FieldKind
from approute.routing.shape import RouteShape

_METADATA_KEY = "approute"


@dataclass(frozen=True, slots=True)
class _FieldMarker:
    kind: FieldKind
    converter: str | Converter | None = None


def path_field(
    *,
    converter: str | Converter | None = None,
    **kwargs: Any,
) -> Any:
    """Declare a path field with an explicit converter.

    Extra keyword arguments go to ``dataclasses.field``.
    """
    return dataclasses.field(
        metadata={_METADATA_KEY: _FieldMarker(FieldKind.PATH, converter)},
        **kwargs,
    )


def query_field(**kwargs: Any) -> Any:
    """Declare a query field. Keyword arguments go to ``dataclasses.field``."""
    return dataclasses.field(metadata={_METADATA_KEY: _FieldMarker(FieldKind.QUERY)}, **kwargs)


def shape_from_dataclass[T](
    cls: type[T],
    template: str,
    config: QueryConfig | None = None,
) -> RouteShape[T]:
    """Build a ``RouteShape`` whose values are instances of *cls*.

    Raises ``ConfigurationError`` for non-dataclasses, unsupported
    annotations, bad templates, or path fields that do not match the
    template's parameters.
    """
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        msg = f"@route(...) requires a dataclass, got {cls!r}"
        raise ConfigurationError(msg)

    hints = get_type_hints(cls)
    builder = RouteShape.builder(template, config)
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        marker = f.metadata.get(_METADATA_KEY)
        hint = hints[f.name]
        if marker is not None and marker.kind is FieldKind.QUERY:
            builder.query(f.name, unwrap_optional(hint), optional=is_optional(hint))
        elif marker is not None and marker.converter is not None:
            builder.path(f.name, marker.converter)
        else:
            builder.path(f.name, hint)
    return builder.build(cls)


def route[T](
    template: str,
    *,
    config: QueryConfig | None = None,
) -> Callable[[type[T]], type[T]]:
    """Class decorator registering a dataclass as a route shape.

    Adds ``parse`` and ``path_pattern`` classmethods, a
    ``query_string()`` method, and ``__str__`` (rendering). The shape
    itself is stored on ``__route_shape__``.
    """

    def decorator(cls: type[T]) -> type[T]:
        shape = shape_from_dataclass(cls, template, config)
        cls.__route_shape__ = shape  # type: ignore[attr-defined]
        cls.parse = classmethod(_parse)  # type: ignore[attr-defined]
        cls.path_pattern = classmethod(_path_pattern)  # type: ignore[attr-defined]
        cls.query_string = _query_string  # type: ignore[attr-defined]
        cls.__str__ = _render  # type: ignore[method-assign]
        return cls

    return decorator


def shape_of(obj: Any) -> RouteShape[Any]:
    """Return the route shape of a ``@route`` class or instance."""
    cls = obj if isinstance(obj, type) else type(obj)
    shape = getattr(cls, "__route_shape__", None)
    if shape is None:
        msg = f"{cls.__qualname__} is not decorated with @route(...)"
        raise ConfigurationError(msg)
    return shape


def _parse(cls: type, raw: str) -> Any:
    return shape_of(cls).parse(raw)


def _path_pattern(cls: type) -> str:
    return shape_of(cls).path_pattern


def _query_string(self: Any) -> str | None:
    return shape_of(self).query_string(self)


def _render(self: Any) -> str:
    return shape_of(self).render(self)
