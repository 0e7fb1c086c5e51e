"""Route shapes: a compiled template plus typed path and query fields.

A shape is declared once, either with the builder::

    shape = (
        RouteShape.builder("/users/:user_id")
        .path("user_id", "u64")
        .query("paging", Paging, optional=True)
        .build()
    )

or with ``@route(...)`` on a dataclass (see ``approute.extraction``).
Declaration compiles the template and checks that its captures match
the declared path fields; both fail with ``ConfigurationError``.

At runtime ``parse`` turns ``/users/42?limit=10`` into a route value
and ``render`` turns a route value back into the same string.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Self

from approute import qs
from approute.config import DEFAULT_CONFIG, QueryConfig
from approute.errors import (
    ConfigurationError,
    FieldMismatchError,
    NoQueryString,
    ParamParseError,
    QueryDecodeError,
    QueryParseError,
    RouteValueError,
)
from approute.routing.matcher import match_path, split_query
from approute.routing.params import Converter, converter_for, resolve_converter
from approute.routing.route import FieldKind, FieldSpec, RouteValue
from approute.routing.template import CompiledTemplate, compile_template

logger = logging.getLogger("approute.routing")


def reconcile_fields(compiled: CompiledTemplate, path_fields: Iterable[str]) -> None:
    """Require the template's captures and the declared path fields to be equal.

    Raises ``FieldMismatchError`` naming the fields missing on each side.
    """
    captures = set(compiled.captures)
    declared = set(path_fields)
    if captures == declared:
        return
    raise FieldMismatchError(
        compiled.template,
        missing_from_path=tuple(sorted(declared - captures)),
        missing_from_struct=tuple(sorted(captures - declared)),
    )


@dataclass(frozen=True, slots=True)
class RouteShape[T]:
    """A registered route shape. Immutable and safe to share across threads."""

    compiled: CompiledTemplate
    path_fields: tuple[FieldSpec, ...]
    query_fields: tuple[FieldSpec, ...]
    factory: Callable[..., T]

    @staticmethod
    def builder(template: str, config: QueryConfig | None = None) -> RouteShapeBuilder:
        return RouteShapeBuilder(template, config)

    @property
    def template(self) -> str:
        return self.compiled.template

    @property
    def path_pattern(self) -> str:
        """The anchored regex the path portion is matched against."""
        return self.compiled.regex

    # -- Parsing --

    def match(self, raw: str) -> dict[str, str]:
        """Return the raw captures for *raw*, or raise ``NoMatches``."""
        return match_path(self.compiled, raw)

    def parse(self, raw: str) -> T:
        """Parse ``<path>[?<query>]`` into a route value.

        Raises a ``RouteParseError`` subclass: ``NoMatches``,
        ``ParamParseError``, ``NoQueryString``, ``QueryParseError`` or
        ``RouteValueError``.
        """
        path, query = split_query(raw)
        return self.compose(match_path(self.compiled, path), query)

    def compose(self, captures: Mapping[str, str], query: str | None) -> T:
        """Build a route value from matched captures and the query string.

        Every query field decodes its own copy of *query*.
        """
        values: dict[str, Any] = {}
        for spec in self.path_fields:
            text = captures[spec.name]
            try:
                values[spec.name] = spec.parse(text)
            except (ValueError, TypeError, ArithmeticError, LookupError) as exc:
                raise ParamParseError(spec.name, str(exc)) from exc
        for spec in self.query_fields:
            values[spec.name] = self._decode_query(spec, query)
        try:
            return self.factory(**values)
        except (ValueError, TypeError) as exc:
            raise RouteValueError(self.template, str(exc)) from exc

    def _decode_query(self, spec: FieldSpec, query: str | None) -> Any:
        if spec.optional:
            if query is None:
                return None
            try:
                return spec.parse(query)
            except QueryDecodeError as exc:
                # Optional groups are best-effort: malformed reads as absent
                logger.debug(
                    "Discarding optional query field %r for %s: %s",
                    spec.name,
                    self.template,
                    exc,
                )
                return None
        if query is None:
            raise NoQueryString()
        try:
            return spec.parse(query)
        except QueryDecodeError as exc:
            raise QueryParseError(spec.name, str(exc)) from exc

    # -- Rendering --

    def render(self, value: Any) -> str:
        """Render a route value as ``<path>[?<query>]``."""
        path = self.compiled.format(
            {spec.name: spec.format(_get(value, spec.name)) for spec in self.path_fields}
        )
        query = self.query_string(value)
        if query is None:
            return path
        return f"{path}?{query}"

    def query_string(self, value: Any) -> str | None:
        """Encode the query fields of *value*, or ``None`` if none are set.

        Fragments are joined with ``&`` in declaration order. Keys shared
        by two query fields are written once per field.
        """
        present = False
        fragments: list[str] = []
        for spec in self.query_fields:
            field_value = _get(value, spec.name)
            if field_value is None:
                continue
            present = True
            fragment = spec.format(field_value)
            if fragment:
                fragments.append(fragment)
        if not present:
            return None
        return "&".join(fragments)


def _get(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value[name]
    return getattr(value, name)


class RouteShapeBuilder:
    """Collects field declarations, then validates them in ``build()``.

    Mutable during setup only; ``build()`` returns an immutable
    ``RouteShape`` and the builder can be discarded.
    """

    __slots__ = ("_config", "_fields", "_template")

    def __init__(self, template: str, config: QueryConfig | None = None) -> None:
        self._template = template
        self._config = config or DEFAULT_CONFIG
        self._fields: list[FieldSpec] = []

    def path(
        self,
        name: str,
        converter: str | type | Converter = "str",
        *,
        parse: Callable[[str], Any] | None = None,
        format: Callable[[Any], str] | None = None,  # noqa: A002
    ) -> Self:
        """Declare a path field.

        *converter* is a named converter (``"int"``, ``"u8"``, ...), a type
        (``int``, an ``Enum``), or a ``Converter``. Explicit *parse* /
        *format* callables override the converter's.
        """
        if isinstance(converter, (str, Converter)):
            resolved = resolve_converter(converter)
        else:
            resolved = converter_for(converter)
        self._add(
            FieldSpec(
                name=name,
                kind=FieldKind.PATH,
                parse=parse or resolved.parse,
                format=format or resolved.format,
                value_type=converter if isinstance(converter, type) else None,
            )
        )
        return self

    def query(self, name: str, value_type: Any, *, optional: bool = False) -> Self:
        """Declare a query field decoded into *value_type* (a dataclass).

        Optional fields read as ``None`` when the query string is absent
        or fails to decode.
        """
        qs.check_type(value_type, name, group=True)
        config = self._config
        self._add(
            FieldSpec(
                name=name,
                kind=FieldKind.QUERY,
                parse=functools.partial(_decode_query_string, cls=value_type, config=config),
                format=functools.partial(qs.to_str, config=config),
                optional=optional,
                value_type=value_type,
            )
        )
        return self

    def _add(self, spec: FieldSpec) -> None:
        if any(existing.name == spec.name for existing in self._fields):
            msg = f"Field {spec.name!r} declared twice for route {self._template!r}"
            raise ConfigurationError(msg)
        self._fields.append(spec)

    def build[T](self, factory: Callable[..., T] = RouteValue) -> RouteShape[T]:
        """Compile the template, check the fields, and freeze the shape.

        *factory* receives every field as a keyword argument; the default
        produces a ``RouteValue`` mapping.

        Raises ``TemplateError`` or ``FieldMismatchError``.
        """
        compiled = compile_template(self._template)
        path_fields = tuple(f for f in self._fields if f.kind is FieldKind.PATH)
        query_fields = tuple(f for f in self._fields if f.kind is FieldKind.QUERY)
        reconcile_fields(compiled, (f.name for f in path_fields))
        logger.debug(
            "Registered route shape %s (path: %s; query: %s)",
            self._template,
            ", ".join(f.name for f in path_fields) or "-",
            ", ".join(f.name for f in query_fields) or "-",
        )
        return RouteShape(
            compiled=compiled,
            path_fields=path_fields,
            query_fields=query_fields,
            factory=factory,
        )


def _decode_query_string(query: str, *, cls: Any, config: QueryConfig) -> Any:
    return qs.from_str(query, cls, config)
