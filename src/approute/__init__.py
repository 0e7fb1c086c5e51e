"""Approute: typed route templates that parse and render both ways.

Compile ``/users/:user_id`` once, then turn ``/users/42?limit=10`` into a
typed value and the value back into the same string.

Basic usage::

    from dataclasses import dataclass

    from approute import query_field, route

    @dataclass(frozen=True, slots=True)
    class Paging:
        limit: int | None = None
        offset: int | None = None

    @route("/users/:user_id")
    @dataclass(frozen=True, slots=True)
    class UserDetail:
        user_id: int
        paging: Paging | None = query_field(default=None)

    value = UserDetail.parse("/users/42?limit=10")
    str(value)  # '/users/42?limit=10'

Without dataclasses::

    from approute import RouteShape

    shape = RouteShape.builder("/users/:user_id").path("user_id", int).build()
    shape.parse("/users/42")["user_id"]  # 42
"""

import importlib

__version__ = "0.1.0"
__all__ = [
    "ApprouteError",
    "CompiledTemplate",
    "ConfigurationError",
    "FieldMismatchError",
    "NoMatches",
    "NoQueryString",
    "ParamParseError",
    "QueryConfig",
    "QueryDecodeError",
    "QueryParseError",
    "RouteParseError",
    "RouteShape",
    "RouteValue",
    "RouteValueError",
    "TemplateError",
    "compile_template",
    "path_field",
    "query_field",
    "route",
    "shape_of",
]

# Public name -> defining module, resolved on first access
_LAZY_IMPORTS: dict[str, str] = {
    "ApprouteError": "approute.errors",
    "CompiledTemplate": "approute.routing.template",
    "ConfigurationError": "approute.errors",
    "FieldMismatchError": "approute.errors",
    "NoMatches": "approute.errors",
    "NoQueryString": "approute.errors",
    "ParamParseError": "approute.errors",
    "QueryConfig": "approute.config",
    "QueryDecodeError": "approute.errors",
    "QueryParseError": "approute.errors",
    "RouteParseError": "approute.errors",
    "RouteShape": "approute.routing.shape",
    "RouteValue": "approute.routing.route",
    "RouteValueError": "approute.errors",
    "TemplateError": "approute.errors",
    "compile_template": "approute.routing.template",
    "path_field": "approute.extraction",
    "query_field": "approute.extraction",
    "route": "approute.extraction",
    "shape_of": "approute.extraction",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import approute`` cheap while providing a flat top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(importlib.import_module(module_name), name)
