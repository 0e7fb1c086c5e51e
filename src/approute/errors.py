"""Approute exception hierarchy.

Shared across the template compiler, route shapes, and the query codec
so every module raises and catches the same types.

Two families:

- ``ConfigurationError``: a route shape was declared wrongly. Raised
  at definition time (decorator or ``build()``), never while parsing.
- ``RouteParseError``: a concrete path or query string did not fit a
  valid route shape. Always recoverable by the caller.
"""


class ApprouteError(Exception):
    """Base for all approute-specific errors."""


class ConfigurationError(ApprouteError):
    """Raised when a route shape declaration is invalid.

    Typically raised by ``@route(...)`` or ``RouteShapeBuilder.build()``
    at import time.
    """


# ---------------------------------------------------------------------------
# Template compilation
# ---------------------------------------------------------------------------


class TemplateError(ConfigurationError):
    """A route template could not be compiled."""

    def __init__(self, template: str, detail: str) -> None:
        self.template = template
        self.detail = detail
        super().__init__(f"{detail} in route template {template!r}")


class MissingLeadingForwardSlash(TemplateError):  # noqa: N818
    """Template does not start with ``/``."""

    def __init__(self, template: str) -> None:
        super().__init__(template, "Missing leading '/'")


class NonAsciiChars(TemplateError):  # noqa: N818
    """Template contains characters outside ASCII."""

    def __init__(self, template: str) -> None:
        super().__init__(template, "Non-ASCII characters")


class InvalidIdentifier(TemplateError):  # noqa: N818
    """A ``:name`` parameter is not a valid identifier."""

    def __init__(self, template: str, name: str) -> None:
        self.name = name
        super().__init__(
            template,
            f"Invalid parameter name {name!r} (expected [A-Za-z][A-Za-z0-9_]*)",
        )


class InvalidTrailingSlash(TemplateError):  # noqa: N818
    """Template ends with ``/``."""

    def __init__(self, template: str) -> None:
        super().__init__(template, "Trailing '/'")


class DuplicateParameter(TemplateError):  # noqa: N818
    """The same ``:name`` appears twice in one template."""

    def __init__(self, template: str, name: str) -> None:
        self.name = name
        super().__init__(template, f"Parameter {name!r} used more than once")


class FieldMismatchError(ConfigurationError):
    """Template captures and declared path fields disagree.

    Both directions are reported so the declaration can be fixed in
    one pass.
    """

    def __init__(
        self,
        template: str,
        missing_from_path: tuple[str, ...],
        missing_from_struct: tuple[str, ...],
    ) -> None:
        self.template = template
        self.missing_from_path = missing_from_path
        self.missing_from_struct = missing_from_struct
        super().__init__(
            f"Path fields do not match route template {template!r}\n"
            f"Fields missing from path pattern: {list(missing_from_path)}\n"
            f"Fields in path missing from declaration: {list(missing_from_struct)}"
        )


# ---------------------------------------------------------------------------
# Runtime parsing
# ---------------------------------------------------------------------------


class RouteParseError(ApprouteError):
    """A concrete path did not parse into a route value."""


class NoMatches(RouteParseError):  # noqa: N818
    """The path does not conform to the compiled template."""

    def __init__(self, path: str = "") -> None:
        self.path = path
        super().__init__(f"No match for path {path!r}" if path else "No match")


class NoQueryString(RouteParseError):  # noqa: N818
    """A required query field was declared but the input had no ``?``."""

    def __init__(self) -> None:
        super().__init__("Required query string is missing")


class ParamParseError(RouteParseError):
    """A captured path parameter could not be converted to its field type."""

    def __init__(self, name: str, description: str) -> None:
        self.name = name
        self.description = description
        super().__init__(f"Path parameter {name!r}: {description}")


class QueryParseError(RouteParseError):
    """A required query field failed structural or type decoding."""

    def __init__(self, name: str, description: str) -> None:
        self.name = name
        self.description = description
        super().__init__(f"Query field {name!r}: {description}")


class RouteValueError(RouteParseError):
    """Every field parsed, but the route value rejected them.

    Raised when the value type itself refuses its arguments, e.g. a
    dataclass ``__post_init__`` that raises ``ValueError``.
    """

    def __init__(self, route: str, description: str) -> None:
        self.route = route
        self.description = description
        super().__init__(f"Route value for {route!r}: {description}")


class QueryDecodeError(ApprouteError, ValueError):
    """Raised by the query codec for malformed or mistyped query strings.

    Route shapes wrap this in ``QueryParseError`` for required query
    fields and discard it for optional ones.
    """
