"""Route template compilation.

A template such as ``/users/:user_id/friends/:friend_name`` is scanned
once, left to right, into two parallel artifacts:

- a regex with one named group per ``:name`` segment::

      ^/users/(?P<user_id>[^/]+)/friends/(?P<friend_name>[^/]+)$

- a format string with one slot per segment::

      /users/{user_id}/friends/{friend_name}

Compiled templates are immutable and cached per distinct template
string for the lifetime of the process.
"""

import logging
import re
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from approute.errors import (
    DuplicateParameter,
    InvalidIdentifier,
    InvalidTrailingSlash,
    MissingLeadingForwardSlash,
    NonAsciiChars,
)

logger = logging.getLogger("approute.routing")

_IDENTIFIER = re.compile(r"[A-Za-z][A-Za-z0-9_]*")

# One or more non-slash characters, any script
CAPTURE_PATTERN = r"[^/]+"


def is_valid_identifier(name: str) -> bool:
    """Return True if *name* is ``[A-Za-z][A-Za-z0-9_]*``.

    No leading digit, no leading underscore, no empty name.
    """
    return _IDENTIFIER.fullmatch(name) is not None


class _State(Enum):
    INITIAL = "initial"
    STATIC = "static"
    CAPTURING_NAME = "capturing_name"


@dataclass(frozen=True, slots=True)
class CompiledTemplate:
    """A compiled route template. Safe to share across threads.

    ``captures`` lists the parameter names in template order.
    """

    template: str
    regex: str
    format_string: str
    captures: tuple[str, ...]
    pattern: re.Pattern[str] = field(compare=False, repr=False)

    def format(self, values: Mapping[str, str]) -> str:
        """Substitute already-formatted parameter text into the template."""
        return self.format_string.format_map(values)


def translate_template(template: str) -> tuple[str, str, tuple[str, ...]]:
    """Scan *template* into ``(regex, format_string, captures)``.

    Pure function: identical input always gives identical output.

    Raises:
        NonAsciiChars: Checked before anything else.
        MissingLeadingForwardSlash: Empty template or first char not ``/``.
        InvalidIdentifier: A ``:name`` segment has an invalid name.
        DuplicateParameter: A ``:name`` is used twice.
        InvalidTrailingSlash: Template ends with ``/`` (other than ``/`` itself).
    """
    if not template.isascii():
        raise NonAsciiChars(template)

    regex: list[str] = []
    format_parts: list[str] = []
    captures: list[str] = []
    state = _State.INITIAL
    name = ""

    for char in template:
        if state is _State.INITIAL:
            if char != "/":
                raise MissingLeadingForwardSlash(template)
            regex.append("^/")
            format_parts.append("/")
            state = _State.STATIC
        elif state is _State.STATIC:
            if char == ":":
                name = ""
                state = _State.CAPTURING_NAME
            else:
                regex.append(re.escape(char))
                format_parts.append(_escape_format(char))
        elif char == "/":
            _emit_capture(template, name, regex, format_parts, captures)
            regex.append("/")
            format_parts.append("/")
            state = _State.STATIC
        else:
            name += char

    if state is _State.INITIAL:
        raise MissingLeadingForwardSlash(template)
    if state is _State.CAPTURING_NAME:
        _emit_capture(template, name, regex, format_parts, captures)

    source = "".join(regex)
    if source.endswith("/") and template != "/":
        raise InvalidTrailingSlash(template)

    return source + "$", "".join(format_parts), tuple(captures)


def _emit_capture(
    template: str,
    name: str,
    regex: list[str],
    format_parts: list[str],
    captures: list[str],
) -> None:
    if not is_valid_identifier(name):
        raise InvalidIdentifier(template, name)
    if name in captures:
        raise DuplicateParameter(template, name)
    captures.append(name)
    regex.append(f"(?P<{name}>{CAPTURE_PATTERN})")
    format_parts.append("{" + name + "}")


def _escape_format(char: str) -> str:
    if char in "{}":
        return char * 2
    return char


def _build(template: str) -> CompiledTemplate:
    regex, format_string, captures = translate_template(template)
    logger.debug("Compiled route template %r -> %s", template, regex)
    return CompiledTemplate(
        template=template,
        regex=regex,
        format_string=format_string,
        captures=captures,
        pattern=re.compile(regex),
    )


class TemplateCache:
    """Process-wide cache of compiled templates, one entry per template.

    Thread safety:
        Lookups are lock-free. A miss takes the lock and checks again,
        so concurrent first use of a template compiles it exactly once.
        Failed compilations are not cached.
    """

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        self._entries: dict[str, CompiledTemplate] = {}
        self._lock = threading.Lock()

    def get(self, template: str) -> CompiledTemplate:
        compiled = self._entries.get(template)
        if compiled is not None:
            return compiled
        with self._lock:
            compiled = self._entries.get(template)
            if compiled is None:
                compiled = _build(template)
                self._entries[template] = compiled
        return compiled

    def __contains__(self, template: object) -> bool:
        return template in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


_cache = TemplateCache()


def compile_template(template: str) -> CompiledTemplate:
    """Compile *template*, reusing the cached result when available.

    Raises a ``TemplateError`` subclass for malformed templates.
    """
    return _cache.get(template)
