"""Matching concrete paths against compiled templates."""

from approute.errors import NoMatches
from approute.routing.template import CompiledTemplate


def split_query(raw: str) -> tuple[str, str | None]:
    """Split *raw* at the first ``?``.

    Returns ``(path, query)`` where *query* is ``None`` when there is no
    ``?`` at all and ``""`` for a bare trailing ``?``.
    """
    path, sep, query = raw.partition("?")
    if not sep:
        return path, None
    return path, query


def match_path(compiled: CompiledTemplate, raw: str) -> dict[str, str]:
    """Match the path portion of *raw* against *compiled*.

    Anything from the first ``?`` on is ignored. The whole path must
    match; captured values are returned exactly as they appear in the
    input (no decoding, no case folding).

    Raises ``NoMatches`` if the path does not conform.
    """
    path, _ = split_query(raw)
    match = compiled.pattern.fullmatch(path)
    if match is None:
        raise NoMatches(path)
    return match.groupdict()
