"""Query string tokenizing: ``&``-joined pairs into a nested tree.

Keys use bracket nesting::

    address[building][name]=Cool%20Building   -> {"address": {"building": {"name": ...}}}
    friend_ids[]=1&friend_ids[]=20             -> {"friend_ids": ["1", "20"]}
    friend_ids[1]=20&friend_ids[0]=1           -> {"friend_ids": {"1": "20", "0": "1"}}

The tree holds three node kinds: ``str`` leaves, ``dict`` for named or
indexed children, and ``list`` for ``[]`` appends. Indexed children stay
a ``dict`` here; turning them into an ordered sequence is up to the
typed decoder, which knows whether a sequence is expected.
"""

import re
from typing import Any
from urllib.parse import quote_plus, unquote_plus

from approute.config import QueryConfig
from approute.errors import QueryDecodeError

type QueryNode = str | list[str] | dict[str, Any]

_KEY = re.compile(r"([^\[\]]+)((?:\[[^\[\]]*\])*)")
_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


def split_key(key: str, max_depth: int) -> list[str]:
    """Split ``a[b][]`` into ``["a", "b", ""]``.

    An empty segment stands for ``[]``. Raises ``QueryDecodeError`` for
    unbalanced brackets or nesting deeper than *max_depth*.
    """
    match = _KEY.fullmatch(key)
    if match is None:
        msg = f"malformed key {key!r}"
        raise QueryDecodeError(msg)
    head, rest = match.groups()
    segments = _SEGMENT.findall(rest)
    if len(segments) > max_depth:
        msg = f"key {key!r} exceeds maximum nesting depth of {max_depth}"
        raise QueryDecodeError(msg)
    return [head, *segments]


def parse_query(query: str, config: QueryConfig) -> dict[str, Any]:
    """Parse a raw query string (without the ``?``) into a nested tree.

    Keys and values are percent-decoded with ``+`` as space. A pair
    without ``=`` has an empty value; empty pairs and empty keys are
    skipped.

    Raises ``QueryDecodeError`` on conflicting or duplicate keys and on
    percent escapes that are not valid UTF-8.
    """
    root: dict[str, Any] = {}
    for pair in query.split("&"):
        raw_key, _, raw_value = pair.partition("=")
        if not raw_key:
            continue
        if config.strict:
            # Brackets are structure only when written literally
            segments = [
                _unquote(s) for s in split_key(raw_key, config.max_depth)
            ]
        else:
            segments = split_key(_unquote(raw_key), config.max_depth)
        _insert(root, segments, _unquote(raw_value), raw_key)
    return root


def _unquote(text: str) -> str:
    try:
        return unquote_plus(text, errors="strict")
    except UnicodeDecodeError as exc:
        msg = f"invalid percent-encoded UTF-8 in {text!r}"
        raise QueryDecodeError(msg) from exc


def _insert(root: dict[str, Any], segments: list[str], value: str, key: str) -> None:
    appending = segments[-1] == ""
    if appending:
        parents, last = segments[:-2], segments[-2]
    else:
        parents, last = segments[:-1], segments[-1]
    if "" in parents or last == "":
        msg = f"'[]' is only supported as the last segment of a key: {key!r}"
        raise QueryDecodeError(msg)

    node = root
    for seg in parents:
        child = node.setdefault(seg, {})
        if not isinstance(child, dict):
            raise _conflict(key)
        node = child

    if appending:
        items = node.setdefault(last, [])
        if not isinstance(items, list):
            raise _conflict(key)
        items.append(value)
        return

    if last in node:
        if isinstance(node[last], str):
            msg = f"duplicate key {key!r}"
            raise QueryDecodeError(msg)
        raise _conflict(key)
    node[last] = value


def _conflict(key: str) -> QueryDecodeError:
    return QueryDecodeError(
        f"key {key!r} mixes incompatible forms (plain, '[]' and indexed/named)"
    )


def format_key(path: list[str], config: QueryConfig) -> str:
    """Render ``["a", "b", "0"]`` as ``a[b][0]``."""
    head, *rest = (quote_plus(seg, safe="") for seg in path)
    if config.encode_brackets:
        return head + "".join(f"%5B{seg}%5D" for seg in rest)
    return head + "".join(f"[{seg}]" for seg in rest)
