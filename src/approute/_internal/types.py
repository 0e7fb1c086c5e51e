"""Shared type aliases used across approute modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Path parameter parser: raw captured text -> typed value
Parser: TypeAlias = Callable[[str], Any]

# Path parameter formatter: typed value -> path text
Formatter: TypeAlias = Callable[[Any], str]
