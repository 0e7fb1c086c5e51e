"""Query codec configuration.

QueryConfig is a frozen dataclass: immutable after creation, passed
explicitly to route shapes and codec calls. There are no environment
variables or global settings.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class QueryConfig:
    """Query string encoding/decoding options. Immutable after creation.

    All fields have defaults matching the wire format route shapes
    produce. Override what you need::

        config = QueryConfig(max_depth=8, encode_brackets=True)
    """

    # Maximum number of bracket segments in one key (``a[b][c]`` is 2)
    max_depth: int = 5

    # Strict mode: percent-encoded brackets (``%5B``/``%5D``) in keys are
    # literal characters, not nesting
    strict: bool = True

    # Render ``a[b]=1`` as ``a%5Bb%5D=1``
    encode_brackets: bool = False

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            msg = f"max_depth must be >= 0, got {self.max_depth}"
            raise ValueError(msg)


DEFAULT_CONFIG = QueryConfig()
