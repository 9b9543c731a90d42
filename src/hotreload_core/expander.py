"""Environment variable expansion for configuration values.

Supports ``${NAME}`` and ``$NAME``. Unbound references are kept verbatim so
they stay visible in logs and paths instead of silently turning into "".
"""

import os
import re
from collections.abc import Mapping
from typing import TypeVar

T = TypeVar("T")

_NAME = r"[A-Za-z_][A-Za-z0-9_]*"
_BRACED = re.compile(r"\$\{(" + _NAME + r")\}")
# A bare reference directly followed by "{" is never expanded.
_BARE = re.compile(r"\$(" + _NAME + r")(?![A-Za-z0-9_{])")


def _substitute(pattern: re.Pattern, value: str, env: Mapping[str, str]) -> str:
    def replace(match: re.Match) -> str:
        bound = env.get(match.group(1))
        return bound if bound is not None else match.group(0)

    return pattern.sub(replace, value)


def expand(value: T, env: Mapping[str, str] | None = None) -> T:
    """Expand environment variable references in a string.

    Args:
        value: String possibly containing ``${NAME}`` or ``$NAME`` references.
            ``None`` and non-string values are returned unchanged.
        env: Variable bindings (defaults to ``os.environ``)

    Returns:
        The expanded string
    """
    if not isinstance(value, str) or not value:
        return value
    env = os.environ if env is None else env

    expanded = _substitute(_BRACED, value, env)
    return _substitute(_BARE, expanded, env)


def expand_deep(value: T, env: Mapping[str, str] | None = None) -> T:
    """Recursively expand every string inside lists, tuples and dicts.

    Structure is preserved; keys are not expanded. Other scalars (bool, int,
    float, None) pass through.
    """
    env = os.environ if env is None else env
    if isinstance(value, str):
        return expand(value, env)
    if isinstance(value, dict):
        return {key: expand_deep(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_deep(item, env) for item in value]
    if isinstance(value, tuple):
        return tuple(expand_deep(item, env) for item in value)
    return value


def find_unresolved(value: str | None) -> list[str]:
    """Return the names of variable references still present in *value*."""
    if not isinstance(value, str):
        return []
    names = _BRACED.findall(value)
    names.extend(_BARE.findall(_BRACED.sub("", value)))
    return names
