"""Glob compilation for path selectors — thin wrapper over wcmatch."""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, TypeVar, Union

from wcmatch import glob

T = TypeVar("T")

# `*` stays within one directory, `**` spans directories, `!pat` negates,
# a list of only negations means "everything except", dotfiles are not special.
GLOB_FLAGS = glob.GLOBSTAR | glob.NEGATE | glob.NEGATEALL | glob.DOTGLOB | glob.FORCEUNIX

PathMatcher = Callable[[str], bool]


def to_list(value: Optional[Union[T, Iterable[T]]]) -> List[T]:
    """Wrap a single value in a list; ``None`` becomes an empty list."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]  # type: ignore[list-item]
    if isinstance(value, Iterable):
        return list(value)
    return [value]


def compile_matcher(patterns: Union[str, Iterable[str], None]) -> PathMatcher:
    """Return a predicate testing a path against one or more glob patterns.

    An empty selector matches nothing.
    """
    pats = to_list(patterns)
    if not pats:
        return lambda path: False

    def _match(path: str) -> bool:
        return glob.globmatch(path, pats, flags=GLOB_FLAGS)

    return _match
