"""
Generation-tagged memoization for summary queries.

Read queries on a summary are memoized per instance. Any mutation calls
``invalidate()``, which bumps the generation and drops every entry, so a
query never returns a value computed before the last mutation.
"""

import functools
from typing import Any, Callable, Dict, Hashable, Tuple, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

_MISSING = object()


class MemoCache:
    """Per-instance cache of derived values, keyed by (name, *args)."""

    __slots__ = ["_generation", "_entries"]

    def __init__(self) -> None:
        self._generation = 0
        self._entries: Dict[Hashable, Tuple[int, Any]] = {}

    @property
    def generation(self) -> int:
        """Number of invalidations since construction."""
        return self._generation

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the value stored under key in the current generation."""
        entry = self._entries.get(key)
        if entry is None or entry[0] != self._generation:
            return default
        return entry[1]

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = (self._generation, value)

    def invalidate(self) -> None:
        """Discard every cached value."""
        self._generation += 1
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        return len(self._entries)


def memoized(method: F) -> F:
    """
    Cache a method's result in ``self._cache`` until the next invalidation.

    The cache key is the method name followed by the arguments, so
    one-argument queries such as ``central_moment(3)`` are cached per argument
    value. Arguments must be hashable.
    """
    name = method.__name__

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        cache: MemoCache = self._cache
        key = (name,) + args
        if kwargs:
            key += tuple(sorted(kwargs.items()))
        value = cache.get(key, _MISSING)
        if value is _MISSING:
            value = method(self, *args, **kwargs)
            cache.set(key, value)
        return value

    return wrapper  # type: ignore[return-value]
