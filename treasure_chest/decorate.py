"""
A ``memoized`` decorator that stores the results of a single-argument function in a
:class:`Cache<treasure_chest.cache.Cache>`.
"""

from __future__ import annotations

import logging
from functools import update_wrapper
from typing import Callable, Generic

from .cache import Cache, Config, In, Out
from .keys import str_key
from .locking import LockingCache

__all__ = ['memoized', 'MemoizedFunc']
log = logging.getLogger(__name__)


def memoized(
    key: Callable[[In], str] = str_key, *, lock: bool = False
) -> Callable[[Callable[[In], Out]], MemoizedFunc[In, Out]]:
    """
    Decorator that memoizes the results of a function that accepts a single positional argument.

    Example::\n
        >>> @memoized()
        ... def times_ten(n):
        ...     return n * 10
        >>> times_ten(2)
        20
        >>> times_ten.cache.set('2', 12)
        >>> times_ten(2)
        12

    :param key: The function to use to compute the cache key for each argument (default: :func:`str`)
    :param lock: Use a :class:`LockingCache<treasure_chest.locking.LockingCache>` so that the decorated function may
      safely be called from multiple threads
    """
    def decorator(func: Callable[[In], Out]) -> MemoizedFunc[In, Out]:
        return MemoizedFunc(func, key, lock=lock)
    return decorator


class MemoizedFunc(Generic[In, Out]):
    __slots__ = ('func', 'cache', '__dict__')

    def __init__(self, func: Callable[[In], Out], key: Callable[[In], str] = str_key, *, lock: bool = False):
        self.func = func
        cache_cls = LockingCache if lock else Cache
        self.cache: Cache[In, Out] = cache_cls(Config(key, func))
        update_wrapper(self, func)

    def __call__(self, arg: In) -> Out:
        return self.cache.get(arg)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}({self.func!r}, cache={self.cache!r})>'
