"""
A minimal memoizing cache.

A :class:`Cache` combines a :class:`Config` (a function that derives a string key from an input, and a function that
derives the value to cache from that same input) with a plain dict that maps keys to cached values.

Example::\n
    >>> cache = create_cache(Config(str, lambda n: n * 10))
    >>> cache.get(1)
    10
    >>> cache.set('2', 12)
    >>> cache.get(2)
    12

There is no eviction policy - entries are only removed via :meth:`Cache.delete` and :meth:`Cache.clear`.
"""

from __future__ import annotations

import logging
from typing import TypeVar, Generic, Callable, Iterable, Mapping, NamedTuple, Union, Any

from .exceptions import InvalidConfigError

__all__ = ['Config', 'KeyValuePair', 'Cache', 'create_cache']
log = logging.getLogger(__name__)

In = TypeVar('In')
Out = TypeVar('Out')
KeyFunc = Callable[[In], str]
ValueFunc = Callable[[In], Out]
Pair = Union['KeyValuePair', tuple[str, Out], Mapping[str, Any]]

_NotFound = object()


class Config(NamedTuple):
    """
    The pair of functions that a :class:`Cache` uses to derive keys and values from inputs.

    :param compute_key: Called with an input; must return a string that uniquely identifies that input.  Uniqueness is
      not validated.
    :param compute_value: Called with an input on a cache miss; its return value is stored as-is.  It may return a
      deferred value (such as a Future or a coroutine), which will be stored without waiting for it to resolve.
    """
    compute_key: KeyFunc
    compute_value: ValueFunc


class KeyValuePair(NamedTuple):
    key: str
    value: Any


class Cache(Generic[In, Out]):
    """
    Memoizes the results of ``config.compute_value`` by the key returned by ``config.compute_key``.

    No locking is used - see :class:`LockingCache<treasure_chest.locking.LockingCache>` for a thread-safe version.

    :param config: A :class:`Config`, a mapping, or any other object that provides callable ``compute_key`` and
      ``compute_value`` members.  The functions are captured during initialization; later changes to the given object
      do not affect this cache.
    """

    def __init__(self, config: Config | Mapping[str, Callable] | Any):
        self._config = _normalize_config(config)
        self._data: dict[str, Out] = {}

    @property
    def config(self) -> Config:
        return self._config

    def get(self, input: In) -> Out:  # noqa
        """
        Return the cached value for the given input, computing and storing it first if necessary.

        Exceptions raised by ``compute_key`` or ``compute_value`` are not handled here; nothing is stored when they
        occur, so a later call with the same input will try again.
        """
        key = self._config.compute_key(input)
        if (value := self._data.get(key, _NotFound)) is not _NotFound:
            log.log(9, f'Cache hit for {key=}')
            return value

        log.log(9, f'Cache miss for {key=}')
        return self._compute_and_store(input, key)

    def _compute_and_store(self, input: In, key: str) -> Out:  # noqa
        # The value is stored before returning, even if it is a deferred value that has not resolved yet
        self._data[key] = value = self._config.compute_value(input)
        return value

    def set(self, key: str, value: Out):
        """
        Store the given value for the given key, replacing any existing value.

        The key is used as-is (it is NOT passed to ``compute_key``), and no attempt is made to verify that the value
        is consistent with what ``compute_value`` would return.
        """
        log.log(9, f'Storing value for {key=}')
        self._data[key] = value

    def set_many(self, pairs: Iterable[Pair]):
        """
        Store each of the given key/value pairs, in order.  If a key appears more than once, then the last value for
        that key is the one that will be kept.

        :param pairs: An iterable of :class:`KeyValuePair` objects, ``(key, value)`` tuples, or mappings with ``key``
          and ``value`` entries
        """
        for pair in pairs:
            if isinstance(pair, Mapping):
                self.set(pair['key'], pair['value'])
            else:
                key, value = pair
                self.set(key, value)

    def delete(self, key: str):
        """Remove the entry for the given key, if one exists."""
        try:
            del self._data[key]
        except KeyError:
            pass
        else:
            log.log(9, f'Deleted {key=}')

    def clear(self):
        """Discard all cached entries."""
        log.debug(f'Clearing {len(self._data)} entries from {self}')
        self._data = {}

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[entries={len(self._data)}]>'


def create_cache(config: Config | Mapping[str, Callable] | Any) -> Cache:
    """Convenience function for initializing a :class:`Cache` with the given config."""
    return Cache(config)


def _normalize_config(config) -> Config:
    if isinstance(config, Config):
        funcs = config
    elif isinstance(config, Mapping):
        funcs = (config.get('compute_key'), config.get('compute_value'))
    else:
        funcs = (getattr(config, 'compute_key', None), getattr(config, 'compute_value', None))

    for attr, func in zip(Config._fields, funcs):
        if not callable(func):
            raise InvalidConfigError(config, attr, func)

    return Config(*funcs)
