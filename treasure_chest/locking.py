"""
A thread-safe variant of :class:`Cache<treasure_chest.cache.Cache>`.
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import Callable, Mapping, Any

from wrapt import synchronized

from .cache import Cache, Config, In, Out, _NotFound

__all__ = ['LockingCache']
log = logging.getLogger(__name__)


class LockingCache(Cache[In, Out]):
    """
    A :class:`Cache<treasure_chest.cache.Cache>` that may be shared between threads.

    All access to the underlying dict is synchronized on this instance.  When multiple threads request a value for the
    same key that has not been computed yet, only the first thread calls ``compute_value`` - the others wait for it to
    finish and then return the value that it stored.  Threads that request values for different keys do not block each
    other while those values are being computed.

    :param config: See :class:`Cache<treasure_chest.cache.Cache>`
    :param key_lock_type: Callable that returns a new lock to use for each key while its value is being computed
    """

    def __init__(self, config: Config | Mapping[str, Callable] | Any, key_lock_type: Callable[[], RLock] = RLock):
        super().__init__(config)
        self._key_lock_type = key_lock_type
        self._key_locks = {}

    def get(self, input: In) -> Out:  # noqa
        key = self._config.compute_key(input)
        with synchronized(self):
            if (value := self._data.get(key, _NotFound)) is not _NotFound:
                log.log(9, f'Cache hit for {key=}')
                return value
            # If a key lock already exists, then another thread is already computing the value for this key
            if (key_lock := self._key_locks.get(key)) is None:
                wait = False
                self._key_locks[key] = key_lock = self._key_lock_type()
                # Acquire before releasing the instance lock so that no other thread can acquire it first
                key_lock.acquire()
            else:
                wait = True

        if wait:
            log.log(9, f'Waiting for another thread to compute the value for {key=}')
            # The key lock must be acquired before the instance lock, otherwise the computing thread would not be able
            # to store its result
            with key_lock, synchronized(self):
                if (value := self._data.get(key, _NotFound)) is not _NotFound:
                    return value
            # The other thread failed, or the entry was deleted before this thread woke up
            log.log(9, f'No value was available for {key=} after waiting - computing it in this thread')
            return self._compute_and_store(input, key)

        log.log(9, f'Cache miss for {key=}')
        try:
            return self._compute_and_store(input, key)
        finally:
            with synchronized(self):
                key_lock.release()
                # Removing the key lock marks the computation as complete, whether it succeeded or not
                del self._key_locks[key]

    def _compute_and_store(self, input: In, key: str) -> Out:  # noqa
        value = self._config.compute_value(input)
        with synchronized(self):
            self._data[key] = value
        return value

    @synchronized
    def set(self, key: str, value: Out):
        super().set(key, value)

    @synchronized
    def set_many(self, pairs):
        super().set_many(pairs)

    @synchronized
    def delete(self, key: str):
        super().delete(key)

    @synchronized
    def clear(self):
        super().clear()

    @synchronized
    def __contains__(self, key: str) -> bool:
        return key in self._data

    @synchronized
    def __len__(self) -> int:
        return len(self._data)
