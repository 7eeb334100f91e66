"""
Create memoizing caches easily.

A :class:`Cache` derives a string key from each input with ``compute_key`` and, on a miss, derives the value to store
with ``compute_value``.  Values may be overridden with :meth:`Cache.set` / :meth:`Cache.set_many`, and invalidated
with :meth:`Cache.delete` / :meth:`Cache.clear`.
"""

from .__version__ import __version__
from .cache import Config, KeyValuePair, Cache, create_cache
from .decorate import memoized, MemoizedFunc
from .exceptions import InvalidConfigError
from .keys import str_key, json_key, hashed_key
from .locking import LockingCache
