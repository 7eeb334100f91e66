"""
Functions that may be used as the ``compute_key`` function in a cache :class:`Config<treasure_chest.cache.Config>`.
"""

import json
from hashlib import new as new_hash
from operator import itemgetter
from typing import Any, Mapping

__all__ = ['str_key', 'json_key', 'hashed_key']


def str_key(obj: Any) -> str:
    return str(obj)


def json_key(obj: Any) -> str:
    """
    Serialize the given object as a canonical JSON string that preserves the types of its contents.

    Lists and scalars are dumped as-is.  Mappings are stored as ``{"dict": [[key, value], ...]}`` with each key
    converted to its own :func:`json_key` and the pairs sorted by that string, so equal mappings produce the same key
    regardless of insertion order, and mappings with keys of mixed types are supported.  Tuples and sets are tagged so
    that they do not collide with lists.  Other objects are represented by their type and :func:`str` value.
    """
    return json.dumps(_canonical(obj), separators=(',', ':'))


def _canonical(obj: Any):
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    elif isinstance(obj, list):
        return [_canonical(val) for val in obj]
    elif isinstance(obj, tuple):
        return {'tuple': [_canonical(val) for val in obj]}
    elif isinstance(obj, Mapping):
        pairs = ([json_key(key), _canonical(val)] for key, val in obj.items())
        return {'dict': sorted(pairs, key=itemgetter(0))}
    elif isinstance(obj, (set, frozenset)):
        return {'set': sorted(json_key(val) for val in obj)}
    cls = obj.__class__
    return {'object': [f'{cls.__module__}.{cls.__qualname__}', str(obj)]}


def hashed_key(obj: Any, algorithm: str = 'sha256') -> str:
    """
    :param obj: The input for which a key should be generated
    :param algorithm: The name of a :mod:`hashlib` algorithm
    :return: The hex digest of the :func:`json_key` for the given object, for use when inputs may be large
    """
    return new_hash(algorithm, json_key(obj).encode('utf-8')).hexdigest()
