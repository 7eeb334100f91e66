#!/usr/bin/env python

from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from threading import Event, RLock
from time import sleep, monotonic
from unittest import TestCase, main
from unittest.mock import Mock

from treasure_chest.cache import Cache, Config
from treasure_chest.locking import LockingCache


class CountingMultiplier:
    __slots__ = ('calls', 'delay', 'lock')

    def __init__(self, delay: float = 0):
        self.calls = 0
        self.delay = delay
        self.lock = RLock()

    def __call__(self, x: int) -> int:
        if self.delay:
            sleep(self.delay)
        with self.lock:
            self.calls += 1
        return x * 10


class TestLockingCache(TestCase):
    @contextmanager
    def assert_finishes_in_about(self, delay: float):
        # Allows for thread startup overhead, but not for a second sequential computation
        start = monotonic()
        yield
        self.assertLess(monotonic() - start, delay * 1.5)

    def test_is_cache(self):
        self.assertIsInstance(LockingCache(Config(str, str)), Cache)

    def test_basic_operations(self):
        cache = LockingCache(Config(str, lambda n: n * 10))
        self.assertEqual(10, cache.get(1))
        cache.set('2', 12)
        self.assertEqual(12, cache.get(2))
        cache.set_many([('5', 50), ('5', 55)])
        self.assertEqual(55, cache.get(5))
        cache.delete('2')
        cache.delete('2')
        self.assertEqual(20, cache.get(2))
        self.assertEqual(3, len(cache))
        cache.clear()
        self.assertNotIn('1', cache)
        self.assertEqual(0, len(cache))

    def test_key_locks_are_removed(self):
        cache = LockingCache(Config(str, lambda n: n * 10))
        cache.get(1)
        self.assertEqual({}, cache._key_locks)

    def test_exception_is_not_cached_and_key_lock_is_removed(self):
        compute_value = Mock(side_effect=(ValueError, 2))
        cache = LockingCache(Config(str, compute_value))
        with self.assertRaises(ValueError):
            cache.get(1)
        self.assertEqual({}, cache._key_locks)
        self.assertEqual(2, cache.get(1))
        self.assertEqual(2, cache.get(1))

    def test_concurrent_gets_for_same_key_compute_once(self):
        delay = 0.05
        func = CountingMultiplier(delay)
        cache = LockingCache(Config(str, func))
        with ThreadPoolExecutor(max_workers=3) as pool, self.assert_finishes_in_about(delay):
            for future in as_completed(pool.submit(cache.get, 2) for _ in range(3)):
                self.assertEqual(20, future.result())
        self.assertEqual(1, func.calls)

    def test_concurrent_gets_for_different_keys_do_not_block_each_other(self):
        delay = 0.05
        func = CountingMultiplier(delay)
        cache = LockingCache(Config(str, func))
        with ThreadPoolExecutor(max_workers=4) as pool, self.assert_finishes_in_about(delay):
            futures = {pool.submit(cache.get, n): n for n in (2, 2, 3, 3)}
            for future in as_completed(futures):
                self.assertEqual(futures[future] * 10, future.result())
        self.assertEqual(2, func.calls)

    def test_waiting_thread_computes_after_failure(self):
        started, proceed = Event(), Event()
        calls = []

        def compute_value(n):
            calls.append(n)
            if len(calls) == 1:
                started.set()
                proceed.wait(1)
                raise RuntimeError('first call failed')
            return n * 10

        cache = LockingCache(Config(str, compute_value))
        with ThreadPoolExecutor(max_workers=2) as pool:
            first = pool.submit(cache.get, 3)
            started.wait(1)
            second = pool.submit(cache.get, 3)
            sleep(0.02)  # Give the second thread time to start waiting for the key lock
            proceed.set()
            with self.assertRaises(RuntimeError):
                first.result()
            self.assertEqual(30, second.result())

        self.assertEqual([3, 3], calls)
        self.assertEqual(30, cache.get(3))


if __name__ == '__main__':
    main(verbosity=2)
