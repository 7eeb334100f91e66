#!/usr/bin/env python

from datetime import date
from hashlib import md5, sha256
from unittest import TestCase, main

from treasure_chest.decorate import memoized
from treasure_chest.keys import str_key, json_key, hashed_key


class TestKeyFunctions(TestCase):
    def test_str_key(self):
        self.assertEqual('1', str_key(1))
        self.assertEqual('None', str_key(None))

    def test_json_key_scalars_and_lists(self):
        self.assertEqual('[1,"a",null,true]', json_key([1, 'a', None, True]))
        self.assertNotEqual(json_key(1), json_key('1'))

    def test_json_key_sorts_mapping_keys(self):
        self.assertEqual(json_key({'b': [1, 2], 'a': None}), json_key({'a': None, 'b': [1, 2]}))
        self.assertEqual(r'{"dict":[["\"a\"",null],["\"b\"",[1,2]]]}', json_key({'b': [1, 2], 'a': None}))

    def test_json_key_mixed_mapping_key_types(self):
        self.assertEqual(json_key({1: 'a', 'b': 2}), json_key({'b': 2, 1: 'a'}))
        self.assertEqual(r'{"dict":[["\"b\"",2],["1","a"]]}', json_key({1: 'a', 'b': 2}))

    def test_json_key_mapping_key_types_are_kept(self):
        self.assertNotEqual(json_key({1: 'x'}), json_key({'1': 'x'}))

    def test_json_key_tuples_and_lists_differ(self):
        self.assertNotEqual(json_key((1, 2)), json_key([1, 2]))
        self.assertNotEqual(json_key({'tuple': [1, 2]}), json_key((1, 2)))

    def test_json_key_sets(self):
        self.assertEqual(json_key({3, 1, 2}), json_key(frozenset((2, 3, 1))))
        self.assertNotEqual(json_key({1, 2}), json_key([1, 2]))

    def test_json_key_other_objects(self):
        self.assertEqual('{"object":["datetime.date","2020-01-02"]}', json_key(date(2020, 1, 2)))
        self.assertNotEqual(json_key(date(2020, 1, 2)), json_key('2020-01-02'))

    def test_json_key_with_memoized_func(self):
        @memoized(json_key)
        def key_types(mapping):
            return [type(key).__name__ for key in mapping]

        self.assertEqual(['int'], key_types({1: 'x'}))
        self.assertEqual(['str'], key_types({'1': 'x'}))
        self.assertEqual(['int', 'str'], key_types({1: 'a', 'b': 2}))
        self.assertEqual(3, len(key_types.cache))

    def test_hashed_key(self):
        self.assertEqual(sha256(json_key({'a': 1}).encode('utf-8')).hexdigest(), hashed_key({'a': 1}))
        self.assertEqual(md5(b'[1,2]').hexdigest(), hashed_key([1, 2], 'md5'))


if __name__ == '__main__':
    main(verbosity=2)
