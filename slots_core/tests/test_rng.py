import unittest

import pytest

from slots_core.utils.rng import (
    Mulberry32RandomSource, RandomSource, SystemRandomSource, create_random_source,
)
from slots_core.tests.helpers import ScriptedRandomSource


class TestMulberry32RandomSource(unittest.TestCase):

    def test_same_seed_replays_same_stream(self):
        a = Mulberry32RandomSource(1234)
        b = Mulberry32RandomSource(1234)
        self.assertEqual([a.next() for _ in range(50)], [b.next() for _ in range(50)])

    def test_different_seeds_diverge(self):
        a = Mulberry32RandomSource(1)
        b = Mulberry32RandomSource(2)
        self.assertNotEqual([a.next() for _ in range(10)], [b.next() for _ in range(10)])

    def test_values_in_unit_interval(self):
        source = Mulberry32RandomSource(99)
        for _ in range(5000):
            value = source.next()
            self.assertGreaterEqual(value, 0.0)
            self.assertLess(value, 1.0)

    def test_seed_is_masked_to_32_bits(self):
        wide = Mulberry32RandomSource(2 ** 32 + 5)
        narrow = Mulberry32RandomSource(5)
        self.assertEqual(wide.seed, 5)
        self.assertEqual([wide.next() for _ in range(5)], [narrow.next() for _ in range(5)])

    def test_non_integer_seed_rejected(self):
        with self.assertRaises(ValueError):
            Mulberry32RandomSource("42")
        with self.assertRaises(ValueError):
            Mulberry32RandomSource(True)


class TestRandomSourceHelpers(unittest.TestCase):

    def test_next_int_range(self):
        source = Mulberry32RandomSource(7)
        for _ in range(1000):
            value = source.next_int(6)
            self.assertIn(value, range(6))

    def test_next_int_clamps_upper_boundary(self):
        source = ScriptedRandomSource([1.0])
        self.assertEqual(source.next_int(3), 2)

    def test_next_int_rejects_non_positive_upper(self):
        with self.assertRaises(ValueError):
            Mulberry32RandomSource(1).next_int(0)

    def test_base_class_is_abstract(self):
        with self.assertRaises(NotImplementedError):
            RandomSource().next()


def test_system_random_source_in_range():
    source = SystemRandomSource()
    values = [source.next() for _ in range(200)]
    assert all(0.0 <= v < 1.0 for v in values)


def test_create_random_source_selects_implementation():
    assert isinstance(create_random_source(), SystemRandomSource)
    seeded = create_random_source(42)
    assert isinstance(seeded, Mulberry32RandomSource)
    assert seeded.seed == 42


@pytest.mark.parametrize("seed", [0, 1, 0xFFFFFFFF])
def test_edge_seeds_produce_valid_values(seed):
    source = Mulberry32RandomSource(seed)
    assert all(0.0 <= source.next() < 1.0 for _ in range(100))
