import unittest
from collections import Counter

from slots_core.exceptions import InvalidConfigException
from slots_core.models import SymbolKind, SymbolWeight
from slots_core.utils.game_config_manager import DEFAULT_SYMBOL_WEIGHTS
from slots_core.utils.rng import Mulberry32RandomSource
from slots_core.utils.symbol_picker import WeightedSymbolPicker
from slots_core.tests.helpers import ScriptedRandomSource


class TestWeightedSymbolPicker(unittest.TestCase):

    def test_total_weight(self):
        picker = WeightedSymbolPicker(DEFAULT_SYMBOL_WEIGHTS, Mulberry32RandomSource(1))
        self.assertEqual(picker.total_weight, 100)
        self.assertEqual(picker.symbols, [w.symbol for w in DEFAULT_SYMBOL_WEIGHTS])

    def test_first_prefix_sum_strictly_greater(self):
        # Cumulative weights: 36, 64, 82, 92, 100
        source = ScriptedRandomSource([0.0, 0.25, 0.5, 0.7, 0.9, 0.95])
        picker = WeightedSymbolPicker(DEFAULT_SYMBOL_WEIGHTS, source)
        picks = [picker.pick() for _ in range(6)]
        self.assertEqual(picks, [
            SymbolKind.CHERRY, SymbolKind.CHERRY, SymbolKind.LEMON,
            SymbolKind.STAR, SymbolKind.SEVEN, SymbolKind.SCATTER,
        ])

    def test_falls_back_to_last_symbol(self):
        source = ScriptedRandomSource([1.0])
        picker = WeightedSymbolPicker(DEFAULT_SYMBOL_WEIGHTS, source)
        self.assertEqual(picker.pick(), SymbolKind.SCATTER)

    def test_single_symbol_always_returned(self):
        picker = WeightedSymbolPicker([SymbolWeight(SymbolKind.STAR, 3)], Mulberry32RandomSource(5))
        self.assertEqual({picker.pick() for _ in range(200)}, {SymbolKind.STAR})

    def test_zero_weight_rejected(self):
        with self.assertRaises(InvalidConfigException):
            WeightedSymbolPicker(
                [SymbolWeight(SymbolKind.CHERRY, 0), SymbolWeight(SymbolKind.LEMON, 1)],
                Mulberry32RandomSource(1))

    def test_empty_weights_rejected(self):
        with self.assertRaises(InvalidConfigException):
            WeightedSymbolPicker([], Mulberry32RandomSource(1))

    def test_frequencies_converge_to_weights(self):
        picker = WeightedSymbolPicker(DEFAULT_SYMBOL_WEIGHTS, Mulberry32RandomSource(42))
        draws = 100000
        counts = Counter(picker.pick() for _ in range(draws))
        for entry in DEFAULT_SYMBOL_WEIGHTS:
            expected = entry.weight / picker.total_weight
            observed = counts[entry.symbol] / draws
            self.assertAlmostEqual(observed, expected, delta=0.01,
                                   msg=f"{entry.symbol.value}: {observed:.4f} vs {expected:.4f}")


if __name__ == '__main__':
    unittest.main()
