import os
import unittest

from slots_core.utils.slot_tester import SlotTester, main
from slots_core.tests.helpers import cherry_only_config

TEST_CONFIG_PATH = os.path.join(os.path.dirname(__file__), 'test_data', 'classic_5x5', 'gameConfig.json')


class TestSlotTester(unittest.TestCase):

    def test_simulation_totals(self):
        tester = SlotTester(num_spins=300, bet_cents=100, seed=99).run_simulation()
        self.assertEqual(tester.total_bet, 300 * 100)
        self.assertEqual(sum(tester.wins_by_multiplier.values()), 300)
        self.assertEqual(len(tester.spin_returns), 300)
        self.assertAlmostEqual(tester.overall_rtp, tester.total_win / tester.total_bet * 100)
        self.assertAlmostEqual(
            tester.base_game_rtp_contribution + tester.bonus_rtp_contribution, tester.overall_rtp)
        self.assertGreaterEqual(tester.volatility_index, 0.0)
        self.assertLessEqual(tester.hit_count, 300)

    def test_seeded_runs_are_reproducible(self):
        a = SlotTester(num_spins=200, seed=5).run_simulation()
        b = SlotTester(num_spins=200, seed=5).run_simulation()
        self.assertEqual(a.summary(), b.summary())

    def test_cherry_only_machine_has_no_variance(self):
        tester = SlotTester(slot_config=cherry_only_config(), num_spins=50, bet_cents=100, seed=1).run_simulation()
        self.assertEqual(tester.hit_frequency, 100)
        self.assertEqual(tester.total_win, 50 * 6800)
        self.assertEqual(tester.overall_rtp, 6800)
        self.assertEqual(tester.volatility_index, 0.0)
        self.assertEqual(tester.bonus_triggers, 0)
        self.assertEqual(tester.wins_by_multiplier, {68: 50})

    def test_loads_game_config_file(self):
        tester = SlotTester(num_spins=10, seed=3, game_config_path=TEST_CONFIG_PATH)
        self.assertEqual(tester.slot_config.name, "Classic 5x5")

    def test_zero_spins(self):
        tester = SlotTester(num_spins=0, seed=1).run_simulation()
        self.assertEqual(tester.total_bet, 0)
        self.assertEqual(tester.overall_rtp, 0)

    def test_main_parses_arguments(self):
        tester = main(['--num_spins', '20', '--bet_amount', '50', '--seed', '7'])
        self.assertEqual(tester.num_spins, 20)
        self.assertEqual(tester.total_bet, 20 * 50)
