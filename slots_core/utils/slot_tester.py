import argparse

import numpy as np

from slots_core.services.bonus_service import BonusPolicy
from slots_core.services.slot_engine import SlotEngine
from slots_core.services.wallet_store import InMemoryWalletStore
from slots_core.utils.game_config_manager import resolve_slot_configuration
from slots_core.utils.rng import create_random_source

# Enough for any realistic run; the tester tops up if it ever runs dry.
SIMULATION_BALANCE_CENTS = 10 ** 12


class SlotTester:
    """
    Simulates paid spins (plus the free-spin sessions they award) on a seeded
    engine and derives RTP, hit rate and volatility figures.
    """

    def __init__(self, slot_config=None, num_spins=10000, bet_cents=100, seed=None,
                 bonus_policy=None, game_config_path=None):
        self.slot_config = slot_config or resolve_slot_configuration(game_config_path)
        self.num_spins = num_spins
        self.bet_cents = bet_cents
        self.seed = seed
        self.bonus_policy = bonus_policy or BonusPolicy()
        self.engine = None

        # Statistics to be collected
        self.total_bet = 0
        self.total_win = 0
        self.hit_count = 0
        self.jackpot_count = 0
        self.bonus_triggers = 0
        self.total_bonus_win = 0
        self.bonus_data = []
        self.wins_by_multiplier = {}
        self.spin_returns = []

        # Derived statistics
        self.overall_rtp = 0
        self.hit_frequency = 0
        self.bonus_frequency = 0
        self.avg_bonus_win = 0
        self.base_game_rtp_contribution = 0
        self.bonus_rtp_contribution = 0
        self.volatility_index = 0.0

    def initialize_simulation_state(self):
        self.engine = SlotEngine(
            self.slot_config,
            create_random_source(self.seed),
            balance_cents=SIMULATION_BALANCE_CENTS,
            bet_cents=self.bet_cents,
            wallet_store=InMemoryWalletStore(),
            bonus_policy=self.bonus_policy,
        )
        return self.engine

    def run_simulation(self):
        if self.engine is None:
            self.initialize_simulation_state()

        for i in range(self.num_spins):
            self._simulate_one_spin()
            if self.num_spins >= 10 and (i + 1) % (self.num_spins // 10) == 0:
                print(f"INFO: Completed {i + 1}/{self.num_spins} spins...")

        self.calculate_derived_statistics()
        return self

    def _simulate_one_spin(self):
        if self.engine.wallet.balance_cents < self.bet_cents:
            self.engine.add_funds(SIMULATION_BALANCE_CENTS)

        outcome = self.engine.spin()
        spin_win = outcome.total_win_cents
        self.total_bet += outcome.bet_cents
        if outcome.is_jackpot:
            self.jackpot_count += 1

        if outcome.free_spins_awarded > 0:
            self.bonus_triggers += 1
            bonus_win = self.engine.run_bonus_session(outcome.free_spins_awarded)
            self.total_bonus_win += bonus_win
            self.bonus_data.append({'free_spins': outcome.free_spins_awarded, 'total_win': bonus_win})
            spin_win += bonus_win

        self.total_win += spin_win
        if spin_win > 0:
            self.hit_count += 1
        multiplier_category = round(spin_win / self.bet_cents)
        self.wins_by_multiplier[multiplier_category] = self.wins_by_multiplier.get(multiplier_category, 0) + 1
        self.spin_returns.append(spin_win / self.bet_cents)

    def calculate_derived_statistics(self):
        if self.num_spins == 0:
            print("Warning: No spins were simulated. Cannot calculate derived statistics.")
            return

        self.overall_rtp = (self.total_win / self.total_bet) * 100 if self.total_bet > 0 else 0
        self.hit_frequency = (self.hit_count / self.num_spins) * 100
        self.bonus_frequency = (self.bonus_triggers / self.num_spins) * 100
        self.avg_bonus_win = (self.total_bonus_win / self.bonus_triggers) if self.bonus_triggers > 0 else 0

        base_game_win = self.total_win - self.total_bonus_win
        self.base_game_rtp_contribution = (base_game_win / self.total_bet) * 100 if self.total_bet > 0 else 0
        self.bonus_rtp_contribution = (self.total_bonus_win / self.total_bet) * 100 if self.total_bet > 0 else 0

        # Volatility Index: standard deviation of per-spin return in bet multiples
        self.volatility_index = float(np.std(np.asarray(self.spin_returns, dtype=float))) if self.spin_returns else 0.0

    def summary(self):
        return {
            'spins': self.num_spins,
            'bet_cents': self.bet_cents,
            'total_bet': self.total_bet,
            'total_win': self.total_win,
            'rtp': self.overall_rtp,
            'hit_frequency': self.hit_frequency,
            'bonus_frequency': self.bonus_frequency,
            'avg_bonus_win': self.avg_bonus_win,
            'base_game_rtp_contribution': self.base_game_rtp_contribution,
            'bonus_rtp_contribution': self.bonus_rtp_contribution,
            'jackpots': self.jackpot_count,
            'volatility_index': self.volatility_index,
            'wins_by_multiplier': dict(sorted(self.wins_by_multiplier.items())),
        }

    def print_summary_statistics(self):
        print("\n--- Simulation Summary ---")
        print(f"Slot Game: {self.slot_config.name} ({self.slot_config.rows}x{self.slot_config.columns})")
        print(f"Total Spins Simulated: {self.num_spins}")
        print(f"Bet Amount Per Spin: {self.bet_cents} cents")
        print(f"Total Wagered: {self.total_bet} cents")
        print(f"Total Won: {self.total_win} cents")

        print("\n--- Detailed Metrics ---")
        print(f"Overall RTP: {self.overall_rtp:.2f}%")
        print(f"Hit Frequency: {self.hit_frequency:.2f}% ({self.hit_count} wins out of {self.num_spins} spins)")
        print(f"Bonus Trigger Frequency: {self.bonus_frequency:.2f}% ({self.bonus_triggers} triggers in {self.num_spins} spins)")
        print(f"Average Bonus Win: {self.avg_bonus_win:.2f} cents (Total from bonuses: {self.total_bonus_win} cents)")
        print(f"Base Game RTP Contribution: {self.base_game_rtp_contribution:.2f}%")
        print(f"Bonus Game RTP Contribution: {self.bonus_rtp_contribution:.2f}%")
        print(f"Jackpots: {self.jackpot_count}")
        print(f"Volatility Index (Return StdDev / Bet): {self.volatility_index:.2f}")

        print("\nWin Distribution (by Bet Multiplier):")
        for mult, count in sorted(self.wins_by_multiplier.items()):
            print(f"  {mult}x Bet: {count} times ({(count / self.num_spins) * 100:.2f}%)")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Slot Machine Tester - Simulates play to analyze RTP and other metrics.")
    parser.add_argument("--num_spins", type=int, default=10000, help="Number of paid spins to simulate.")
    parser.add_argument("--bet_amount", type=int, default=100, help="Bet amount in cents for each spin.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run.")
    parser.add_argument("--game_config", type=str, default=None, help="Path to a gameConfig.json (default: classic 5x5).")
    args = parser.parse_args(argv)

    tester = SlotTester(
        num_spins=args.num_spins,
        bet_cents=args.bet_amount,
        seed=args.seed,
        game_config_path=args.game_config,
    )
    print(f"--- Initializing Slot Tester for: {tester.slot_config.name} ---")
    tester.run_simulation()
    tester.print_summary_statistics()
    return tester


if __name__ == "__main__":
    main()
