import unittest

from marshmallow import ValidationError

from slots_core.models import (
    BonusSpinResult, LineWin, ScoredGrid, SlotConfiguration, SpinOutcome, SymbolKind, WalletState,
)
from slots_core.schemas import (
    BonusSpinResultSchema, SlotConfigurationSchema, SpinOutcomeSchema, WalletSchema,
)


def _symbol(symbol_id, weight=10, payouts=None):
    return {"id": symbol_id, "weight": weight, "payouts": payouts or {"3": 1, "4": 2, "5": 3}}


class TestSlotConfigurationSchema(unittest.TestCase):

    def setUp(self):
        self.schema = SlotConfigurationSchema()
        self.valid = {
            "name": "Mini",
            "layout": {"rows": 3, "columns": 4},
            "symbols": [
                _symbol("CHERRY", 5, {"3": 1.5, "4": 3, "5": 6}),
                _symbol("FS", 1, {"3": 0, "4": 0, "5": 0}),
            ],
        }

    def test_load_builds_configuration(self):
        config = self.schema.load(self.valid)
        self.assertIsInstance(config, SlotConfiguration)
        self.assertEqual((config.rows, config.columns, config.name), (3, 4, "Mini"))
        self.assertEqual(config.symbols, [SymbolKind.CHERRY, SymbolKind.SCATTER])
        self.assertEqual(config.payout_for(SymbolKind.CHERRY, 3), 1.5)

    def test_name_defaults(self):
        del self.valid["name"]
        self.assertEqual(self.schema.load(self.valid).name, "Classic 5x5")

    def test_missing_run_length_rejected(self):
        self.valid["symbols"][0]["payouts"] = {"3": 1, "4": 2}
        with self.assertRaises(ValidationError) as ctx:
            self.schema.load(self.valid)
        self.assertIn("symbols", ctx.exception.messages)

    def test_unknown_symbol_rejected(self):
        self.valid["symbols"].append(_symbol("BELL"))
        with self.assertRaises(ValidationError):
            self.schema.load(self.valid)

    def test_zero_weight_rejected(self):
        self.valid["symbols"][0]["weight"] = 0
        with self.assertRaises(ValidationError):
            self.schema.load(self.valid)

    def test_scatter_payout_must_be_zero(self):
        self.valid["symbols"][1]["payouts"] = {"3": 2, "4": 0, "5": 0}
        with self.assertRaises(ValidationError):
            self.schema.load(self.valid)

    def test_duplicate_symbols_rejected(self):
        self.valid["symbols"].append(_symbol("CHERRY"))
        with self.assertRaises(ValidationError) as ctx:
            self.schema.load(self.valid)
        self.assertIn("symbols", ctx.exception.messages)

    def test_bad_layout_rejected(self):
        self.valid["layout"] = {"rows": 0, "columns": 5}
        with self.assertRaises(ValidationError) as ctx:
            self.schema.load(self.valid)
        self.assertIn("layout", ctx.exception.messages)


class TestResultSchemas(unittest.TestCase):

    def setUp(self):
        self.line_win = LineWin(0, 0, 0, 2, 3, SymbolKind.SEVEN, 500, 2)
        self.grid = [[SymbolKind.SEVEN, SymbolKind.SCATTER], [SymbolKind.CHERRY, SymbolKind.LEMON]]

    def test_spin_outcome_dump(self):
        outcome = SpinOutcome(
            grid=self.grid, total_win_cents=500, line_wins=(self.line_win,), is_jackpot=False,
            free_spins_awarded=0, scatter_count=1, bet_cents=100, balance_after_cents=900)
        data = SpinOutcomeSchema().dump(outcome)
        self.assertEqual(data["grid"], [["SEVEN", "FS"], ["CHERRY", "LEMON"]])
        self.assertEqual(data["line_wins"][0]["symbol"], "SEVEN")
        self.assertEqual(data["line_wins"][0]["wild_multiplier"], 2)
        self.assertEqual(data["balance_after_cents"], 900)

    def test_bonus_spin_result_dump(self):
        scored = ScoredGrid(500, (self.line_win,), False, retrigger_spins=2, scatter_count=3)
        result = BonusSpinResult(
            spin_index=1, total_spins=7, grid=self.grid, wild_overlay=[[2, 0], [0, 1]],
            scored=scored, running_total_cents=500, new_wild_cells=((1, 1),))
        data = BonusSpinResultSchema().dump(result)
        self.assertEqual(data["wild_overlay"], [[2, 0], [0, 1]])
        self.assertEqual(data["scored"]["retrigger_spins"], 2)
        self.assertEqual(data["new_wild_cells"], [[1, 1]])

    def test_wallet_schema(self):
        self.assertEqual(WalletSchema().dump(WalletState(1000, 100)), {"balance_cents": 1000, "bet_cents": 100})
        self.assertIn("bet_cents", WalletSchema().validate({"balance_cents": 10, "bet_cents": 0}))
