from slots_core.models import SlotConfiguration, SymbolKind, SymbolWeight
from slots_core.utils.rng import RandomSource


class ScriptedRandomSource(RandomSource):
    """Replays a fixed list of draws, then keeps returning `default`."""

    def __init__(self, values, default=0.0):
        self.values = list(values)
        self.default = default
        self.calls = 0

    def next(self):
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default


CHERRY_ONLY_PAYOUTS = {SymbolKind.CHERRY: {3: 2, 4: 4, 5: 8}}


def cherry_only_config(rows=5, columns=5):
    return SlotConfiguration(
        rows=rows,
        columns=columns,
        symbol_weights=(SymbolWeight(SymbolKind.CHERRY, 1),),
        payout_table={SymbolKind.CHERRY: dict(CHERRY_ONLY_PAYOUTS[SymbolKind.CHERRY])},
        name="Cherry Only",
    )


def grid_from_ids(rows):
    """[["CHERRY", "FS", ...], ...] -> grid of SymbolKind."""
    return [[SymbolKind(symbol_id) for symbol_id in row] for row in rows]
