from marshmallow import Schema, fields, ValidationError, post_load, validates_schema
from marshmallow.validate import OneOf, Range, Length

from .models import ( # Relative import
    RUN_LENGTHS, SlotConfiguration, SymbolKind, SymbolWeight,
)

SYMBOL_IDS = [kind.value for kind in SymbolKind]


def _symbol_value(symbol):
    return symbol.value if isinstance(symbol, SymbolKind) else symbol


def _dump_grid(grid):
    return [[_symbol_value(symbol) for symbol in row] for row in grid]


# --- Game configuration (load) ---

class LayoutSchema(Schema):
    rows = fields.Int(required=True, strict=True, validate=Range(min=1))
    columns = fields.Int(required=True, strict=True, validate=Range(min=1))


class SymbolSchema(Schema):
    id = fields.Str(required=True, validate=OneOf(SYMBOL_IDS))
    name = fields.Str(validate=Length(max=50))
    weight = fields.Int(required=True, strict=True, validate=Range(min=1))
    payouts = fields.Dict(
        keys=fields.Str(validate=OneOf([str(length) for length in RUN_LENGTHS])),
        values=fields.Float(validate=Range(min=0)),
        required=True,
    )

    @validates_schema
    def validate_payouts(self, data, **kwargs):
        missing = [str(length) for length in RUN_LENGTHS if str(length) not in data.get('payouts', {})]
        if missing:
            raise ValidationError(f"Payouts must define run lengths {', '.join(missing)}.", 'payouts')
        if data.get('id') == SymbolKind.SCATTER.value and any(v != 0 for v in data['payouts'].values()):
            raise ValidationError("Scatter payouts must be zero.", 'payouts')


class SlotConfigurationSchema(Schema):
    name = fields.Str(load_default="Classic 5x5", validate=Length(min=1, max=100))
    layout = fields.Nested(LayoutSchema, required=True)
    symbols = fields.List(fields.Nested(SymbolSchema), required=True, validate=Length(min=1))

    @validates_schema
    def validate_unique_symbols(self, data, **kwargs):
        ids = [symbol['id'] for symbol in data.get('symbols', [])]
        if len(ids) != len(set(ids)):
            raise ValidationError("Each symbol may only be listed once.", 'symbols')

    @post_load
    def make_configuration(self, data, **kwargs):
        symbol_weights = []
        payout_table = {}
        for symbol_data in data['symbols']:
            kind = SymbolKind(symbol_data['id'])
            symbol_weights.append(SymbolWeight(kind, symbol_data['weight']))
            payout_table[kind] = {int(length): value for length, value in symbol_data['payouts'].items()}
        return SlotConfiguration(
            rows=data['layout']['rows'],
            columns=data['layout']['columns'],
            symbol_weights=tuple(symbol_weights),
            payout_table=payout_table,
            name=data['name'],
        )


# --- Spin results (dump) ---

class LineWinSchema(Schema):
    start_row = fields.Int()
    start_col = fields.Int()
    end_row = fields.Int()
    end_col = fields.Int()
    length = fields.Int()
    symbol = fields.Function(lambda obj: _symbol_value(obj.symbol))
    win_cents = fields.Int()
    wild_multiplier = fields.Int()


class ScoredGridSchema(Schema):
    total_win_cents = fields.Int()
    line_wins = fields.List(fields.Nested(LineWinSchema))
    is_jackpot = fields.Bool()
    retrigger_spins = fields.Int()
    scatter_count = fields.Int()


class SpinOutcomeSchema(Schema):
    grid = fields.Function(lambda obj: _dump_grid(obj.grid))
    total_win_cents = fields.Int()
    line_wins = fields.List(fields.Nested(LineWinSchema))
    is_jackpot = fields.Bool()
    free_spins_awarded = fields.Int()
    scatter_count = fields.Int()
    bet_cents = fields.Int()
    balance_after_cents = fields.Int()


class BonusSpinResultSchema(Schema):
    spin_index = fields.Int()
    total_spins = fields.Int()
    grid = fields.Function(lambda obj: _dump_grid(obj.grid))
    wild_overlay = fields.List(fields.List(fields.Int()))
    scored = fields.Nested(ScoredGridSchema)
    running_total_cents = fields.Int()
    new_wild_cells = fields.Function(lambda obj: [list(cell) for cell in obj.new_wild_cells])


class WalletSchema(Schema):
    balance_cents = fields.Int(required=True, validate=Range(min=0))
    bet_cents = fields.Int(required=True, validate=Range(min=1))
