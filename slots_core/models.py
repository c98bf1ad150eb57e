from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from numbers import Real
from typing import Dict, List, Optional, Tuple

from sqlalchemy import BigInteger, Column, DateTime, Integer, String
from sqlalchemy.orm import declarative_base

from slots_core.exceptions import InvalidConfigException

Base = declarative_base()

MIN_RUN_LENGTH = 3
MAX_RUN_LENGTH = 5
RUN_LENGTHS = (3, 4, 5)


class SymbolKind(str, Enum):
    CHERRY = "CHERRY"
    LEMON = "LEMON"
    STAR = "STAR"
    SEVEN = "SEVEN"
    SCATTER = "FS"


# Five SEVENs on one line is the jackpot.
JACKPOT_SYMBOL = SymbolKind.SEVEN

Grid = List[List[SymbolKind]]
WildOverlay = List[List[int]]
Cell = Tuple[int, int]


def _is_strict_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class SymbolWeight:
    symbol: SymbolKind
    weight: int


@dataclass(frozen=True)
class SlotConfiguration:
    """
    Static description of a machine: layout, reel distribution and pay table.

    Validation runs on construction and raises InvalidConfigException, so an
    instance that exists is always usable by the engine.
    """
    rows: int
    columns: int
    symbol_weights: Tuple[SymbolWeight, ...]
    payout_table: Dict[SymbolKind, Dict[int, float]]
    name: str = "Classic 5x5"

    def __post_init__(self):
        # Accept any sequence of weights but store a tuple.
        object.__setattr__(self, 'symbol_weights', tuple(self.symbol_weights))
        # The caller keeps its own table; only the validated copy is ever read.
        if isinstance(self.payout_table, dict):
            object.__setattr__(self, 'payout_table', {
                symbol: dict(payouts) if isinstance(payouts, dict) else payouts
                for symbol, payouts in self.payout_table.items()
            })
        self._validate()
        object.__setattr__(self, '_best_symbol', self._find_best_symbol())

    def _validate(self):
        for key in ('rows', 'columns'):
            value = getattr(self, key)
            if not _is_strict_int(value) or value <= 0:
                raise InvalidConfigException(
                    f"{key} must be a positive integer.", details={key: value})

        if not self.symbol_weights:
            raise InvalidConfigException("At least one symbol weight must be defined.")

        seen = set()
        for entry in self.symbol_weights:
            if not isinstance(entry, SymbolWeight) or not isinstance(entry.symbol, SymbolKind):
                raise InvalidConfigException(
                    "symbol_weights must contain SymbolWeight entries.", details={'entry': repr(entry)})
            if entry.symbol in seen:
                raise InvalidConfigException(
                    f"Symbol {entry.symbol.value} is weighted more than once.")
            seen.add(entry.symbol)
            if not _is_strict_int(entry.weight) or entry.weight <= 0:
                raise InvalidConfigException(
                    f"Weight for {entry.symbol.value} must be a positive integer.",
                    details={'symbol': entry.symbol.value, 'weight': entry.weight})

        if all(entry.symbol == SymbolKind.SCATTER for entry in self.symbol_weights):
            raise InvalidConfigException("At least one non-scatter symbol must carry weight.")

        if not isinstance(self.payout_table, dict):
            raise InvalidConfigException("payout_table must be a mapping of symbol to run payouts.")

        missing = [s.value for s in seen if s not in self.payout_table]
        if missing:
            raise InvalidConfigException(
                "Payout table is missing weighted symbols.", details={'missing_symbols': sorted(missing)})

        for symbol, payouts in self.payout_table.items():
            if not isinstance(symbol, SymbolKind):
                raise InvalidConfigException(
                    f"Unknown payout table symbol {symbol!r}.")
            if not isinstance(payouts, dict):
                raise InvalidConfigException(
                    f"Payouts for {symbol.value} must be a mapping of run length to multiplier.")
            for length in RUN_LENGTHS:
                multiplier = payouts.get(length)
                if multiplier is None:
                    raise InvalidConfigException(
                        f"Payouts for {symbol.value} must define run length {length}.",
                        details={'symbol': symbol.value, 'missing_length': length})
                if isinstance(multiplier, bool) or not isinstance(multiplier, Real) or multiplier < 0:
                    raise InvalidConfigException(
                        f"Payout for {symbol.value} x{length} must be a non-negative number.",
                        details={'symbol': symbol.value, 'length': length, 'multiplier': multiplier})
                if symbol == SymbolKind.SCATTER and multiplier != 0:
                    raise InvalidConfigException(
                        "Scatter never pays as a line; its payouts must be zero.",
                        details={'length': length, 'multiplier': multiplier})

    @property
    def symbols(self) -> List[SymbolKind]:
        return [entry.symbol for entry in self.symbol_weights]

    def payout_for(self, symbol: SymbolKind, length: int) -> float:
        return self.payout_table[symbol][length]

    @property
    def best_symbol(self) -> SymbolKind:
        """Highest paying non-scatter symbol for a five-run (first one wins a tie)."""
        return self._best_symbol

    def _find_best_symbol(self):
        best = None
        best_payout = None
        for symbol, payouts in self.payout_table.items():
            if symbol == SymbolKind.SCATTER:
                continue
            if best is None or payouts[MAX_RUN_LENGTH] > best_payout:
                best = symbol
                best_payout = payouts[MAX_RUN_LENGTH]
        return best if best is not None else self.symbols[0]


@dataclass(frozen=True)
class WalletState:
    balance_cents: int
    bet_cents: int


@dataclass(frozen=True)
class LineWin:
    start_row: int
    start_col: int
    end_row: int
    end_col: int
    length: int
    symbol: SymbolKind
    win_cents: int
    wild_multiplier: int = 1

    @property
    def direction(self) -> Cell:
        step = self.length - 1
        return ((self.end_row - self.start_row) // step, (self.end_col - self.start_col) // step)

    def cells(self) -> List[Cell]:
        d_row, d_col = self.direction
        return [(self.start_row + k * d_row, self.start_col + k * d_col) for k in range(self.length)]


@dataclass(frozen=True)
class ScoredGrid:
    total_win_cents: int
    line_wins: Tuple[LineWin, ...]
    is_jackpot: bool
    # Always present; stays 0 when scoring a base-game grid.
    retrigger_spins: int = 0
    # Grid-wide scatter count, reported in both modes.
    scatter_count: int = 0

    def winning_cells(self):
        cells = set()
        for line_win in self.line_wins:
            cells.update(line_win.cells())
        return cells


@dataclass(frozen=True)
class SpinOutcome:
    grid: Grid
    total_win_cents: int
    line_wins: Tuple[LineWin, ...]
    is_jackpot: bool
    free_spins_awarded: int
    scatter_count: int
    bet_cents: int
    balance_after_cents: int


@dataclass(frozen=True)
class BonusSpinResult:
    spin_index: int
    total_spins: int
    grid: Grid
    wild_overlay: WildOverlay
    scored: ScoredGrid
    running_total_cents: int
    new_wild_cells: Tuple[Cell, ...] = ()

    @property
    def win_cents(self) -> int:
        return self.scored.total_win_cents


class BonusSessionStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SETTLED = "settled"


@dataclass
class BonusSessionState:
    status: BonusSessionStatus = BonusSessionStatus.IDLE
    spins_played: int = 0
    total_spins: int = 0
    bet_cents: int = 0
    wild_overlay: WildOverlay = field(default_factory=list)
    total_win_cents: int = 0
    previous_win_mask: Optional[List[List[bool]]] = None
    retriggers: int = 0

    @property
    def spins_remaining(self) -> int:
        return max(0, self.total_spins - self.spins_played)


class WalletRecord(Base):
    __tablename__ = 'slots_wallet'
    id = Column(Integer, primary_key=True)
    wallet_id = Column(String(64), unique=True, nullable=False, index=True)
    balance_cents = Column(BigInteger, default=0, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc), nullable=False)

    def __repr__(self):
        return f"<WalletRecord {self.wallet_id} balance={self.balance_cents}>"
