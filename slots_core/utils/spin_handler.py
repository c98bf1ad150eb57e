import logging
from decimal import Decimal

from slots_core.exceptions import InvalidArgumentException
from slots_core.models import (
    JACKPOT_SYMBOL, MAX_RUN_LENGTH, MIN_RUN_LENGTH,
    LineWin, ScoredGrid, SymbolKind,
)

logger = logging.getLogger(__name__)

# --- Scatter rules ---
RETRIGGER_SCATTER_COUNT = 3
RETRIGGER_SPINS = 2

# Scatter count -> free spins awarded in the base game (step function, not a formula).
FREE_SPINS_BY_SCATTER_COUNT = (
    (5, 10),
    (4, 8),
    (3, 5),
)

# (d_row, d_col) for each scored line family; every line starts in column 0.
HORIZONTAL = (0, 1)
DIAGONAL_DOWN_RIGHT = (1, 1)
DIAGONAL_UP_RIGHT = (-1, 1)


# --- Grid generation ---

def _fill_column(grid, col_idx, rows, picker, wild_overlay=None):
    scatter_placed = False
    for r_idx in range(rows):
        on_wild = wild_overlay is not None and wild_overlay[r_idx][col_idx] > 0
        symbol = picker.pick()
        while symbol == SymbolKind.SCATTER and (scatter_placed or on_wild):
            symbol = picker.pick()
        if symbol == SymbolKind.SCATTER:
            scatter_placed = True
        grid[r_idx][col_idx] = symbol


def generate_spin_grid(rows, columns, picker):
    """
    Generates a base-game grid, filling each column top to bottom.

    A column never holds more than one scatter: a second scatter draw in the
    same column is rejected and redrawn.

    Args:
        rows (int): Number of grid rows.
        columns (int): Number of grid columns.
        picker (WeightedSymbolPicker): Source of weighted symbol draws.

    Returns:
        list[list[SymbolKind]]: A fresh grid indexed as grid[row][col].
    """
    grid = [[None for _ in range(columns)] for _ in range(rows)]
    for c_idx in range(columns):
        _fill_column(grid, c_idx, rows, picker)
    return grid


def generate_bonus_grid(rows, columns, picker, wild_overlay):
    """
    Generates a free-spin grid against the current wild overlay.

    Same column rule as the base game, and additionally a scatter may never
    land on a cell carrying a wild multiplier. The overlay is only read.

    Args:
        rows (int): Number of grid rows.
        columns (int): Number of grid columns.
        picker (WeightedSymbolPicker): Source of weighted symbol draws.
        wild_overlay (list[list[int]]): Wild multipliers, 0 where there is no wild.

    Returns:
        list[list[SymbolKind]]: A fresh grid indexed as grid[row][col].
    """
    validate_wild_overlay(wild_overlay, rows, columns)
    grid = [[None for _ in range(columns)] for _ in range(rows)]
    for c_idx in range(columns):
        _fill_column(grid, c_idx, rows, picker, wild_overlay)
    return grid


def validate_wild_overlay(wild_overlay, rows, columns):
    if wild_overlay is None:
        return
    if not isinstance(wild_overlay, (list, tuple)) or len(wild_overlay) != rows:
        raise InvalidArgumentException(
            f"Wild overlay must have {rows} rows.", details={'rows': rows})
    for r_idx, row in enumerate(wild_overlay):
        if not isinstance(row, (list, tuple)) or len(row) != columns:
            raise InvalidArgumentException(
                f"Wild overlay row {r_idx} must have {columns} columns.",
                details={'row': r_idx, 'columns': columns})
        for c_idx, value in enumerate(row):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidArgumentException(
                    "Wild multipliers must be non-negative integers.",
                    details={'cell': [r_idx, c_idx], 'value': value})


def empty_wild_overlay(rows, columns):
    return [[0 for _ in range(columns)] for _ in range(rows)]


# --- Scatter helpers ---

def count_scatters(grid):
    return sum(1 for row in grid for symbol in row if symbol == SymbolKind.SCATTER)


def free_spins_for_scatter_count(scatter_count):
    for threshold, spins in FREE_SPINS_BY_SCATTER_COUNT:
        if scatter_count >= threshold:
            return spins
    return 0


def check_bonus_trigger(grid):
    """
    Checks whether a base-game grid awards free spins.

    Returns:
        dict: 'triggered', 'scatter_count' and 'spins_awarded'.
    """
    scatter_count = count_scatters(grid)
    spins_awarded = free_spins_for_scatter_count(scatter_count)
    return {
        'triggered': spins_awarded > 0,
        'scatter_count': scatter_count,
        'spins_awarded': spins_awarded,
    }


# --- Line scoring ---

def iter_line_starts(rows):
    """Yields (start_row, start_col, d_row, d_col) for every scored line."""
    for r_idx in range(rows):
        yield r_idx, 0, HORIZONTAL[0], HORIZONTAL[1]
    for r_idx in range(0, rows - 2):
        yield r_idx, 0, DIAGONAL_DOWN_RIGHT[0], DIAGONAL_DOWN_RIGHT[1]
    for r_idx in range(2, rows):
        yield r_idx, 0, DIAGONAL_UP_RIGHT[0], DIAGONAL_UP_RIGHT[1]


def _walk(r0, c0, d_row, d_col, num_rows, num_cols):
    r, c = r0, c0
    for _ in range(MAX_RUN_LENGTH):
        if not (0 <= r < num_rows and 0 <= c < num_cols):
            return
        yield r, c
        r += d_row
        c += d_col


def _wild_at(wild_overlay, r, c):
    if wild_overlay is None:
        return 0
    return wild_overlay[r][c]


def resolve_target_symbol(grid, r0, c0, d_row, d_col, wild_overlay, fallback_symbol):
    """
    The symbol a line is scored against: the first non-wild cell along it.
    A line made only of wilds takes fallback_symbol instead.
    """
    num_rows = len(grid)
    num_cols = len(grid[0]) if num_rows > 0 else 0
    for r, c in _walk(r0, c0, d_row, d_col, num_rows, num_cols):
        if _wild_at(wild_overlay, r, c) == 0:
            return grid[r][c]
    return fallback_symbol


def measure_run(grid, r0, c0, d_row, d_col, target, wild_overlay):
    """
    Counts the run matching target from the line start.

    Returns:
        tuple: (run length, product of the wild multipliers inside the run)
    """
    num_rows = len(grid)
    num_cols = len(grid[0]) if num_rows > 0 else 0
    length = 0
    multiplier_product = 1
    for r, c in _walk(r0, c0, d_row, d_col, num_rows, num_cols):
        wild = _wild_at(wild_overlay, r, c)
        if grid[r][c] != target and wild == 0:
            break
        length += 1
        if wild > 0:
            multiplier_product *= wild
    return length, multiplier_product


def calculate_line_win(bet_cents, payout_multiplier, wild_multiplier):
    """Truncates at each step: floor(bet x payout), then floor(base x wilds)."""
    base_win = int(Decimal(bet_cents) * Decimal(str(payout_multiplier)))
    return base_win * wild_multiplier


def score_line(grid, r0, c0, d_row, d_col, bet_cents, slot_config, wild_overlay=None):
    """
    Scores a single line.

    Args:
        grid (list[list[SymbolKind]]): The spin result.
        r0 (int), c0 (int): Line start cell.
        d_row (int), d_col (int): Step direction.
        bet_cents (int): Stake the payout multipliers apply to.
        slot_config (SlotConfiguration): Pay table and fallback symbol.
        wild_overlay (list[list[int]] | None): Wild multipliers for bonus spins.

    Returns:
        LineWin | None: The win, or None when the line pays nothing.
    """
    target = resolve_target_symbol(grid, r0, c0, d_row, d_col, wild_overlay, slot_config.best_symbol)
    length, wild_multiplier = measure_run(grid, r0, c0, d_row, d_col, target, wild_overlay)
    if length < MIN_RUN_LENGTH:
        return None

    clamped = min(length, MAX_RUN_LENGTH)
    payouts = slot_config.payout_table.get(target)
    if not payouts:
        return None
    win_cents = calculate_line_win(bet_cents, payouts[clamped], wild_multiplier)
    if win_cents <= 0:
        return None

    return LineWin(
        start_row=r0,
        start_col=c0,
        end_row=r0 + (clamped - 1) * d_row,
        end_col=c0 + (clamped - 1) * d_col,
        length=clamped,
        symbol=target,
        win_cents=win_cents,
        wild_multiplier=wild_multiplier,
    )


def score_grid(grid, bet_cents, slot_config, wild_overlay=None, bonus_mode=False,
               retrigger_spins=RETRIGGER_SPINS, retrigger_scatter_count=RETRIGGER_SCATTER_COUNT):
    """
    Scores every horizontal and diagonal line of a grid.

    Pure function of its inputs. In bonus mode the grid-wide scatter count is
    also checked for a retrigger; outside bonus mode retrigger_spins is 0.

    Args:
        grid (list[list[SymbolKind]]): The spin result.
        bet_cents (int): Stake for the spin.
        slot_config (SlotConfiguration): Layout and pay table.
        wild_overlay (list[list[int]] | None): Wild multipliers, bonus spins only.
        bonus_mode (bool): Enables retrigger detection.
        retrigger_spins (int): Spins added on a retrigger.
        retrigger_scatter_count (int): Scatters needed for a retrigger.

    Returns:
        ScoredGrid: Total win, line wins, jackpot flag and retrigger spins.
    """
    if isinstance(bet_cents, bool) or not isinstance(bet_cents, int) or bet_cents < 0:
        raise InvalidArgumentException(
            "Bet must be a non-negative integer (cents).", details={'bet_cents': bet_cents})
    num_rows = len(grid)
    num_cols = len(grid[0]) if num_rows > 0 else 0
    if num_rows != slot_config.rows or num_cols != slot_config.columns:
        raise InvalidArgumentException(
            f"Grid must be {slot_config.rows}x{slot_config.columns}.",
            details={'rows': num_rows, 'columns': num_cols})
    validate_wild_overlay(wild_overlay, num_rows, num_cols)

    line_wins = []
    total_win_cents = 0
    is_jackpot = False
    for r0, c0, d_row, d_col in iter_line_starts(num_rows):
        line_win = score_line(grid, r0, c0, d_row, d_col, bet_cents, slot_config, wild_overlay)
        if line_win is None:
            continue
        line_wins.append(line_win)
        total_win_cents += line_win.win_cents
        if line_win.symbol == JACKPOT_SYMBOL and line_win.length == MAX_RUN_LENGTH:
            is_jackpot = True

    scatter_count = count_scatters(grid)
    awarded_retrigger = 0
    if bonus_mode and scatter_count >= retrigger_scatter_count:
        awarded_retrigger = retrigger_spins

    return ScoredGrid(
        total_win_cents=total_win_cents,
        line_wins=tuple(line_wins),
        is_jackpot=is_jackpot,
        retrigger_spins=awarded_retrigger,
        scatter_count=scatter_count,
    )


def build_win_mask(line_wins, rows, columns):
    """Cells covered by any winning line, as a rows x columns boolean grid."""
    mask = [[False for _ in range(columns)] for _ in range(rows)]
    for line_win in line_wins:
        for r, c in line_win.cells():
            if 0 <= r < rows and 0 <= c < columns:
                mask[r][c] = True
    return mask
