"""
Free-spin session logic.

A session keeps a wild overlay alive across its spins: wilds that sat on a
winning line grow by one, new x1 wilds may appear in empty cells, and three or
more scatters extend the session. The wallet is only credited once, when the
session settles.
"""
import copy
import logging
from dataclasses import dataclass
from typing import Optional

from slots_core.exceptions import (
    GameLogicException, InvalidArgumentException, InvalidConfigException,
)
from slots_core.models import BonusSessionState, BonusSessionStatus, BonusSpinResult
from slots_core.utils.event_logger import GameEventLogger, spin_context
from slots_core.utils.spin_handler import (
    RETRIGGER_SCATTER_COUNT, RETRIGGER_SPINS, build_win_mask, empty_wild_overlay,
)

logger = logging.getLogger(__name__)


def _is_strict_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class BonusPolicy:
    spawn_chance: float = 0.7
    second_wild_chance: float = 0.4
    max_new_wilds: int = 2
    retrigger_spins: int = RETRIGGER_SPINS
    retrigger_scatter_count: int = RETRIGGER_SCATTER_COUNT
    # None leaves wild multipliers unbounded.
    multiplier_cap: Optional[int] = None

    def __post_init__(self):
        for key in ('spawn_chance', 'second_wild_chance'):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
                raise InvalidConfigException(f"{key} must be between 0 and 1.", details={key: value})
        for key in ('max_new_wilds', 'retrigger_spins'):
            value = getattr(self, key)
            if not _is_strict_int(value) or value < 0:
                raise InvalidConfigException(f"{key} must be a non-negative integer.", details={key: value})
        if not _is_strict_int(self.retrigger_scatter_count) or self.retrigger_scatter_count < 1:
            raise InvalidConfigException(
                "retrigger_scatter_count must be a positive integer.",
                details={'retrigger_scatter_count': self.retrigger_scatter_count})
        if self.multiplier_cap is not None and (
                not _is_strict_int(self.multiplier_cap) or self.multiplier_cap < 1):
            raise InvalidConfigException(
                "multiplier_cap must be a positive integer or None.",
                details={'multiplier_cap': self.multiplier_cap})

    @classmethod
    def from_config(cls, config):
        return cls(
            spawn_chance=config.BONUS_SPAWN_CHANCE,
            second_wild_chance=config.BONUS_SECOND_WILD_CHANCE,
            max_new_wilds=config.BONUS_MAX_NEW_WILDS,
            retrigger_spins=config.BONUS_RETRIGGER_SPINS,
            multiplier_cap=config.WILD_MULTIPLIER_CAP,
        )


class BonusSessionController:
    """
    Runs exactly one free-spin session against an engine.

    Lifecycle is IDLE -> RUNNING -> SETTLED. The controller owns the overlay
    and the previous spin's win mask; observers only get copies.
    """

    def __init__(self, engine, policy: BonusPolicy = None, random_source=None):
        self.engine = engine
        self.policy = policy or engine.bonus_policy
        self.random_source = random_source or engine.random_source
        self._state = BonusSessionState()

    @property
    def status(self) -> BonusSessionStatus:
        return self._state.status

    @property
    def state(self) -> BonusSessionState:
        """Copy of the session bookkeeping."""
        return copy.deepcopy(self._state)

    def start(self, initial_free_spins):
        if self._state.status != BonusSessionStatus.IDLE:
            raise GameLogicException(
                "A bonus session controller can only run one session.",
                details={'status': self._state.status.value})
        if not _is_strict_int(initial_free_spins) or initial_free_spins <= 0:
            raise InvalidArgumentException(
                "Free spin count must be a positive integer.",
                details={'initial_free_spins': repr(initial_free_spins)})

        config = self.engine.config
        self._state.status = BonusSessionStatus.RUNNING
        self._state.total_spins = initial_free_spins
        self._state.bet_cents = self.engine.wallet.bet_cents
        self._state.wild_overlay = empty_wild_overlay(config.rows, config.columns)
        logger.info(f"Bonus session started: {initial_free_spins} free spins at bet {self._state.bet_cents}")

    def play_spin(self) -> BonusSpinResult:
        state = self._state
        if state.status != BonusSessionStatus.RUNNING:
            raise GameLogicException("No bonus session is running.", details={'status': state.status.value})
        if state.spins_remaining <= 0:
            raise GameLogicException("No free spins remain; settle the session.")

        self._grow_winning_wilds()
        new_wild_cells = self._spawn_new_wilds()

        grid = self.engine.generate_bonus_grid(state.wild_overlay)
        scored = self.engine.score_grid(
            grid, state.bet_cents, wild_overlay=state.wild_overlay, bonus_mode=True, policy=self.policy)

        state.total_win_cents += scored.total_win_cents
        state.previous_win_mask = build_win_mask(scored.line_wins, len(grid), len(grid[0]))
        state.spins_played += 1
        if scored.retrigger_spins > 0:
            state.total_spins += scored.retrigger_spins
            state.retriggers += 1
            logger.info(f"Bonus retrigger: +{scored.retrigger_spins} spins ({state.total_spins} total)")

        result = BonusSpinResult(
            spin_index=state.spins_played,
            total_spins=state.total_spins,
            grid=grid,
            wild_overlay=copy.deepcopy(state.wild_overlay),
            scored=scored,
            running_total_cents=state.total_win_cents,
            new_wild_cells=tuple(new_wild_cells),
        )
        GameEventLogger.log_game_event(
            'bonus_spin', bet_amount=0, win_amount=scored.total_win_cents,
            details={
                'spin_index': result.spin_index,
                'total_spins': result.total_spins,
                'running_total_cents': result.running_total_cents,
                'new_wilds': len(new_wild_cells),
            })
        self.engine.notify('on_bonus_spin', result)
        return result

    def settle(self) -> int:
        state = self._state
        if state.status != BonusSessionStatus.RUNNING:
            raise GameLogicException("No bonus session is running.", details={'status': state.status.value})
        if state.spins_remaining > 0:
            raise GameLogicException(
                "Cannot settle a session with free spins remaining.",
                details={'spins_remaining': state.spins_remaining})

        total = state.total_win_cents
        self.engine.settle_bonus(total)
        state.status = BonusSessionStatus.SETTLED
        state.wild_overlay = []
        state.previous_win_mask = None

        GameEventLogger.log_game_event(
            'bonus_settled', bet_amount=state.bet_cents, win_amount=total,
            details={'spins_played': state.spins_played, 'retriggers': state.retriggers})
        self.engine.notify('on_bonus_complete', total)
        return total

    def run(self, initial_free_spins) -> int:
        """Plays every spin, including retriggered ones, then settles."""
        if not _is_strict_int(initial_free_spins):
            raise InvalidArgumentException(
                "Free spin count must be an integer.",
                details={'initial_free_spins': repr(initial_free_spins)})
        if initial_free_spins <= 0:
            return 0

        with spin_context('bonus'):
            self.start(initial_free_spins)
            # Retriggers extend total_spins mid-loop.
            while self._state.spins_remaining > 0:
                self.play_spin()
            return self.settle()

    def _grow_winning_wilds(self):
        mask = self._state.previous_win_mask
        if mask is None:
            return
        overlay = self._state.wild_overlay
        cap = self.policy.multiplier_cap
        for r_idx, row in enumerate(overlay):
            for c_idx, value in enumerate(row):
                if value > 0 and mask[r_idx][c_idx]:
                    grown = value + 1
                    row[c_idx] = grown if cap is None else min(grown, cap)

    def _spawn_new_wilds(self):
        """
        Places up to max_new_wilds x1 wilds on empty cells.

        Draw order: spawn roll, second-wild roll, then a Fisher-Yates shuffle
        of the empty cells (row-major) from the back. A full overlay stops
        after the spawn roll.
        """
        if self.random_source.next() >= self.policy.spawn_chance:
            return []

        overlay = self._state.wild_overlay
        empty_cells = [
            (r_idx, c_idx)
            for r_idx, row in enumerate(overlay)
            for c_idx, value in enumerate(row)
            if value == 0
        ]
        if not empty_cells:
            return []

        count = 1
        if self.random_source.next() < self.policy.second_wild_chance:
            count = 2
        count = min(count, self.policy.max_new_wilds, len(empty_cells))
        if count <= 0:
            return []

        for i in range(len(empty_cells) - 1, 0, -1):
            j = self.random_source.next_int(i + 1)
            empty_cells[i], empty_cells[j] = empty_cells[j], empty_cells[i]

        chosen = empty_cells[:count]
        for r_idx, c_idx in chosen:
            overlay[r_idx][c_idx] = 1
        return chosen
