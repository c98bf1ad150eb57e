"""
Slot Engine
Wallet, bet and spin orchestration over the grid generator and line scorer
"""
import logging

from slots_core.exceptions import (
    InsufficientFundsException, InvalidArgumentException, InvalidConfigException,
)
from slots_core.models import SlotConfiguration, SpinOutcome, SymbolWeight, WalletState
from slots_core.services.bonus_service import BonusPolicy, BonusSessionController
from slots_core.utils import spin_handler
from slots_core.utils.event_logger import GameEventLogger, spin_context
from slots_core.utils.rng import RandomSource, create_random_source
from slots_core.utils.symbol_picker import WeightedSymbolPicker

logger = logging.getLogger(__name__)

DEFAULT_BALANCE_CENTS = 10000
DEFAULT_BET_CENTS = 100


def _is_strict_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _require_positive_cents(value, name):
    if not _is_strict_int(value) or value <= 0:
        raise InvalidArgumentException(
            f"{name} must be a positive integer (cents).", details={name: repr(value)})


class SlotEngine:
    """
    Owns the wallet and runs base-game spins.

    Every public mutator validates before it touches state, so a rejected
    call leaves the wallet exactly as it was. Balance changes are pushed to
    the wallet store (best effort) and presenters only ever see snapshots.
    """

    def __init__(self, config, random_source, balance_cents=DEFAULT_BALANCE_CENTS,
                 bet_cents=DEFAULT_BET_CENTS, wallet_store=None, presenter=None, bonus_policy=None):
        if not isinstance(config, SlotConfiguration):
            raise InvalidConfigException("config must be a SlotConfiguration.")
        if not isinstance(random_source, RandomSource):
            raise InvalidConfigException("random_source must be a RandomSource.")
        if not _is_strict_int(balance_cents) or balance_cents < 0:
            raise InvalidConfigException(
                "Initial balance must be a non-negative integer (cents).",
                details={'balance_cents': repr(balance_cents)})
        if not _is_strict_int(bet_cents) or bet_cents <= 0:
            raise InvalidConfigException(
                "Initial bet must be a positive integer (cents).", details={'bet_cents': repr(bet_cents)})
        if bonus_policy is not None and not isinstance(bonus_policy, BonusPolicy):
            raise InvalidConfigException("bonus_policy must be a BonusPolicy.")

        self.config = config
        self.random_source = random_source
        self.picker = WeightedSymbolPicker(config.symbol_weights, random_source)
        self.wallet_store = wallet_store
        self.presenter = presenter
        self.bonus_policy = bonus_policy or BonusPolicy()

        self._bet_cents = bet_cents
        self._balance_cents = balance_cents
        persisted = self._load_persisted()
        if persisted is not None:
            self._balance_cents = persisted
            logger.info(f"Restored persisted wallet balance: {persisted} cents")

    # --- Wallet ---

    @property
    def wallet(self) -> WalletState:
        return WalletState(balance_cents=self._balance_cents, bet_cents=self._bet_cents)

    def set_bet(self, bet_cents):
        _require_positive_cents(bet_cents, 'bet_cents')
        self._bet_cents = bet_cents
        return self.wallet

    def add_funds(self, amount_cents):
        _require_positive_cents(amount_cents, 'amount_cents')
        self._change_balance(amount_cents, 'funds_added')
        return self.wallet

    def _change_balance(self, delta_cents, event_type, details=None, persist=True):
        before = self._balance_cents
        self._balance_cents = before + delta_cents
        GameEventLogger.log_financial_event(
            event_type, amount=abs(delta_cents), balance_before=before,
            balance_after=self._balance_cents, details=details)
        if persist:
            self._persist()

    def _load_persisted(self):
        if self.wallet_store is None:
            return None
        try:
            balance = self.wallet_store.load()
        except Exception as e:
            logger.error(f"Wallet store load failed, using initial balance: {e}", exc_info=True)
            return None
        if balance is None:
            return None
        if not _is_strict_int(balance) or balance < 0:
            logger.warning(f"Ignoring invalid persisted balance {balance!r}")
            return None
        return balance

    def _persist(self):
        if self.wallet_store is None:
            return
        try:
            self.wallet_store.save(self._balance_cents)
        except Exception as e:
            logger.error(f"Wallet store save failed: {e}", exc_info=True)

    def notify(self, hook, *args):
        """Calls a presenter hook; presenter failures never reach the game."""
        if self.presenter is None:
            return
        try:
            getattr(self.presenter, hook)(*args)
        except Exception as e:
            logger.error(f"Presenter hook {hook} failed: {e}", exc_info=True)

    # --- Grids and scoring ---

    def generate_grid(self):
        return spin_handler.generate_spin_grid(self.config.rows, self.config.columns, self.picker)

    def generate_bonus_grid(self, wild_overlay):
        return spin_handler.generate_bonus_grid(
            self.config.rows, self.config.columns, self.picker, wild_overlay)

    def score_grid(self, grid, bet_cents, wild_overlay=None, bonus_mode=False, policy=None):
        policy = policy or self.bonus_policy
        return spin_handler.score_grid(
            grid, bet_cents, self.config,
            wild_overlay=wild_overlay,
            bonus_mode=bonus_mode,
            retrigger_spins=policy.retrigger_spins,
            retrigger_scatter_count=policy.retrigger_scatter_count,
        )

    # --- Spins ---

    def spin(self) -> SpinOutcome:
        """
        Runs one paid base-game spin.

        Raises:
            InsufficientFundsException: If the bet exceeds the balance. Nothing
                is debited in that case.
        """
        bet_cents = self._bet_cents
        if bet_cents > self._balance_cents:
            raise InsufficientFundsException(
                "Insufficient balance for this bet.",
                details={'balance_cents': self._balance_cents, 'bet_cents': bet_cents})

        with spin_context('spin'):
            # Debit and credit land in the store as one save.
            self._change_balance(-bet_cents, 'bet_debit', persist=False)

            grid = self.generate_grid()
            scored = self.score_grid(grid, bet_cents)
            if scored.total_win_cents > 0:
                self._change_balance(scored.total_win_cents, 'win_credit',
                                     details={'lines': len(scored.line_wins)}, persist=False)
            self._persist()

            trigger = spin_handler.check_bonus_trigger(grid)
            outcome = SpinOutcome(
                grid=grid,
                total_win_cents=scored.total_win_cents,
                line_wins=scored.line_wins,
                is_jackpot=scored.is_jackpot,
                free_spins_awarded=trigger['spins_awarded'],
                scatter_count=trigger['scatter_count'],
                bet_cents=bet_cents,
                balance_after_cents=self._balance_cents,
            )

            GameEventLogger.log_game_event(
                'spin', bet_amount=bet_cents, win_amount=scored.total_win_cents,
                details={
                    'lines': len(scored.line_wins),
                    'is_jackpot': scored.is_jackpot,
                    'scatter_count': outcome.scatter_count,
                    'free_spins_awarded': outcome.free_spins_awarded,
                })
            if outcome.is_jackpot:
                logger.info(f"JACKPOT on spin: {scored.total_win_cents} cents")
            self.notify('on_spin', outcome)
            return outcome

    # --- Free spins ---

    def run_bonus_session(self, initial_free_spins):
        """
        Plays a whole free-spin session and credits its total once.

        Returns:
            int: Total won over the session, in cents. 0 when no spins were
                requested.
        """
        if not _is_strict_int(initial_free_spins):
            raise InvalidArgumentException(
                "Free spin count must be an integer.", details={'initial_free_spins': repr(initial_free_spins)})
        if initial_free_spins <= 0:
            return 0
        controller = BonusSessionController(self)
        return controller.run(initial_free_spins)

    def settle_bonus(self, total_win_cents):
        """Credits a finished session's total; a zero total leaves the wallet untouched."""
        if not _is_strict_int(total_win_cents) or total_win_cents < 0:
            raise InvalidArgumentException(
                "Bonus total must be a non-negative integer (cents).",
                details={'total_win_cents': repr(total_win_cents)})
        if total_win_cents > 0:
            self._change_balance(total_win_cents, 'bonus_credit')
        return self.wallet

    def __repr__(self):
        return (f"<SlotEngine {self.config.name} {self.config.rows}x{self.config.columns} "
                f"balance={self._balance_cents} bet={self._bet_cents}>")


def _coerce_symbol_weights(symbol_weights):
    entries = []
    for entry in symbol_weights or ():
        if isinstance(entry, SymbolWeight):
            entries.append(entry)
        elif isinstance(entry, (tuple, list)) and len(entry) == 2:
            entries.append(SymbolWeight(entry[0], entry[1]))
        else:
            raise InvalidConfigException(
                "Symbol weights must be SymbolWeight entries or (symbol, weight) pairs.",
                details={'entry': repr(entry)})
    return tuple(entries)


def configure(rows, columns, symbol_weights, payout_table, *, random_source=None,
              balance_cents=DEFAULT_BALANCE_CENTS, bet_cents=DEFAULT_BET_CENTS,
              wallet_store=None, presenter=None, bonus_policy=None, name="Classic 5x5"):
    """
    Builds a ready-to-spin engine from a layout, reel weights and a pay table.

    Raises:
        InvalidConfigException: If any part of the setup is invalid.
    """
    slot_config = SlotConfiguration(
        rows=rows,
        columns=columns,
        symbol_weights=_coerce_symbol_weights(symbol_weights),
        payout_table=payout_table,
        name=name,
    )
    if random_source is None:
        random_source = create_random_source()
    return SlotEngine(
        slot_config, random_source,
        balance_cents=balance_cents,
        bet_cents=bet_cents,
        wallet_store=wallet_store,
        presenter=presenter,
        bonus_policy=bonus_policy,
    )
