from slots_core.exceptions import (
    SlotsException, InvalidConfigException, InvalidArgumentException,
    InsufficientFundsException, GameLogicException,
)
from slots_core.models import (
    SymbolKind, SymbolWeight, SlotConfiguration, WalletState, LineWin, ScoredGrid,
    SpinOutcome, BonusSpinResult,
)
from slots_core.services.bonus_service import BonusPolicy, BonusSessionController
from slots_core.services.slot_engine import SlotEngine, configure
from slots_core.utils.rng import Mulberry32RandomSource, SystemRandomSource, create_random_source
