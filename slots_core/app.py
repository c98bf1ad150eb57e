from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

import logging
from pythonjsonlogger import jsonlogger

from .config import Config # Relative import
from .services.bonus_service import BonusPolicy
from .services.presentation import LoggingPresenter
from .services.slot_engine import SlotEngine
from .services.wallet_store import build_wallet_store
from .utils.event_logger import current_spin_context
from .utils.game_config_manager import resolve_slot_configuration
from .utils.rng import create_random_source

LOGGER_NAME = 'slots_core'


# Custom Logging Filter for spin context
class SpinContextFilter(logging.Filter):
    def filter(self, record):
        record.spin_context = current_spin_context()
        return True


def configure_logging(debug=False):
    """Installs the package log handler: JSON lines normally, plain text in debug."""
    logger = logging.getLogger(LOGGER_NAME)
    if not debug:
        handler = logging.StreamHandler()
        formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(levelname)s %(spin_context)s %(module)s %(funcName)s %(lineno)d %(message)s'
        )
        handler.setFormatter(formatter)
        handler.addFilter(SpinContextFilter())
        if logger.hasHandlers():
            logger.handlers.clear()
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    else:
        # Basic logging for debug mode if not already configured
        if not logging.getLogger().handlers:
            logging.basicConfig(level=logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    return logger


def create_app(config_class=Config, random_source=None, wallet_store=None, presenter=None):
    """
    Engine factory: the one place that wires configuration, randomness,
    persistence and presentation together.
    """
    logger = configure_logging(debug=config_class.DEBUG)

    slot_config = resolve_slot_configuration(config_class.GAME_CONFIG_PATH)
    if random_source is None:
        random_source = create_random_source(config_class.RNG_SEED)
    if wallet_store is None:
        wallet_store = build_wallet_store(config_class)
    if presenter is None and config_class.DEBUG:
        presenter = LoggingPresenter()

    engine = SlotEngine(
        slot_config,
        random_source,
        balance_cents=config_class.INITIAL_BALANCE_CENTS,
        bet_cents=config_class.DEFAULT_BET_CENTS,
        wallet_store=wallet_store,
        presenter=presenter,
        bonus_policy=BonusPolicy.from_config(config_class),
    )
    logger.info(
        f"Slot engine ready: '{slot_config.name}' {slot_config.rows}x{slot_config.columns}, "
        f"store={type(wallet_store).__name__}, seeded={config_class.RNG_SEED is not None}"
    )
    return engine
