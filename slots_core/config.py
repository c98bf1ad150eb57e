"""
Engine configuration with fail-fast validation.

Values come from the environment (optionally a .env file) and are validated
once at import time. Production deployments must not pin an RNG seed.
"""
from dotenv import load_dotenv

from slots_core.config_validator import validate_engine_config

load_dotenv()


class Config:
    """Validated engine configuration."""

    _validated_config = validate_engine_config()

    ENV = _validated_config['ENV']
    DEBUG = _validated_config['DEBUG']
    TESTING = False

    # Randomness - None means a non-deterministic system source
    RNG_SEED = _validated_config['RNG_SEED']

    # Wallet
    INITIAL_BALANCE_CENTS = _validated_config['INITIAL_BALANCE_CENTS']
    DEFAULT_BET_CENTS = _validated_config['DEFAULT_BET_CENTS']
    WALLET_STORE = _validated_config['WALLET_STORE']
    WALLET_DATABASE_URL = _validated_config['WALLET_DATABASE_URL']
    WALLET_JSON_PATH = _validated_config['WALLET_JSON_PATH']
    WALLET_ID = _validated_config['WALLET_ID']

    # Free-spin sessions
    BONUS_SPAWN_CHANCE = _validated_config['BONUS_SPAWN_CHANCE']
    BONUS_SECOND_WILD_CHANCE = _validated_config['BONUS_SECOND_WILD_CHANCE']
    BONUS_MAX_NEW_WILDS = _validated_config['BONUS_MAX_NEW_WILDS']
    BONUS_RETRIGGER_SPINS = _validated_config['BONUS_RETRIGGER_SPINS']
    WILD_MULTIPLIER_CAP = _validated_config['WILD_MULTIPLIER_CAP']

    # Optional JSON machine definition; the built-in classic 5x5 otherwise
    GAME_CONFIG_PATH = _validated_config['GAME_CONFIG_PATH']


class TestingConfig(Config):
    TESTING = True
    DEBUG = True
    RNG_SEED = 1234
    WALLET_STORE = 'memory'
    WALLET_JSON_PATH = None
    INITIAL_BALANCE_CENTS = 10000
    DEFAULT_BET_CENTS = 100
    BONUS_SPAWN_CHANCE = 0.7
    BONUS_SECOND_WILD_CHANCE = 0.4
    BONUS_MAX_NEW_WILDS = 2
    BONUS_RETRIGGER_SPINS = 2
    WILD_MULTIPLIER_CAP = None
    GAME_CONFIG_PATH = None
