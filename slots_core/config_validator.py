"""
Configuration validation and startup checks for the slot engine.

This module implements fail-fast validation of the SLOTS_* environment
variables so that a misconfigured engine never starts, and so that a fixed
RNG seed can never leak into a production deployment.
"""

import os
import sys
import warnings
from typing import List, Optional, Tuple

WALLET_STORE_CHOICES = ('sqlalchemy', 'json', 'memory')
SUPPORTED_DATABASE_PREFIXES = ('sqlite://', 'postgresql://', 'postgresql+psycopg2://', 'mysql://')

_TRUE_VALUES = ('true', '1', 't')


class ConfigValidationError(Exception):
    """Raised when critical configuration is missing or invalid."""
    pass


class ConfigValidator:
    """Validates engine configuration and enforces production rules."""

    def __init__(self, is_production: bool = None):
        """
        Initialize the configuration validator.

        Args:
            is_production: If None, auto-detect from SLOTS_ENV
        """
        if is_production is None:
            is_production = os.getenv('SLOTS_ENV', 'development').lower() == 'production'

        self.is_production = is_production
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def _read_int(self, var_name: str, default: Optional[int], minimum: int = None) -> Optional[int]:
        raw = os.getenv(var_name)
        if raw is None or raw.strip() == '':
            return default
        try:
            value = int(raw)
        except ValueError:
            self.errors.append(f"CRITICAL: {var_name} must be an integer (got {raw!r})")
            return default
        if minimum is not None and value < minimum:
            self.errors.append(f"CRITICAL: {var_name} must be at least {minimum} (got {value})")
            return default
        return value

    def _read_probability(self, var_name: str, default: float) -> float:
        raw = os.getenv(var_name)
        if raw is None or raw.strip() == '':
            return default
        try:
            value = float(raw)
        except ValueError:
            self.errors.append(f"CRITICAL: {var_name} must be a number between 0 and 1 (got {raw!r})")
            return default
        if not 0.0 <= value <= 1.0:
            self.errors.append(f"CRITICAL: {var_name} must be between 0 and 1 (got {value})")
            return default
        return value

    def validate_rng_config(self) -> Optional[int]:
        """Validate the optional RNG seed."""
        seed = self._read_int('SLOTS_RNG_SEED', None)
        if seed is None:
            return None

        if self.is_production:
            self.errors.append(
                "CRITICAL: SLOTS_RNG_SEED must not be set in production. "
                "A fixed seed makes every grid predictable."
            )
        elif not 0 <= seed <= 0xFFFFFFFF:
            self.warnings.append(f"SLOTS_RNG_SEED {seed} is outside 32 bits and will be masked")
        else:
            self.warnings.append("Using a fixed RNG seed - spins are reproducible")
        return seed

    def validate_wallet_config(self) -> Tuple[str, str, Optional[str], str, int, int]:
        """Validate wallet store selection and starting balances."""
        store = os.getenv('SLOTS_WALLET_STORE', 'sqlalchemy').lower()
        if store not in WALLET_STORE_CHOICES:
            self.errors.append(
                f"CRITICAL: SLOTS_WALLET_STORE must be one of {', '.join(WALLET_STORE_CHOICES)} (got {store!r})"
            )

        database_url = os.getenv('SLOTS_WALLET_DATABASE_URL', 'sqlite:///slots_wallet.db')
        if store == 'sqlalchemy' and not database_url.startswith(SUPPORTED_DATABASE_PREFIXES):
            self.errors.append("CRITICAL: SLOTS_WALLET_DATABASE_URL must use a supported database driver")

        json_path = os.getenv('SLOTS_WALLET_JSON_PATH')
        if store == 'json' and not json_path:
            json_path = 'slots_wallet.json'
            self.warnings.append("SLOTS_WALLET_JSON_PATH not set - using ./slots_wallet.json")

        if store == 'memory' and self.is_production:
            self.warnings.append("In-memory wallet store in production - balances are lost on restart")

        wallet_id = os.getenv('SLOTS_WALLET_ID', 'default')
        if not wallet_id or len(wallet_id) > 64:
            self.errors.append("CRITICAL: SLOTS_WALLET_ID must be between 1 and 64 characters")

        initial_balance = self._read_int('SLOTS_INITIAL_BALANCE_CENTS', 10000, minimum=0)
        default_bet = self._read_int('SLOTS_DEFAULT_BET_CENTS', 100, minimum=1)

        return store, database_url, json_path, wallet_id, initial_balance, default_bet

    def validate_bonus_config(self) -> dict:
        """Validate free-spin session tuning."""
        bonus = {
            'SPAWN_CHANCE': self._read_probability('SLOTS_BONUS_SPAWN_CHANCE', 0.7),
            'SECOND_WILD_CHANCE': self._read_probability('SLOTS_BONUS_SECOND_WILD_CHANCE', 0.4),
            'MAX_NEW_WILDS': self._read_int('SLOTS_BONUS_MAX_NEW_WILDS', 2, minimum=0),
            'RETRIGGER_SPINS': self._read_int('SLOTS_BONUS_RETRIGGER_SPINS', 2, minimum=0),
            'WILD_MULTIPLIER_CAP': self._read_int('SLOTS_WILD_MULTIPLIER_CAP', None, minimum=1),
        }
        return bonus

    def validate_game_config_path(self) -> Optional[str]:
        path = os.getenv('SLOTS_GAME_CONFIG_PATH')
        if path and not os.path.exists(path):
            self.errors.append(f"CRITICAL: SLOTS_GAME_CONFIG_PATH points to a missing file: {path}")
        return path or None

    def validate_all(self) -> dict:
        """
        Validate all configuration settings.

        Returns:
            Dictionary containing validated configuration values

        Raises:
            ConfigValidationError: If any critical value is missing or invalid
        """
        config = {}

        try:
            config['RNG_SEED'] = self.validate_rng_config()
            (config['WALLET_STORE'], config['WALLET_DATABASE_URL'], config['WALLET_JSON_PATH'],
             config['WALLET_ID'], config['INITIAL_BALANCE_CENTS'],
             config['DEFAULT_BET_CENTS']) = self.validate_wallet_config()
            for key, value in self.validate_bonus_config().items():
                config[f'BONUS_{key}' if key != 'WILD_MULTIPLIER_CAP' else key] = value
            config['GAME_CONFIG_PATH'] = self.validate_game_config_path()

            config['ENV'] = 'production' if self.is_production else os.getenv('SLOTS_ENV', 'development').lower()
            config['DEBUG'] = os.getenv('SLOTS_DEBUG', 'False').lower() in _TRUE_VALUES

            if self.is_production and config['DEBUG']:
                self.errors.append("CRITICAL: DEBUG mode must be disabled in production (set SLOTS_DEBUG=False)")

            if self.errors:
                error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in self.errors)
                if self.warnings:
                    error_msg += "\n\nWarnings:\n" + "\n".join(f"  - {warning}" for warning in self.warnings)
                raise ConfigValidationError(error_msg)

            for warning in self.warnings:
                warnings.warn(warning, UserWarning)

            return config

        except Exception as e:
            if isinstance(e, ConfigValidationError):
                raise
            raise ConfigValidationError(f"Configuration validation error: {str(e)}") from e


def validate_engine_config(is_production: bool = None) -> dict:
    """
    Validate engine configuration with fail-fast behavior.

    Raises:
        ConfigValidationError: If critical configuration is missing or invalid
    """
    try:
        return ConfigValidator(is_production=is_production).validate_all()
    except ConfigValidationError as e:
        print("\nSLOT ENGINE CONFIGURATION VALIDATION FAILED\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nSet or correct the SLOTS_* environment variables (or .env) and restart.\n", file=sys.stderr)
        raise
