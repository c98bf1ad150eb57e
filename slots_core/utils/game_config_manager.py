"""
Game Configuration Manager
Loads and validates slot machine definitions (layout, reel weights, pay table)
"""

import json
import logging
import os
from typing import Optional

from marshmallow import ValidationError

from slots_core.exceptions import InvalidConfigException
from slots_core.models import SlotConfiguration, SymbolKind, SymbolWeight
from slots_core.schemas import SlotConfigurationSchema

logger = logging.getLogger(__name__)

DEFAULT_ROWS = 5
DEFAULT_COLUMNS = 5

DEFAULT_SYMBOL_WEIGHTS = (
    SymbolWeight(SymbolKind.CHERRY, 36),
    SymbolWeight(SymbolKind.LEMON, 28),
    SymbolWeight(SymbolKind.STAR, 18),
    SymbolWeight(SymbolKind.SEVEN, 10),
    SymbolWeight(SymbolKind.SCATTER, 8),
)

# Multipliers applied to the bet, per run length. Scatter has no line pay.
DEFAULT_PAYOUT_TABLE = {
    SymbolKind.CHERRY: {3: 1.5, 4: 3, 5: 6},
    SymbolKind.LEMON: {3: 2, 4: 4, 5: 8},
    SymbolKind.STAR: {3: 3, 4: 6, 5: 12},
    SymbolKind.SEVEN: {3: 5, 4: 12, 5: 25},
    SymbolKind.SCATTER: {3: 0, 4: 0, 5: 0},
}


def default_slot_configuration() -> SlotConfiguration:
    return SlotConfiguration(
        rows=DEFAULT_ROWS,
        columns=DEFAULT_COLUMNS,
        symbol_weights=DEFAULT_SYMBOL_WEIGHTS,
        payout_table={symbol: dict(payouts) for symbol, payouts in DEFAULT_PAYOUT_TABLE.items()},
    )


def parse_game_config(raw_config, source="<memory>") -> SlotConfiguration:
    """
    Validates a decoded game configuration document.

    Args:
        raw_config (dict): Document with a top-level 'game' object.
        source (str): Where the document came from, for error messages.

    Returns:
        SlotConfiguration: The validated configuration.

    Raises:
        InvalidConfigException: If the structure or values are invalid.
    """
    if not isinstance(raw_config, dict) or not isinstance(raw_config.get('game'), dict):
        raise InvalidConfigException(
            f"Config validation error for '{source}': 'game' key must be a dictionary.")
    try:
        return SlotConfigurationSchema().load(raw_config['game'])
    except ValidationError as e:
        logger.error(f"Configuration validation error for '{source}': {e.messages}")
        raise InvalidConfigException(
            f"Config validation error for '{source}'.", details={'errors': e.messages})


def load_game_config(file_path: str) -> SlotConfiguration:
    """
    Loads a game configuration JSON file and validates its structure.

    Raises:
        InvalidConfigException: If the file is missing, is not valid JSON, or
            describes an invalid machine.
    """
    if not os.path.exists(file_path):
        logger.error(f"Game configuration file not found at {file_path}")
        raise InvalidConfigException(
            f"Configuration file not found at {file_path}", details={'path': file_path})

    try:
        with open(file_path, 'r') as f:
            raw_config = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"JSON decode error for {file_path}: {e.msg} at line {e.lineno} col {e.colno}")
        raise InvalidConfigException(
            f"Invalid JSON in {file_path}: {e.msg} (line {e.lineno}, col {e.colno})",
            details={'path': file_path})
    except OSError as e:
        raise InvalidConfigException(
            f"Could not read game config {file_path}: {e}", details={'path': file_path})

    config = parse_game_config(raw_config, source=file_path)
    logger.info(f"Loaded game configuration '{config.name}' from {file_path}")
    return config


def resolve_slot_configuration(file_path: Optional[str] = None) -> SlotConfiguration:
    if file_path:
        return load_game_config(file_path)
    return default_slot_configuration()
