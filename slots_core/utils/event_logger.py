"""
Game Event Logging
Structured log lines for wallet movements and spin results
"""

import json
import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_spin_context: ContextVar[str] = ContextVar('spin_context', default='N/A')


def current_spin_context() -> str:
    return _spin_context.get()


@contextmanager
def spin_context(kind: str):
    """Tags every log record emitted inside the block with one context id."""
    context_id = f"{kind}-{uuid.uuid4().hex[:12]}"
    token = _spin_context.set(context_id)
    try:
        yield context_id
    finally:
        _spin_context.reset(token)


class GameEventLogger:
    """Centralized game event logging"""

    @staticmethod
    def log_financial_event(event_type: str, amount: int = None,
                            balance_before: int = None, balance_after: int = None,
                            details: dict = None):
        """Log wallet balance movements"""
        event_data = {
            'event_type': 'financial',
            'sub_type': event_type,
            'amount_cents': amount,
            'balance_before_cents': balance_before,
            'balance_after_cents': balance_after,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'spin_context': current_spin_context(),
            'details': details or {}
        }

        logger.info(f"FINANCIAL_EVENT: {json.dumps(event_data)}")

    @staticmethod
    def log_game_event(event_type: str, bet_amount: int = None, win_amount: int = None,
                       details: dict = None):
        """Log spin and bonus-session events"""
        event_data = {
            'event_type': 'game',
            'sub_type': event_type,
            'bet_amount_cents': bet_amount,
            'win_amount_cents': win_amount,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'spin_context': current_spin_context(),
            'details': details or {}
        }

        level = logging.INFO if event_type != 'bonus_spin' else logging.DEBUG
        logger.log(level, f"GAME_EVENT: {json.dumps(event_data)}")
