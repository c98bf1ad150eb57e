"""
Wallet persistence adapters.

The engine treats persistence as best effort: every adapter logs and swallows
its own failures, and `load` answers None when nothing usable is stored.
"""
import json
import logging
import os
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from slots_core.error_codes import ErrorCodes
from slots_core.models import Base, WalletRecord

logger = logging.getLogger(__name__)

BALANCE_KEY = "balanceCents"


def _valid_balance(value):
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


class WalletStore:
    """Persists a single wallet balance in cents."""

    def load(self) -> Optional[int]:
        raise NotImplementedError

    def save(self, balance_cents: int) -> None:
        raise NotImplementedError


class InMemoryWalletStore(WalletStore):
    def __init__(self, balance_cents: Optional[int] = None):
        self.balance_cents = balance_cents
        self.save_count = 0

    def load(self):
        return self.balance_cents

    def save(self, balance_cents):
        self.balance_cents = balance_cents
        self.save_count += 1


class JsonFileWalletStore(WalletStore):
    """Stores {"balanceCents": n} in a small JSON document."""

    def __init__(self, path: str):
        self.path = path

    def load(self):
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"[{ErrorCodes.PERSISTENCE_ERROR}] Could not read wallet file {self.path}: {e}")
            return None

        balance = data.get(BALANCE_KEY) if isinstance(data, dict) else None
        if not _valid_balance(balance):
            logger.warning(f"[{ErrorCodes.PERSISTENCE_ERROR}] Ignoring malformed wallet file {self.path}")
            return None
        return balance

    def save(self, balance_cents):
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump({BALANCE_KEY: balance_cents}, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"[{ErrorCodes.PERSISTENCE_ERROR}] Could not write wallet file {self.path}: {e}")


class SqlAlchemyWalletStore(WalletStore):
    """
    Keeps the balance in the slots_wallet table, one row per wallet id.

    The engine and table are created lazily on first use so that constructing
    the store never touches the database.
    """

    def __init__(self, database_url: str, wallet_id: str = "default", engine_options: dict = None):
        self.database_url = database_url
        self.wallet_id = wallet_id
        self._engine_options = engine_options or {}
        self._session_factory = None

    def _get_session(self):
        if self._session_factory is None:
            engine = create_engine(self.database_url, **self._engine_options)
            Base.metadata.create_all(engine)
            self._session_factory = sessionmaker(bind=engine)
        return self._session_factory()

    def load(self):
        session = None
        try:
            session = self._get_session()
            record = session.query(WalletRecord).filter_by(wallet_id=self.wallet_id).first()
            if record is None:
                return None
            balance = int(record.balance_cents)
            return balance if balance >= 0 else None
        except SQLAlchemyError as e:
            logger.error(f"[{ErrorCodes.PERSISTENCE_ERROR}] Failed to load wallet '{self.wallet_id}': {e}")
            return None
        finally:
            if session is not None:
                session.close()

    def save(self, balance_cents):
        session = None
        try:
            session = self._get_session()
            record = session.query(WalletRecord).filter_by(wallet_id=self.wallet_id).first()
            if record is None:
                record = WalletRecord(wallet_id=self.wallet_id, balance_cents=balance_cents)
                session.add(record)
            else:
                record.balance_cents = balance_cents
            session.commit()
        except SQLAlchemyError as e:
            if session is not None:
                session.rollback()
            logger.error(f"[{ErrorCodes.PERSISTENCE_ERROR}] Failed to save wallet '{self.wallet_id}': {e}")
        finally:
            if session is not None:
                session.close()


def build_wallet_store(config) -> WalletStore:
    """Creates the store selected by config.WALLET_STORE."""
    store = getattr(config, 'WALLET_STORE', 'memory')
    if store == 'sqlalchemy':
        return SqlAlchemyWalletStore(config.WALLET_DATABASE_URL, config.WALLET_ID)
    if store == 'json':
        return JsonFileWalletStore(config.WALLET_JSON_PATH or 'slots_wallet.json')
    return InMemoryWalletStore()
