import json
import os
from types import SimpleNamespace

import pytest

from slots_core.services.wallet_store import (
    InMemoryWalletStore, JsonFileWalletStore, SqlAlchemyWalletStore, build_wallet_store,
)


def test_in_memory_store_round_trip():
    store = InMemoryWalletStore()
    assert store.load() is None
    store.save(1234)
    assert store.load() == 1234
    assert store.save_count == 1


def test_json_store_missing_file_loads_none(tmp_path):
    store = JsonFileWalletStore(str(tmp_path / "wallet.json"))
    assert store.load() is None


def test_json_store_writes_balance_document(tmp_path):
    path = tmp_path / "wallet.json"
    store = JsonFileWalletStore(str(path))
    store.save(4200)
    assert json.loads(path.read_text()) == {"balanceCents": 4200}
    assert store.load() == 4200
    assert not os.path.exists(f"{path}.tmp")


@pytest.mark.parametrize("content", [
    "not json at all",
    json.dumps([1, 2, 3]),
    json.dumps({"balanceCents": -10}),
    json.dumps({"balanceCents": "100"}),
    json.dumps({"balance": 100}),
])
def test_json_store_ignores_malformed_documents(tmp_path, content):
    path = tmp_path / "wallet.json"
    path.write_text(content)
    assert JsonFileWalletStore(str(path)).load() is None


def test_json_store_ignores_undecodable_bytes(tmp_path):
    path = tmp_path / "wallet.json"
    path.write_bytes(b'{"balanceCents": \xff\xfe}')
    assert JsonFileWalletStore(str(path)).load() is None


def test_json_store_write_failure_is_swallowed(tmp_path):
    store = JsonFileWalletStore(str(tmp_path / "missing_dir" / "wallet.json"))
    store.save(100)
    assert store.load() is None


def test_sqlalchemy_store_round_trip(tmp_path):
    url = f"sqlite:///{tmp_path / 'wallet.db'}"
    store = SqlAlchemyWalletStore(url, wallet_id="alice")
    assert store.load() is None
    store.save(500)
    assert store.load() == 500
    store.save(700)
    assert store.load() == 700

    # A second store over the same database sees the persisted row
    assert SqlAlchemyWalletStore(url, wallet_id="alice").load() == 700


def test_sqlalchemy_store_keeps_wallets_separate(tmp_path):
    url = f"sqlite:///{tmp_path / 'wallet.db'}"
    alice = SqlAlchemyWalletStore(url, wallet_id="alice")
    bob = SqlAlchemyWalletStore(url, wallet_id="bob")
    alice.save(100)
    bob.save(900)
    assert alice.load() == 100
    assert bob.load() == 900


def test_sqlalchemy_store_failures_are_swallowed(tmp_path):
    url = f"sqlite:///{tmp_path / 'no_such_dir' / 'wallet.db'}"
    store = SqlAlchemyWalletStore(url)
    assert store.load() is None
    store.save(100)


def test_build_wallet_store_selects_adapter(tmp_path):
    memory = build_wallet_store(SimpleNamespace(WALLET_STORE='memory'))
    assert isinstance(memory, InMemoryWalletStore)

    json_store = build_wallet_store(SimpleNamespace(WALLET_STORE='json', WALLET_JSON_PATH=str(tmp_path / 'w.json')))
    assert isinstance(json_store, JsonFileWalletStore)
    assert json_store.path == str(tmp_path / 'w.json')

    sql_store = build_wallet_store(SimpleNamespace(
        WALLET_STORE='sqlalchemy', WALLET_DATABASE_URL='sqlite:///:memory:', WALLET_ID='carol'))
    assert isinstance(sql_store, SqlAlchemyWalletStore)
    assert sql_store.wallet_id == 'carol'
