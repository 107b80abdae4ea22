"""Key file loading and the RPC connection manager"""

import json
from unittest.mock import MagicMock

import pytest
from solana.rpc.commitment import Confirmed
from solders.keypair import Keypair

from dlmm_manager.core.connection import SolanaManager, load_keypair
from dlmm_manager.core.exceptions import ConfigError, ConnectionError


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    # Keep any .env in the working tree out of the manager's config
    monkeypatch.chdir(tmp_path)
    for name in ("SOLANA_RPC_URL", "KEYPAIR_PATH"):
        monkeypatch.delenv(name, raising=False)


def write_key_file(path, secret):
    path.write_text(json.dumps(secret))
    return path


@pytest.fixture
def keypair():
    return Keypair()


@pytest.fixture
def key_file(tmp_path, keypair):
    return write_key_file(tmp_path / "id.json", list(bytes(keypair)))


@pytest.fixture
def client():
    client = MagicMock(name="client")
    client.is_connected.return_value = True
    return client


def test_load_keypair_from_byte_array(key_file, keypair):
    loaded = load_keypair(key_file)
    assert loaded.pubkey() == keypair.pubkey()


@pytest.mark.parametrize("secret", [[1, 2, 3], [300], {"secret": []}, "not bytes"])
def test_load_keypair_rejects_malformed_secret(tmp_path, secret):
    path = write_key_file(tmp_path / "bad.json", secret)
    with pytest.raises(ConfigError, match="Failed to load keypair"):
        load_keypair(path)


def test_load_keypair_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_keypair(tmp_path / "missing.json")


def test_signer_loaded_from_keypair_path(monkeypatch, key_file, keypair, client):
    monkeypatch.setenv("KEYPAIR_PATH", str(key_file))

    manager = SolanaManager(require_signer=True, client=client)

    assert manager.pubkey == keypair.pubkey()
    assert manager.address == str(keypair.pubkey())


def test_read_only_manager_has_no_signer(client):
    manager = SolanaManager(client=client)
    assert manager.keypair is None
    assert manager.address is None


def test_unreachable_endpoint(client):
    client.is_connected.return_value = False

    with pytest.raises(ConnectionError, match="Failed to connect to http://localhost:8899"):
        SolanaManager(rpc_url="http://localhost:8899", client=client)


def test_connection_check_can_be_skipped(client):
    client.is_connected.return_value = False
    SolanaManager(client=client, check_connection=False)
    client.is_connected.assert_not_called()


def test_sol_balance(client, keypair):
    client.get_balance.return_value.value = 2_500_000_000
    manager = SolanaManager(client=client)

    assert manager.get_balance(str(keypair.pubkey())) == 2.5
    client.get_balance.assert_called_once_with(keypair.pubkey())


def test_balance_needs_an_address(client):
    with pytest.raises(ValueError, match="No address provided"):
        SolanaManager(client=client).get_balance()


def test_token_balance(client, keypair):
    client.get_token_account_balance.return_value.value.ui_amount = 12.75
    manager = SolanaManager(client=client)

    assert manager.get_token_balance(keypair.pubkey()) == 12.75
    client.get_token_account_balance.assert_called_once_with(keypair.pubkey())


def test_empty_token_account(client, keypair):
    client.get_token_account_balance.return_value.value.ui_amount = None
    assert SolanaManager(client=client).get_token_balance(keypair.pubkey()) == 0.0


def test_airdrop_waits_for_confirmation(client, keypair):
    client.request_airdrop.return_value.value = "airdrop-sig"
    manager = SolanaManager(client=client)

    assert manager.request_airdrop(1_000_000_000, keypair.pubkey()) == "airdrop-sig"
    client.request_airdrop.assert_called_once_with(keypair.pubkey(), 1_000_000_000)
    client.confirm_transaction.assert_called_once_with("airdrop-sig", commitment=Confirmed)
