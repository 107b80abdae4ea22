"""Solana RPC connection management"""

import json
from pathlib import Path

from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .config import Config
from .exceptions import ConnectionError, ConfigError

LAMPORTS_PER_SOL = 1_000_000_000


def load_keypair(path):
    """
    Load a keypair from a JSON file holding the secret key as a byte array.

    Args:
        path: Path to the key file (solana-keygen format)

    Returns:
        solders Keypair
    """
    try:
        with open(Path(path).expanduser()) as f:
            secret = json.load(f)
        return Keypair.from_bytes(bytes(secret))
    except (OSError, ValueError, TypeError) as e:
        raise ConfigError(f"Failed to load keypair from {path}: {e}") from e


def to_pubkey(value):
    """Accept a Pubkey, a Keypair or a base58 string"""
    if isinstance(value, Pubkey):
        return value
    if isinstance(value, Keypair):
        return value.pubkey()
    return Pubkey.from_string(str(value))


class SolanaManager:
    """Manages the RPC client and signing keypair"""

    def __init__(self, require_signer=False, rpc_url=None, client=None, check_connection=True):
        """
        Initialize Solana connection.

        Args:
            require_signer: If True, loads the keypair file for signing transactions
            rpc_url: RPC endpoint (defaults to SOLANA_RPC_URL)
            client: Pre-built solana Client (skips construction)
            check_connection: Verify the endpoint responds before continuing
        """
        self.config = Config()
        self.rpc_url = rpc_url or self.config.rpc_url
        self.client = client or Client(self.rpc_url, commitment=Confirmed)

        if check_connection and not self.client.is_connected():
            raise ConnectionError(f"Failed to connect to {self.rpc_url}")

        self.keypair = None
        if require_signer:
            self.keypair = load_keypair(self.config.keypair_path)

    @property
    def pubkey(self):
        """Signer public key, or None for read-only managers"""
        return self.keypair.pubkey() if self.keypair else None

    @property
    def address(self):
        pubkey = self.pubkey
        return str(pubkey) if pubkey else None

    def get_balance(self, address=None):
        """Get SOL balance"""
        addr = address or self.pubkey
        if not addr:
            raise ValueError("No address provided")
        lamports = self.client.get_balance(to_pubkey(addr)).value
        return lamports / LAMPORTS_PER_SOL

    def get_token_balance(self, token_account):
        """Get UI balance of an SPL token account"""
        resp = self.client.get_token_account_balance(to_pubkey(token_account))
        return float(resp.value.ui_amount or 0)

    def request_airdrop(self, lamports, address=None):
        """Request a devnet/testnet airdrop and wait for confirmation"""
        addr = address or self.pubkey
        if not addr:
            raise ValueError("No address provided")
        signature = self.client.request_airdrop(to_pubkey(addr), lamports).value
        self.client.confirm_transaction(signature, commitment=Confirmed)
        return signature

    def get_latest_blockhash(self):
        return self.client.get_latest_blockhash().value.blockhash
