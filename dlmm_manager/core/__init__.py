"""Core module - configuration, connection and exceptions"""

from .config import Config, load_pool_loader
from .connection import SolanaManager, load_keypair, to_pubkey
from .exceptions import (
    DLMMError,
    ConfigError,
    ConnectionError,
    TransactionError,
    PositionError,
    PositionQueryError,
    PoolError,
    PoolNotInitializedError,
    QuoteError,
    KeeperAPIError,
)

__all__ = [
    "Config",
    "load_pool_loader",
    "SolanaManager",
    "load_keypair",
    "to_pubkey",
    "DLMMError",
    "ConfigError",
    "ConnectionError",
    "TransactionError",
    "PositionError",
    "PositionQueryError",
    "PoolError",
    "PoolNotInitializedError",
    "QuoteError",
    "KeeperAPIError",
]
