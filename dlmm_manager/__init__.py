"""
DLMM Manager - Liquidity orchestration for Meteora DLMM pools on Solana
"""

from .core.connection import SolanaManager
from .core.config import Config
from .core.exceptions import DLMMError, ConfigError, ConnectionError, TransactionError
from .operations import PoolSession, LiquidityManager, SwapManager
from .keeper import KeeperClient

__version__ = "0.1.0"
__all__ = [
    "SolanaManager",
    "Config",
    "DLMMError",
    "ConfigError",
    "ConnectionError",
    "TransactionError",
    "PoolSession",
    "LiquidityManager",
    "SwapManager",
    "KeeperClient",
]
