"""High-level operations for DLMM liquidity management"""

from .session import PoolSession
from .positions import PositionQuery, normalize_positions, summarize_position
from .pools import PoolQuery
from .liquidity import LiquidityManager, MigrationPlan
from .swap import SwapManager

__all__ = [
    "PoolSession",
    "PositionQuery",
    "normalize_positions",
    "summarize_position",
    "PoolQuery",
    "LiquidityManager",
    "MigrationPlan",
    "SwapManager",
]
