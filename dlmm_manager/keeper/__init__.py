"""Meteora DLMM analytics API client"""

from .client import KeeperClient, lexical_pair_key

__all__ = ["KeeperClient", "lexical_pair_key"]
