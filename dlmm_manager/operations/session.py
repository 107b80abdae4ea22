"""Caller-owned registry of initialized DLMM pool handles"""

import logging

from solders.pubkey import Pubkey

from ..core.config import Config, load_pool_loader
from ..core.exceptions import PoolError, PoolNotInitializedError

logger = logging.getLogger(__name__)


class PoolSession:
    """
    Maps pool addresses to initialized SDK pool handles.

    Addresses are used verbatim as keys (case-sensitive, no normalization).
    Operations never initialize pools implicitly: call ensure_initialized
    first, then get_handle.

    Usage:
        with PoolSession(manager) as session:
            session.ensure_initialized(pool_address)
            LiquidityManager(session).add_liquidity(...)
    """

    def __init__(self, manager, pool_loader=None):
        """
        Args:
            manager: SolanaManager instance
            pool_loader: Callable (pool_pubkey, rpc_url) -> pool handle.
                Resolved from DLMM_POOL_LOADER when None.
        """
        self.manager = manager
        self._pool_loader = pool_loader
        self._pools = {}

    @property
    def pool_loader(self):
        """Lazy resolve the SDK factory"""
        if self._pool_loader is None:
            self._pool_loader = load_pool_loader(Config(load_env=False).pool_loader_path)
        return self._pool_loader

    @property
    def addresses(self):
        return list(self._pools)

    def __contains__(self, pool_address):
        return pool_address in self._pools

    def __len__(self):
        return len(self._pools)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.clear()
        return False

    def is_initialized(self, pool_address):
        return pool_address in self._pools

    def ensure_initialized(self, pool_address):
        """
        Load the pool handle if not already present. Idempotent.

        Returns:
            The pool handle
        """
        if pool_address in self._pools:
            return self._pools[pool_address]

        try:
            pool_pubkey = Pubkey.from_string(pool_address)
            handle = self.pool_loader(pool_pubkey, self.manager.rpc_url)
        except Exception as e:
            logger.error("Error initializing DLMM pool %s: %s", pool_address, e)
            raise PoolError(f"Failed to initialize DLMM pool: {e}") from e

        self._pools[pool_address] = handle
        logger.debug("Initialized DLMM pool %s", pool_address)
        return handle

    def get_handle(self, pool_address):
        """
        Get an initialized pool handle.

        Raises:
            PoolNotInitializedError: If ensure_initialized was never called
        """
        handle = self._pools.get(pool_address)
        if handle is None:
            raise PoolNotInitializedError(
                f"Pool {pool_address} not initialized. Call ensure_initialized first."
            )
        return handle

    def drop(self, pool_address):
        """Forget a pool handle. Returns True if it was present."""
        return self._pools.pop(pool_address, None) is not None

    def clear(self):
        self._pools.clear()
