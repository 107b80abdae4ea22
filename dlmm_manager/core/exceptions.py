"""Custom exceptions for DLMM Manager"""


class DLMMError(Exception):
    """Base exception for all DLMM Manager errors"""
    pass


class ConfigError(DLMMError):
    """Configuration-related errors"""
    pass


class ConnectionError(DLMMError):
    """Solana RPC connection errors"""
    pass


class TransactionError(DLMMError):
    """
    Transaction execution errors.

    Batch operations attach the positions they had already processed
    when the fault occurred, since those changes are final on-chain.
    """

    def __init__(self, message, completed=None, plan=None):
        super().__init__(message)
        self.completed = list(completed or [])
        self.plan = plan


class PositionError(DLMMError):
    """Position-related errors (not found, not owned, etc.)"""
    pass


class PositionQueryError(PositionError):
    """Position listing failed upstream (distinct from owning no positions)"""
    pass


class PoolError(DLMMError):
    """Pool-related errors (failed to load, etc.)"""
    pass


class PoolNotInitializedError(PoolError):
    """Operation invoked against a pool that was never initialized"""
    pass


class QuoteError(DLMMError):
    """Quote-related errors (failed to get quote, etc.)"""
    pass


class KeeperAPIError(DLMMError):
    """Non-success response from the DLMM analytics API"""

    def __init__(self, status_code, body):
        super().__init__(f"API Error {status_code}: {body}")
        self.status_code = status_code
        self.body = body
