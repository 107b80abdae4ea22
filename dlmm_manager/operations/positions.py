"""Position query operations"""

import logging

from ..core.connection import to_pubkey
from ..core.exceptions import PositionQueryError

logger = logging.getLogger(__name__)


def get_field(obj, *names, default=None):
    """Read the first present attribute or mapping key"""
    for name in names:
        if isinstance(obj, dict):
            if name in obj:
                return obj[name]
        elif hasattr(obj, name):
            return getattr(obj, name)
    return default


def normalize_positions(result):
    """
    Normalize the SDK's position listing shapes into a list.

    Accepts a plain sequence, an object exposing user_positions, or a
    mapping keyed by user_positions / userPositions.
    """
    if result is None:
        return []
    if isinstance(result, (list, tuple)):
        return list(result)

    wrapped = get_field(result, "user_positions", "userPositions")
    if wrapped is None:
        raise TypeError(f"Unrecognized position listing: {type(result).__name__}")
    return list(wrapped)


def position_key(position):
    """String identity of a position or position public key"""
    key = get_field(position, "public_key", "publicKey", default=position)
    return str(key)


def position_bin_ids(position):
    """Bin identifiers covered by a position, in SDK order"""
    data = get_field(position, "position_data", "positionData")
    bins = get_field(data, "position_bin_data", "positionBinData", default=[])
    return [get_field(b, "bin_id", "binId") for b in bins]


def summarize_position(position):
    """JSON-safe view of a position"""
    bin_ids = position_bin_ids(position)
    return {
        "public_key": position_key(position),
        "bin_ids": bin_ids,
        "lower_bin_id": min(bin_ids) if bin_ids else None,
        "upper_bin_id": max(bin_ids) if bin_ids else None,
        "num_bins": len(bin_ids),
    }


class PositionQuery:
    """Query a user's DLMM positions"""

    def __init__(self, session):
        """
        Args:
            session: PoolSession holding initialized pools
        """
        self.session = session

    def get_user_positions(self, pool_address, user):
        """
        Get all positions owned by user in a pool.

        Args:
            pool_address: Initialized pool address
            user: Owner public key, keypair or base58 string

        Returns:
            List of SDK position objects (empty if the user owns none)

        Raises:
            PoolNotInitializedError: If the pool was never initialized
            PositionQueryError: If the SDK or RPC call fails
        """
        pool = self.session.get_handle(pool_address)
        owner = to_pubkey(user)

        try:
            if callable(getattr(pool, "get_positions_by_user", None)):
                result = pool.get_positions_by_user(owner)
            else:
                result = pool.get_positions_by_user_and_lb_pair(owner)
            return normalize_positions(result)
        except Exception as e:
            logger.error("Error getting user positions for pool %s: %s", pool_address, e)
            raise PositionQueryError(f"Failed to get user positions: {e}") from e

    def find_position(self, pool_address, user, target):
        """
        Find one of the user's positions by identity.

        Args:
            target: Position object, public key or base58 string

        Returns:
            The matching position, or None if the user does not own it
        """
        wanted = position_key(target)
        for position in self.get_user_positions(pool_address, user):
            if position_key(position) == wanted:
                return position
        return None

    def get_positions_summary(self, pool_address, user):
        """Summaries of every position the user owns in the pool"""
        return [summarize_position(p) for p in self.get_user_positions(pool_address, user)]
