"""Pool query operations"""

from .positions import get_field
from ..utils.bins import bin_id_to_price


def read_active_bin_id(pool):
    """
    Current active bin of a pool handle.

    Reads the pair state when the handle carries it, otherwise asks the
    SDK for the active bin.
    """
    active_id = get_field(get_field(pool, "lb_pair", "lbPair"), "active_id", "activeId")
    if active_id is not None:
        return active_id
    return get_field(pool.get_active_bin(), "bin_id", "binId")


def _token_info(token):
    if token is None:
        return None
    return {
        "mint": str(get_field(token, "public_key", "publicKey")),
        "decimals": get_field(token, "decimals"),
    }


class PoolQuery:
    """Query DLMM pool information"""

    def __init__(self, session):
        """
        Args:
            session: PoolSession holding initialized pools
        """
        self.session = session

    def get_active_bin(self, pool_address):
        """
        Get the active bin of an initialized pool.

        Returns:
            Dict with bin_id
        """
        pool = self.session.get_handle(pool_address)
        return {"bin_id": read_active_bin_id(pool)}

    def get_pool_info(self, pool_address):
        """
        Get pool details: active bin, token mints and decimals, bin step.

        The active bin price is included when the pool exposes its bin step.
        """
        pool = self.session.get_handle(pool_address)
        active_bin_id = read_active_bin_id(pool)
        token_x = _token_info(get_field(pool, "token_x", "tokenX"))
        token_y = _token_info(get_field(pool, "token_y", "tokenY"))
        bin_step = get_field(get_field(pool, "lb_pair", "lbPair"), "bin_step", "binStep")

        result = {
            "address": pool_address,
            "active_bin_id": active_bin_id,
            "bin_step": bin_step,
            "token_x": token_x,
            "token_y": token_y,
        }

        if bin_step is not None and token_x and token_y:
            result["active_price"] = bin_id_to_price(
                active_bin_id, bin_step, token_x["decimals"], token_y["decimals"]
            )

        return result
