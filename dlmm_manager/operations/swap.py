"""Token swap operations"""

import logging

from ..core.exceptions import QuoteError, TransactionError
from ..utils.transactions import TransactionSender
from .positions import get_field

logger = logging.getLogger(__name__)


class SwapManager:
    """Execute swaps against a single DLMM pool"""

    def __init__(self, session, sender=None):
        """
        Args:
            session: PoolSession holding initialized pools
            sender: TransactionSender (created from the session's manager if None)
        """
        self.session = session
        self.sender = sender or TransactionSender(session.manager)

    def _quote(self, pool, amount, is_x_to_y, slippage_bps):
        # The SDK's direction flag is the negation of is_x_to_y
        swap_for_y = not is_x_to_y
        bin_arrays = pool.get_bin_array_for_swap(swap_for_y)
        return pool.swap_quote(amount, swap_for_y, slippage_bps, bin_arrays)

    def quote(self, pool_address, amount, is_x_to_y, slippage_bps=100):
        """
        Get a swap quote without executing.

        Args:
            pool_address: Initialized pool address
            amount: Input amount in base units
            is_x_to_y: True sells token X for token Y
            slippage_bps: Slippage tolerance in basis points

        Returns:
            Dict with input amount and minimum output under the tolerance
        """
        pool = self.session.get_handle(pool_address)
        amount = int(amount)

        try:
            swap_quote = self._quote(pool, amount, is_x_to_y, slippage_bps)
        except Exception as e:
            logger.error("Error quoting swap in pool %s: %s", pool_address, e)
            raise QuoteError(f"Failed to get quote: {e}") from e

        return {
            "pool": pool_address,
            "is_x_to_y": is_x_to_y,
            "in_amount": amount,
            "out_amount": get_field(swap_quote, "out_amount", "outAmount"),
            "min_out_amount": get_field(swap_quote, "min_out_amount", "minOutAmount"),
            "slippage_bps": slippage_bps,
        }

    def swap(self, user, pool_address, amount, is_x_to_y, slippage_bps=100):
        """
        Swap tokens, guarding output with the quoted minimum.

        Args:
            user: Signing keypair
            pool_address: Initialized pool address
            amount: Input amount in base units
            is_x_to_y: True sells token X for token Y
            slippage_bps: Slippage tolerance in basis points (100 = 1%)

        Returns:
            Confirmed transaction signature
        """
        pool = self.session.get_handle(pool_address)
        amount = int(amount)

        try:
            swap_quote = self._quote(pool, amount, is_x_to_y, slippage_bps)

            token_x = pool.token_x.public_key
            token_y = pool.token_y.public_key

            tx = pool.swap(
                in_token=token_x if is_x_to_y else token_y,
                out_token=token_y if is_x_to_y else token_x,
                bin_arrays_pubkey=get_field(swap_quote, "bin_arrays_pubkey", "binArraysPubkey"),
                in_amount=amount,
                min_out_amount=get_field(swap_quote, "min_out_amount", "minOutAmount"),
                lb_pair=pool.pubkey,
                user=user.pubkey(),
            )
            signature = self.sender.send_and_confirm(tx, [user])

        except Exception as e:
            logger.error("Error performing swap in pool %s: %s", pool_address, e)
            raise TransactionError(f"Failed to swap: {e}") from e

        return signature
