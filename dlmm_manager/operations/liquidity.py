"""Liquidity management operations"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..core.connection import to_pubkey
from ..core.exceptions import TransactionError
from ..utils.bins import (
    MAX_BPS,
    balanced_bin_range,
    one_sided_bin_range,
    uniform_bps,
    to_base_units,
    build_strategy,
    check_strategy_type,
)
from ..utils.transactions import TransactionSender
from .pools import read_active_bin_id
from .positions import PositionQuery, get_field, position_key, position_bin_ids

logger = logging.getLogger(__name__)

# Human amount of token X deposited when the caller gives none
DEFAULT_X_TOKENS = 100


@dataclass
class MigrationPlan:
    """
    Two-phase record of a fund move between pools.

    Once removed is True the source pool has been emptied; feeding the plan
    back into move_funds resumes at the add phase instead of removing again.
    """

    from_pool: str
    to_pool: str
    base_decimals: int
    remove_options: Dict[str, Any] = field(default_factory=dict)
    add_options: Dict[str, Any] = field(default_factory=dict)
    removed: bool = False
    remove_result: Optional[str] = None
    add_result: Optional[str] = None

    @property
    def completed(self):
        return self.add_result is not None


class LiquidityManager:
    """Manage DLMM liquidity positions"""

    def __init__(self, session, sender=None):
        """
        Args:
            session: PoolSession holding initialized pools
            sender: TransactionSender (created from the session's manager if None)
        """
        self.session = session
        self.sender = sender or TransactionSender(session.manager)
        self.positions = PositionQuery(session)

    def _resolve_positions(self, pool_address, owner, targets=None):
        """
        Map target positions to the user's current position objects.

        None means every position the user owns. Targets the user no longer
        owns are skipped with a warning.
        """
        owned = self.positions.get_user_positions(pool_address, owner)
        if targets is None:
            return owned

        by_key = {position_key(p): p for p in owned}
        resolved = []
        for target in targets:
            position = by_key.get(position_key(target))
            if position is None:
                logger.warning("Position %s not found or not owned by user", position_key(target))
                continue
            resolved.append(position)
        return resolved

    def remove_liquidity(
        self,
        user,
        pool_address,
        target_positions=None,
        bps_to_remove=MAX_BPS,
        should_claim_and_close=True,
    ):
        """
        Remove liquidity from positions, one position at a time.

        Args:
            user: Owner keypair (signs every transaction)
            pool_address: Initialized pool address
            target_positions: Positions or public keys (default: all owned)
            bps_to_remove: Fraction removed from every bin, in basis points
            should_claim_and_close: Claim fees/rewards and close the position

        Returns:
            Success message, or None if there was nothing to remove

        Raises:
            TransactionError: On any upstream fault. Positions processed
                before the fault are listed in error.completed.
        """
        pool = self.session.get_handle(pool_address)
        if not 0 < bps_to_remove <= MAX_BPS:
            raise ValueError(f"bps_to_remove must be in (0, {MAX_BPS}], got {bps_to_remove}")

        owner = user.pubkey()
        completed = []

        try:
            targets = target_positions
            if targets is None:
                owned = self.positions.get_user_positions(pool_address, owner)
                targets = [position_key(p) for p in owned]

            if not targets:
                logger.info("No positions found for user in pool %s", pool_address)
                return None

            for target in targets:
                # Re-fetch: a previous removal in this batch may have closed it
                position = self.positions.find_position(pool_address, owner, target)
                if position is None:
                    logger.warning("Position %s not found or not owned by user", position_key(target))
                    continue

                bin_ids = position_bin_ids(position)
                tx = pool.remove_liquidity(
                    position=get_field(position, "public_key", "publicKey"),
                    user=owner,
                    bin_ids=bin_ids,
                    liquidities_bps_to_remove=uniform_bps(bin_ids, bps_to_remove),
                    should_claim_and_close=should_claim_and_close,
                )
                self.sender.send_all(tx, [user])
                completed.append(position_key(position))

        except Exception as e:
            logger.error("Error removing liquidity from pool %s: %s", pool_address, e)
            raise TransactionError(f"Failed to remove liquidity: {e}", completed=completed) from e

        return "Successfully removed liquidity"

    def add_liquidity(
        self,
        user,
        pool_address,
        base_decimals,
        x_amount=None,
        y_amount=None,
        bin_range=10,
        strategy_type="Spot",
        strategy_params=None,
        existing_position=None,
    ):
        """
        Add liquidity around the active bin.

        Args:
            user: Owner keypair
            pool_address: Initialized pool address
            base_decimals: Decimals of token X
            x_amount: Token X in base units (default: 100 tokens)
            y_amount: Token Y in base units (default: 0, strategy auto-fills)
            bin_range: Bins on each side of the active bin
            strategy_type: "Spot", "Curve" or "BidAsk"
            strategy_params: Extra strategy fields, merged over the computed ones
            existing_position: Position to deposit into instead of a new one

        Returns:
            Success message
        """
        pool = self.session.get_handle(pool_address)
        check_strategy_type(strategy_type)

        try:
            active_bin_id = read_active_bin_id(pool)
            min_bin_id, max_bin_id = balanced_bin_range(active_bin_id, bin_range)

            total_x_amount = int(x_amount) if x_amount is not None else to_base_units(DEFAULT_X_TOKENS, base_decimals)
            total_y_amount = int(y_amount) if y_amount is not None else 0

            strategy = build_strategy(min_bin_id, max_bin_id, strategy_type, strategy_params)
            logger.info(
                "Adding liquidity to %s: x=%s y=%s bins %s..%s (%s)",
                pool_address, total_x_amount, total_y_amount,
                strategy["min_bin_id"], strategy["max_bin_id"], strategy_type,
            )

            params = {
                "user": user.pubkey(),
                "total_x_amount": total_x_amount,
                "total_y_amount": total_y_amount,
                "strategy": strategy,
            }
            if existing_position is not None:
                params["position_pub_key"] = to_pubkey(position_key(existing_position))

            tx = pool.add_liquidity_by_strategy(**params)
            self.sender.send_all(tx, [user])

        except Exception as e:
            logger.error("Error adding liquidity to pool %s: %s", pool_address, e)
            raise TransactionError(f"Failed to add liquidity: {e}") from e

        return "Successfully added liquidity"

    def create_balanced_position(
        self, user, pool_address, base_decimals, x_amount=None, bin_range=10, strategy_type="Spot"
    ):
        """Position spread evenly around the current price"""
        try:
            return self.add_liquidity(
                user, pool_address, base_decimals,
                x_amount=x_amount,
                bin_range=bin_range,
                strategy_type=strategy_type,
            )
        except Exception as e:
            raise TransactionError(f"Failed to create balanced position: {e}") from e

    def create_imbalanced_position(
        self, user, pool_address, base_decimals,
        x_amount=None, y_amount=None, bin_range=10, strategy_type="Spot",
    ):
        """Position with explicit amounts of both tokens"""
        try:
            return self.add_liquidity(
                user, pool_address, base_decimals,
                x_amount=x_amount,
                y_amount=y_amount,
                bin_range=bin_range,
                strategy_type=strategy_type,
            )
        except Exception as e:
            raise TransactionError(f"Failed to create imbalanced position: {e}") from e

    def create_one_sided_position(
        self, user, pool_address, base_decimals, amount=None, bin_range=10, is_x_side=True, offset=0,
    ):
        """
        Position holding a single token on one side of the active bin.

        Args:
            amount: Base units of the deposited token. Defaults to 100 tokens
                on the X side; required on the Y side.
            is_x_side: True deposits token X in [active - range, active],
                False deposits token Y in [active, active + range]
            offset: Shift applied to both ends of the window
        """
        if not is_x_side and amount is None:
            raise ValueError("amount is required for a Y-side position")

        try:
            pool = self.session.get_handle(pool_address)
            active_bin_id = read_active_bin_id(pool)
            min_bin_id, max_bin_id = one_sided_bin_range(active_bin_id, bin_range, is_x_side, offset)

            if is_x_side:
                x_amount, y_amount = amount, 0
            else:
                x_amount, y_amount = 0, amount

            return self.add_liquidity(
                user, pool_address, base_decimals,
                x_amount=x_amount,
                y_amount=y_amount,
                strategy_type="Spot",
                strategy_params={"min_bin_id": min_bin_id, "max_bin_id": max_bin_id},
            )
        except Exception as e:
            raise TransactionError(f"Failed to create one-sided position: {e}") from e

    def move_funds(
        self,
        user,
        from_pool,
        to_pool,
        base_decimals,
        remove_options=None,
        add_options=None,
        plan=None,
    ):
        """
        Move liquidity from one pool to another.

        Removal is fully confirmed before addition starts. The move is not
        atomic: if adding fails, the withdrawn funds stay in the wallet and
        error.plan records removed=True so a retry skips straight to adding.

        Args:
            user: Owner keypair
            from_pool: Source pool address
            to_pool: Destination pool address
            base_decimals: Decimals of the destination's token X
            remove_options: Keyword arguments for remove_liquidity
            add_options: Keyword arguments for add_liquidity
            plan: MigrationPlan from a previous failed attempt

        Returns:
            Dict with success flag, message, add result and the plan
        """
        if plan is None:
            plan = MigrationPlan(
                from_pool=from_pool,
                to_pool=to_pool,
                base_decimals=base_decimals,
                remove_options=dict(remove_options or {}),
                add_options=dict(add_options or {}),
            )

        try:
            if not plan.removed:
                plan.remove_result = self.remove_liquidity(user, plan.from_pool, **plan.remove_options)
                plan.removed = True
            else:
                logger.info("Removal from %s already done, resuming at add", plan.from_pool)

            plan.add_result = self.add_liquidity(
                user, plan.to_pool, plan.base_decimals, **plan.add_options
            )
        except Exception as e:
            logger.error("Error moving funds from %s to %s: %s", plan.from_pool, plan.to_pool, e)
            raise TransactionError(f"Failed to move funds: {e}", plan=plan) from e

        return {
            "success": True,
            "message": f"Successfully moved funds from {plan.from_pool} to {plan.to_pool}",
            "result": plan.add_result,
            "plan": plan,
        }

    def claim_swap_fees(self, user, pool_address, target_positions=None):
        """
        Claim accumulated swap fees.

        Args:
            user: Owner keypair
            pool_address: Initialized pool address
            target_positions: Positions or public keys (default: all owned)

        Returns:
            Success message, or None if there was nothing to claim
        """
        pool = self.session.get_handle(pool_address)
        owner = user.pubkey()

        try:
            positions = self._resolve_positions(pool_address, owner, target_positions)
            if not positions:
                logger.info("No positions found for user in pool %s", pool_address)
                return None

            txs = pool.claim_all_swap_fee(owner=owner, positions=positions)
            self.sender.send_all(txs, [user])

        except Exception as e:
            logger.error("Error claiming swap fees from pool %s: %s", pool_address, e)
            raise TransactionError(f"Failed to claim swap fees: {e}") from e

        return "Successfully claimed swap fees"

    def close_positions(self, user, pool_address, target_positions=None):
        """
        Close positions one at a time.

        Returns:
            Success message, or None if there was nothing to close
        """
        pool = self.session.get_handle(pool_address)
        owner = user.pubkey()
        completed = []

        try:
            positions = self._resolve_positions(pool_address, owner, target_positions)
            if not positions:
                logger.info("No positions found for user in pool %s", pool_address)
                return None

            for position in positions:
                tx = pool.close_position(owner=owner, position=position)
                self.sender.send_all(tx, [user])
                completed.append(position_key(position))

        except Exception as e:
            logger.error("Error closing positions in pool %s: %s", pool_address, e)
            raise TransactionError(f"Failed to close positions: {e}", completed=completed) from e

        return "Successfully closed positions"
