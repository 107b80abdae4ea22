"""Bin-range and amount helpers for DLMM liquidity requests"""

MAX_BPS = 10000

STRATEGY_TYPES = ("Spot", "Curve", "BidAsk")


def balanced_bin_range(active_bin_id, bin_range):
    """
    Symmetric window around the active bin.

    Args:
        active_bin_id: Current active bin
        bin_range: Bins on each side of the active bin

    Returns:
        (min_bin_id, max_bin_id)
    """
    return active_bin_id - bin_range, active_bin_id + bin_range


def one_sided_bin_range(active_bin_id, bin_range, is_x_side=True, offset=0):
    """
    Window on one side of the active bin, shifted by offset.

    X side covers [active - range, active], Y side covers
    [active, active + range]. The offset moves the whole window
    without changing its width.

    Returns:
        (min_bin_id, max_bin_id)
    """
    if is_x_side:
        return active_bin_id - bin_range + offset, active_bin_id + offset
    return active_bin_id + offset, active_bin_id + bin_range + offset


def uniform_bps(bin_ids, bps):
    """Same basis-point fraction for every bin"""
    if not 0 < bps <= MAX_BPS:
        raise ValueError(f"bps must be in (0, {MAX_BPS}], got {bps}")
    return [int(bps)] * len(bin_ids)


def to_base_units(amount, decimals):
    """Convert a human amount to integer base units"""
    return int(round(amount * (10 ** decimals)))


def check_strategy_type(strategy_type):
    if strategy_type not in STRATEGY_TYPES:
        raise ValueError(f"Unknown strategy type: {strategy_type}. Expected one of {STRATEGY_TYPES}")


def build_strategy(min_bin_id, max_bin_id, strategy_type="Spot", strategy_params=None):
    """
    Build the strategy descriptor passed to the SDK.

    Caller-supplied strategy_params are merged last, so they override the
    computed bounds on key collision.
    """
    check_strategy_type(strategy_type)

    return {
        "min_bin_id": min_bin_id,
        "max_bin_id": max_bin_id,
        "strategy_type": strategy_type,
        **(strategy_params or {}),
    }


def bin_id_to_price(bin_id, bin_step, decimals_x, decimals_y):
    """
    Price of token X in token Y at a bin.

    Args:
        bin_id: Bin identifier
        bin_step: Pool bin step in basis points
        decimals_x: Token X decimals
        decimals_y: Token Y decimals
    """
    raw = (1 + bin_step / MAX_BPS) ** bin_id
    return raw * (10 ** (decimals_x - decimals_y))
