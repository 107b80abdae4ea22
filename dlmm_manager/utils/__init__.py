"""Utility functions for bin math and transactions"""

from .bins import (
    balanced_bin_range,
    one_sided_bin_range,
    uniform_bps,
    to_base_units,
    build_strategy,
    bin_id_to_price,
)
from .transactions import TransactionSender, normalize_transactions

__all__ = [
    "balanced_bin_range",
    "one_sided_bin_range",
    "uniform_bps",
    "to_base_units",
    "build_strategy",
    "bin_id_to_price",
    "TransactionSender",
    "normalize_transactions",
]
