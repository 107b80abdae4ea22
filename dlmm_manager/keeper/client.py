"""Read-only client for the Meteora DLMM analytics API"""

import logging
from urllib.parse import urlencode

import requests

from ..core.config import Config
from ..core.exceptions import KeeperAPIError

logger = logging.getLogger(__name__)


def _query_value(value):
    # Booleans go over the wire as true/false
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def lexical_pair_key(mint_a, mint_b):
    """
    Group-pair identifier: the two token mints sorted lexically, joined by '-'.

    Example:
        lexical_pair_key("So11111111111111111111111111111111111111112",
                         "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v")
        -> "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v-So11111111111111111111111111111111111111112"
    """
    return "-".join(sorted([str(mint_a), str(mint_b)]))


class KeeperClient:
    """
    One method per analytics endpoint. Each call is a single GET; responses
    are returned as parsed JSON without modification.
    """

    HEADERS = {"Content-Type": "application/json"}

    def __init__(self, base_url=None, timeout=30):
        """
        Args:
            base_url: API origin (defaults to DLMM_API_URL / public endpoint)
            timeout: Request timeout in seconds
        """
        self.base_url = (base_url or Config(load_env=False).api_url).rstrip("/")
        self.timeout = timeout

    def build_url(self, endpoint, params=None):
        url = f"{self.base_url}{endpoint}"
        if params:
            url = f"{url}?{urlencode({k: _query_value(v) for k, v in params.items()})}"
        return url

    def _fetch(self, endpoint, params=None):
        """
        GET an endpoint.

        Raises:
            KeeperAPIError: On a non-success HTTP status
            requests.RequestException: Network faults, unchanged
        """
        url = self.build_url(endpoint, params)
        try:
            response = requests.get(url, headers=self.HEADERS, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("API request to %s failed: %s", url, e)
            raise

        if not response.ok:
            logger.error("API Error %s from %s", response.status_code, url)
            raise KeeperAPIError(response.status_code, response.text)
        return response.json()

    # ── Protocol ───────────────────────────────────────────────────────

    def get_protocol_metrics(self):
        """TVL, daily and total volume, total fees"""
        return self._fetch("/info/protocol_metrics")

    # ── Pairs ──────────────────────────────────────────────────────────

    def get_all_pairs(self, include_unknown=True):
        """
        All liquidity pairs.

        Args:
            include_unknown: Include pools with unverified tokens
        """
        return self._fetch("/pair/all", {"include_unknown": include_unknown})

    def get_all_pairs_by_groups(self, params=None):
        """Pairs grouped by token pair (pagination, sorting, filtering params)"""
        return self._fetch("/pair/all_by_groups", params)

    def get_all_pairs_by_groups_metadata(self, params=None):
        """Metadata (TVL, volume) for grouped pairs"""
        return self._fetch("/pair/all_by_groups_metadata", params)

    def get_all_pairs_with_pagination(self, params=None):
        return self._fetch("/pair/all_with_pagination", params)

    def get_single_group_pair(self, lexical_order_mints):
        """
        One group of pairs by token mints.

        Args:
            lexical_order_mints: Output of lexical_pair_key
        """
        return self._fetch(f"/pair/group_pair/{lexical_order_mints}")

    def get_pair(self, pair_address):
        return self._fetch(f"/pair/{pair_address}")

    def get_pair_fee_bps_by_days(self, pair_address, num_of_days):
        """Fee (bps) history, up to 255 days"""
        return self._fetch(f"/pair/{pair_address}/analytic/pair_fee_bps", {"num_of_days": num_of_days})

    def get_pair_daily_trade_volume_by_days(self, pair_address, num_of_days):
        return self._fetch(f"/pair/{pair_address}/analytic/pair_trade_volume", {"num_of_days": num_of_days})

    def get_pair_tvl_by_days(self, pair_address, num_of_days):
        return self._fetch(f"/pair/{pair_address}/analytic/pair_tvl", {"num_of_days": num_of_days})

    def get_pair_swap_records(self, pair_address, rows_to_take):
        """Most recent swaps, up to 255 rows"""
        return self._fetch(f"/pair/{pair_address}/analytic/swap_history", {"rows_to_take": rows_to_take})

    def get_pair_positions_lock(self, pair_address):
        return self._fetch(f"/pair/{pair_address}/positions_lock")

    # ── Positions ──────────────────────────────────────────────────────

    def get_position(self, position_address):
        return self._fetch(f"/position/{position_address}")

    def get_claim_fees(self, position_address):
        return self._fetch(f"/position/{position_address}/claim_fees")

    def get_claim_rewards(self, position_address):
        return self._fetch(f"/position/{position_address}/claim_rewards")

    def get_deposits(self, position_address):
        return self._fetch(f"/position/{position_address}/deposits")

    def get_withdraws(self, position_address):
        return self._fetch(f"/position/{position_address}/withdraws")

    def get_position_v2(self, position_address):
        return self._fetch(f"/position_v2/{position_address}")

    # ── Wallets ────────────────────────────────────────────────────────

    def get_wallet_earning(self, wallet_address, pair_address):
        """Fees and rewards earned by a wallet in one pair"""
        return self._fetch(f"/wallet/{wallet_address}/{pair_address}/earning")
