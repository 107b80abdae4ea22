"""HTTP facade over the keeper client and pool queries"""

import logging
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..core.config import Config
from ..core.connection import SolanaManager, to_pubkey
from ..keeper.client import KeeperClient
from ..operations.pools import PoolQuery
from ..operations.positions import PositionQuery, summarize_position
from ..operations.session import PoolSession

logger = logging.getLogger(__name__)


def _position_payload(position):
    summary = summarize_position(position)
    return {
        "publicKey": summary["public_key"],
        "binIds": summary["bin_ids"],
        "lowerBinId": summary["lower_bin_id"],
        "upperBinId": summary["upper_bin_id"],
        "numBins": summary["num_bins"],
    }


def _error(message):
    return JSONResponse(status_code=500, content={"error": message})


def create_app(session, keeper=None):
    """
    Build the API application.

    Args:
        session: PoolSession used for on-chain queries; pools are
            initialized on first request
        keeper: KeeperClient for analytics endpoints (created if None)
    """
    keeper = keeper or KeeperClient()
    pools = PoolQuery(session)
    positions = PositionQuery(session)

    app = FastAPI(title="DLMM Manager API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.session = session
    app.state.keeper = keeper

    @app.get("/health")
    def health():
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/metrics")
    def protocol_metrics():
        try:
            return keeper.get_protocol_metrics()
        except Exception as e:
            logger.error("Error fetching protocol metrics: %s", e)
            return _error("Failed to fetch protocol metrics")

    @app.get("/api/pairs")
    def all_pairs(include_unknown: str = "true"):
        try:
            return keeper.get_all_pairs(include_unknown != "false")
        except Exception as e:
            logger.error("Error fetching pairs: %s", e)
            return _error("Failed to fetch pairs")

    @app.get("/api/pairs/{pair_address}")
    def pair(pair_address: str):
        try:
            return keeper.get_pair(pair_address)
        except Exception as e:
            logger.error("Error fetching pair %s: %s", pair_address, e)
            return _error("Failed to fetch pair data")

    @app.get("/api/pools/{pool_address}/active-bin")
    def active_bin(pool_address: str):
        try:
            session.ensure_initialized(pool_address)
            active = pools.get_active_bin(pool_address)
            return {"poolAddress": pool_address, "activeBin": {"binId": active["bin_id"]}}
        except Exception as e:
            logger.error("Error fetching active bin for pool %s: %s", pool_address, e)
            return _error("Failed to fetch active bin")

    @app.get("/api/users/{user_address}/pools/{pool_address}/positions")
    def user_positions(user_address: str, pool_address: str):
        try:
            user = to_pubkey(user_address)
            session.ensure_initialized(pool_address)
            found = positions.get_user_positions(pool_address, user)
            return {
                "poolAddress": pool_address,
                "userAddress": user_address,
                "positions": [_position_payload(p) for p in found],
            }
        except Exception as e:
            logger.error("Error fetching positions for user %s in pool %s: %s", user_address, pool_address, e)
            return _error("Failed to fetch user positions")

    return app


def build_app():
    """Application wired from environment configuration"""
    manager = SolanaManager(check_connection=False)
    return create_app(PoolSession(manager), KeeperClient())


def run(host="0.0.0.0", port=None):
    """Serve the API with uvicorn"""
    port = port or Config().port
    app = build_app()
    logger.info("Server running on port %s", port)
    uvicorn.run(app, host=host, port=port)
