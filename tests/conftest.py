"""Shared fixtures: an in-memory pool handle standing in for the DLMM SDK"""

from types import SimpleNamespace
from unittest.mock import MagicMock, Mock

import pytest
from solders.keypair import Keypair

from dlmm_manager.operations import PoolSession

POOL = "71HuFmuYAFEFUna2x2R4HJjrFNQHGuagW3gUMFToL9tk"
OTHER_POOL = "9d9mb8kooFfaD3SctgZtkxQypkshx6ezhbKio89ixyy2"
RPC_URL = "http://localhost:8899"


def make_position(bin_ids, public_key=None):
    """SDK-shaped position with the given bins"""
    return SimpleNamespace(
        public_key=public_key or Keypair().pubkey(),
        position_data=SimpleNamespace(
            position_bin_data=[SimpleNamespace(bin_id=b) for b in bin_ids],
        ),
    )


def make_pool_handle(active_bin_id=100, positions=None):
    pool = MagicMock(name="pool")
    pool.get_active_bin.return_value = SimpleNamespace(bin_id=active_bin_id, price="1.0")
    pool.get_positions_by_user.return_value = SimpleNamespace(user_positions=list(positions or []))
    pool.token_x = SimpleNamespace(public_key=Keypair().pubkey(), decimals=6)
    pool.token_y = SimpleNamespace(public_key=Keypair().pubkey(), decimals=6)
    pool.lb_pair = SimpleNamespace(active_id=active_bin_id, bin_step=10)
    return pool


@pytest.fixture
def user():
    return Keypair()


@pytest.fixture
def manager():
    return SimpleNamespace(rpc_url=RPC_URL, client=MagicMock(name="client"))


@pytest.fixture
def pool():
    return make_pool_handle()


@pytest.fixture
def other_pool():
    return make_pool_handle(active_bin_id=-50)


@pytest.fixture
def loader(pool, other_pool):
    handles = {POOL: pool, OTHER_POOL: other_pool}
    return Mock(side_effect=lambda pubkey, rpc_url: handles[str(pubkey)])


@pytest.fixture
def session(manager, loader):
    session = PoolSession(manager, pool_loader=loader)
    session.ensure_initialized(POOL)
    session.ensure_initialized(OTHER_POOL)
    return session


@pytest.fixture
def sender():
    sender = Mock(name="sender")
    sender.send_all.side_effect = lambda result, signers: ["sig"]
    return sender
