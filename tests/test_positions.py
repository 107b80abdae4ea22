"""Position listing and normalization"""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from dlmm_manager.core.exceptions import PositionQueryError, PoolNotInitializedError
from dlmm_manager.operations import PositionQuery, PoolSession, normalize_positions, summarize_position

from conftest import POOL, make_position


@pytest.mark.parametrize("shape", [
    lambda items: items,
    lambda items: tuple(items),
    lambda items: SimpleNamespace(user_positions=items),
    lambda items: {"userPositions": items},
    lambda items: {"user_positions": items},
])
def test_normalize_listing_shapes(shape):
    items = [make_position([1]), make_position([2])]
    assert normalize_positions(shape(items)) == items


def test_normalize_none_is_empty():
    assert normalize_positions(None) == []


def test_normalize_unknown_shape():
    with pytest.raises(TypeError):
        normalize_positions(42)


def test_summarize_position():
    position = make_position([12, 10, 11])
    summary = summarize_position(position)

    assert summary["public_key"] == str(position.public_key)
    assert summary["bin_ids"] == [12, 10, 11]
    assert (summary["lower_bin_id"], summary["upper_bin_id"], summary["num_bins"]) == (10, 12, 3)


def test_user_with_no_positions(session, pool, user):
    pool.get_positions_by_user.return_value = SimpleNamespace(user_positions=[])
    assert PositionQuery(session).get_user_positions(POOL, user.pubkey()) == []


def test_queries_by_owner(session, pool, user):
    positions = [make_position([1, 2])]
    pool.get_positions_by_user.return_value = SimpleNamespace(user_positions=positions)

    assert PositionQuery(session).get_user_positions(POOL, str(user.pubkey())) == positions
    pool.get_positions_by_user.assert_called_once_with(user.pubkey())


def test_falls_back_to_pair_listing(manager, user):
    positions = [make_position([5])]
    handle = SimpleNamespace(
        get_positions_by_user_and_lb_pair=Mock(return_value=SimpleNamespace(user_positions=positions))
    )
    session = PoolSession(manager, pool_loader=lambda pubkey, rpc_url: handle)
    session.ensure_initialized(POOL)

    assert PositionQuery(session).get_user_positions(POOL, user) == positions


def test_upstream_fault_is_not_an_empty_list(session, pool, user):
    pool.get_positions_by_user.side_effect = RuntimeError("rpc timeout")

    with pytest.raises(PositionQueryError, match="Failed to get user positions: rpc timeout"):
        PositionQuery(session).get_user_positions(POOL, user.pubkey())


def test_uninitialized_pool(manager, loader, user):
    session = PoolSession(manager, pool_loader=loader)
    with pytest.raises(PoolNotInitializedError):
        PositionQuery(session).get_user_positions(POOL, user.pubkey())


def test_find_position(session, pool, user):
    wanted = make_position([3])
    pool.get_positions_by_user.return_value = [make_position([1]), wanted]
    query = PositionQuery(session)

    assert query.find_position(POOL, user.pubkey(), str(wanted.public_key)) is wanted
    assert query.find_position(POOL, user.pubkey(), wanted.public_key) is wanted
    assert query.find_position(POOL, user.pubkey(), make_position([9])) is None
