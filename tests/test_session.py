"""Pool session lifecycle"""

import pytest

from dlmm_manager.core.exceptions import PoolError, PoolNotInitializedError
from dlmm_manager.operations import PoolSession

from conftest import POOL, OTHER_POOL, RPC_URL


def test_ensure_initialized_is_idempotent(manager, loader, pool):
    session = PoolSession(manager, pool_loader=loader)

    assert session.ensure_initialized(POOL) is pool
    assert session.ensure_initialized(POOL) is pool
    assert loader.call_count == 1
    assert str(loader.call_args[0][0]) == POOL
    assert loader.call_args[0][1] == RPC_URL


def test_get_handle_requires_initialization(manager, loader):
    session = PoolSession(manager, pool_loader=loader)

    with pytest.raises(PoolNotInitializedError, match="not initialized"):
        session.get_handle(POOL)
    loader.assert_not_called()


def test_invalid_address_is_pool_error(manager, loader):
    session = PoolSession(manager, pool_loader=loader)

    with pytest.raises(PoolError, match="Failed to initialize DLMM pool"):
        session.ensure_initialized("not-a-pubkey")
    assert POOL not in session


def test_loader_failure_leaves_session_unchanged(manager, loader):
    loader.side_effect = RuntimeError("account not found")
    session = PoolSession(manager, pool_loader=loader)

    with pytest.raises(PoolError, match="account not found"):
        session.ensure_initialized(POOL)
    assert len(session) == 0


def test_sessions_are_independent(manager, loader):
    first = PoolSession(manager, pool_loader=loader)
    second = PoolSession(manager, pool_loader=loader)
    first.ensure_initialized(POOL)

    assert first.is_initialized(POOL)
    assert not second.is_initialized(POOL)


def test_drop_and_clear(session):
    assert session.addresses == [POOL, OTHER_POOL]
    assert session.drop(POOL) is True
    assert session.drop(POOL) is False
    assert POOL not in session

    session.clear()
    assert len(session) == 0


def test_context_manager_clears(manager, loader):
    with PoolSession(manager, pool_loader=loader) as session:
        session.ensure_initialized(POOL)
        assert POOL in session
    assert len(session) == 0
