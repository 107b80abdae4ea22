"""Environment configuration and pool loader resolution"""

import os.path

import pytest

from dlmm_manager.core.config import Config, load_pool_loader
from dlmm_manager.core.exceptions import ConfigError


@pytest.fixture
def config(monkeypatch):
    for name in ("SOLANA_RPC_URL", "KEYPAIR_PATH", "DLMM_API_URL", "DLMM_POOL_LOADER", "PORT"):
        monkeypatch.delenv(name, raising=False)
    return Config(load_env=False)


def test_defaults(config):
    assert config.rpc_url == "https://api.mainnet-beta.solana.com"
    assert config.keypair_path == "./id.json"
    assert config.port == 3000
    assert config.pool_loader_path == "dlmm:DLMM_CLIENT.create"


def test_environment_overrides(config, monkeypatch):
    monkeypatch.setenv("SOLANA_RPC_URL", "http://localhost:8899")
    monkeypatch.setenv("DLMM_API_URL", "http://localhost:9000/")
    monkeypatch.setenv("PORT", "8080")
    assert config.rpc_url == "http://localhost:8899"
    assert config.api_url == "http://localhost:9000"
    assert config.port == 8080


def test_invalid_port(config, monkeypatch):
    monkeypatch.setenv("PORT", "http")
    with pytest.raises(ConfigError, match="Invalid PORT"):
        config.port


def test_load_pool_loader_resolves_dotted_attribute():
    assert load_pool_loader("os:path.join") is os.path.join


@pytest.mark.parametrize("path", [
    "no_colon_here",
    "module_that_does_not_exist_xyz:create",
    "os.path:missing_function",
    "os:sep",
])
def test_load_pool_loader_errors(path):
    with pytest.raises(ConfigError):
        load_pool_loader(path)
