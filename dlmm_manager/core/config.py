"""Configuration loading and management"""

import os
import importlib

from dotenv import load_dotenv

from .exceptions import ConfigError


class Config:
    """Environment-backed settings shared by the CLI, server and managers"""

    DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
    DEFAULT_KEYPAIR_PATH = "./id.json"
    DEFAULT_API_URL = "https://dlmm-api.meteora.ag"
    DEFAULT_POOL_LOADER = "dlmm:DLMM_CLIENT.create"
    DEFAULT_PORT = 3000

    # TRUMP/USDC pool
    DEFAULT_POOL_ADDRESS = "71HuFmuYAFEFUna2x2R4HJjrFNQHGuagW3gUMFToL9tk"

    def __init__(self, load_env=True):
        """
        Args:
            load_env: Load .env and wallet.env into the environment first
        """
        if load_env:
            load_dotenv()
            load_dotenv("wallet.env")

    @property
    def rpc_url(self):
        """Solana RPC endpoint"""
        return os.getenv("SOLANA_RPC_URL") or self.DEFAULT_RPC_URL

    @property
    def keypair_path(self):
        """Path to the signer key file (JSON byte array)"""
        return os.getenv("KEYPAIR_PATH") or self.DEFAULT_KEYPAIR_PATH

    @property
    def api_url(self):
        """DLMM analytics API origin"""
        return (os.getenv("DLMM_API_URL") or self.DEFAULT_API_URL).rstrip("/")

    @property
    def pool_loader_path(self):
        """Import path of the SDK pool factory, as module:attribute"""
        return os.getenv("DLMM_POOL_LOADER") or self.DEFAULT_POOL_LOADER

    @property
    def default_pool_address(self):
        return os.getenv("DEFAULT_POOL_ADDRESS") or self.DEFAULT_POOL_ADDRESS

    @property
    def port(self):
        value = os.getenv("PORT")
        if not value:
            return self.DEFAULT_PORT
        try:
            return int(value)
        except ValueError:
            raise ConfigError(f"Invalid PORT: {value}")


def load_pool_loader(path):
    """
    Resolve an SDK pool factory from an import path.

    Args:
        path: "package.module:attr" or "package.module:Class.method"

    Returns:
        Callable taking (pool_pubkey, rpc_url) and returning a pool handle
    """
    module_name, _, attr_path = path.partition(":")
    if not module_name or not attr_path:
        raise ConfigError(f"Invalid pool loader path: {path}. Expected: module:attribute")

    try:
        target = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Could not import pool loader module '{module_name}': {e}") from e

    for name in attr_path.split("."):
        try:
            target = getattr(target, name)
        except AttributeError:
            raise ConfigError(f"Pool loader '{attr_path}' not found in {module_name}")

    if not callable(target):
        raise ConfigError(f"Pool loader {path} is not callable")

    return target
