"""Pytest configuration and fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from privpool.config import PoolConfig
from privpool.core.environment import ExecutionEnvironment
from privpool.core.pool import PrivacyPool
from privpool.core.token import InMemoryToken

OWNER = "owner"
POOL_ACCOUNT = "pool"


@pytest.fixture
def make_config():
    """Factory for small test configurations."""

    def _make(**overrides) -> PoolConfig:
        settings = {
            "tree_height": 4,
            "max_amount": 1_000_000,
            "owner": OWNER,
            "pool_account": POOL_ACCOUNT,
            "database_url": "sqlite://",
        }
        settings.update(overrides)
        return PoolConfig(**settings)

    return _make


@pytest.fixture
def token():
    """Token with funded users."""
    return InMemoryToken(balances={"alice": 10_000_000, "bob": 10_000_000})


@pytest.fixture
def make_pool(make_config, token):
    """Factory for pools sharing the funded token."""

    def _make(**overrides) -> PrivacyPool:
        config = make_config(**overrides)
        environment = ExecutionEnvironment(config.pool_account, block_height=100)
        return PrivacyPool(config=config, environment=environment, token=token)

    return _make


@pytest.fixture
def pool(make_pool):
    """Strict pool of height 4."""
    return make_pool()


@pytest.fixture
def commitment():
    """Random 32-byte commitment."""
    return os.urandom(32)
