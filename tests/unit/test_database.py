"""Tests for database storage layer."""

import os
import tempfile

import pytest
from sqlalchemy import BigInteger

from privpool.core.environment import ExecutionEnvironment
from privpool.core.pool import PrivacyPool
from privpool.core.token import InMemoryToken
from privpool.storage.database import (
    DatabaseManager,
    Deposit,
    MerkleNode,
    PoolSnapshot,
    SpentNullifier,
    get_db_manager,
    reset_db_manager,
)
from privpool.exceptions import NullifierExistsError, StorageError


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    manager = DatabaseManager(f"sqlite:///{path}")
    manager.create_tables()
    yield manager
    manager.engine.dispose()
    os.unlink(path)


@pytest.fixture
def populated_pool(pool):
    """Pool with three deposits and one withdrawal."""
    for _ in range(3):
        pool.deposit(os.urandom(32), 100, "alice")
    nullifier = os.urandom(32)
    leaf_index = pool.deposit(nullifier, 200, "bob")
    pool.environment.advance_block()
    pool.withdraw(
        nullifier,
        pool.get_current_root(),
        pool.get_merkle_path(leaf_index),
        "dave",
        150,
        leaf_index=leaf_index,
    )
    return pool


class TestDatabaseManager:
    """Test database manager initialization."""

    def test_database_creation(self, temp_db):
        assert temp_db.engine is not None
        assert temp_db.SessionLocal is not None

    def test_empty_database_has_no_pool(self, temp_db, make_config):
        session = temp_db.get_session()
        assert temp_db.has_snapshot(session) is False
        assert temp_db.load_pool(session, make_config()) is None
        session.close()

    def test_singleton(self, tmp_path):
        reset_db_manager()
        url = f"sqlite:///{tmp_path / 'single.db'}"
        assert get_db_manager(url) is get_db_manager(url)
        reset_db_manager()


class TestPoolSnapshots:
    """Test saving and restoring pool state."""

    def test_save_writes_rows(self, temp_db, populated_pool):
        session = temp_db.get_session()
        temp_db.save_pool(session, populated_pool)

        assert session.query(PoolSnapshot).count() == 1
        assert session.query(Deposit).count() == 4
        assert session.query(SpentNullifier).count() == 1
        assert session.query(MerkleNode).count() == len(populated_pool.tree.store)
        session.close()

    def test_round_trip(self, temp_db, populated_pool, make_config, token):
        session = temp_db.get_session()
        temp_db.save_pool(session, populated_pool)
        session.close()

        session = temp_db.get_session()
        restored = temp_db.load_pool(session, make_config(), token=token)
        session.close()

        assert restored.get_current_root() == populated_pool.get_current_root()
        assert restored.get_contract_status() == populated_pool.get_contract_status()
        assert restored.tree.known_roots == populated_pool.tree.known_roots
        assert restored.environment.block_height == populated_pool.environment.block_height
        assert len(restored.nullifiers) == 1
        for commitment, record in populated_pool.commitments.items():
            assert restored.get_deposit(commitment) == record

    def test_restored_pool_keeps_protocol_state(self, temp_db, populated_pool, make_config, token):
        session = temp_db.get_session()
        temp_db.save_pool(session, populated_pool)
        restored = temp_db.load_pool(session, make_config(), token=token)
        session.close()

        spent = next(key for key, _ in populated_pool.nullifiers.items())
        with pytest.raises(NullifierExistsError):
            restored.withdraw(spent, restored.get_current_root(), [os.urandom(32)], "dave", 1)
        assert restored.deposit(os.urandom(32), 10, "alice") == 4

    def test_save_replaces_previous_snapshot(self, temp_db, pool):
        session = temp_db.get_session()
        temp_db.save_pool(session, pool)
        pool.deposit(os.urandom(32), 10, "alice")
        temp_db.save_pool(session, pool)

        assert session.query(PoolSnapshot).count() == 1
        assert session.query(PoolSnapshot).first().next_leaf_index == 1
        session.close()

    def test_paused_flag_persists(self, temp_db, pool, make_config):
        pool.toggle_pause("owner")
        session = temp_db.get_session()
        temp_db.save_pool(session, pool)
        restored = temp_db.load_pool(session, make_config())
        session.close()
        assert restored.paused is True

    def test_height_mismatch(self, temp_db, pool, make_config):
        session = temp_db.get_session()
        temp_db.save_pool(session, pool)
        with pytest.raises(StorageError):
            temp_db.load_pool(session, make_config(tree_height=5))
        session.close()

    def test_tampered_total_detected(self, temp_db, populated_pool, make_config):
        session = temp_db.get_session()
        temp_db.save_pool(session, populated_pool)
        session.query(PoolSnapshot).update({"total_deposited": 1})
        session.commit()

        with pytest.raises(StorageError):
            temp_db.load_pool(session, make_config())
        session.close()


class TestTokenBalances:
    """Test in-memory token persistence."""

    def test_round_trip(self, temp_db):
        token = InMemoryToken(balances={"alice": 5, "pool": 7})
        session = temp_db.get_session()
        temp_db.save_token_balances(session, token)
        assert temp_db.load_token_balances(session) == {"alice": 5, "pool": 7}
        session.close()

    def test_saved_with_pool_snapshot(self, temp_db, populated_pool, token):
        session = temp_db.get_session()
        temp_db.save_pool(session, populated_pool, token=token)
        assert temp_db.load_token_balances(session) == token.snapshot_balances()

        token.mint("carol", 3)
        temp_db.save_pool(session, populated_pool, token=token)
        assert temp_db.load_token_balances(session)["carol"] == 3
        session.close()


class TestSchema:
    """Column types for unbounded tree positions."""

    @pytest.mark.parametrize(
        "column",
        [
            MerkleNode.__table__.c.node_index,
            Deposit.__table__.c.leaf_index,
            PoolSnapshot.__table__.c.next_leaf_index,
        ],
    )
    def test_positions_are_big_integers(self, column):
        assert isinstance(column.type, BigInteger)

    def test_large_node_index_round_trip(self, temp_db):
        session = temp_db.get_session()
        session.add(MerkleNode(level=0, node_index=2**40, node_hash=bytes(32)))
        session.commit()
        stored = session.query(MerkleNode).one()
        assert stored.node_index == 2**40
        session.close()
