"""Storage layer for persistent data."""

from privpool.storage.database import (
    DatabaseManager,
    PoolSnapshot,
    MerkleNode,
    Deposit,
    SpentNullifier,
    KnownRoot,
    TokenBalance,
    Base,
    get_db_manager,
    reset_db_manager,
)

__all__ = [
    "DatabaseManager",
    "PoolSnapshot",
    "MerkleNode",
    "Deposit",
    "SpentNullifier",
    "KnownRoot",
    "TokenBalance",
    "Base",
    "get_db_manager",
    "reset_db_manager",
]
