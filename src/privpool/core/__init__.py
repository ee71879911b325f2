"""Core pool components: tree, proofs, ledgers and protocols."""

from privpool.core.merkle_tree import MerkleStore, MerkleTree, compute_root
from privpool.core.proof import ProofVerifier
from privpool.core.ledger import (
    CommitmentLedger,
    DepositRecord,
    NullifierLedger,
    NullifierRecord,
)
from privpool.core.token import FungibleToken, InMemoryToken
from privpool.core.environment import ExecutionEnvironment
from privpool.core.pool import PoolState, PoolStatus, PrivacyPool, WithdrawalReceipt

__all__ = [
    "MerkleStore",
    "MerkleTree",
    "compute_root",
    "ProofVerifier",
    "CommitmentLedger",
    "DepositRecord",
    "NullifierLedger",
    "NullifierRecord",
    "FungibleToken",
    "InMemoryToken",
    "ExecutionEnvironment",
    "PoolState",
    "PoolStatus",
    "PrivacyPool",
    "WithdrawalReceipt",
]
