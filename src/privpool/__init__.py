"""Main package initialization."""

__version__ = "0.1.0"
__author__ = "Privacy Pool Team"
__description__ = "Commitment/nullifier privacy pool over an append-only Merkle tree"

from .config import PoolConfig
from .core.merkle_tree import MerkleTree, MerkleStore
from .core.proof import ProofVerifier
from .core.pool import PrivacyPool
from .core.token import InMemoryToken
from .core.environment import ExecutionEnvironment

__all__ = [
    "PoolConfig",
    "MerkleTree",
    "MerkleStore",
    "ProofVerifier",
    "PrivacyPool",
    "InMemoryToken",
    "ExecutionEnvironment",
]
