"""Incremental append-only Merkle tree over sparse node storage."""

import logging
from collections import deque
from typing import Deque, Dict, Iterable, Iterator, List, Optional, Tuple

from privpool.utils.hash import ZERO_HASH, HASH_SIZE, merkle_hash
from privpool.exceptions import InvalidLeafIndexError, TreeFullError

logger = logging.getLogger(__name__)

NodeKey = Tuple[int, int]


class MerkleStore:
    """
    Node hashes addressed by (level, index).

    Level 0 holds the leaves. Nodes that were never written read as the
    zero sentinel, so memory stays proportional to the filled nodes.
    There is no delete: nodes are only ever written or overwritten.
    """

    def __init__(self, nodes: Optional[Dict[NodeKey, bytes]] = None):
        self._nodes: Dict[NodeKey, bytes] = dict(nodes or {})

    def get(self, level: int, index: int) -> bytes:
        """Return the node hash, or the zero sentinel if unset."""
        return self._nodes.get((level, index), ZERO_HASH)

    def set(self, level: int, index: int, value: bytes) -> None:
        """Write a node hash, replacing any previous value."""
        if not isinstance(value, bytes) or len(value) != HASH_SIZE:
            raise ValueError("Node hash must be 32 bytes")
        self._nodes[(level, index)] = value

    def items(self) -> Iterator[Tuple[NodeKey, bytes]]:
        """Iterate over ((level, index), hash) for every stored node."""
        return iter(sorted(self._nodes.items()))

    def __contains__(self, key: NodeKey) -> bool:
        return key in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)


class MerkleTree:
    """
    Fixed-height binary Merkle tree with strict append order.

    Every insertion rewrites the whole leaf-to-root path, one node per
    level, so the root at (height, 0) always reflects every leaf.
    """

    DEFAULT_HEIGHT = 20
    DEFAULT_ROOT_HISTORY = 30

    def __init__(
        self,
        tree_height: int = DEFAULT_HEIGHT,
        store: Optional[MerkleStore] = None,
        next_leaf_index: int = 0,
        root_history_size: int = DEFAULT_ROOT_HISTORY,
        known_roots: Optional[Iterable[bytes]] = None,
    ):
        """
        Initialize a tree, optionally over previously persisted nodes.

        Args:
            tree_height: Height of the tree (1..64)
            store: Node storage; a fresh empty store when omitted
            next_leaf_index: Index the next leaf will occupy
            root_history_size: Number of recent roots remembered
            known_roots: Recent roots, oldest first, when restoring

        Raises:
            ValueError: If height or next_leaf_index is out of range
        """
        if tree_height < 1 or tree_height > 64:
            raise ValueError("Tree height must be between 1 and 64")

        self.height = tree_height
        self.max_leaves = 2**tree_height

        if next_leaf_index < 0 or next_leaf_index > self.max_leaves:
            raise ValueError(f"next_leaf_index out of range: {next_leaf_index}")

        self.store = store if store is not None else MerkleStore()
        self._next_leaf_index = next_leaf_index
        self._roots: Deque[bytes] = deque(known_roots or (), maxlen=root_history_size)

    @property
    def next_leaf_index(self) -> int:
        """Slot the next inserted leaf will occupy."""
        return self._next_leaf_index

    @property
    def root(self) -> bytes:
        """Get the current Merkle root hash."""
        return self.store.get(self.height, 0)

    @property
    def known_roots(self) -> List[bytes]:
        """Recent roots, oldest first."""
        return list(self._roots)

    @property
    def is_full(self) -> bool:
        return self._next_leaf_index >= self.max_leaves

    def insert_leaf(self, index: int, commitment: bytes) -> None:
        """
        Write a commitment as the level-0 node at index.

        Args:
            index: Must equal next_leaf_index
            commitment: 32-byte leaf value

        Raises:
            TreeFullError: If every slot is already taken
            InvalidLeafIndexError: If index breaks append order
        """
        if index >= self.max_leaves or self.is_full:
            raise TreeFullError(f"Tree is full (max {self.max_leaves} leaves)")
        if index != self._next_leaf_index:
            raise InvalidLeafIndexError(
                f"Leaf index {index} out of order, expected {self._next_leaf_index}"
            )
        self.store.set(0, index, commitment)

    def update_parent(self, level: int, index: int) -> None:
        """
        Recompute the parent of node (level, index) from it and its sibling.

        A right child (odd index) has its sibling on the left.
        """
        if level < 0 or level >= self.height:
            raise ValueError(f"Level must be in [0, {self.height}), got {level}")

        current = self.store.get(level, index)
        sibling = self.store.get(level, index ^ 1)

        if index % 2 == 1:
            parent = merkle_hash(sibling, current)
        else:
            parent = merkle_hash(current, sibling)

        self.store.set(level + 1, index >> 1, parent)

    def insert(self, commitment: bytes) -> int:
        """
        Append a commitment and refresh the root.

        Args:
            commitment: 32-byte leaf value

        Returns:
            int: Leaf index assigned to the commitment

        Raises:
            TreeFullError: If the tree is at capacity
        """
        leaf_index = self._next_leaf_index
        self.insert_leaf(leaf_index, commitment)

        position = leaf_index
        for level in range(self.height):
            self.update_parent(level, position)
            position >>= 1

        self._next_leaf_index += 1
        self._roots.append(self.root)

        logger.debug("Inserted leaf %d, root %s", leaf_index, self.root.hex()[:16])
        return leaf_index

    def is_known_root(self, root: bytes) -> bool:
        """True if root is the current root or one of the recent ones."""
        if not root or root == ZERO_HASH:
            return False
        return root == self.root or root in self._roots

    def get_path(self, leaf_index: int) -> List[bytes]:
        """
        Return the sibling hashes from leaf to root.

        Args:
            leaf_index: Index of an inserted leaf

        Returns:
            List[bytes]: One sibling hash per level, leaf level first

        Raises:
            InvalidLeafIndexError: If leaf index is not an inserted leaf
        """
        if leaf_index < 0 or leaf_index >= self._next_leaf_index:
            raise InvalidLeafIndexError(f"Invalid leaf index: {leaf_index}")

        path = []
        position = leaf_index

        for level in range(self.height):
            path.append(self.store.get(level, position ^ 1))
            position >>= 1

        return path

    def get_state(self) -> dict:
        """
        Get the current state of the tree for serialization.

        Returns:
            dict: Height, capacity, next leaf index and root
        """
        return {
            "height": self.height,
            "max_leaves": self.max_leaves,
            "next_leaf_index": self._next_leaf_index,
            "root": self.root.hex(),
        }

    def __len__(self) -> int:
        """Return the number of leaves in the tree."""
        return self._next_leaf_index

    def __repr__(self) -> str:
        return (
            f"MerkleTree(height={self.height}, "
            f"leaves={self._next_leaf_index}/{self.max_leaves}, "
            f"root={self.root.hex()[:16]}...)"
        )


def compute_root(leaves: List[bytes], tree_height: int) -> bytes:
    """
    Recompute a root from scratch over an ordered list of leaves.

    Each level's odd tail is paired with the zero sentinel. Levels above
    an empty level stay empty, so an empty tree has the zero sentinel as
    its root.

    Args:
        leaves: Leaf hashes in insertion order
        tree_height: Height of the tree

    Returns:
        bytes: Root hash
    """
    if len(leaves) > 2**tree_height:
        raise TreeFullError(f"{len(leaves)} leaves exceed capacity of height {tree_height}")

    level_nodes = list(leaves)
    for _ in range(tree_height):
        if not level_nodes:
            return ZERO_HASH
        if len(level_nodes) % 2 == 1:
            level_nodes.append(ZERO_HASH)
        level_nodes = [
            merkle_hash(level_nodes[i], level_nodes[i + 1])
            for i in range(0, len(level_nodes), 2)
        ]

    return level_nodes[0] if level_nodes else ZERO_HASH
