"""Merkle inclusion proof verification."""

from typing import List, Optional, Sequence

from privpool.utils.hash import HASH_SIZE, ZERO_HASH, merkle_hash


class ProofVerifier:
    """
    Folds a leaf hash through a sibling path and checks the result.

    The accumulator starts at the leaf hash and is combined with each
    proof element in order. Every intermediate hash must be non-zero.

    Without a leaf index the accumulator always sits on the left. With a
    leaf index the sibling goes on the left wherever the corresponding
    position bit is 1, matching how MerkleTree.update_parent builds nodes.

    In strict mode the final accumulator must also equal the claimed root.
    In lenient mode the claimed root is not compared, so only the non-zero
    chain is checked.
    """

    def __init__(self, tree_height: int, strict: bool = True):
        if tree_height < 1:
            raise ValueError("Tree height must be positive")
        self.height = tree_height
        self.strict = strict

    def is_valid_length(self, proof: Sequence[bytes]) -> bool:
        """Proofs must carry between 1 and height elements."""
        return 1 <= len(proof) <= self.height

    def fold(self, leaf_hash: bytes, proof: Sequence[bytes], leaf_index: Optional[int] = None) -> List[bytes]:
        """
        Return every intermediate hash of the fold, leaf level first.

        Raises:
            ValueError: If a proof element is not 32 bytes
        """
        accumulator = leaf_hash
        position = leaf_index
        chain = []

        for element in proof:
            if not isinstance(element, bytes) or len(element) != HASH_SIZE:
                raise ValueError("Proof elements must be 32 bytes")

            if position is not None and position % 2 == 1:
                accumulator = merkle_hash(element, accumulator)
            else:
                accumulator = merkle_hash(accumulator, element)

            chain.append(accumulator)
            if position is not None:
                position >>= 1

        return chain

    def verify(
        self,
        leaf_hash: bytes,
        proof: Sequence[bytes],
        claimed_root: bytes,
        leaf_index: Optional[int] = None,
    ) -> bool:
        """
        Verify that leaf_hash folds through proof to a valid root.

        Args:
            leaf_hash: 32-byte starting value
            proof: Ordered sibling hashes, 1..height elements
            claimed_root: Root the caller claims the leaf belongs to
            leaf_index: Optional leaf position selecting fold direction

        Returns:
            bool: True if the proof is accepted
        """
        if not self.is_valid_length(proof):
            return False
        if not isinstance(leaf_hash, bytes) or len(leaf_hash) != HASH_SIZE:
            return False
        if leaf_index is not None and (leaf_index < 0 or leaf_index >= 2**self.height):
            return False

        try:
            chain = self.fold(leaf_hash, proof, leaf_index)
        except ValueError:
            return False

        valid = True
        for node in chain:
            valid = valid and node != ZERO_HASH

        if self.strict:
            valid = valid and chain[-1] == claimed_root

        return valid
