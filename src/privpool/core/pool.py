"""Privacy pool: deposit and withdrawal protocols over a shared Merkle tree.

Depositors lock tokens behind a commitment that becomes a leaf of an
append-only Merkle tree. Withdrawers present a nullifier together with a
Merkle proof; the nullifier is burned so the same claim cannot be used twice.

Transaction Flow:

    DEPOSIT:
        1. Reject when paused, on a malformed commitment, a bad amount,
           a full tree or a commitment that is already in the ledger
        2. Move `amount` from the depositor to the pool account
        3. Append the commitment to the tree and refresh every level
        4. Record the deposit and add the amount to total-deposited
        5. Return the assigned leaf index

    WITHDRAWAL:
        1. Reject when paused, on a malformed nullifier, a bad proof length
           or a bad amount
        2. Reject a nullifier that is already spent (cheap check first)
        3. Fold the nullifier through the proof and check the claimed root
        4. Record the nullifier, then move `amount` to the recipient

Key Invariants:
    - Leaf indices are assigned sequentially and never reused
    - next-leaf-index never exceeds 2^height
    - A spent nullifier can never be spent again
    - total-deposited equals the sum of recorded deposit amounts

The nullifier is recorded before the outbound transfer. If that transfer
then fails, the nullifier stays spent and no funds move; the caller gets
TransferFailedError and the event is logged at WARNING level.
"""

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from privpool.config import PoolConfig
from privpool.core.environment import ExecutionEnvironment
from privpool.core.ledger import (
    CommitmentLedger,
    DepositRecord,
    NullifierLedger,
    NullifierRecord,
)
from privpool.core.merkle_tree import MerkleTree
from privpool.core.proof import ProofVerifier
from privpool.core.token import FungibleToken
from privpool.utils.encoding import bytes_to_hex
from privpool.utils.hash import HASH_SIZE, normalize_hash32
from privpool.exceptions import (
    CommitmentExistsError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidCommitmentError,
    InvalidInputError,
    InvalidNullifierError,
    InvalidProofError,
    InvalidProofLengthError,
    InvalidTokenError,
    NotAuthorizedError,
    NullifierExistsError,
    PoolPausedError,
    TransferFailedError,
    TreeFullError,
    UnknownRootError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolStatus:
    """Public counters of the pool."""

    paused: bool
    total_deposited: int
    next_leaf_index: int

    def to_dict(self) -> dict:
        return {
            "paused": self.paused,
            "total_deposited": self.total_deposited,
            "next_leaf_index": self.next_leaf_index,
        }


@dataclass(frozen=True)
class WithdrawalReceipt:
    """Receipt for a successful withdrawal."""

    nullifier: bytes
    recipient: str
    amount: int
    block_height: int

    def to_dict(self) -> dict:
        return {
            "nullifier": bytes_to_hex(self.nullifier),
            "recipient": self.recipient,
            "amount": self.amount,
            "block_height": self.block_height,
        }


@dataclass(frozen=True)
class PoolState:
    """Point-in-time copy of everything a pool persists."""

    tree_height: int
    next_leaf_index: int
    root: bytes
    total_deposited: int
    paused: bool
    block_height: int
    nodes: List[Tuple[Tuple[int, int], bytes]]
    known_roots: List[bytes]
    deposits: List[Tuple[bytes, DepositRecord]]
    nullifiers: List[Tuple[bytes, NullifierRecord]]


class PrivacyPool:
    """
    Orchestrates deposits and withdrawals atop the tree and both ledgers.

    Every public operation runs under a single re-entrant lock, so tree,
    node store and ledgers change together as one unit and deposits and
    withdrawals are linearizable when the pool is shared between threads.
    """

    def __init__(
        self,
        config: Optional[PoolConfig] = None,
        environment: Optional[ExecutionEnvironment] = None,
        token: Optional[FungibleToken] = None,
        tree: Optional[MerkleTree] = None,
        commitments: Optional[CommitmentLedger] = None,
        nullifiers: Optional[NullifierLedger] = None,
        paused: bool = False,
    ):
        """
        Initialize a pool, optionally over restored state.

        Args:
            config: Deployment constants; loaded from the environment if omitted
            environment: Block height and pool account provider
            token: Token the pool accepts; any conforming token when omitted
            tree: Restored Merkle tree
            commitments: Restored deposit ledger
            nullifiers: Restored nullifier ledger
            paused: Restored pause flag
        """
        self.config = config or PoolConfig()
        self.environment = environment or ExecutionEnvironment(self.config.pool_account)
        self.token = token

        self.tree = tree or MerkleTree(
            tree_height=self.config.tree_height,
            root_history_size=self.config.root_history_size,
        )
        if self.tree.height != self.config.tree_height:
            raise ValueError(
                f"Tree height {self.tree.height} does not match configured {self.config.tree_height}"
            )

        self.commitments = commitments or CommitmentLedger()
        self.nullifiers = nullifiers or NullifierLedger()
        self.verifier = ProofVerifier(self.config.tree_height, strict=self.config.strict_root_check)

        self.paused = paused
        self.total_deposited = self.commitments.total_amount()

        self._lock = threading.RLock()

    # ========== VALIDATION ==========

    def _require_active(self) -> None:
        if self.paused:
            raise PoolPausedError("Pool is paused")

    def require_owner(self, caller: str) -> None:
        """
        Check that caller is the pool owner.

        Raises:
            NotAuthorizedError: If caller is not the configured owner
        """
        if caller != self.config.owner:
            raise NotAuthorizedError(f"{caller!r} is not the pool owner")

    def _validate_amount(self, amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmountError(f"Amount must be an integer, got {type(amount).__name__}")
        if amount <= 0:
            raise InvalidAmountError("Amount must be positive")
        if amount > self.config.max_amount:
            raise InvalidAmountError(f"Amount exceeds maximum of {self.config.max_amount}")

    @staticmethod
    def _validate_account(account: str, label: str) -> None:
        if not isinstance(account, str) or not account:
            raise InvalidInputError(f"{label} must be a non-empty identity")

    def _resolve_token(self, token: Optional[FungibleToken]) -> FungibleToken:
        token = token if token is not None else self.token
        if token is None or not isinstance(token, FungibleToken):
            raise InvalidTokenError("A fungible token handle is required")
        if self.token is not None and token is not self.token:
            raise InvalidTokenError(f"Pool does not accept token {token.get_symbol()}")
        return token

    # ========== PROTOCOLS ==========

    def deposit(
        self,
        commitment: bytes,
        amount: int,
        depositor: str,
        token: Optional[FungibleToken] = None,
    ) -> int:
        """
        Lock `amount` tokens behind a commitment.

        Args:
            commitment: Non-zero value of at most 32 bytes
            amount: Deposit amount, 1..max_amount
            depositor: Identity the tokens are taken from
            token: Token handle; defaults to the pool's token

        Returns:
            int: Leaf index assigned to the commitment

        Raises:
            PoolPausedError: If the pool is paused
            InvalidCommitmentError: If the commitment is malformed
            InvalidAmountError: If the amount is zero or too large
            TreeFullError: If every leaf slot is taken
            CommitmentExistsError: If the commitment was already deposited
            TransferFailedError: If the token refuses the transfer
        """
        with self._lock:
            self._require_active()

            try:
                commitment = normalize_hash32(commitment)
            except ValueError as e:
                raise InvalidCommitmentError(f"Invalid commitment: {e}")

            self._validate_amount(amount)

            if self.tree.is_full:
                raise TreeFullError(f"Tree is full (max {self.tree.max_leaves} commitments)")

            self._validate_account(depositor, "Depositor")
            token = self._resolve_token(token)

            if self.commitments.contains(commitment):
                raise CommitmentExistsError(f"Commitment already deposited: {bytes_to_hex(commitment)}")

            if not token.transfer(amount, depositor, self.environment.pool_account):
                raise TransferFailedError(f"Transfer of {amount} from {depositor} to pool failed")

            leaf_index = self.tree.insert(commitment)
            self.commitments.insert(
                commitment,
                DepositRecord(
                    leaf_index=leaf_index,
                    block_height=self.environment.block_height,
                    depositor=depositor,
                    amount=amount,
                ),
            )
            self.total_deposited += amount

            logger.info("Deposit of %d accepted at leaf %d", amount, leaf_index)
            return leaf_index

    def withdraw(
        self,
        nullifier: bytes,
        claimed_root: bytes,
        proof: Sequence[bytes],
        recipient: str,
        amount: int,
        token: Optional[FungibleToken] = None,
        leaf_index: Optional[int] = None,
    ) -> WithdrawalReceipt:
        """
        Burn a nullifier and pay `amount` to recipient.

        The nullifier itself is the leaf hash folded through the proof.

        Args:
            nullifier: Non-zero value of at most 32 bytes
            claimed_root: Root the proof is claimed against
            proof: Sibling hashes, 1..height elements
            recipient: Identity receiving the tokens
            amount: Withdrawal amount, 1..max_amount
            token: Token handle; defaults to the pool's token
            leaf_index: Optional leaf position selecting fold direction

        Returns:
            WithdrawalReceipt: Details of the payout

        Raises:
            PoolPausedError: If the pool is paused
            InvalidNullifierError: If the nullifier is malformed
            InvalidProofLengthError: If the proof is empty or too long
            InvalidAmountError: If the amount is zero or too large
            NullifierExistsError: If the nullifier was already spent
            UnknownRootError: If strict checking is on and the root is not recent
            InvalidProofError: If the proof does not verify
            InsufficientBalanceError: If the pool cannot cover the amount
            TransferFailedError: If the token refuses the payout
        """
        with self._lock:
            self._require_active()

            try:
                nullifier = normalize_hash32(nullifier)
            except ValueError as e:
                raise InvalidNullifierError(f"Invalid nullifier: {e}")

            proof = list(proof)
            if not self.verifier.is_valid_length(proof):
                raise InvalidProofLengthError(
                    f"Proof must have between 1 and {self.tree.height} elements, got {len(proof)}"
                )
            if any(not isinstance(element, bytes) or len(element) != HASH_SIZE for element in proof):
                raise InvalidInputError("Proof elements must be 32 bytes")
            if not isinstance(claimed_root, bytes) or len(claimed_root) != HASH_SIZE:
                raise InvalidInputError("Claimed root must be 32 bytes")

            self._validate_amount(amount)
            self._validate_account(recipient, "Recipient")
            token = self._resolve_token(token)

            if self.nullifiers.is_spent(nullifier):
                raise NullifierExistsError(f"Nullifier already spent: {bytes_to_hex(nullifier)}")

            if self.config.strict_root_check and not self.tree.is_known_root(claimed_root):
                raise UnknownRootError(f"Unknown Merkle root: {bytes_to_hex(claimed_root)}")

            if not self.verifier.verify(nullifier, proof, claimed_root, leaf_index):
                raise InvalidProofError("Proof verification failed")

            if token.get_balance(self.environment.pool_account) < amount:
                raise InsufficientBalanceError(f"Pool balance is below {amount}")

            block_height = self.environment.block_height
            self.nullifiers.insert(
                nullifier, NullifierRecord(amount=amount, withdrawn_at=block_height)
            )

            if not token.transfer(amount, self.environment.pool_account, recipient):
                logger.warning(
                    "Payout failed after nullifier %s was recorded; nullifier stays spent",
                    bytes_to_hex(nullifier)[:18],
                )
                raise TransferFailedError(f"Transfer of {amount} to {recipient} failed")

            logger.info("Withdrawal of %d paid at block %d", amount, block_height)
            return WithdrawalReceipt(
                nullifier=nullifier,
                recipient=recipient,
                amount=amount,
                block_height=block_height,
            )

    def admin_recovery(
        self,
        caller: str,
        recipient: str,
        amount: int,
        token: Optional[FungibleToken] = None,
    ) -> int:
        """
        Move funds out of the pool without touching tree or ledgers.

        Raises:
            NotAuthorizedError: If caller is not the owner
            InvalidAmountError: If amount is not positive
            TransferFailedError: If the token refuses the transfer
        """
        with self._lock:
            self.require_owner(caller)

            if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
                raise InvalidAmountError("Amount must be positive")

            self._validate_account(recipient, "Recipient")
            token = self._resolve_token(token)

            if not token.transfer(amount, self.environment.pool_account, recipient):
                raise TransferFailedError(f"Recovery transfer of {amount} to {recipient} failed")

            logger.info("Owner recovered %d to %s", amount, recipient)
            return amount

    def toggle_pause(self, caller: str) -> bool:
        """Flip the pause flag and return the new state."""
        with self._lock:
            self.require_owner(caller)
            self.paused = not self.paused
            logger.info("Pool %s", "paused" if self.paused else "resumed")
            return self.paused

    # ========== QUERIES ==========

    @property
    def lock(self) -> threading.RLock:
        """Re-entrant lock guarding every pool operation."""
        return self._lock

    def export_state(self) -> PoolState:
        """Copy tree, ledgers and flags as one consistent state."""
        with self._lock:
            return PoolState(
                tree_height=self.tree.height,
                next_leaf_index=self.tree.next_leaf_index,
                root=self.tree.root,
                total_deposited=self.total_deposited,
                paused=self.paused,
                block_height=self.environment.block_height,
                nodes=list(self.tree.store.items()),
                known_roots=self.tree.known_roots,
                deposits=list(self.commitments.items()),
                nullifiers=list(self.nullifiers.items()),
            )

    def get_contract_status(self) -> PoolStatus:
        with self._lock:
            return PoolStatus(
                paused=self.paused,
                total_deposited=self.total_deposited,
                next_leaf_index=self.tree.next_leaf_index,
            )

    def get_current_root(self) -> bytes:
        with self._lock:
            return self.tree.root

    def is_known_root(self, root: bytes) -> bool:
        with self._lock:
            return self.tree.is_known_root(root)

    def get_deposit(self, commitment: bytes) -> Optional[DepositRecord]:
        try:
            key = normalize_hash32(commitment)
        except ValueError:
            return None
        with self._lock:
            return self.commitments.get(key)

    def get_nullifier(self, nullifier: bytes) -> Optional[NullifierRecord]:
        try:
            key = normalize_hash32(nullifier)
        except ValueError:
            return None
        with self._lock:
            return self.nullifiers.get(key)

    def is_nullifier_spent(self, nullifier: bytes) -> bool:
        return self.get_nullifier(nullifier) is not None

    def get_merkle_path(self, leaf_index: int) -> list:
        """Sibling path for an inserted leaf, leaf level first."""
        with self._lock:
            return self.tree.get_path(leaf_index)

    def __repr__(self) -> str:
        return (
            f"PrivacyPool(paused={self.paused}, deposits={len(self.commitments)}, "
            f"withdrawals={len(self.nullifiers)}, total_deposited={self.total_deposited})"
        )
