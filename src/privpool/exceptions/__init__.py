"""Custom exceptions for the privacy pool."""


class PrivacyPoolError(Exception):
    """Base exception for all privacy pool errors."""

    error_code = "POOL_ERROR"


# Authorization Errors
class NotAuthorizedError(PrivacyPoolError):
    """Raised when a non-owner calls an owner-only operation."""

    error_code = "NOT_AUTHORIZED"


class PoolPausedError(NotAuthorizedError):
    """Raised when a user operation is attempted while the pool is paused."""

    pass


class UnauthorizedWithdrawalError(PrivacyPoolError):
    """Reserved for recipient-authorization checks on withdrawal."""

    error_code = "UNAUTHORIZED_WITHDRAWAL"


# Input Errors
class InvalidAmountError(PrivacyPoolError):
    """Raised when an amount is zero or above the configured maximum."""

    error_code = "INVALID_AMOUNT"


class InsufficientBalanceError(PrivacyPoolError):
    """Raised when the pool cannot cover a payout."""

    error_code = "INSUFFICIENT_BALANCE"


class InvalidInputError(PrivacyPoolError):
    """Base exception for malformed operation inputs."""

    error_code = "INVALID_INPUT"


class InvalidCommitmentError(InvalidInputError):
    """Raised when a commitment is zero, empty or oversized."""

    error_code = "INVALID_COMMITMENT"


class InvalidNullifierError(InvalidInputError):
    """Raised when a nullifier is zero, empty or oversized."""

    pass


class InvalidProofLengthError(InvalidInputError):
    """Raised when a proof is empty or longer than the tree height."""

    pass


class InvalidTokenError(InvalidInputError):
    """Raised when the token handle is not an accepted fungible token."""

    pass


# Ledger Errors
class AlreadyExistsError(PrivacyPoolError):
    """Raised when inserting a key that is already recorded."""

    error_code = "ALREADY_EXISTS"


class CommitmentExistsError(AlreadyExistsError):
    """Raised when a commitment has already been deposited."""

    error_code = "COMMITMENT_EXISTS"


class NullifierExistsError(AlreadyExistsError):
    """Raised when attempting to spend the same nullifier twice."""

    error_code = "NULLIFIER_EXISTS"


# Proof Errors
class InvalidProofError(PrivacyPoolError):
    """Raised when proof verification fails."""

    error_code = "INVALID_PROOF"


class UnknownRootError(InvalidProofError):
    """Raised when the claimed root is neither current nor recent."""

    pass


# Merkle Tree Errors
class MerkleTreeError(PrivacyPoolError):
    """Base exception for Merkle tree errors."""

    error_code = "MERKLE_TREE_ERROR"


class TreeFullError(MerkleTreeError):
    """Raised when the tree has no free leaf slot left."""

    error_code = "TREE_FULL"


class InvalidLeafIndexError(MerkleTreeError):
    """Raised when leaf index is invalid or out of append order."""

    error_code = "INVALID_LEAF_INDEX"


# Token Errors
class TransferFailedError(PrivacyPoolError):
    """Raised when the external token transfer reports failure."""

    error_code = "TRANSFER_FAILED"


# Storage Errors
class StorageError(PrivacyPoolError):
    """Base exception for storage errors."""

    error_code = "STORAGE_ERROR"
