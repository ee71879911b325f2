"""Append-only commitment and nullifier ledgers."""

from dataclasses import dataclass, field
from typing import Dict, Generic, Iterator, Optional, Tuple, Type, TypeVar

from privpool.utils.encoding import bytes_to_hex
from privpool.exceptions import (
    AlreadyExistsError,
    CommitmentExistsError,
    NullifierExistsError,
)


@dataclass(frozen=True)
class DepositRecord:
    """Audit entry written once per deposited commitment."""

    leaf_index: int
    block_height: int
    depositor: str
    amount: int

    def to_dict(self) -> dict:
        return {
            "leaf_index": self.leaf_index,
            "block_height": self.block_height,
            "depositor": self.depositor,
            "amount": self.amount,
        }


@dataclass(frozen=True)
class NullifierRecord:
    """Entry written once per spent nullifier."""

    amount: int
    withdrawn_at: int
    used: bool = field(default=True)

    def to_dict(self) -> dict:
        return {
            "used": self.used,
            "amount": self.amount,
            "withdrawn_at": self.withdrawn_at,
        }


R = TypeVar("R")


class AppendOnlyLedger(Generic[R]):
    """
    Records keyed by a 32-byte value.

    Keys can be inserted once and never removed or overwritten.
    """

    duplicate_error: Type[AlreadyExistsError] = AlreadyExistsError
    label = "key"

    def __init__(self, records: Optional[Dict[bytes, R]] = None):
        self._records: Dict[bytes, R] = dict(records or {})

    def contains(self, key: bytes) -> bool:
        return key in self._records

    def insert(self, key: bytes, record: R) -> None:
        """
        Record a new entry.

        Raises:
            AlreadyExistsError: If the key is already present
        """
        if key in self._records:
            raise self.duplicate_error(f"{self.label} already recorded: {bytes_to_hex(key)}")
        self._records[key] = record

    def get(self, key: bytes) -> Optional[R]:
        return self._records.get(key)

    def items(self) -> Iterator[Tuple[bytes, R]]:
        return iter(self._records.items())

    def __contains__(self, key: bytes) -> bool:
        return self.contains(key)

    def __len__(self) -> int:
        return len(self._records)


class CommitmentLedger(AppendOnlyLedger[DepositRecord]):
    """Deposited commitments and where they landed in the tree."""

    duplicate_error = CommitmentExistsError
    label = "Commitment"

    def total_amount(self) -> int:
        """Sum of every recorded deposit."""
        return sum(record.amount for record in self._records.values())


class NullifierLedger(AppendOnlyLedger[NullifierRecord]):
    """Spent nullifiers."""

    duplicate_error = NullifierExistsError
    label = "Nullifier"

    def is_spent(self, nullifier: bytes) -> bool:
        return self.contains(nullifier)
