"""Pydantic data models for the privacy pool API."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class DepositRequest(BaseModel):
    """Request model for deposit operations."""
    commitment: str = Field(..., description="Commitment (hex, at most 32 bytes)")
    amount: int = Field(..., description="Amount to deposit")


class DepositResponse(BaseModel):
    """Response model for deposit operations."""
    leaf_index: int = Field(..., description="Index in Merkle tree")
    merkle_root: str = Field(..., description="Merkle root after insertion (hex)")
    timestamp: datetime = Field(default_factory=datetime.now)


class WithdrawalRequest(BaseModel):
    """Request model for withdrawal operations."""
    nullifier: str = Field(..., description="Nullifier (hex, at most 32 bytes)")
    merkle_root: str = Field(..., description="Claimed Merkle root (hex)")
    proof: List[str] = Field(..., description="Sibling hashes, leaf level first (hex list)")
    recipient: str = Field(..., min_length=1, description="Recipient identity")
    amount: int = Field(..., description="Withdrawal amount")
    leaf_index: Optional[int] = Field(default=None, ge=0, description="Leaf position for fold direction")


class WithdrawalResponse(BaseModel):
    """Response model for withdrawal operations."""
    nullifier: str
    recipient: str
    amount: int
    block_height: int
    timestamp: datetime = Field(default_factory=datetime.now)


class AdminRecoveryRequest(BaseModel):
    """Request model for owner fund recovery."""
    recipient: str = Field(..., min_length=1)
    amount: int


class MintRequest(BaseModel):
    """Request model for minting in-memory tokens."""
    account: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0)


class PauseResponse(BaseModel):
    paused: bool


class PoolStatusResponse(BaseModel):
    """Response model for pool status."""
    paused: bool
    total_deposited: int
    next_leaf_index: int
    tree_height: int
    num_nullifiers: int


class RootResponse(BaseModel):
    merkle_root: str = Field(..., description="Current Merkle root (hex)")


class DepositRecordResponse(BaseModel):
    commitment: str
    leaf_index: int
    block_height: int
    depositor: str
    amount: int


class NullifierRecordResponse(BaseModel):
    nullifier: str
    used: bool
    amount: int
    withdrawn_at: int


class BalanceResponse(BaseModel):
    account: str
    balance: int
    symbol: str


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")
