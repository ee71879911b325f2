"""REST API endpoints for the privacy pool."""

import logging
import threading
from contextlib import contextmanager
from typing import List, Optional, Tuple, Type

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from privpool.config import PoolConfig
from privpool.core.environment import ExecutionEnvironment
from privpool.core.pool import PrivacyPool
from privpool.core.token import InMemoryToken
from privpool.security import verify_access_token
from privpool.storage import DatabaseManager, get_db_manager
from privpool.utils.encoding import bytes_to_hex, hex_to_bytes
from privpool.models.schemas import (
    AdminRecoveryRequest,
    BalanceResponse,
    DepositRecordResponse,
    DepositRequest,
    DepositResponse,
    ErrorResponse,
    MintRequest,
    NullifierRecordResponse,
    PauseResponse,
    PoolStatusResponse,
    RootResponse,
    WithdrawalRequest,
    WithdrawalResponse,
)
from privpool.exceptions import (
    AlreadyExistsError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidInputError,
    InvalidProofError,
    NotAuthorizedError,
    PrivacyPoolError,
    StorageError,
    TransferFailedError,
    TreeFullError,
    UnauthorizedWithdrawalError,
)

logger = logging.getLogger(__name__)

# HTTP status per error family; the most specific class in the MRO wins
ERROR_STATUS = {
    NotAuthorizedError: 403,
    UnauthorizedWithdrawalError: 403,
    InvalidAmountError: 400,
    InvalidInputError: 400,
    AlreadyExistsError: 409,
    TreeFullError: 409,
    InsufficientBalanceError: 409,
    InvalidProofError: 422,
    TransferFailedError: 502,
    StorageError: 500,
}

# Global pool instance, built lazily from configuration and stored state
_config: Optional[PoolConfig] = None
_pool: Optional[PrivacyPool] = None
_token: Optional[InMemoryToken] = None
_state_lock = threading.Lock()
# Serialises mutate-then-store so the database never lags a reply
_write_lock = threading.Lock()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = "0.1.0"


app = FastAPI(
    title="Privacy Pool REST API",
    description="Commitment/nullifier deposit and withdrawal pool",
    version="0.1.0",
)


def status_for(error: PrivacyPoolError) -> int:
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 400


@app.exception_handler(PrivacyPoolError)
async def pool_error_handler(request: Request, exc: PrivacyPoolError):
    """Render pool errors as {detail, code}."""
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.error_code} {exc}")
    return JSONResponse(
        status_code=status_for(exc),
        content=ErrorResponse(detail=str(exc), code=exc.error_code).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors (422) to 400 Bad Request."""
    error_messages = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        error_messages.append(f"{field}: {error['msg']}")

    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            detail="; ".join(error_messages), code=InvalidInputError.error_code
        ).model_dump(),
    )


def configure_service(config: Optional[PoolConfig] = None) -> None:
    """Drop the cached pool so the next request rebuilds it from config."""
    global _config, _pool, _token
    with _state_lock:
        _config = config
        _pool = None
        _token = None


def get_config() -> PoolConfig:
    global _config
    if _config is None:
        _config = PoolConfig()
    return _config


def get_db() -> DatabaseManager:
    """Get database manager."""
    return get_db_manager(get_config().database_url)


def get_pool(db: DatabaseManager = Depends(get_db)) -> PrivacyPool:
    """Return the service pool, restoring persisted state on first use."""
    global _pool, _token
    with _state_lock:
        if _pool is not None:
            return _pool

        config = get_config()
        session = db.get_session()
        try:
            token = InMemoryToken(
                name=config.token_name,
                symbol=config.token_symbol,
                decimals=config.token_decimals,
                token_uri=config.token_uri or None,
                balances=db.load_token_balances(session),
            )
            pool = db.load_pool(session, config, token=token)
        finally:
            session.close()

        if pool is None:
            pool = PrivacyPool(
                config=config,
                environment=ExecutionEnvironment(config.pool_account),
                token=token,
            )
            logger.info("Created new privacy pool (height %d)", config.tree_height)
        else:
            logger.info("Restored privacy pool with %d deposits", len(pool.commitments))

        _pool, _token = pool, token
        return _pool


def discard_pool(pool: PrivacyPool) -> None:
    """Forget the cached pool so the next request reloads the stored state."""
    global _pool, _token
    with _state_lock:
        if _pool is pool:
            _pool = None
            _token = None


async def get_sender(authorization: Optional[str] = Header(None)) -> str:
    """Caller identity from a verified Bearer token."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header")

    config = get_config()
    payload = verify_access_token(authorization[7:], config.jwt_secret, config.jwt_algorithm)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return payload["sub"]


def require_owner(
    sender: str = Depends(get_sender), pool: PrivacyPool = Depends(get_pool)
) -> str:
    """Require the pool owner."""
    pool.require_owner(sender)
    return sender


def save_state(db: DatabaseManager, pool: PrivacyPool) -> None:
    session = db.get_session()
    try:
        db.save_pool(session, pool, token=pool.token)
    except StorageError:
        logger.error("Saving pool state failed; falling back to the last stored state")
        discard_pool(pool)
        raise
    finally:
        session.close()


@contextmanager
def write_transaction(
    db: DatabaseManager,
    pool: PrivacyPool,
    advance_block: bool = False,
    keep_on: Tuple[Type[PrivacyPoolError], ...] = (),
):
    """
    Apply one mutation and store it before the next mutation starts.

    Errors listed in keep_on are raised after a state change that must be
    kept, so they are stored like a success.

    If the store fails, the in-memory pool is dropped and rebuilt from the
    database on the next request, so a failed request leaves no trace.
    """
    with _write_lock:
        if pool is not _pool:
            raise StorageError("Pool state was reloaded; retry the request")
        try:
            yield
        except keep_on:
            if advance_block:
                pool.environment.advance_block()
            save_state(db, pool)
            raise
        if advance_block:
            pool.environment.advance_block()
        save_state(db, pool)


def decode_hex(value: str, label: str) -> bytes:
    try:
        return hex_to_bytes(value)
    except ValueError as e:
        raise InvalidInputError(f"Invalid {label} hex: {e}")


def decode_hash32(value: str, label: str) -> bytes:
    """Decode a hex value that must be exactly 32 bytes."""
    decoded = decode_hex(value, label)
    if len(decoded) != 32:
        raise InvalidInputError(f"{label} must be 32 bytes, got {len(decoded)}")
    return decoded


# ============================================================================
# Health & Query Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check service health and status."""
    return HealthResponse(status="operational")


@app.get("/status", response_model=PoolStatusResponse, tags=["Pool"])
def get_status(pool: PrivacyPool = Depends(get_pool)):
    """Get pause flag and counters."""
    status = pool.get_contract_status()
    return PoolStatusResponse(
        paused=status.paused,
        total_deposited=status.total_deposited,
        next_leaf_index=status.next_leaf_index,
        tree_height=pool.tree.height,
        num_nullifiers=len(pool.nullifiers),
    )


@app.get("/root", response_model=RootResponse, tags=["Pool"])
def get_root(pool: PrivacyPool = Depends(get_pool)):
    """Get current Merkle root."""
    return RootResponse(merkle_root=bytes_to_hex(pool.get_current_root()))


@app.get("/deposits/{commitment}", response_model=DepositRecordResponse, tags=["Pool"])
def get_deposit(commitment: str, pool: PrivacyPool = Depends(get_pool)):
    """Look up a deposited commitment."""
    record = pool.get_deposit(decode_hex(commitment, "commitment"))
    if record is None:
        raise HTTPException(status_code=404, detail="Commitment not found")
    return DepositRecordResponse(commitment=commitment, **record.to_dict())


@app.get("/nullifiers/{nullifier}", response_model=NullifierRecordResponse, tags=["Pool"])
def get_nullifier(nullifier: str, pool: PrivacyPool = Depends(get_pool)):
    """Look up a spent nullifier."""
    record = pool.get_nullifier(decode_hex(nullifier, "nullifier"))
    if record is None:
        raise HTTPException(status_code=404, detail="Nullifier not spent")
    return NullifierRecordResponse(nullifier=nullifier, **record.to_dict())


@app.get("/merkle-path/{leaf_index}", tags=["Pool"])
def get_merkle_path(leaf_index: int, pool: PrivacyPool = Depends(get_pool)) -> List[str]:
    """Sibling path for an inserted leaf, leaf level first."""
    return [bytes_to_hex(node) for node in pool.get_merkle_path(leaf_index)]


# ============================================================================
# Protocol Endpoints
# ============================================================================


@app.post("/deposit", response_model=DepositResponse, tags=["Deposit"])
def deposit(
    request: DepositRequest,
    sender: str = Depends(get_sender),
    pool: PrivacyPool = Depends(get_pool),
    db: DatabaseManager = Depends(get_db),
):
    """
    Lock tokens from the authenticated caller behind a commitment.

    - **commitment**: Hex value, non-zero, at most 32 bytes
    - **amount**: Amount in token base units
    """
    commitment = decode_hex(request.commitment, "commitment")
    with write_transaction(db, pool, advance_block=True):
        leaf_index = pool.deposit(commitment=commitment, amount=request.amount, depositor=sender)
        merkle_root = pool.get_current_root()
    return DepositResponse(leaf_index=leaf_index, merkle_root=bytes_to_hex(merkle_root))


@app.post("/withdraw", response_model=WithdrawalResponse, tags=["Withdrawal"])
def withdraw(
    request: WithdrawalRequest,
    pool: PrivacyPool = Depends(get_pool),
    db: DatabaseManager = Depends(get_db),
):
    """
    Burn a nullifier and pay the recipient.

    Knowledge of the nullifier and its proof is the authorization, so the
    caller does not authenticate.

    - **nullifier**: Hex value folded through the proof
    - **merkle_root**: Root the proof is claimed against
    - **proof**: Sibling hashes, 1..height elements
    """
    nullifier = decode_hex(request.nullifier, "nullifier")
    claimed_root = decode_hash32(request.merkle_root, "merkle_root")
    proof = [decode_hash32(node, "proof element") for node in request.proof]

    # A failed payout still burns the nullifier
    with write_transaction(db, pool, advance_block=True, keep_on=(TransferFailedError,)):
        receipt = pool.withdraw(
            nullifier=nullifier,
            claimed_root=claimed_root,
            proof=proof,
            recipient=request.recipient,
            amount=request.amount,
            leaf_index=request.leaf_index,
        )
    return WithdrawalResponse(**receipt.to_dict())


# ============================================================================
# Owner Endpoints
# ============================================================================


@app.post("/admin/pause", response_model=PauseResponse, tags=["Admin"])
def toggle_pause(
    owner: str = Depends(require_owner),
    pool: PrivacyPool = Depends(get_pool),
    db: DatabaseManager = Depends(get_db),
):
    """Flip the pause flag (owner only)."""
    with write_transaction(db, pool):
        paused = pool.toggle_pause(owner)
    return PauseResponse(paused=paused)


@app.post("/admin/recover", tags=["Admin"])
def admin_recover(
    request: AdminRecoveryRequest,
    owner: str = Depends(require_owner),
    pool: PrivacyPool = Depends(get_pool),
    db: DatabaseManager = Depends(get_db),
):
    """Move funds out of the pool, bypassing pool accounting (owner only)."""
    with write_transaction(db, pool):
        amount = pool.admin_recovery(owner, request.recipient, request.amount)
    return {"recipient": request.recipient, "amount": amount}


@app.post("/token/mint", response_model=BalanceResponse, tags=["Token"])
def mint(
    request: MintRequest,
    owner: str = Depends(require_owner),
    pool: PrivacyPool = Depends(get_pool),
    db: DatabaseManager = Depends(get_db),
):
    """Issue in-memory tokens (owner only)."""
    with write_transaction(db, pool):
        pool.token.mint(request.account, request.amount)
        balance = pool.token.get_balance(request.account)
    return BalanceResponse(
        account=request.account,
        balance=balance,
        symbol=pool.token.get_symbol(),
    )


@app.get("/token/balance/{account}", response_model=BalanceResponse, tags=["Token"])
def get_balance(account: str, pool: PrivacyPool = Depends(get_pool)):
    """Token balance of an account."""
    return BalanceResponse(
        account=account,
        balance=pool.token.get_balance(account),
        symbol=pool.token.get_symbol(),
    )
