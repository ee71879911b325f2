"""Pool configuration loaded from the environment."""

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from privpool.utils.hash import ZERO_HASH


class PoolConfig(BaseSettings):
    """
    Deployment-time constants of a privacy pool.

    Values are read from ``PRIVPOOL_*`` environment variables or a local
    ``.env`` file and are immutable once the pool is constructed.
    """

    model_config = SettingsConfigDict(
        env_prefix="PRIVPOOL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    tree_height: int = Field(default=20, ge=1, le=32, description="Merkle tree height")
    max_amount: int = Field(
        default=1_000_000_000_000, gt=0, description="Maximum single deposit/withdrawal"
    )
    owner: str = Field(default="pool-owner", min_length=1, description="Owner identity")
    pool_account: str = Field(default="privacy-pool", min_length=1)
    strict_root_check: bool = Field(
        default=True, description="Require proofs to fold to a known root"
    )
    root_history_size: int = Field(default=30, ge=1)

    database_url: str = "sqlite:///privacy_pool.db"
    log_level: str = "INFO"

    # Bearer token signing; requests carrying an identity are rejected
    # while no secret is configured
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = Field(default=24, ge=1)

    # In-memory token metadata used by the HTTP service
    token_name: str = "Pool Token"
    token_symbol: str = "PTK"
    token_decimals: int = Field(default=6, ge=0)
    token_uri: str = ""

    @property
    def capacity(self) -> int:
        """Number of leaf slots in the tree."""
        return 2**self.tree_height

    @property
    def zero_hash(self) -> bytes:
        """Sentinel hash of unset tree nodes."""
        return ZERO_HASH


def configure_logging(level: str = "INFO") -> None:
    """Install a basic stream handler for service and script entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
