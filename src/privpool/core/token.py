"""Fungible token interface consumed by the pool."""

import logging
import threading
from typing import Dict, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class FungibleToken(Protocol):
    """
    Balance-moving capability injected into the pool.

    transfer reports failure by returning False; the pool converts that
    into TransferFailedError.
    """

    def transfer(self, amount: int, sender: str, recipient: str, memo: Optional[bytes] = None) -> bool: ...

    def get_balance(self, account: str) -> int: ...

    def get_total_supply(self) -> int: ...

    def get_name(self) -> str: ...

    def get_symbol(self) -> str: ...

    def get_decimals(self) -> int: ...

    def get_token_uri(self) -> Optional[str]: ...


class InMemoryToken:
    """Dictionary-backed token ledger, safe to share between threads."""

    def __init__(
        self,
        name: str = "Pool Token",
        symbol: str = "PTK",
        decimals: int = 6,
        token_uri: Optional[str] = None,
        balances: Optional[Dict[str, int]] = None,
    ):
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.token_uri = token_uri
        self.balances: Dict[str, int] = dict(balances or {})
        self._lock = threading.RLock()

    def mint(self, account: str, amount: int) -> None:
        """Credit newly issued tokens to account."""
        if amount <= 0:
            raise ValueError("Mint amount must be positive")
        with self._lock:
            self.balances[account] = self.balances.get(account, 0) + amount
        logger.info("Minted %d %s to %s", amount, self.symbol, account)

    def transfer(self, amount: int, sender: str, recipient: str, memo: Optional[bytes] = None) -> bool:
        if amount <= 0:
            logger.warning("Rejected transfer of non-positive amount %d", amount)
            return False
        with self._lock:
            if self.balances.get(sender, 0) < amount:
                logger.warning("Rejected transfer: %s holds less than %d %s", sender, amount, self.symbol)
                return False

            self.balances[sender] -= amount
            self.balances[recipient] = self.balances.get(recipient, 0) + amount
            return True

    def get_balance(self, account: str) -> int:
        return self.balances.get(account, 0)

    def get_total_supply(self) -> int:
        with self._lock:
            return sum(self.balances.values())

    def snapshot_balances(self) -> Dict[str, int]:
        """Copy of every balance taken at one instant."""
        with self._lock:
            return dict(self.balances)

    def get_name(self) -> str:
        return self.name

    def get_symbol(self) -> str:
        return self.symbol

    def get_decimals(self) -> int:
        return self.decimals

    def get_token_uri(self) -> Optional[str]:
        return self.token_uri

    def __repr__(self) -> str:
        return f"InMemoryToken(symbol={self.symbol}, supply={self.get_total_supply()})"
