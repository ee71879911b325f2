"""Execution environment collaborator: block height and pool identity."""


class ExecutionEnvironment:
    """
    Supplies the ledger context an operation runs in.

    Block height only moves forward. The pool account is the identity
    that holds deposited funds in the token ledger.
    """

    def __init__(self, pool_account: str = "privacy-pool", block_height: int = 0):
        if block_height < 0:
            raise ValueError("Block height must be non-negative")
        self.pool_account = pool_account
        self._block_height = block_height

    @property
    def block_height(self) -> int:
        return self._block_height

    def advance_block(self, blocks: int = 1) -> int:
        """Move the chain forward and return the new height."""
        if blocks < 1:
            raise ValueError("Can only advance by a positive number of blocks")
        self._block_height += blocks
        return self._block_height

    def __repr__(self) -> str:
        return f"ExecutionEnvironment(pool_account={self.pool_account}, block_height={self._block_height})"
