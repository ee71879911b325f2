#!/usr/bin/env python3
"""
Quick start guide for the privacy pool.

Run this to see a complete deposit and withdrawal workflow.
"""

import os
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from privpool import ExecutionEnvironment, InMemoryToken, PoolConfig, PrivacyPool
from privpool.exceptions import NullifierExistsError


def main():
    """Run a simple example of the privacy pool."""

    print("=" * 70)
    print("PRIVACY POOL QUICK START EXAMPLE")
    print("=" * 70)
    print()

    # Step 1: Initialize the pool
    print("Step 1: Initialize the pool")
    print("-" * 70)
    config = PoolConfig(tree_height=8, owner="owner", pool_account="pool")
    token = InMemoryToken(balances={"alice": 5_000, "bob": 5_000})
    pool = PrivacyPool(config=config, environment=ExecutionEnvironment("pool"), token=token)
    print(f"✓ Pool created with {config.tree_height}-level Merkle tree ({config.capacity} deposits)")
    print()

    # Step 2: Deposits
    print("Step 2: Alice and Bob deposit")
    print("-" * 70)
    alice_note = os.urandom(32)
    alice_index = pool.deposit(alice_note, 1_000, "alice")
    pool.environment.advance_block()
    pool.deposit(os.urandom(32), 1_000, "bob")
    print(f"✓ Alice's commitment at leaf {alice_index}: {alice_note.hex()[:32]}...")
    print(f"  Pool balance: {token.get_balance('pool')}")
    print(f"  Merkle root:  {pool.get_current_root().hex()[:32]}...")
    print()

    # Step 3: Withdraw to a fresh account
    print("Step 3: Alice withdraws to a fresh account")
    print("-" * 70)
    root = pool.get_current_root()
    path = pool.get_merkle_path(alice_index)
    receipt = pool.withdraw(alice_note, root, path, "fresh-account", 1_000, leaf_index=alice_index)
    print(f"✓ Paid {receipt.amount} to {receipt.recipient} at block {receipt.block_height}")
    print()

    # Step 4: Double spend
    print("Step 4: Attempt to reuse the nullifier")
    print("-" * 70)
    try:
        pool.withdraw(alice_note, root, path, "fresh-account", 1_000, leaf_index=alice_index)
    except NullifierExistsError as e:
        print(f"✓ Rejected: {e}")
    print()

    status = pool.get_contract_status()
    print("Final status:", status.to_dict())


if __name__ == "__main__":
    main()
