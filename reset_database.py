#!/usr/bin/env python3
"""
Database Reset Script
Clears the stored pool snapshot and seeds token balances
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from privpool.config import PoolConfig
from privpool.core.token import InMemoryToken
from privpool.storage import DatabaseManager

SEED_BALANCES = {
    "user1": 10_000,
    "user2": 10_000,
    "user3": 10_000,
}


def reset_database(config: PoolConfig):
    """Drop and recreate all tables, then fund the seed accounts."""
    print("🔄 Resetting database...")
    db = DatabaseManager(config.database_url)

    print("  ⚠️  Dropping all tables...")
    db.drop_tables()

    print("  ✨ Creating tables...")
    db.create_tables()

    session = db.get_session()
    try:
        db.save_token_balances(session, InMemoryToken(balances=dict(SEED_BALANCES)))
    finally:
        session.close()

    print("\n✅ Database reset complete!")
    for account, balance in SEED_BALANCES.items():
        print(f"    ✓ {account}: {balance} {config.token_symbol}")


if __name__ == "__main__":
    try:
        reset_database(PoolConfig())
    except KeyboardInterrupt:
        print("\n\n⚠️  Operation cancelled by user")
        sys.exit(1)
