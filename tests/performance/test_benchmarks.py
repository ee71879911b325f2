"""Performance benchmarking suite for the privacy pool."""

import os
import time
from statistics import mean, stdev

from privpool.config import PoolConfig
from privpool.core.environment import ExecutionEnvironment
from privpool.core.merkle_tree import MerkleTree
from privpool.core.pool import PrivacyPool
from privpool.core.proof import ProofVerifier
from privpool.core.token import InMemoryToken


class PerformanceBenchmark:
    """Benchmarking harness for pool operations."""

    def __init__(self, name: str, iterations: int = 10):
        self.name = name
        self.iterations = iterations
        self.times = []

    def __enter__(self):
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.times.append(time.perf_counter() - self.start)

    def report(self):
        """Print benchmark results."""
        avg = mean(self.times)
        std_dev = stdev(self.times) if len(self.times) > 1 else 0

        print(f"\n{'='*70}")
        print(f"Benchmark: {self.name}")
        print(f"{'='*70}")
        print(f"Iterations:     {len(self.times)}")
        print(f"Average Time:   {avg*1000:.2f} ms")
        print(f"Std Dev:        {std_dev*1000:.2f} ms")
        print(f"Throughput:     {1/avg:.2f} ops/sec")

        return {
            "name": self.name,
            "iterations": len(self.times),
            "avg_ms": avg * 1000,
            "max_ms": max(self.times) * 1000,
        }


class TestPerformanceBenchmarks:
    """Performance benchmarks for the full-height tree."""

    def test_merkle_tree_insertion(self):
        """Every insert rehashes all 20 levels."""
        tree = MerkleTree()
        benchmark = PerformanceBenchmark("Merkle Tree Insertion", iterations=200)

        for _ in range(benchmark.iterations):
            commitment = os.urandom(32)
            with benchmark:
                tree.insert(commitment)

        stats = benchmark.report()
        assert stats["avg_ms"] < 5

    def test_proof_verification(self):
        tree = MerkleTree()
        leaves = [os.urandom(32) for _ in range(50)]
        for leaf in leaves:
            tree.insert(leaf)

        verifier = ProofVerifier(tree.height)
        benchmark = PerformanceBenchmark("Merkle Proof Verification", iterations=50)

        for index, leaf in enumerate(leaves):
            path = tree.get_path(index)
            with benchmark:
                assert verifier.verify(leaf, path, tree.root, leaf_index=index)

        stats = benchmark.report()
        assert stats["avg_ms"] < 5

    def test_deposit_withdraw_cycle(self):
        config = PoolConfig(owner="owner", pool_account="pool", database_url="sqlite://")
        token = InMemoryToken(balances={"alice": 10**9})
        pool = PrivacyPool(config=config, environment=ExecutionEnvironment("pool"), token=token)
        benchmark = PerformanceBenchmark("Deposit + Withdraw", iterations=50)

        for _ in range(benchmark.iterations):
            commitment = os.urandom(32)
            with benchmark:
                leaf_index = pool.deposit(commitment, 10, "alice")
                pool.withdraw(
                    commitment,
                    pool.get_current_root(),
                    pool.get_merkle_path(leaf_index),
                    "bob",
                    10,
                    leaf_index=leaf_index,
                )

        stats = benchmark.report()
        assert stats["avg_ms"] < 20
        assert token.get_balance("bob") == 10 * benchmark.iterations
