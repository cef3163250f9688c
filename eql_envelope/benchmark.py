"""
EQL Envelope Benchmark CLI.

Usage:
    eql-envelope-benchmark [iterations]

Or run directly:
    python -m eql_envelope.benchmark

When DATABASE_URL is set (environment or .env file) and points at the
encrypting proxy, a table named by EQL_BENCHMARK_TABLE (default
"eql_benchmark") with columns id integer, name, profile, age, active
(all encrypted except id) is written to and read back as a final demo.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from typing import Any, Callable, List, Tuple

import asyncpg

from eql_envelope.codecs import (
    EncryptedBool,
    EncryptedInt,
    EncryptedJsonb,
    EncryptedText,
    EncryptedValue,
)
from eql_envelope.config import Settings
from eql_envelope.errors import EnvelopeError
from eql_envelope.postgres import PostgresEqlStore
from eql_envelope.queries import (
    ejson_path_query,
    jsonb_query,
    match_query,
    ore_query,
    unique_query,
)

DEFAULT_ITERATIONS = 10_000
TABLE = "users"

SAMPLES: List[EncryptedValue] = [
    EncryptedText("Hello, World!"),
    EncryptedJsonb({"name": "Alice", "age": 30, "is_member": True}),
    EncryptedInt(42),
    EncryptedBool(True),
]

QUERIES: List[Tuple[str, Callable[[Any, str, str], bytes], Any]] = [
    ("match", match_query, "test_string"),
    ("ore", ore_query, 123),
    ("unique", unique_query, "alice@example.com"),
    ("ste_vec", jsonb_query, {"top": {"nested": ["a", "b"]}}),
    ("ejson_path", ejson_path_query, "$.top"),
]


def _rate(count: int, seconds: float) -> str:
    return f"{count / seconds:.2f}" if seconds > 0 else "inf"


def _check_iterations(iterations: int) -> None:
    if iterations < 1:
        raise ValueError(f"iterations must be at least 1, got {iterations}")


def _banner(title: str) -> None:
    print("+" + "-" * 68 + "+")
    print(f"|  {title}".ljust(69) + "|")
    print("+" + "-" * 68 + "+")


def run_codec_benchmark(iterations: int) -> List[Tuple[str, str]]:
    """Round-trip each typed codec and return (name, ops/sec) pairs."""
    _check_iterations(iterations)
    summary = []
    _banner(f"Demo 1: Codec Round Trips ({iterations} each)")
    for sample in SAMPLES:
        name = type(sample).__name__
        start = time.perf_counter()
        for _ in range(iterations):
            data = sample.serialize(TABLE, "column")
            restored = type(sample).deserialize(data)
        duration = time.perf_counter() - start

        if restored != sample:
            print(f"[ERROR] {name} round trip mismatch: {restored!r} != {sample!r}")
        rate = _rate(iterations, duration)
        print(f"[OK] {name:<15} {duration * 1000:.3f}ms | Rate: {rate} ops/sec")
        summary.append((name, rate))
    print()
    return summary


def run_query_benchmark(iterations: int) -> List[Tuple[str, str]]:
    """Build each query envelope kind and return (tag, ops/sec) pairs."""
    _check_iterations(iterations)
    summary = []
    _banner(f"Demo 2: Query Envelopes ({iterations} each)")
    for tag, fn, value in QUERIES:
        start = time.perf_counter()
        for _ in range(iterations):
            data = fn(value, TABLE, "column")
        duration = time.perf_counter() - start

        rate = _rate(iterations, duration)
        print(f"[OK] {tag:<15} {duration * 1000:.3f}ms | Rate: {rate} ops/sec")
        print(f"     {data.decode('utf-8')}")
        summary.append((tag, rate))
    print()
    return summary


async def run_proxy_demo(settings: Settings, iterations: int) -> None:
    """Write rows through the proxy and read them back."""
    _banner("Demo 3: Proxy Write/Read")
    table = settings.benchmark_table

    pool = await asyncpg.create_pool(settings.require_database_url())
    if pool is None:
        print("[ERROR] Failed to create connection pool\n")
        return

    store = PostgresEqlStore(pool, zero_policy=settings.zero_value_policy)
    count = min(iterations, 100)
    try:
        start = time.perf_counter()
        for i in range(count):
            await store.insert(
                table,
                {
                    "id": i,
                    "name": EncryptedText(f"user-{i}"),
                    "profile": EncryptedJsonb({"index": i}),
                    "age": EncryptedInt(i),
                    "active": EncryptedBool(i % 2 == 0),
                },
            )
        write_time = time.perf_counter() - start
        print(f"[OK] Wrote {count} rows | Rate: {_rate(count, write_time)} ops/sec")

        start = time.perf_counter()
        for i in range(count):
            await store.fetch_value(table, "name", EncryptedText, "id", i)
        read_time = time.perf_counter() - start
        print(f"[OK] Read {count} values | Rate: {_rate(count, read_time)} ops/sec\n")
    except EnvelopeError as e:
        print(f"[ERROR] Proxy demo failed: {e}\n")
    finally:
        await pool.close()


def run_benchmark(iterations: int = DEFAULT_ITERATIONS) -> None:
    """Run the EQL envelope benchmark."""
    _check_iterations(iterations)
    print("=== EQL Envelope Benchmark ===\n")

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    print("=" * 70)
    print("                    BENCHMARK START")
    print("=" * 70 + "\n")

    codec_summary = run_codec_benchmark(iterations)
    query_summary = run_query_benchmark(iterations)

    if settings.database_url:
        asyncio.run(run_proxy_demo(settings, iterations))
    else:
        print("[SKIP] DATABASE_URL not set, skipping proxy demo\n")

    print("=" * 70)
    print("                    BENCHMARK SUMMARY")
    print("=" * 70 + "\n")
    for name, rate in codec_summary + query_summary:
        print(f"  - {name:<15} {rate} ops/sec")

    print("\n" + "=" * 70)
    print("                    BENCHMARK COMPLETE")
    print("=" * 70 + "\n")


def main() -> None:
    """CLI entry point for eql-envelope-benchmark command."""
    try:
        iterations = int(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_ITERATIONS
    except ValueError:
        print(f"ERROR: iterations must be an integer, got {sys.argv[1]!r}")
        sys.exit(1)
    if iterations < 1:
        print(f"ERROR: iterations must be at least 1, got {iterations}")
        sys.exit(1)
    run_benchmark(iterations)


if __name__ == "__main__":
    main()
