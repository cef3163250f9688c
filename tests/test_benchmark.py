"""Tests for the benchmark CLI."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from eql_envelope import Settings, ZeroValuePolicy, benchmark


@pytest.mark.parametrize("arg", ["0", "-3"])
def test_main_rejects_non_positive_iterations(monkeypatch, capsys, arg):
    monkeypatch.setattr("sys.argv", ["eql-envelope-benchmark", arg])

    with pytest.raises(SystemExit) as exc_info:
        benchmark.main()

    assert exc_info.value.code == 1
    assert "at least 1" in capsys.readouterr().out


def test_main_rejects_non_integer_iterations(monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["eql-envelope-benchmark", "lots"])

    with pytest.raises(SystemExit):
        benchmark.main()

    assert "must be an integer" in capsys.readouterr().out


@pytest.mark.parametrize(
    "runner",
    [benchmark.run_benchmark, benchmark.run_codec_benchmark, benchmark.run_query_benchmark],
)
@pytest.mark.parametrize("iterations", [0, -1])
def test_runners_reject_non_positive_iterations(runner, iterations):
    with pytest.raises(ValueError, match="at least 1"):
        runner(iterations)


def test_codec_and_query_benchmarks(capsys):
    codec_summary = benchmark.run_codec_benchmark(2)
    query_summary = benchmark.run_query_benchmark(2)

    assert [name for name, _ in codec_summary] == [
        "EncryptedText",
        "EncryptedJsonb",
        "EncryptedInt",
        "EncryptedBool",
    ]
    assert [tag for tag, _ in query_summary] == ["match", "ore", "unique", "ste_vec", "ejson_path"]
    assert "[ERROR]" not in capsys.readouterr().out


async def test_proxy_demo_uses_settings(monkeypatch, mock_pool):
    mock_pool.close = AsyncMock()
    create_pool = AsyncMock(return_value=mock_pool)
    monkeypatch.setattr(benchmark.asyncpg, "create_pool", create_pool)
    settings = Settings(
        database_url="postgresql://proxy:6432/app",
        zero_value_policy=ZeroValuePolicy.ENCRYPT,
        benchmark_table="bench_rows",
    )

    await benchmark.run_proxy_demo(settings, 2)

    create_pool.assert_awaited_once_with("postgresql://proxy:6432/app")
    assert mock_pool.execute.await_count == 2
    query, *args = mock_pool.execute.await_args_list[1].args
    assert query.startswith('INSERT INTO "bench_rows"')
    assert json.loads(args[-1])["p"] == "false"
    mock_pool.close.assert_awaited_once()
