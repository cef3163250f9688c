"""
Environment-based settings.

Settings are read from the process environment after loading an optional
.env file:

- DATABASE_URL: PostgreSQL (proxy) connection string, optional
- EQL_ZERO_VALUE_POLICY: "omit" or "encrypt", overrides codec defaults
- EQL_LOG_LEVEL: logging level name, default WARNING
- EQL_BENCHMARK_TABLE: table the benchmark writes to, default "eql_benchmark"
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Type, Union

from dotenv import load_dotenv

from .codecs import ColumnCodec, EncryptedValue, ZeroValuePolicy
from .errors import ConfigError

DEFAULT_LOG_LEVEL: str = "WARNING"
DEFAULT_BENCHMARK_TABLE: str = "eql_benchmark"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the data-access layer."""

    database_url: Optional[str] = None
    zero_value_policy: Optional[ZeroValuePolicy] = None
    log_level: str = DEFAULT_LOG_LEVEL
    benchmark_table: str = DEFAULT_BENCHMARK_TABLE

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> Settings:
        """
        Load settings from a .env file and the environment.

        Args:
            env_file: Optional path to a .env file (default: search upwards from cwd)
            environ: Mapping to read instead of os.environ; skips .env loading

        Returns:
            Settings instance

        Raises:
            ConfigError: If a value is invalid
        """
        if environ is None:
            load_dotenv(env_file)
            environ = os.environ

        policy = None
        raw_policy = environ.get("EQL_ZERO_VALUE_POLICY", "").strip()
        if raw_policy:
            policy = ZeroValuePolicy.from_str(raw_policy)

        log_level = environ.get("EQL_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f"Invalid log level: {log_level!r}")

        return cls(
            database_url=environ.get("DATABASE_URL") or None,
            zero_value_policy=policy,
            log_level=log_level,
            benchmark_table=environ.get("EQL_BENCHMARK_TABLE", "").strip() or DEFAULT_BENCHMARK_TABLE,
        )

    def require_database_url(self) -> str:
        """Return DATABASE_URL or raise ConfigError."""
        if not self.database_url:
            raise ConfigError("DATABASE_URL must be set in environment or .env file")
        return self.database_url

    def column(
        self, table: str, column: str, value_type: Type[EncryptedValue]
    ) -> ColumnCodec:
        """Bind a column codec using the configured zero value policy."""
        return ColumnCodec(
            table=table,
            column=column,
            value_type=value_type,
            zero_policy=self.zero_value_policy,
        )
