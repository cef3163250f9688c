"""
PostgreSQL access to EQL encrypted columns through the proxy.

This module provides:
- PostgresEqlStore: writes typed values as envelopes and reads them back

Architecture:
- **Proxy**: the asyncpg pool connects to the encrypting proxy, not to
  PostgreSQL directly. The proxy encrypts envelopes on write and puts the
  decrypted plaintext back into "p" on read.
- **Store**: only marshals plaintext. It never sees ciphertext.

Envelopes are bound as text and cast to jsonb. A wrapper that serializes
to b"" (zero value under ZeroValuePolicy.OMIT) is bound as NULL.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Tuple, Type, TypeVar

import asyncpg

from .codecs import EncryptedValue, ZeroValuePolicy
from .errors import StorageError

logger = logging.getLogger(__name__)

V = TypeVar("V", bound=EncryptedValue)


def quote_ident(name: str) -> str:
    """Quote a (optionally schema-qualified) SQL identifier."""
    if not name:
        raise StorageError("Empty SQL identifier")
    return ".".join('"' + part.replace('"', '""') + '"' for part in name.split("."))


class PostgresEqlStore:
    """
    Read and write encrypted columns through the proxy.

    Plain (non-wrapper) values pass through unchanged, so key columns and
    unencrypted columns can be written in the same row.
    """

    def __init__(
        self,
        pool: asyncpg.Pool,
        zero_policy: Optional[ZeroValuePolicy] = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            pool: asyncpg connection pool pointed at the proxy
            zero_policy: Override of each codec's default zero value policy
        """
        self._pool = pool
        self._zero_policy = zero_policy

    @property
    def pool(self) -> asyncpg.Pool:
        """Get the connection pool."""
        return self._pool

    def build_insert(self, table: str, values: Mapping[str, Any]) -> Tuple[str, List[Any]]:
        """
        Build the INSERT statement and bind arguments for a row.

        Raises:
            StorageError: If no values are given
            SerializationError: If a wrapper cannot be serialized
        """
        if not values:
            raise StorageError(f"No values to insert into {table}")

        columns: List[str] = []
        placeholders: List[str] = []
        args: List[Any] = []
        for index, (name, value) in enumerate(values.items(), start=1):
            columns.append(quote_ident(name))
            if isinstance(value, EncryptedValue):
                payload = value.serialize(table, name, self._zero_policy)
                args.append(payload.decode("utf-8") if payload else None)
                placeholders.append(f"${index}::jsonb")
            else:
                args.append(value)
                placeholders.append(f"${index}")

        query = (
            f"INSERT INTO {quote_ident(table)} ({', '.join(columns)}) "
            f"VALUES ({', '.join(placeholders)})"
        )
        return query, args

    async def insert(self, table: str, values: Mapping[str, Any]) -> None:
        """
        Insert one row.

        Args:
            table: Target table
            values: Column name -> EncryptedValue or plain value
        """
        query, args = self.build_insert(table, values)
        try:
            await self._pool.execute(query, *args)
        except Exception as e:
            raise StorageError(f"Failed to insert into {table}: {e}")
        logger.debug("Inserted row into %s (%d columns)", table, len(args))

    async def fetch_value(
        self,
        table: str,
        column: str,
        value_type: Type[V],
        key_column: str,
        key: Any,
    ) -> Optional[V]:
        """
        Read one encrypted column by key.

        Args:
            table: Source table
            column: Encrypted column
            value_type: Wrapper type to deserialize into
            key_column: Column to match key against
            key: Key value

        Returns:
            Deserialized wrapper, or None if no row matched. A NULL column
            deserializes to the type's empty value.
        """
        query = (
            f"SELECT {quote_ident(column)}::text AS value "
            f"FROM {quote_ident(table)} WHERE {quote_ident(key_column)} = $1"
        )
        try:
            row = await self._pool.fetchrow(query, key)
        except Exception as e:
            raise StorageError(f"Failed to read {table}.{column}: {e}")
        if row is None:
            return None
        return value_type.deserialize(row["value"])

    async def fetch_by_query(
        self,
        table: str,
        column: str,
        value_type: Type[V],
        predicate: str,
        query_envelope: bytes,
    ) -> List[V]:
        """
        Read an encrypted column for rows matching a query envelope.

        Args:
            table: Source table
            column: Encrypted column to return
            value_type: Wrapper type to deserialize into
            predicate: SQL condition using $1 for the envelope, e.g.
                "cs_unique_v1(email) = cs_unique_v1($1)"
            query_envelope: Output of one of the queries module functions

        Returns:
            Deserialized wrappers, one per matching row
        """
        query = (
            f"SELECT {quote_ident(column)}::text AS value "
            f"FROM {quote_ident(table)} WHERE {predicate}"
        )
        try:
            rows = await self._pool.fetch(query, query_envelope.decode("utf-8"))
        except Exception as e:
            raise StorageError(f"Failed to query {table}.{column}: {e}")
        return [value_type.deserialize(row["value"]) for row in rows]
