"""
Query envelopes for searching encrypted columns.

Each function tags a plaintext value with the search operation the proxy
should use and returns the envelope bytes, ready to be bound as a query
parameter. Unlike the typed codecs there is no zero value short-circuit:
"", 0 and False are meaningful query values.
"""

from __future__ import annotations

from typing import Any, Union

from .envelope import QueryType, build_envelope


def match_query(value: Any, table: str, column: str) -> bytes:
    """Serialize a plaintext value used in a match query."""
    return serialize_query(value, table, column, QueryType.MATCH)


def ore_query(value: Any, table: str, column: str) -> bytes:
    """Serialize a plaintext value used in an ore (range/ordering) query."""
    return serialize_query(value, table, column, QueryType.ORE)


def unique_query(value: Any, table: str, column: str) -> bytes:
    """Serialize a plaintext value used in a unique (equality) query."""
    return serialize_query(value, table, column, QueryType.UNIQUE)


def jsonb_query(value: Any, table: str, column: str) -> bytes:
    """Serialize a plaintext value used in a jsonb containment query."""
    return serialize_query(value, table, column, QueryType.STE_VEC)


def ejson_path_query(value: Any, table: str, column: str) -> bytes:
    """Serialize an ejson path (e.g. "$.top") used in an ejson path query."""
    return serialize_query(value, table, column, QueryType.EJSON_PATH)


def serialize_query(
    value: Any,
    table: str,
    column: str,
    query_type: Union[QueryType, str],
) -> bytes:
    """
    Build a query envelope for equality, range, containment and path queries.

    Args:
        value: Plaintext query value
        table: Table being queried
        column: Encrypted column being queried
        query_type: Search operation tag

    Returns:
        JSON envelope bytes with "q" set

    Raises:
        SerializationError: If the value cannot be canonicalized or the tag is unknown
    """
    if isinstance(query_type, str):
        query_type = QueryType.from_str(query_type)
    return build_envelope(value, table, column, query_type).to_bytes()
