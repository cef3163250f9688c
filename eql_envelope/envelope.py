"""
EQL envelope model.

This module provides:
- TableColumn: table/column identifier an encrypted value belongs to
- QueryType: search operation a query envelope is tagged with
- EncryptedColumn: the plaintext envelope sent to the proxy
- build_envelope: canonicalize a value and wrap it in an envelope
- extract_plaintext: read the "p" field back out of proxy output

Wire format:

    {"k":"pt","p":"<plaintext>","i":{"t":"<table>","c":"<column>"},"v":1,"q":"<tag>"}

"q" is only present on query envelopes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from .canonical import canonicalize
from .errors import MalformedEnvelopeError, SerializationError, UnsupportedTypeError

PLAINTEXT_KIND: str = "pt"
ENVELOPE_VERSION: int = 1

RawEnvelope = Union[bytes, bytearray, memoryview, str]


# =============================================================================
# Query Type Enum
# =============================================================================


class QueryType(Enum):
    """Search operation the proxy should use for a query envelope."""

    MATCH = "match"  # Full-text match
    ORE = "ore"  # Order-revealing range/comparison
    UNIQUE = "unique"  # Equality / uniqueness
    STE_VEC = "ste_vec"  # JSON containment
    EJSON_PATH = "ejson_path"  # JSON path selector

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_str(cls, s: str) -> QueryType:
        """Parse from string."""
        try:
            return cls(s)
        except ValueError:
            raise SerializationError(f"Invalid query type: {s!r}")


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class TableColumn:
    """Table and column an encrypted value belongs to."""

    table: str
    column: str

    def to_dict(self) -> Dict[str, str]:
        return {"t": self.table, "c": self.column}


@dataclass(frozen=True)
class EncryptedColumn:
    """
    Plaintext envelope sent by a database client.

    The proxy encrypts "p" on write and fills it with the decrypted
    plaintext on read.
    """

    plaintext: str
    identifier: TableColumn
    query_type: Optional[QueryType] = None
    kind: str = PLAINTEXT_KIND
    version: int = ENVELOPE_VERSION

    def to_dict(self) -> Dict[str, Any]:
        """Wire form; "q" is omitted when the envelope is not a query."""
        data: Dict[str, Any] = {
            "k": self.kind,
            "p": self.plaintext,
            "i": self.identifier.to_dict(),
            "v": self.version,
        }
        if self.query_type is not None:
            data["q"] = self.query_type.value
        return data

    def to_json(self) -> str:
        """Serialize envelope to a compact JSON string."""
        try:
            return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"error marshalling EncryptedColumn: {e}") from e

    def to_bytes(self) -> bytes:
        return self.to_json().encode("utf-8")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> EncryptedColumn:
        """
        Rebuild an envelope from a decoded JSON object.

        Fields the proxy adds (ciphertext, indexes) are ignored.

        Raises:
            MalformedEnvelopeError: If a required field is missing or mistyped
        """
        plaintext = data.get("p")
        if not isinstance(plaintext, str):
            raise MalformedEnvelopeError("invalid format: missing 'p' field")

        ident = data.get("i")
        if not isinstance(ident, dict):
            raise MalformedEnvelopeError("invalid format: missing 'i' field")
        table = ident.get("t")
        column = ident.get("c")
        if not isinstance(table, str) or not isinstance(column, str):
            raise MalformedEnvelopeError("invalid format: 'i' needs string 't' and 'c'")

        query_type = None
        raw_q = data.get("q")
        if raw_q is not None and raw_q != "":
            try:
                query_type = QueryType(raw_q)
            except ValueError:
                raise MalformedEnvelopeError(f"invalid format: unknown query type {raw_q!r}")

        version = data.get("v", ENVELOPE_VERSION)
        if isinstance(version, bool) or not isinstance(version, int):
            raise MalformedEnvelopeError(f"invalid format: version {version!r} is not an integer")

        return cls(
            plaintext=plaintext,
            identifier=TableColumn(table=table, column=column),
            query_type=query_type,
            kind=data.get("k", PLAINTEXT_KIND),
            version=version,
        )

    @classmethod
    def from_json(cls, data: RawEnvelope) -> EncryptedColumn:
        """Deserialize an envelope from JSON bytes or text."""
        return cls.from_dict(_load_object(data))


# =============================================================================
# Envelope Functions
# =============================================================================


def build_envelope(
    value: Any,
    table: str,
    column: str,
    query_type: Optional[Union[QueryType, str]] = None,
) -> EncryptedColumn:
    """
    Convert a plaintext value into an EncryptedColumn.

    Args:
        value: Plaintext value (str, bool, int, float or dict)
        table: Table the value belongs to
        column: Column the value belongs to
        query_type: Optional query tag; None or "" means a plain value

    Returns:
        EncryptedColumn ready to be serialized

    Raises:
        SerializationError: If the value cannot be canonicalized
    """
    try:
        plaintext = canonicalize(value)
    except UnsupportedTypeError as e:
        raise SerializationError(f"error serializing {table}.{column}: {e}") from e

    if isinstance(query_type, str):
        query_type = QueryType.from_str(query_type) if query_type else None

    return EncryptedColumn(
        plaintext=plaintext,
        identifier=TableColumn(table=table, column=column),
        query_type=query_type,
    )


def extract_plaintext(data: RawEnvelope) -> str:
    """
    Read the plaintext "p" field from an envelope returned by the proxy.

    Args:
        data: JSON envelope as bytes or text

    Returns:
        The plaintext string

    Raises:
        MalformedEnvelopeError: If data is not a JSON object with a string "p"
    """
    plaintext = _load_object(data).get("p")
    if not isinstance(plaintext, str):
        raise MalformedEnvelopeError("invalid format: missing 'p' field in JSONB")
    return plaintext


def _load_object(data: RawEnvelope) -> Dict[str, Any]:
    """Internal: decode JSON input that must be an object."""
    if isinstance(data, (bytearray, memoryview)):
        data = bytes(data)
    try:
        decoded = json.loads(data)
    except (TypeError, ValueError) as e:
        raise MalformedEnvelopeError(f"invalid envelope JSON: {e}") from e
    if not isinstance(decoded, dict):
        raise MalformedEnvelopeError(
            f"invalid format: expected JSON object, got {type(decoded).__name__}"
        )
    return decoded
