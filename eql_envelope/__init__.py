"""
EQL Envelope Library

Helpers for serializing and deserializing values into the shape EQL and an
encrypting database proxy need to encrypt, decrypt and search values while
they stay encrypted at all times.

The proxy expects a JSON envelope that looks like this:

    {"k":"pt","p":"a string representation of the plaintext","i":{"t":"table","c":"column"},"v":1}

Quick Start
-----------
```python
from eql_envelope import EncryptedText, EncryptedInt, unique_query

# Write path: envelope bytes for an INSERT/UPDATE parameter
data = EncryptedText("alice@example.com").serialize("users", "email")

# Read path: the proxy returns the envelope with "p" decrypted
email = EncryptedText.deserialize(data).value

# Query path: tag the value with the search operation
predicate_param = unique_query("alice@example.com", "users", "email")
```

Key Features
------------
- **Typed codecs**: text, JSON objects, integers and booleans
- **Query tags**: match, ore, unique, ste_vec and ejson_path
- **Zero value policy**: choose per column whether zero values are enveloped
- **PostgreSQL**: asyncpg-backed store that talks to the proxy
"""

__version__ = "0.1.0"

# =============================================================================
# Error Exports
# =============================================================================

from .errors import (
    ConfigError,
    EnvelopeError,
    MalformedEnvelopeError,
    ParseError,
    SerializationError,
    StorageError,
    UnsupportedTypeError,
)

# =============================================================================
# Envelope Exports
# =============================================================================

from .canonical import Plaintext, PlaintextKind, canonicalize
from .envelope import (
    ENVELOPE_VERSION,
    PLAINTEXT_KIND,
    EncryptedColumn,
    QueryType,
    TableColumn,
    build_envelope,
    extract_plaintext,
)

# =============================================================================
# Codec and Query Exports (Primary API)
# =============================================================================

from .codecs import (
    ColumnCodec,
    EncryptedBool,
    EncryptedInt,
    EncryptedJsonb,
    EncryptedText,
    EncryptedValue,
    ZeroValuePolicy,
)
from .config import Settings
from .queries import (
    ejson_path_query,
    jsonb_query,
    match_query,
    ore_query,
    serialize_query,
    unique_query,
)

# =============================================================================
# PostgreSQL Exports
# =============================================================================

from .postgres import PostgresEqlStore

# =============================================================================
# Public API
# =============================================================================

__all__ = [
    # Version
    "__version__",
    # Errors
    "EnvelopeError",
    "UnsupportedTypeError",
    "SerializationError",
    "MalformedEnvelopeError",
    "ParseError",
    "ConfigError",
    "StorageError",
    # Envelope
    "Plaintext",
    "PlaintextKind",
    "canonicalize",
    "ENVELOPE_VERSION",
    "PLAINTEXT_KIND",
    "EncryptedColumn",
    "QueryType",
    "TableColumn",
    "build_envelope",
    "extract_plaintext",
    # Codecs
    "ColumnCodec",
    "EncryptedValue",
    "EncryptedText",
    "EncryptedJsonb",
    "EncryptedInt",
    "EncryptedBool",
    "ZeroValuePolicy",
    "Settings",
    # Queries
    "match_query",
    "ore_query",
    "unique_query",
    "jsonb_query",
    "ejson_path_query",
    "serialize_query",
    # PostgreSQL
    "PostgresEqlStore",
]
