"""
Canonical plaintext strings for EQL envelopes.

The proxy only ever sees plaintext as a string in the envelope's "p" field.
This module reduces every supported application value to that single string:

- str: unchanged
- bool: "true" / "false"
- int: base-10 decimal
- float: fixed-point with six decimals ("123.456000")
- dict: compact JSON with sorted keys

Anything else is rejected at the boundary by Plaintext.of().
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple

from .errors import SerializationError, UnsupportedTypeError

FLOAT_DECIMALS: int = 6


# =============================================================================
# Plaintext Kind Enum
# =============================================================================


class PlaintextKind(Enum):
    """Logical kind of a plaintext value."""

    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    JSONB = "jsonb"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Plaintext
# =============================================================================


@dataclass(frozen=True)
class Plaintext:
    """
    A plaintext value tagged with its logical kind.

    Construct with Plaintext.of() so the kind is decided exactly once.
    """

    kind: PlaintextKind
    value: Any

    @classmethod
    def of(cls, value: Any) -> Plaintext:
        """
        Classify a native value.

        Args:
            value: Application value

        Returns:
            Plaintext tagged with the matching kind

        Raises:
            UnsupportedTypeError: If the value is outside the supported set
        """
        # bool is a subclass of int
        if isinstance(value, bool):
            return cls(PlaintextKind.BOOLEAN, value)
        if isinstance(value, str):
            return cls(PlaintextKind.TEXT, value)
        if isinstance(value, int):
            return cls(PlaintextKind.INTEGER, value)
        if isinstance(value, float):
            if not math.isfinite(value):
                raise UnsupportedTypeError("float", f"non-finite value {value!r}")
            return cls(PlaintextKind.FLOAT, value)
        if isinstance(value, dict):
            _check_keys(value, "$")
            return cls(PlaintextKind.JSONB, value)
        raise UnsupportedTypeError(type(value).__name__)

    def canonical(self) -> str:
        """
        Render the canonical string form.

        Raises:
            SerializationError: If a JSONB value holds something JSON cannot
                encode, or an integer is too large to format
        """
        if self.kind is PlaintextKind.TEXT:
            return self.value
        if self.kind is PlaintextKind.BOOLEAN:
            return "true" if self.value else "false"
        if self.kind is PlaintextKind.INTEGER:
            try:
                return "%d" % self.value
            except ValueError as e:
                # int max_str_digits limit
                raise SerializationError(f"error formatting integer: {e}") from e
        if self.kind is PlaintextKind.FLOAT:
            return f"{self.value:.{FLOAT_DECIMALS}f}"
        return dump_json(self.value)


def _check_keys(data: Any, path: str, parents: Tuple[int, ...] = ()) -> None:
    """Reject non-str keys anywhere in a JSON object; json.dumps would coerce them."""
    if isinstance(data, (dict, list, tuple)):
        if id(data) in parents:
            raise SerializationError(f"error marshaling JSON: circular reference at {path}")
        parents = parents + (id(data),)
    if isinstance(data, dict):
        for key, item in data.items():
            if not isinstance(key, str):
                raise UnsupportedTypeError(
                    "dict", f"key {key!r} at {path} is {type(key).__name__}, not str"
                )
            _check_keys(item, f"{path}.{key}", parents)
    elif isinstance(data, (list, tuple)):
        for index, item in enumerate(data):
            _check_keys(item, f"{path}[{index}]", parents)


def dump_json(data: Dict[str, Any]) -> str:
    """Compact JSON with sorted keys, UTF-8 kept as-is."""
    try:
        return json.dumps(
            data, separators=(",", ":"), sort_keys=True, ensure_ascii=False, allow_nan=False
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(f"error marshaling JSON: {e}") from e


def canonicalize(value: Any) -> str:
    """
    Convert a supported plaintext value to its canonical string.

    Args:
        value: str, bool, int, float or dict with str keys

    Returns:
        Canonical plaintext string

    Raises:
        UnsupportedTypeError: If the value's type has no string mapping
        SerializationError: If a value cannot be rendered (unencodable JSON, oversized integer)
    """
    return Plaintext.of(value).canonical()
