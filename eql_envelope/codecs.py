"""
Typed codecs for encrypted columns.

This module provides:
- ZeroValuePolicy: whether a zero value is enveloped or left unset
- EncryptedText, EncryptedJsonb, EncryptedInt, EncryptedBool: typed wrappers
  that serialize to EQL envelopes and deserialize proxy output
- ColumnCodec: a wrapper type bound to one table/column and policy

Zero values:
- Text "", Jsonb {} and Bool False serialize to b"" by default, which tells
  the data-access layer to leave the column unset.
- Int 0 is always enveloped by default.
- Under ZeroValuePolicy.OMIT a Bool False cannot be told apart from an
  unset column. Use ZeroValuePolicy.ENCRYPT for columns where False matters.
- None is always treated as an unset column.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Type, TypeVar, Union

from .canonical import PlaintextKind
from .envelope import RawEnvelope, build_envelope, extract_plaintext
from .errors import ConfigError, MalformedEnvelopeError, ParseError, UnsupportedTypeError

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

V = TypeVar("V", bound="EncryptedValue")


# =============================================================================
# Zero Value Policy Enum
# =============================================================================


class ZeroValuePolicy(Enum):
    """How a type's zero value is written."""

    OMIT = "omit"  # Serialize to b"" (column unset)
    ENCRYPT = "encrypt"  # Serialize to a real envelope

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_str(cls, s: str) -> ZeroValuePolicy:
        """Parse from string."""
        try:
            return cls(s.strip().lower())
        except ValueError:
            raise ConfigError(f"Invalid zero value policy: {s!r}")


# =============================================================================
# Base Wrapper
# =============================================================================


@dataclass(frozen=True)
class EncryptedValue(ABC):
    """
    Base class for a plaintext value bound for an encrypted column.

    Subclasses set the native type, the plaintext kind and the default
    zero value policy, and implement _parse() for the read path.
    """

    value: Any

    kind: ClassVar[PlaintextKind]
    native_types: ClassVar[Tuple[type, ...]]
    default_zero_policy: ClassVar[ZeroValuePolicy] = ZeroValuePolicy.OMIT

    def __post_init__(self) -> None:
        if self.value is None:
            return
        # bool is an int subclass; only EncryptedBool accepts it
        if isinstance(self.value, bool) and bool not in self.native_types:
            raise UnsupportedTypeError("bool", f"{type(self).__name__} expects {self.kind}")
        if not isinstance(self.value, self.native_types):
            raise UnsupportedTypeError(
                type(self.value).__name__, f"{type(self).__name__} expects {self.kind}"
            )

    def is_zero(self) -> bool:
        """Return True if the value is the type's zero value."""
        return not self.value

    def serialize(
        self,
        table: str,
        column: str,
        zero_policy: Optional[ZeroValuePolicy] = None,
    ) -> bytes:
        """
        Turn the value into a JSON envelope for the proxy.

        Args:
            table: Table the column belongs to
            column: Column name
            zero_policy: Override of the type's default zero value policy

        Returns:
            Envelope bytes, or b"" when the column should be left unset

        Raises:
            SerializationError: If the envelope cannot be built
        """
        policy = zero_policy or self.default_zero_policy
        if self.value is None or (self.is_zero() and policy is ZeroValuePolicy.OMIT):
            logger.debug("Skipping zero %s value for %s.%s", self.kind, table, column)
            return b""

        return build_envelope(self.value, table, column).to_bytes()

    @classmethod
    def deserialize(cls: Type[V], data: Optional[RawEnvelope]) -> V:
        """
        Turn an envelope returned by the proxy back into a typed value.

        Args:
            data: Envelope bytes or text; None or empty means the column was unset

        Returns:
            Typed wrapper instance

        Raises:
            MalformedEnvelopeError: If data is not an envelope with a string "p"
            ParseError: If "p" cannot be parsed as the target type
        """
        if data is None or len(data) == 0:
            return cls.empty()
        plaintext = extract_plaintext(data)
        try:
            return cls(cls._parse(plaintext))
        except ParseError as e:
            logger.debug("Failed to parse %s plaintext: %s", cls.kind, e)
            raise

    @classmethod
    @abstractmethod
    def empty(cls: Type[V]) -> V:
        """Value returned when the stored column is empty."""

    @classmethod
    @abstractmethod
    def _parse(cls, plaintext: str) -> Any:
        """Convert the plaintext string to the native value."""


# =============================================================================
# Typed Wrappers
# =============================================================================


@dataclass(frozen=True)
class EncryptedText(EncryptedValue):
    """A string value to be encrypted."""

    value: Optional[str] = ""

    kind: ClassVar[PlaintextKind] = PlaintextKind.TEXT
    native_types: ClassVar[Tuple[type, ...]] = (str,)

    @classmethod
    def empty(cls) -> EncryptedText:
        return cls("")

    @classmethod
    def _parse(cls, plaintext: str) -> str:
        return plaintext


@dataclass(frozen=True)
class EncryptedJsonb(EncryptedValue):
    """A JSON object value to be encrypted."""

    value: Optional[Dict[str, Any]] = field(default_factory=dict)

    kind: ClassVar[PlaintextKind] = PlaintextKind.JSONB
    native_types: ClassVar[Tuple[type, ...]] = (dict,)

    @classmethod
    def empty(cls) -> EncryptedJsonb:
        return cls({})

    @classmethod
    def _parse(cls, plaintext: str) -> Dict[str, Any]:
        try:
            data = json.loads(plaintext)
        except ValueError as e:
            raise ParseError("JSON", plaintext, str(e)) from e
        if not isinstance(data, dict):
            raise ParseError("JSON", plaintext, f"expected object, got {type(data).__name__}")
        return data


@dataclass(frozen=True)
class EncryptedInt(EncryptedValue):
    """An integer value to be encrypted. Zero is always enveloped by default."""

    value: Optional[int] = 0

    kind: ClassVar[PlaintextKind] = PlaintextKind.INTEGER
    native_types: ClassVar[Tuple[type, ...]] = (int,)
    default_zero_policy: ClassVar[ZeroValuePolicy] = ZeroValuePolicy.ENCRYPT

    @classmethod
    def empty(cls) -> EncryptedInt:
        raise MalformedEnvelopeError("invalid format: empty input for integer column")

    @classmethod
    def _parse(cls, plaintext: str) -> int:
        if not _INTEGER_RE.fullmatch(plaintext):
            raise ParseError("number", plaintext)
        try:
            return int(plaintext)
        except ValueError as e:
            # int max_str_digits limit
            raise ParseError("number", plaintext, str(e)) from e


@dataclass(frozen=True)
class EncryptedBool(EncryptedValue):
    """A boolean value to be encrypted. False is left unset by default."""

    value: Optional[bool] = False

    kind: ClassVar[PlaintextKind] = PlaintextKind.BOOLEAN
    native_types: ClassVar[Tuple[type, ...]] = (bool,)

    @classmethod
    def empty(cls) -> EncryptedBool:
        return cls(False)

    @classmethod
    def _parse(cls, plaintext: str) -> bool:
        if plaintext == "true":
            return True
        if plaintext == "false":
            return False
        raise ParseError("boolean", plaintext)


# =============================================================================
# Column Binding
# =============================================================================


@dataclass(frozen=True)
class ColumnCodec:
    """
    Codec bound to one encrypted column.

    Lets a data-access layer declare the zero value policy per field
    instead of relying on the type default.
    """

    table: str
    column: str
    value_type: Type[EncryptedValue]
    zero_policy: Optional[ZeroValuePolicy] = None

    def wrap(self, value: Any) -> EncryptedValue:
        if isinstance(value, self.value_type):
            return value
        if isinstance(value, EncryptedValue):
            raise UnsupportedTypeError(
                type(value).__name__, f"column {self.table}.{self.column} expects {self.value_type.__name__}"
            )
        return self.value_type(value)

    def serialize(self, value: Union[EncryptedValue, Any]) -> bytes:
        """Serialize a native or wrapped value for this column."""
        return self.wrap(value).serialize(self.table, self.column, self.zero_policy)

    def deserialize(self, data: Optional[RawEnvelope]) -> Any:
        """Deserialize proxy output to the native value."""
        return self.value_type.deserialize(data).value
