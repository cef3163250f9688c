"""
Exception classes for EQL envelope operations.

Every error raised by this package derives from EnvelopeError so that a
data-access layer can catch the whole family in one place.
"""

from __future__ import annotations


class EnvelopeError(Exception):
    """Base exception for all EQL envelope operations."""

    pass


class UnsupportedTypeError(EnvelopeError):
    """Value has no canonical plaintext string form."""

    def __init__(self, type_name: str, detail: str = "") -> None:
        self.type_name = type_name
        message = f"unsupported type: {type_name}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class SerializationError(EnvelopeError):
    """Envelope could not be built or encoded as JSON."""

    pass


class MalformedEnvelopeError(EnvelopeError):
    """Input is not a JSON envelope with a string 'p' field."""

    pass


class ParseError(EnvelopeError):
    """Plaintext string cannot be parsed as the target type."""

    def __init__(self, target: str, plaintext: str, detail: str = "") -> None:
        self.target = target
        self.plaintext = plaintext
        message = f"invalid {target} format in 'p' field: {plaintext!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ConfigError(EnvelopeError):
    """Configuration error."""

    pass


class StorageError(EnvelopeError):
    """Database error while reading or writing encrypted columns."""

    pass
