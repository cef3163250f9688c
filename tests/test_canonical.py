"""Tests for canonical plaintext strings."""

from __future__ import annotations

import sys

import pytest

from eql_envelope import (
    Plaintext,
    PlaintextKind,
    SerializationError,
    UnsupportedTypeError,
    canonicalize,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("test_string", "test_string"),
        ("", ""),
        (123, "123"),
        (-42, "-42"),
        (0, "0"),
        (2**70, "1180591620717411303424"),
        (123.456, "123.456000"),
        (-0.5, "-0.500000"),
        (1e20, "100000000000000000000.000000"),
        (True, "true"),
        (False, "false"),
        ({"key": "value"}, '{"key":"value"}'),
        ({}, "{}"),
    ],
)
def test_canonicalize(value, expected):
    assert canonicalize(value) == expected


def test_canonicalize_dict_is_compact_with_sorted_keys():
    value = {"name": "Alice", "age": 30, "tags": ["a", "b"], "nested": {"z": 1, "a": None}}

    assert canonicalize(value) == (
        '{"age":30,"name":"Alice","nested":{"a":null,"z":1},"tags":["a","b"]}'
    )


def test_canonicalize_dict_keeps_unicode():
    assert canonicalize({"city": "Zürich"}) == '{"city":"Zürich"}'


@pytest.mark.parametrize("value", [[1, 2, 3], (1, 2), {1, 2}, None, b"bytes", object()])
def test_canonicalize_unsupported_type(value):
    with pytest.raises(UnsupportedTypeError) as exc_info:
        canonicalize(value)

    assert exc_info.value.type_name == type(value).__name__
    assert type(value).__name__ in str(exc_info.value)


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_canonicalize_rejects_non_finite_floats(value):
    with pytest.raises(UnsupportedTypeError):
        canonicalize(value)


def test_canonicalize_rejects_non_string_keys():
    with pytest.raises(UnsupportedTypeError):
        canonicalize({1: "one"})


def test_canonicalize_dict_with_unencodable_value():
    with pytest.raises(SerializationError):
        canonicalize({"when": object()})


def test_plaintext_kind_checks_bool_before_int():
    assert Plaintext.of(True).kind is PlaintextKind.BOOLEAN
    assert Plaintext.of(1).kind is PlaintextKind.INTEGER
    assert Plaintext.of(1.0).kind is PlaintextKind.FLOAT
    assert Plaintext.of("1").kind is PlaintextKind.TEXT
    assert Plaintext.of({"a": 1}).kind is PlaintextKind.JSONB


def test_canonicalize_rejects_nested_non_string_keys():
    with pytest.raises(UnsupportedTypeError) as exc_info:
        canonicalize({"a": {1: "x"}})

    assert "$.a" in str(exc_info.value)


def test_canonicalize_rejects_non_string_keys_inside_lists():
    with pytest.raises(UnsupportedTypeError):
        canonicalize({"items": [{"ok": 1}, {2: "two"}]})


def test_canonicalize_circular_dict():
    value = {"name": "loop"}
    value["self"] = value

    with pytest.raises(SerializationError):
        canonicalize(value)


def test_canonicalize_repeated_shared_dict_is_not_circular():
    shared = {"k": "v"}

    assert canonicalize({"a": shared, "b": shared}) == '{"a":{"k":"v"},"b":{"k":"v"}}'


@pytest.mark.skipif(
    not hasattr(sys, "get_int_max_str_digits") or sys.get_int_max_str_digits() == 0,
    reason="interpreter has no integer string conversion limit",
)
def test_canonicalize_integer_over_digit_limit():
    with pytest.raises(SerializationError):
        canonicalize(10 ** (sys.get_int_max_str_digits() + 1))
