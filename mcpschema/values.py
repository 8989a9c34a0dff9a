"""Equality, hashing and typing of JSON values as JSON Schema understands them.

A JSON value is represented by ``None``, ``bool``, numbers (``int``, ``float``,
``fractions.Fraction`` or ``decimal.Decimal``), ``str``, lists or tuples, and
dicts. Dataclass instances are accepted wherever an object is expected.
"""

from __future__ import annotations

import dataclasses
import math
import numbers
from decimal import Decimal
from fractions import Fraction
from typing import Any


def _is_struct(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _struct_values(value: Any) -> list[Any]:
    """Return the values of the public, compared fields of a dataclass instance."""
    return [
        getattr(value, f.name)
        for f in dataclasses.fields(value)
        if f.compare and not f.name.startswith("_")
    ]


def _kind(value: Any) -> str | None:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (numbers.Rational, float, Decimal)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    if _is_struct(value):
        return "struct"
    return None


def json_number(value: Any) -> Fraction | None:
    """Return the exact rational value of a JSON number, or None if it is not one.

    Booleans are not numbers, and neither are infinities or NaNs.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Rational):
        return Fraction(value)
    if isinstance(value, float):
        return Fraction(value) if math.isfinite(value) else None
    if isinstance(value, Decimal):
        return Fraction(value) if value.is_finite() else None
    return None


def json_type(value: Any) -> str | None:
    """Return the JSON Schema type name of value, or None if it is not a JSON value.

    Numbers without a fractional part are reported as "integer".
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, numbers.Rational):
        return "integer" if Fraction(value).denominator == 1 else "number"
    if isinstance(value, float):
        return "integer" if value.is_integer() else "number"
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return "integer"
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict) or _is_struct(value):
        return "object"
    return None


def equal(x: Any, y: Any) -> bool:
    """Report whether two JSON values are equal under JSON Schema rules.

    Numbers compare by mathematical value, so ``1`` equals ``1.0``.
    Raises TypeError for values that are not JSON values.
    """
    if x is None or y is None:
        return x is None and y is None
    nx, ny = json_number(x), json_number(y)
    if nx is not None and ny is not None:
        return nx == ny
    kind = _kind(x)
    if kind != _kind(y):
        return False
    if kind == "array":
        return len(x) == len(y) and all(equal(a, b) for a, b in zip(x, y))
    if kind == "object":
        return len(x) == len(y) and all(
            key in y and equal(val, y[key]) for key, val in x.items()
        )
    if kind == "struct":
        if type(x) is not type(y):
            return False
        return all(
            equal(a, b) for a, b in zip(_struct_values(x), _struct_values(y))
        )
    if kind in ("string", "boolean", "number"):
        return x == y
    raise TypeError(f"unsupported value of type {type(x).__name__}")


def _canonical(value: Any) -> Any:
    number = json_number(value)
    if number is not None:
        return ("number", number)
    if value is None:
        return ("null",)
    if isinstance(value, bool):
        return ("boolean", value)
    if isinstance(value, str):
        return ("string", value)
    if isinstance(value, complex):
        return ("complex", value)
    if isinstance(value, (float, Decimal)):
        # Non-finite numbers.
        return ("nonfinite", repr(float(value)))
    if isinstance(value, (list, tuple)):
        return ("array", tuple(_canonical(item) for item in value))
    if isinstance(value, dict):
        for key in value:
            if not isinstance(key, str):
                raise TypeError("map with non-string key")
        return (
            "object",
            tuple((key, _canonical(value[key])) for key in sorted(value)),
        )
    if _is_struct(value):
        return (
            "struct",
            type(value).__qualname__,
            tuple(_canonical(v) for v in _struct_values(value)),
        )
    raise TypeError(f"unsupported value of type {type(value).__name__}")


def hash_value(value: Any) -> int:
    """Return a hash of a JSON value that agrees with :func:`equal`.

    Raises TypeError for values that cannot be hashed, including dicts whose
    keys are not strings.
    """
    return hash(_canonical(value))