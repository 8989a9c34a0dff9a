"""Conversion of schemas to and from JSON.

A boolean schema decodes to its object form: ``true`` is the empty schema and
``false`` is ``{"not": {}}``. Keywords that are not fields of :class:`Schema`
are kept in ``Schema.extra`` and written back after the known keywords, in
key order. Map keys are always written in sorted order.
"""

from __future__ import annotations

import dataclasses
import json
import math
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Any

from mcpschema.schema import ABSENT, Schema, SchemaError, false_schema


class SchemaDecodeError(ValueError):
    """JSON text or data does not describe a schema."""


_INT_FIELDS = frozenset(
    {
        "minLength",
        "maxLength",
        "minItems",
        "maxItems",
        "minProperties",
        "maxProperties",
        "minContains",
        "maxContains",
    }
)
_FLOAT_FIELDS = frozenset(
    {"multipleOf", "minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum"}
)
_ANY_FIELDS = frozenset({"const", "default"})
_STRING_LISTS = frozenset({"required"})

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class _Field:
    json_name: str
    attr: str
    kind: str
    default: Any


_FIELDS: list[_Field] = [
    _Field(f.metadata["json"], f.name, f.metadata["kind"], f.default)
    for f in dataclasses.fields(Schema)
    if f.metadata.get("json") not in (None, "-")
]

# Every key that the encoder writes for a known keyword.
_KNOWN = frozenset({"type"} | {f.json_name for f in _FIELDS})

_OMIT = object()


def _q(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


def _json_kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float, Decimal, Fraction)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


# ---------------------------------------------------------------- encoding


def _number(value: Any) -> int | float:
    f = float(value)
    if not math.isfinite(f):
        raise ValueError(f"unsupported value: {f!r}")
    if f.is_integer() and abs(f) < 1e21:
        return int(f)
    return f


def _to_json(value: Any) -> Any:
    """Return value as plain JSON data, with numbers in their shortest form."""
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal, Fraction)):
        return _number(value)
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    if isinstance(value, dict):
        for key in value:
            if not isinstance(key, str):
                raise TypeError(f"map key {key!r} is not a string")
        return {key: _to_json(value[key]) for key in sorted(value)}
    raise TypeError(f"unsupported value of type {type(value).__name__}")


def _encode_field(info: _Field, value: Any) -> Any:
    kind = info.kind
    if kind == "schema":
        return _OMIT if value is None else schema_to_dict(value)
    if kind == "schema_list":
        if not value:
            return _OMIT
        return [None if s is None else schema_to_dict(s) for s in value]
    if kind == "schema_map":
        if not value:
            return _OMIT
        return {
            key: None if value[key] is None else schema_to_dict(value[key])
            for key in sorted(value)
        }
    if kind == "list":
        if not value:
            return _OMIT
        if info.json_name in _STRING_LISTS:
            return list(value)
        return [_to_json(item) for item in value]
    if kind == "map":
        if not value:
            return _OMIT
        if info.json_name == "$vocabulary":
            return {key: bool(value[key]) for key in sorted(value)}
        return {key: list(value[key] or ()) for key in sorted(value)}
    # Plain keyword values.
    name = info.json_name
    if name in _ANY_FIELDS:
        return _OMIT if value is ABSENT else _to_json(value)
    if name in _INT_FIELDS:
        return _OMIT if value is None else int(value)
    if name in _FLOAT_FIELDS:
        return _OMIT if value is None else _number(value)
    # Strings and booleans are omitted when empty or false.
    return value if value else _OMIT


def schema_to_dict(schema: Schema) -> dict[str, Any]:
    """Return the JSON object form of schema.

    Raises SchemaError if type and types are both set, if defs and definitions
    are both set, or if an extra keyword has the name of a known one.
    """
    schema.basic_checks()
    extra = schema.extra or {}
    for key in extra:
        if key in _KNOWN:
            raise SchemaError(f"map key {_q(key)} duplicates struct field")
    out: dict[str, Any] = {}
    if schema.type:
        out["type"] = schema.type
    elif schema.types is not None:
        out["type"] = list(schema.types)
    for info in _FIELDS:
        encoded = _encode_field(info, getattr(schema, info.attr))
        if encoded is not _OMIT:
            out[info.json_name] = encoded
    for key in sorted(extra):
        out[key] = _to_json(extra[key])
    return out


def dumps(schema: Schema) -> str:
    """Return the compact JSON text of schema."""
    return json.dumps(
        schema_to_dict(schema), separators=(",", ":"), ensure_ascii=False
    )


# ---------------------------------------------------------------- decoding


def _plain(value: Any) -> Any:
    """Turn decoded JSON data into plain Python values, numbers as int or float."""
    if isinstance(value, Decimal):
        f = float(value)
        if not math.isfinite(f):
            raise SchemaDecodeError(f"number {value} is out of range")
        return f
    if isinstance(value, dict):
        return {key: _plain(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def _mismatch(name: str, value: Any, want: str) -> SchemaDecodeError:
    return SchemaDecodeError(
        f"cannot unmarshal {_json_kind(value)} into field {name} of type {want}"
    )


def _decode_int(name: str, value: Any) -> int:
    def fail(msg: str) -> SchemaDecodeError:
        return SchemaDecodeError(f"{name}: {msg}")

    if isinstance(value, Decimal):
        text = str(value)
        has_point = "." in text
        if not has_point and ("E" in text or "e" in text):
            raise fail("cannot be unmarshaled into an int")
    elif isinstance(value, float):
        has_point = True
    elif isinstance(value, int) and not isinstance(value, bool):
        has_point = False
    else:
        try:
            text = json.dumps(value, default=str)
        except (TypeError, ValueError):
            text = str(value)
        if "." in text:
            raise fail("not a number")
        raise fail("cannot be unmarshaled into an int")

    if has_point:
        f = float(value)
        if not math.isfinite(f) or abs(f) >= 2**63 or not f.is_integer():
            raise fail("not an integer value")
        i = int(f)
    else:
        i = int(value)
        if not _INT64_MIN <= i <= _INT64_MAX:
            raise fail("cannot be unmarshaled into an int")
    if not _INT32_MIN <= i <= _INT32_MAX:
        raise fail("integer is out of range")
    return i


def _decode_schema_list(name: str, value: Any) -> list[Schema | None] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise _mismatch(name, value, "array of schemas")
    return [None if item is None else schema_from_dict(item) for item in value]


def _decode_schema_map(name: str, value: Any) -> dict[str, Schema | None] | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise _mismatch(name, value, "map of schemas")
    return {
        key: None if item is None else schema_from_dict(item)
        for key, item in value.items()
    }


def _decode_string_list(name: str, value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(x, str) for x in value):
        raise _mismatch(name, value, "array of strings")
    return list(value)


def _decode_field(info: _Field, value: Any) -> Any:
    name = info.json_name
    kind = info.kind
    if kind == "schema":
        return None if value is None else schema_from_dict(value)
    if kind == "schema_list":
        return _decode_schema_list(name, value)
    if kind == "schema_map":
        return _decode_schema_map(name, value)
    if kind == "list":
        if value is None:
            return None
        if name in _STRING_LISTS:
            return _decode_string_list(name, value)
        if not isinstance(value, list):
            raise _mismatch(name, value, "array")
        return [_plain(item) for item in value]
    if kind == "map":
        if value is None:
            return None
        if not isinstance(value, dict):
            raise _mismatch(name, value, "object")
        if name == "$vocabulary":
            out: dict[str, Any] = {}
            for key, item in value.items():
                if item is not None and not isinstance(item, bool):
                    raise _mismatch(name, item, "bool")
                out[key] = bool(item)
            return out
        return {
            key: [] if item is None else _decode_string_list(name, item)
            for key, item in value.items()
        }
    if name in _ANY_FIELDS:
        return _plain(value)
    if name in _INT_FIELDS:
        return None if value is None else _decode_int(name, value)
    if name in _FLOAT_FIELDS:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(
            value, (int, float, Decimal, Fraction)
        ):
            raise _mismatch(name, value, "number")
        return float(value)
    if info.default == "":
        if value is None:
            return ""
        if not isinstance(value, str):
            raise _mismatch(name, value, "string")
        return value
    # Boolean keywords.
    if value is None:
        return False
    if not isinstance(value, bool):
        raise _mismatch(name, value, "bool")
    return value


def _decode_type(value: Any) -> tuple[str, list[str] | None]:
    if isinstance(value, str):
        return value, None
    if isinstance(value, list) and all(isinstance(x, str) for x in value):
        return "", list(value)
    raise SchemaDecodeError(
        f"invalid value for \"type\": {json.dumps(_to_json_safe(value))}"
    )


def _to_json_safe(value: Any) -> Any:
    try:
        return _to_json(value)
    except (TypeError, ValueError):
        return str(value)


def schema_from_dict(data: Any) -> Schema:
    """Build a schema from decoded JSON data: an object or a boolean.

    Raises SchemaDecodeError if data does not describe a schema.
    """
    if isinstance(data, bool):
        return Schema() if data else false_schema()
    if not isinstance(data, dict):
        raise SchemaDecodeError(f"cannot unmarshal {_json_kind(data)} into a schema")
    kwargs: dict[str, Any] = {}
    for info in _FIELDS:
        if info.json_name in data:
            kwargs[info.attr] = _decode_field(info, data[info.json_name])
    if "type" in data:
        kwargs["type"], kwargs["types"] = _decode_type(data["type"])
    extra = {key: _plain(val) for key, val in data.items() if key not in _KNOWN}
    if extra:
        kwargs["extra"] = extra
    return Schema(**kwargs)


def _reject_constant(name: str) -> Any:
    raise SchemaDecodeError(f"invalid JSON value {name}")


def loads(text: str | bytes) -> Schema:
    """Parse JSON text into a schema.

    Raises SchemaDecodeError if the text is not JSON or not a schema.
    """
    try:
        data = json.loads(text, parse_float=Decimal, parse_constant=_reject_constant)
    except json.JSONDecodeError as err:
        raise SchemaDecodeError(str(err)) from err
    return schema_from_dict(data)