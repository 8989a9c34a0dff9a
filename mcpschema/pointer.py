"""JSON Pointers (RFC 6901) applied to schemas.

A pointer is empty, naming the root, or a sequence of slash-prefixed
segments such as ``/$defs/A``. Pointers here navigate only through
schemas and must end at a schema.
"""

from __future__ import annotations

import dataclasses
import json
import re
from typing import Any

from mcpschema.schema import Schema


class PointerError(ValueError):
    """A JSON Pointer is malformed or does not refer to a schema."""


_UNESCAPE = re.compile(r"~[01]")
_INT = re.compile(r"[+-]?[0-9]+")

_LIST_KINDS = ("schema_list", "list")
_MAP_KINDS = ("schema_map", "map")

_FIELD_KINDS: dict[str, str] = {
    f.metadata["json"]: f.metadata["kind"]
    for f in dataclasses.fields(Schema)
    if f.metadata.get("json") not in (None, "-")
}


def _q(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


def escape_segment(segment: str) -> str:
    """Escape "~" and "/" in a pointer segment."""
    return segment.replace("~", "~0").replace("/", "~1")


def unescape_segment(segment: str) -> str:
    """Undo :func:`escape_segment`."""
    return _UNESCAPE.sub(lambda m: "~" if m.group() == "~0" else "/", segment)


def parse_pointer(ptr: str) -> list[str]:
    """Split a pointer into its unescaped segments.

    Segments stay strings: whether one is an index depends on what it is
    applied to.
    """
    if ptr == "":
        return []
    if not ptr.startswith("/"):
        raise PointerError(f"JSON Pointer {_q(ptr)} does not begin with '/'")
    # Consecutive slashes are not coalesced, and a final slash gives an empty segment.
    segments = ptr[1:].split("/")
    if "~" in ptr:
        segments = [unescape_segment(seg) for seg in segments]
    return segments


def _schema_field(schema: Schema, seg: str) -> Any:
    try:
        value = schema.field(seg)
    except KeyError:
        raise PointerError(f"no schema field {_q(seg)}") from None
    if value is None:
        kind = _FIELD_KINDS.get(seg)
        if kind in _LIST_KINDS:
            return []
        if kind in _MAP_KINDS:
            return {}
    return value


def _index(items: list[Any] | tuple[Any, ...], seg: str) -> Any:
    if seg == "-":
        raise PointerError("the JSON Pointer array segment '-' is not supported")
    if len(seg) > 1 and seg[0] == "0":
        raise PointerError(f"segment {_q(seg)} has leading zeroes")
    if not _INT.fullmatch(seg):
        raise PointerError(f"invalid int: {_q(seg)}")
    n = int(seg)
    if n < 0 or n >= len(items):
        raise PointerError(
            f"index {n} is out of bounds for array of length {len(items)}"
        )
    return items[n]


def _dereference(schema: Schema, ptr: str) -> Schema:
    value: Any = schema
    for seg in parse_pointer(ptr):
        if value is None:
            raise PointerError("navigated to nil reference")
        if isinstance(value, Schema):
            value = _schema_field(value, seg)
        elif isinstance(value, (list, tuple)):
            value = _index(value, seg)
        elif isinstance(value, dict):
            if seg not in value:
                raise PointerError(f"no key {_q(seg)} in map")
            value = value[seg]
        else:
            raise PointerError(
                f"value {value!r} ({type(value).__name__}) is not a schema, list or map"
            )
    if isinstance(value, Schema):
        return value
    raise PointerError(f"does not refer to a schema, but to a {type(value).__name__}")


def dereference(schema: Schema, ptr: str) -> Schema:
    """Return the schema that ptr refers to within schema.

    Raises PointerError if there is none.
    """
    try:
        return _dereference(schema, ptr)
    except PointerError as err:
        raise PointerError(f"JSON Pointer {_q(ptr)}: {err}") from None