"""The Schema type: a JSON Schema object of the 2020-12 draft."""

from __future__ import annotations

import dataclasses
import json
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


class SchemaError(ValueError):
    """A schema is malformed."""


@dataclass(frozen=True, repr=False)
class _Absent:
    """Marks a keyword whose value may be JSON null as not present."""

    def __repr__(self) -> str:
        return "ABSENT"

    def __copy__(self) -> _Absent:
        return self

    def __deepcopy__(self, memo: dict) -> _Absent:
        return self

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()

_SCHEMA = "schema"
_SCHEMA_LIST = "schema_list"
_SCHEMA_MAP = "schema_map"
_LIST = "list"
_MAP = "map"
_VALUE = "value"


def _kw(json_name: str, kind: str = _VALUE, default: Any = None) -> Any:
    return field(default=default, metadata={"json": json_name, "kind": kind})


def _computed(default: Any = None) -> Any:
    return field(default=default, init=False, repr=False, compare=False)


@dataclass(frozen=True)
class AnchorInfo:
    """The subschema an anchor names, and whether it is a $dynamicAnchor."""

    schema: Schema
    dynamic: bool


@dataclass(eq=False, kw_only=True)
class Schema:
    """A JSON Schema object.

    ``None`` (or an empty string, or False) means a keyword is absent. An empty
    list or dict is present and takes part in validation. The ``const`` and
    ``default`` keywords use :data:`ABSENT`, because JSON null is a valid value
    for them. ``type`` and ``types`` are mutually exclusive.
    """

    # core
    id: str = _kw("$id", default="")
    schema: str = _kw("$schema", default="")
    ref: str = _kw("$ref", default="")
    comment: str = _kw("$comment", default="")
    defs: dict[str, Schema] | None = _kw("$defs", _SCHEMA_MAP)
    definitions: dict[str, Schema] | None = _kw("definitions", _SCHEMA_MAP)
    anchor: str = _kw("$anchor", default="")
    dynamic_anchor: str = _kw("$dynamicAnchor", default="")
    dynamic_ref: str = _kw("$dynamicRef", default="")
    vocabulary: dict[str, bool] | None = _kw("$vocabulary", _MAP)

    # metadata
    title: str = _kw("title", default="")
    description: str = _kw("description", default="")
    default: Any = _kw("default", default=ABSENT)
    deprecated: bool = _kw("deprecated", default=False)
    read_only: bool = _kw("readOnly", default=False)
    write_only: bool = _kw("writeOnly", default=False)
    examples: list[Any] | None = _kw("examples", _LIST)

    # validation
    type: str = _kw("-", default="")
    types: list[str] | None = _kw("-", _LIST)
    enum: list[Any] | None = _kw("enum", _LIST)
    const: Any = _kw("const", default=ABSENT)
    multiple_of: float | None = _kw("multipleOf")
    minimum: float | None = _kw("minimum")
    maximum: float | None = _kw("maximum")
    exclusive_minimum: float | None = _kw("exclusiveMinimum")
    exclusive_maximum: float | None = _kw("exclusiveMaximum")
    min_length: int | None = _kw("minLength")
    max_length: int | None = _kw("maxLength")
    pattern: str = _kw("pattern", default="")

    # arrays
    prefix_items: list[Schema] | None = _kw("prefixItems", _SCHEMA_LIST)
    items: Schema | None = _kw("items", _SCHEMA)
    min_items: int | None = _kw("minItems")
    max_items: int | None = _kw("maxItems")
    additional_items: Schema | None = _kw("additionalItems", _SCHEMA)
    unique_items: bool = _kw("uniqueItems", default=False)
    contains: Schema | None = _kw("contains", _SCHEMA)
    min_contains: int | None = _kw("minContains")
    max_contains: int | None = _kw("maxContains")
    unevaluated_items: Schema | None = _kw("unevaluatedItems", _SCHEMA)

    # objects
    min_properties: int | None = _kw("minProperties")
    max_properties: int | None = _kw("maxProperties")
    required: list[str] | None = _kw("required", _LIST)
    dependent_required: dict[str, list[str]] | None = _kw("dependentRequired", _MAP)
    properties: dict[str, Schema] | None = _kw("properties", _SCHEMA_MAP)
    pattern_properties: dict[str, Schema] | None = _kw("patternProperties", _SCHEMA_MAP)
    additional_properties: Schema | None = _kw("additionalProperties", _SCHEMA)
    property_names: Schema | None = _kw("propertyNames", _SCHEMA)
    unevaluated_properties: Schema | None = _kw("unevaluatedProperties", _SCHEMA)

    # logic
    all_of: list[Schema] | None = _kw("allOf", _SCHEMA_LIST)
    any_of: list[Schema] | None = _kw("anyOf", _SCHEMA_LIST)
    one_of: list[Schema] | None = _kw("oneOf", _SCHEMA_LIST)
    not_: Schema | None = _kw("not", _SCHEMA)

    # conditional
    if_: Schema | None = _kw("if", _SCHEMA)
    then: Schema | None = _kw("then", _SCHEMA)
    else_: Schema | None = _kw("else", _SCHEMA)
    dependent_schemas: dict[str, Schema] | None = _kw("dependentSchemas", _SCHEMA_MAP)

    # other
    content_encoding: str = _kw("contentEncoding", default="")
    content_media_type: str = _kw("contentMediaType", default="")
    content_schema: Schema | None = _kw("contentSchema", _SCHEMA)
    format: str = _kw("format", default="")

    # keywords beyond those above
    extra: dict[str, Any] | None = _kw("-", _MAP)

    # Computed during resolution.
    # The innermost enclosing schema (possibly this one) that is the root or has an $id.
    _base: Schema | None = _computed()
    # The URI of the schema if it is the root or has an $id.
    _uri: str | None = _computed()
    # The JSON Pointer from the root to here, for error messages.
    _path: str = _computed("")
    _resolved_ref: Schema | None = _computed()
    # Exactly one of the next two is set for a resolved $dynamicRef.
    _resolved_dynamic_ref: Schema | None = _computed()
    _dynamic_ref_anchor: str = _computed("")
    _anchors: dict[str, AnchorInfo] | None = _computed()
    _pattern: re.Pattern[str] | None = _computed()
    _pattern_properties: list[tuple[re.Pattern[str], Schema]] | None = _computed()
    _is_required: set[str] | None = _computed()

    def __str__(self) -> str:
        if self._uri:
            return self._uri
        anchor = self.anchor or self.dynamic_anchor
        if anchor:
            base = self._base
            base_uri = base._uri if base is not None and base._uri is not None else ""
            return f"{json.dumps(base_uri)}, anchor {anchor}"
        if self._path:
            return self._path
        return "<anonymous schema>"

    def basic_checks(self) -> None:
        """Raise SchemaError if mutually exclusive keywords are both set."""
        if self.type and self.types is not None:
            raise SchemaError("both type and types are set; at most one should be")
        if self.defs is not None and self.definitions is not None:
            raise SchemaError("both defs and definitions are set; at most one should be")

    def children(self) -> Iterator[Schema]:
        """Yield the immediate subschemas, ordered by keyword, map entries by key.

        Absent single subschemas are skipped; None entries in lists and maps
        are yielded as they are.
        """
        for info in _FIELD_INFOS:
            value = getattr(self, info.attr)
            if info.kind == _SCHEMA:
                if value is not None:
                    yield value
            elif info.kind == _SCHEMA_LIST:
                yield from value or ()
            elif info.kind == _SCHEMA_MAP and value:
                for key in sorted(value):
                    yield value[key]

    def all(self) -> Iterator[Schema]:
        """Yield this schema and every schema under it, in preorder."""
        yield self
        for child in self.children():
            yield from child.all()

    def field(self, json_name: str) -> Any:
        """Return the value of the keyword json_name.

        "type" gives ``type`` if it is set and ``types`` otherwise.
        Raises KeyError for a name that is not a keyword of Schema.
        """
        if json_name == "type":
            return self.type if self.type else self.types
        info = _FIELDS_BY_JSON.get(json_name)
        if info is None:
            raise KeyError(json_name)
        return getattr(self, info.attr)


@dataclass(frozen=True)
class _FieldInfo:
    json_name: str
    attr: str
    kind: str


_FIELD_INFOS: list[_FieldInfo] = sorted(
    (
        _FieldInfo(f.metadata["json"], f.name, f.metadata["kind"])
        for f in dataclasses.fields(Schema)
        if f.metadata.get("json") not in (None, "-")
    ),
    key=lambda info: info.json_name,
)

_FIELDS_BY_JSON: dict[str, _FieldInfo] = {info.json_name: info for info in _FIELD_INFOS}


def false_schema() -> Schema:
    """Return a new schema that no value satisfies."""
    return Schema(not_=Schema())