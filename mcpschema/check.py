"""Preparing a schema for validation.

This covers well-formedness checks, compiling regular expressions, and
assigning base URIs and anchors to every schema in a tree.
"""

from __future__ import annotations

import json
import re
from typing import Any
from urllib.parse import urljoin, urlsplit

from mcpschema.pointer import escape_segment
from mcpschema.schema import _FIELD_INFOS, AnchorInfo, Schema, SchemaError

DRAFT_2020_12 = "https://json-schema.org/draft/2020-12/schema"
"""The value of the "$schema" keyword for the draft that can be validated."""


def _q(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


def check_structure(root: Schema) -> None:
    """Verify that root and its subschemas form a tree of non-None schemas.

    Each schema is given its path from the root, for error messages: the
    root is "root", the others their JSON Pointer from it.
    Raises SchemaError if a subschema is None or appears more than once.
    """

    def visit(schema: Any, path: str) -> None:
        where = path or "root"
        if schema is None:
            raise SchemaError(f"jsonschema: schema at {where} is nil")
        if schema._path:
            # Each schema must have a unique parent; a cycle would also make
            # Schema.all recurse forever.
            raise SchemaError(
                f"jsonschema: schemas at {root} do not form a tree; "
                f"{schema._path} appears more than once (also at {where})"
            )
        schema._path = where
        for info in _FIELD_INFOS:
            value = getattr(schema, info.attr)
            if info.kind == "schema":
                if value is not None:
                    visit(value, f"{path}/{info.json_name}")
            elif info.kind == "schema_list":
                for i, child in enumerate(value or ()):
                    visit(child, f"{path}/{info.json_name}/{i}")
            elif info.kind == "schema_map":
                for key in sorted(value or {}):
                    visit(value[key], f"{path}/{info.json_name}/{escape_segment(key)}")

    visit(root, "")


def check_local(schema: Schema | None) -> list[SchemaError]:
    """Check schema on its own, without the schemas it refers to.

    Compiles its regular expressions and records its required properties
    for later validation. Returns the problems found.
    """
    if schema is None:
        return [SchemaError("jsonschema.Schema: <nil>: nil subschema")]
    errors: list[SchemaError] = []

    def add(msg: str) -> None:
        errors.append(SchemaError(f"jsonschema.Schema: {schema}: {msg}"))

    try:
        schema.basic_checks()
    except SchemaError as err:
        return [err]

    # $vocabulary is kept for round trips but only the 2020-12 meta-schema's
    # use of it can be validated.
    if schema.vocabulary is not None and schema.schema != DRAFT_2020_12:
        add("cannot validate a schema with $vocabulary")

    if schema.pattern:
        try:
            schema._pattern = re.compile(schema.pattern)
        except re.error as err:
            add(f"pattern: error parsing regexp: {err}")

    if schema.pattern_properties:
        compiled = []
        for source, subschema in schema.pattern_properties.items():
            try:
                compiled.append((re.compile(source), subschema))
            except re.error as err:
                add(f"patternProperties[{_q(source)}]: error parsing regexp: {err}")
        schema._pattern_properties = compiled

    if schema.required:
        schema._is_required = set(schema.required)
    return errors


def check(root: Schema) -> None:
    """Check the structure of root and every schema in it.

    Raises SchemaError describing every problem found.
    """
    check_structure(root)
    errors = [err for schema in root.all() for err in check_local(schema)]
    if errors:
        raise SchemaError("\n".join(str(err) for err in errors))


def _is_absolute(uri: str) -> bool:
    return bool(urlsplit(uri).scheme)


def resolve_uris(root: Schema, base_uri: str) -> dict[str, Schema]:
    """Assign base URIs and anchors to root and its subschemas.

    A schema with an $id gets that $id resolved against its parent's base;
    one without inherits its parent's base. The root starts with base_uri.
    Returns a map from each URI to its schema; base_uri always maps to root.
    Raises SchemaError for an $id with a fragment or one that does not
    resolve to an absolute URI.
    """
    resolved: dict[str, Schema] = {}

    def visit(schema: Schema, base: Schema) -> None:
        if schema.id:
            try:
                parsed = urlsplit(schema.id)
            except ValueError as err:
                raise SchemaError(f"$id {schema.id}: {err}") from None
            if parsed.fragment:
                raise SchemaError(f"$id {schema.id} must not have a fragment")
            schema._uri = urljoin(base._uri or "", schema.id)
            if not _is_absolute(schema._uri):
                raise SchemaError(
                    f"$id {schema.id} does not resolve to an absolute URI "
                    f"(base is {base._uri})"
                )
            resolved[schema._uri] = schema
            base = schema
        schema._base = base

        # Anchors are scoped to their base; the first one of a name wins.
        for anchor, dynamic in ((schema.anchor, False), (schema.dynamic_anchor, True)):
            if anchor:
                if base._anchors is None:
                    base._anchors = {}
                base._anchors.setdefault(anchor, AnchorInfo(schema, dynamic))

        for child in schema.children():
            if child is not None:
                visit(child, base)

    root._uri = base_uri
    # The original base still names the root even if the root has an $id.
    resolved[base_uri] = root
    visit(root, root)
    return resolved