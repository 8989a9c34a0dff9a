"""Filling in property defaults of object instances."""

from __future__ import annotations

import copy
import dataclasses
from typing import Any

from mcpschema.properties import _is_zero, get_property, has_property
from mcpschema.schema import ABSENT, Schema


def apply_defaults(schema: Schema, instance: Any) -> None:
    """Set missing or zero properties of instance to their defaults, in place.

    Only the defaults of the schema's own properties are used, and only for
    properties that are not required. A dict gains each missing property
    that has a default. A dataclass field that exists but holds a zero value
    is set to the default. Other instances are left alone.

    Raises TypeError if a dict instance has a key that is not a string.
    """
    is_dict = isinstance(instance, dict)
    is_struct = dataclasses.is_dataclass(instance) and not isinstance(instance, type)
    if not (is_dict or is_struct):
        return
    if is_dict:
        for key in instance:
            if not isinstance(key, str):
                raise TypeError(
                    f"apply_defaults: schema {schema}: map key {key!r} is not a string"
                )
    required = set(schema.required or ())
    for prop, subschema in (schema.properties or {}).items():
        # A required property should not have a default.
        if prop in required or subschema is None or subschema.default is ABSENT:
            continue
        if not has_property(instance, prop):
            if is_dict:
                instance[prop] = copy.deepcopy(subschema.default)
            continue
        if is_struct and _is_zero(get_property(instance, prop)):
            attr = _attribute_for(instance, prop)
            setattr(instance, attr, copy.deepcopy(subschema.default))


def _attribute_for(instance: Any, prop: str) -> str:
    for f in dataclasses.fields(instance):
        if f.name.startswith("_"):
            continue
        name = f.metadata.get("json") or f.name
        if name == prop:
            return f.name
    raise KeyError(prop)