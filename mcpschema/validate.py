"""Validation of JSON values against prepared schemas."""

from __future__ import annotations

import dataclasses
import json
import math
import re
from fractions import Fraction
from typing import Any

from mcpschema.annotations import Annotations
from mcpschema.properties import (
    _is_zero,
    get_property,
    has_property,
    iter_properties,
    num_properties_bounds,
)
from mcpschema.schema import ABSENT, Schema
from mcpschema.values import equal, hash_value, json_number, json_type


class ValidationError(ValueError):
    """An instance does not satisfy a schema."""


def _q(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


def _fail(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(f"assertion failed: {message}")


def _is_struct(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _required(schema: Schema) -> set[str]:
    if schema._is_required is not None:
        return schema._is_required
    return set(schema.required or ())


def _pattern(schema: Schema) -> re.Pattern[str]:
    if schema._pattern is None:
        schema._pattern = re.compile(schema.pattern)
    return schema._pattern


def _pattern_properties(schema: Schema) -> list[tuple[re.Pattern[str], Schema]]:
    if schema._pattern_properties is None:
        schema._pattern_properties = [
            (re.compile(source), sub)
            for source, sub in (schema.pattern_properties or {}).items()
        ]
    return schema._pattern_properties


def _is_multiple(n: Fraction, divisor: float) -> bool:
    try:
        nf = float(n)
    except OverflowError:
        nf = math.inf if n > 0 else -math.inf
    d = float(divisor)
    if d == 0:
        return False
    quotient = nf / d
    if not math.isfinite(quotient):
        return False
    return math.modf(quotient)[0] == 0


def _quoted_list(items: list[str]) -> str:
    return "[" + " ".join(_q(item) for item in items) + "]"


class Validator:
    """Validates instances against a resolved schema tree rooted at root.

    Keeps the stack of schemas being applied, which is the dynamic scope
    used to resolve $dynamicRef.
    """

    def __init__(self, root: Schema) -> None:
        self.root = root
        self._stack: list[Schema] = []

    def validate(
        self, instance: Any, schema: Schema, annotations: Annotations | None = None
    ) -> None:
        """Raise ValidationError if instance does not satisfy schema.

        On success, the properties and items that were evaluated are merged
        into annotations, if given.
        """
        _fail(schema is not None, "nil schema")
        self._stack.append(schema)
        try:
            self._validate(instance, schema, annotations)
        except ValidationError as err:
            raise ValidationError(f"validating {schema}: {err}") from None
        finally:
            self._stack.pop()

    def _valid(
        self, instance: Any, schema: Schema, annotations: Annotations | None
    ) -> bool:
        try:
            self.validate(instance, schema, annotations)
        except ValidationError:
            return False
        return True

    def _validate(
        self, instance: Any, schema: Schema, caller: Annotations | None
    ) -> None:
        _check_type(instance, schema)
        _check_enum_const(instance, schema)
        _check_number(instance, schema)
        _check_string(instance, schema)

        anns = Annotations()
        self._apply_refs(instance, schema, anns)
        self._apply_logic(instance, schema, anns)
        if isinstance(instance, (list, tuple)):
            self._check_array(instance, schema, anns)
        if isinstance(instance, dict) or _is_struct(instance):
            self._check_object(instance, schema, anns)

        if caller is not None:
            caller.merge(anns)

    def _apply_refs(self, instance: Any, schema: Schema, anns: Annotations) -> None:
        if schema.ref:
            _fail(schema._resolved_ref is not None, "unresolved $ref")
            self.validate(instance, schema._resolved_ref, anns)

        if schema.dynamic_ref:
            # The ref behaves either lexically or dynamically, never both.
            _fail(
                (schema._resolved_dynamic_ref is None) != (schema._dynamic_ref_anchor == ""),
                "DynamicRef not resolved properly",
            )
            if schema._resolved_dynamic_ref is not None:
                self.validate(instance, schema._resolved_dynamic_ref, anns)
                return
            # The outermost schema on the stack whose base has the dynamic
            # anchor wins.
            target = None
            for outer in self._stack:
                base = outer._base
                info = (base._anchors or {}).get(schema._dynamic_ref_anchor) if base else None
                if info is not None and info.dynamic:
                    target = info.schema
                    break
            if target is None:
                raise ValidationError(
                    f"missing dynamic anchor {_q(schema._dynamic_ref_anchor)}"
                )
            self.validate(instance, target, anns)

    def _apply_logic(self, instance: Any, schema: Schema, anns: Annotations) -> None:
        # These run before the array and object keywords, so that items and
        # properties they evaluate are not unevaluated.
        if schema.all_of is not None:
            for sub in schema.all_of:
                self.validate(instance, sub, anns)
        if schema.any_of is not None:
            # Visit every one, to collect annotations.
            results = [self._valid(instance, sub, anns) for sub in schema.any_of]
            if not any(results):
                raise ValidationError(
                    f"anyOf: did not validate against any of {_names(schema.any_of)}"
                )
        if schema.one_of is not None:
            matched = None
            for sub in schema.one_of:
                if self._valid(instance, sub, anns):
                    if matched is not None:
                        raise ValidationError(
                            f"oneOf: validated against both {matched} and {sub}"
                        )
                    matched = sub
            if matched is None:
                raise ValidationError(
                    f"oneOf: did not validate against any of {_names(schema.one_of)}"
                )
        if schema.not_ is not None and self._valid(instance, schema.not_, None):
            raise ValidationError(f"not: validated against {schema.not_}")
        if schema.if_ is not None:
            branch = schema.then if self._valid(instance, schema.if_, anns) else schema.else_
            if branch is not None:
                self.validate(instance, branch, anns)

    def _check_array(self, instance: Any, schema: Schema, anns: Annotations) -> None:
        prefix = schema.prefix_items or []
        # Items are instances in their own right: their annotations are not kept.
        for item, sub in zip(instance, prefix):
            self.validate(item, sub, None)
        anns.note_end_index(min(len(prefix), len(instance)))

        if schema.items is not None:
            for item in instance[len(prefix):]:
                self.validate(item, schema.items, None)
            anns.all_items = True

        n_contains = 0
        if schema.contains is not None:
            for i, item in enumerate(instance):
                if self._valid(item, schema.contains, None):
                    n_contains += 1
                    anns.note_index(i)
            if n_contains == 0 and (schema.min_contains is None or schema.min_contains > 0):
                raise ValidationError(
                    f"contains: {instance!r} does not have an item matching {schema.contains}"
                )
            if schema.min_contains is not None and n_contains < schema.min_contains:
                raise ValidationError(
                    f"minContains: contains validated {n_contains} items, "
                    f"less than {schema.min_contains}"
                )
            if schema.max_contains is not None and n_contains > schema.max_contains:
                raise ValidationError(
                    f"maxContains: contains validated {n_contains} items, "
                    f"greater than {schema.max_contains}"
                )

        if schema.min_items is not None and len(instance) < schema.min_items:
            raise ValidationError(
                f"minItems: array length {len(instance)} is less than {schema.min_items}"
            )
        if schema.max_items is not None and len(instance) > schema.max_items:
            raise ValidationError(
                f"maxItems: array length {len(instance)} is greater than {schema.max_items}"
            )
        if schema.unique_items and len(instance) > 1:
            by_hash: dict[int, list[int]] = {}
            for i, item in enumerate(instance):
                h = hash_value(item)
                for j in by_hash.get(h, ()):
                    if equal(item, instance[j]):
                        raise ValidationError(
                            f"uniqueItems: array items {i} and {j} are equal"
                        )
                by_hash.setdefault(h, []).append(i)

        if schema.unevaluated_items is not None and not anns.all_items:
            for i in range(anns.end_index, len(instance)):
                if i not in anns.evaluated_indexes:
                    self.validate(instance[i], schema.unevaluated_items, None)
            anns.all_items = True

    def _check_object(self, instance: Any, schema: Schema, anns: Annotations) -> None:
        is_struct = not isinstance(instance, dict)
        if not is_struct:
            for key in instance:
                if not isinstance(key, str):
                    raise ValidationError(
                        f"map key type {type(key).__name__} is not a string"
                    )
        required = _required(schema)

        # Properties evaluated by this schema alone, for additionalProperties.
        evaluated: set[str] = set()
        for prop, sub in (schema.properties or {}).items():
            if not has_property(instance, prop):
                continue
            value = get_property(instance, prop)
            # A zero optional field of a dataclass counts as missing.
            if is_struct and _is_zero(value) and prop not in required:
                continue
            self.validate(value, sub, None)
            evaluated.add(prop)

        if schema.pattern_properties:
            patterns = _pattern_properties(schema)
            for prop, value in iter_properties(instance):
                for regex, sub in patterns:
                    if regex.search(prop):
                        self.validate(value, sub, None)
                        evaluated.add(prop)

        if schema.additional_properties is not None:
            for prop, value in iter_properties(instance):
                if prop not in evaluated:
                    self.validate(value, schema.additional_properties, None)
                    evaluated.add(prop)
        anns.note_properties(evaluated)

        if schema.property_names is not None:
            for prop, _ in iter_properties(instance):
                self.validate(prop, schema.property_names, None)

        if schema.min_properties is not None or schema.max_properties is not None:
            least, most = num_properties_bounds(instance, required)
            if schema.min_properties is not None and most < schema.min_properties:
                raise ValidationError(
                    f"minProperties: object has {most} properties, "
                    f"less than {schema.min_properties}"
                )
            if schema.max_properties is not None and least > schema.max_properties:
                raise ValidationError(
                    f"maxProperties: object has {least} properties, "
                    f"greater than {schema.max_properties}"
                )

        def missing(props: list[str]) -> list[str]:
            return [p for p in props if not has_property(instance, p)]

        if schema.required is not None:
            absent = missing(schema.required)
            if absent:
                raise ValidationError(
                    f"required: missing properties: {_quoted_list(absent)}"
                )
        for dprop, reqs in (schema.dependent_required or {}).items():
            if has_property(instance, dprop):
                absent = missing(reqs)
                if absent:
                    raise ValidationError(
                        f"dependentRequired[{_q(dprop)}]: missing properties "
                        f"{_quoted_list(absent)}"
                    )
        for dprop, sub in (schema.dependent_schemas or {}).items():
            if has_property(instance, dprop):
                self.validate(instance, sub, anns)

        if schema.unevaluated_properties is not None and not anns.all_properties:
            for prop, value in iter_properties(instance):
                if prop not in anns.evaluated_properties:
                    self.validate(value, schema.unevaluated_properties, None)
            # Every property has now been evaluated.
            anns.all_properties = True


def _names(schemas: list[Schema]) -> str:
    return "[" + " ".join(str(s) for s in schemas) + "]"


def _check_type(instance: Any, schema: Schema) -> None:
    if not schema.type and schema.types is None:
        return
    got = json_type(instance)
    if got is None:
        raise ValidationError(
            f"type: {instance!r} of type {type(instance).__name__} is not a valid JSON value"
        )
    if schema.type:
        # "number" includes integers.
        if not (got == schema.type or (got == "integer" and schema.type == "number")):
            raise ValidationError(
                f"type: {instance!r} has type {_q(got)}, want {_q(schema.type)}"
            )
    elif not (got in schema.types or (got == "integer" and "number" in schema.types)):
        raise ValidationError(
            f"type: {instance!r} has type {_q(got)}, "
            f"want one of {_q(', '.join(schema.types))}"
        )


def _check_enum_const(instance: Any, schema: Schema) -> None:
    if schema.enum is not None and not any(equal(e, instance) for e in schema.enum):
        raise ValidationError(
            f"enum: {instance!r} does not equal any of: {schema.enum!r}"
        )
    if schema.const is not ABSENT and not equal(schema.const, instance):
        raise ValidationError(f"const: {instance!r} does not equal {schema.const!r}")


def _check_number(instance: Any, schema: Schema) -> None:
    limits = (
        schema.multiple_of,
        schema.minimum,
        schema.maximum,
        schema.exclusive_minimum,
        schema.exclusive_maximum,
    )
    if all(limit is None for limit in limits):
        return
    n = json_number(instance)
    if n is None:
        return
    if schema.multiple_of is not None and not _is_multiple(n, schema.multiple_of):
        raise ValidationError(
            f"multipleOf: {n} is not a multiple of {schema.multiple_of:f}"
        )
    if schema.minimum is not None and n < Fraction(schema.minimum):
        raise ValidationError(f"minimum: {n} is less than {schema.minimum:f}")
    if schema.maximum is not None and n > Fraction(schema.maximum):
        raise ValidationError(f"maximum: {n} is greater than {schema.maximum:f}")
    if schema.exclusive_minimum is not None and n <= Fraction(schema.exclusive_minimum):
        raise ValidationError(
            f"exclusiveMinimum: {n} is less than or equal to {schema.exclusive_minimum:f}"
        )
    if schema.exclusive_maximum is not None and n >= Fraction(schema.exclusive_maximum):
        raise ValidationError(
            f"exclusiveMaximum: {n} is greater than or equal to {schema.exclusive_maximum:f}"
        )


def _check_string(instance: Any, schema: Schema) -> None:
    if not isinstance(instance, str):
        return
    n = len(instance)
    if schema.min_length is not None and n < schema.min_length:
        raise ValidationError(
            f"minLength: {_q(instance)} contains {n} Unicode code points, "
            f"fewer than {schema.min_length}"
        )
    if schema.max_length is not None and n > schema.max_length:
        raise ValidationError(
            f"maxLength: {_q(instance)} contains {n} Unicode code points, "
            f"more than {schema.max_length}"
        )
    if schema.pattern and not _pattern(schema).search(instance):
        raise ValidationError(
            f"pattern: {_q(instance)} does not match regular expression {_q(schema.pattern)}"
        )