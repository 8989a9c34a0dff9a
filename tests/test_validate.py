import dataclasses
from dataclasses import dataclass, field
from typing import Optional

import pytest

from mcpschema.annotations import Annotations
from mcpschema.check import check
from mcpschema.schema import Schema, false_schema
from mcpschema.validate import ValidationError, Validator


def _validator(schema):
    check(schema)
    return Validator(schema)


def is_valid(schema, instance):
    validator = _validator(schema)
    try:
        validator.validate(instance, schema)
    except ValidationError:
        return False
    return True


@dataclass
class _Instance:
    I: int = 1
    B: bool = field(default=True, metadata={"json": "b"})
    P: Optional[int] = None
    _u: int = 0


@pytest.mark.parametrize(
    "schema, want",
    [
        (Schema(min_properties=4), False),
        (Schema(min_properties=3), True),
        (Schema(max_properties=1), False),
        (Schema(max_properties=2), True),
        (Schema(required=["i"]), False),
        (Schema(required=["B"]), False),
        (Schema(property_names=Schema(min_length=2)), False),
        (Schema(properties={"b": Schema(type="boolean")}), True),
        (Schema(properties={"b": Schema(type="number")}), False),
        (Schema(required=["I"]), True),
        (Schema(required=["I", "P"]), True),
        (Schema(required=["I", "P"], properties={"P": Schema(type="number")}), False),
        (Schema(required=["I"], properties={"P": Schema(type="number")}), True),
        (Schema(required=["I"], additional_properties=false_schema()), False),
        (Schema(dependent_required={"b": ["u"]}), False),
        (Schema(dependent_schemas={"b": false_schema()}), False),
        (Schema(unevaluated_properties=false_schema()), False),
    ],
)
def test_struct_instance(schema, want):
    assert is_valid(schema, _Instance()) is want


def test_error_names_failing_subschema():
    schema = Schema(prefix_items=[Schema(contains=Schema(type="integer"))])
    validator = _validator(schema)
    with pytest.raises(ValidationError, match="prefixItems/0"):
        validator.validate([["1"]], schema)


def test_type_mismatch_message():
    schema = Schema(type="string")
    validator = _validator(schema)
    with pytest.raises(ValidationError) as info:
        validator.validate(2, schema)
    assert 'has type "integer", want "string"' in str(info.value)
    assert str(info.value).startswith("validating root: ")


@pytest.mark.parametrize(
    "schema, instance, want",
    [
        (Schema(type="number"), 3, True),
        (Schema(type="integer"), 3.0, True),
        (Schema(type="integer"), 3.5, False),
        (Schema(types=["null", "string"]), None, True),
        (Schema(types=["null", "string"]), 1, False),
        (Schema(enum=[1, "a"]), 1.0, True),
        (Schema(enum=[]), 1, False),
        (Schema(const=None), None, True),
        (Schema(const=None), 0, False),
        (Schema(minimum=2.0), 2, True),
        (Schema(exclusive_minimum=2.0), 2, False),
        (Schema(maximum=2.0), "text", True),
        (Schema(multiple_of=0.5), 4.5, True),
        (Schema(multiple_of=2.0), 3, False),
        (Schema(multiple_of=0.123456789), 1e308, False),
        (Schema(min_length=2), "\u00e9\u00e9", True),
        (Schema(max_length=1), "\u00e9\u00e9", False),
        (Schema(pattern="b+"), "abbc", True),
        (Schema(pattern="^b"), "abbc", False),
    ],
)
def test_scalar_keywords(schema, instance, want):
    assert is_valid(schema, instance) is want


@pytest.mark.parametrize(
    "schema, instance, want",
    [
        (Schema(all_of=[Schema(minimum=1.0), Schema(maximum=3.0)]), 2, True),
        (Schema(all_of=[Schema(minimum=1.0), Schema(maximum=3.0)]), 4, False),
        (Schema(any_of=[Schema(type="string"), Schema(minimum=5.0)]), 1, False),
        (Schema(any_of=[Schema(type="string"), Schema(minimum=5.0)]), "a", True),
        (Schema(one_of=[Schema(type="integer"), Schema(minimum=0.0)]), 1, False),
        (Schema(one_of=[Schema(type="integer"), Schema(minimum=0.0)]), 1.5, True),
        (Schema(not_=Schema(type="string")), "a", False),
        (
            Schema(if_=Schema(type="string"), then=Schema(min_length=3), else_=Schema(minimum=10.0)),
            "ab",
            False,
        ),
        (
            Schema(if_=Schema(type="string"), then=Schema(min_length=3), else_=Schema(minimum=10.0)),
            11,
            True,
        ),
    ],
)
def test_logic_keywords(schema, instance, want):
    assert is_valid(schema, instance) is want


@pytest.mark.parametrize(
    "schema, instance, want",
    [
        (Schema(prefix_items=[Schema(type="string")], items=Schema(type="integer")), ["a", 1, 2], True),
        (Schema(prefix_items=[Schema(type="string")], items=Schema(type="integer")), ["a", "b"], False),
        (Schema(prefix_items=[Schema(type="string"), Schema(type="string")]), ["a"], True),
        (Schema(contains=Schema(type="string")), [1, 2], False),
        (Schema(contains=Schema(type="string"), min_contains=0), [1, 2], True),
        (Schema(contains=Schema(type="string"), max_contains=1), ["a", "b"], False),
        (Schema(min_items=2), [1], False),
        (Schema(max_items=2), (1, 2), True),
        (Schema(unique_items=True), [1, 1.0], False),
        (Schema(unique_items=True), [{"a": 1}, {"a": 2}], True),
        (Schema(prefix_items=[Schema()], unevaluated_items=false_schema()), [1], True),
        (Schema(prefix_items=[Schema()], unevaluated_items=false_schema()), [1, 2], False),
        (Schema(contains=Schema(type="string"), unevaluated_items=Schema(type="integer")), ["a", 2], True),
    ],
)
def test_array_keywords(schema, instance, want):
    assert is_valid(schema, instance) is want


@pytest.mark.parametrize(
    "schema, instance, want",
    [
        (Schema(properties={"a": Schema(type="integer")}, additional_properties=false_schema()), {"a": 1}, True),
        (Schema(properties={"a": Schema(type="integer")}, additional_properties=false_schema()), {"a": 1, "b": 2}, False),
        (Schema(pattern_properties={"^x": Schema(type="string")}), {"xa": 1}, False),
        (Schema(pattern_properties={"^x": Schema()}, additional_properties=false_schema()), {"xa": 1}, True),
        (Schema(required=["a"]), {"b": 1}, False),
        (Schema(dependent_required={"a": ["b"]}), {"a": 1}, False),
        (Schema(dependent_required={"a": ["b"]}), {"c": 1}, True),
        (Schema(all_of=[Schema(properties={"a": Schema()})], unevaluated_properties=false_schema()), {"a": 1}, True),
        (Schema(all_of=[Schema(properties={"a": Schema()})], unevaluated_properties=false_schema()), {"a": 1, "b": 2}, False),
        (Schema(min_properties=1), {}, False),
    ],
)
def test_object_keywords(schema, instance, want):
    assert is_valid(schema, instance) is want


def test_annotations_merged_on_success():
    schema = Schema(properties={"a": Schema()}, prefix_items=[Schema(), Schema()])
    validator = _validator(schema)
    anns = Annotations()
    validator.validate({"a": 1, "b": 2}, schema, anns)
    assert anns.evaluated_properties == {"a"}

    array_anns = Annotations()
    validator.validate([1, 2, 3], schema, array_anns)
    assert array_anns.end_index == len(schema.prefix_items)


def test_annotations_untouched_on_failure():
    schema = Schema(properties={"a": Schema()}, required=["z"])
    validator = _validator(schema)
    anns = Annotations()
    with pytest.raises(ValidationError, match="required"):
        validator.validate({"a": 1}, schema, anns)
    assert anns == Annotations()


def test_non_string_keys_rejected():
    schema = Schema()
    validator = _validator(schema)
    with pytest.raises(ValidationError, match="is not a string"):
        validator.validate({1: "a"}, schema)


def test_invalid_json_value_for_type():
    schema = Schema(type="string")
    validator = _validator(schema)
    with pytest.raises(ValidationError, match="not a valid JSON value"):
        validator.validate(object(), schema)


def test_stack_is_empty_after_validation():
    schema = Schema(all_of=[Schema(type="integer")])
    validator = _validator(schema)
    with pytest.raises(ValidationError):
        validator.validate("a", schema)
    assert validator._stack == []
    assert dataclasses.is_dataclass(_Instance())