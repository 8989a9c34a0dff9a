import pytest

from mcpschema.codec import (
    SchemaDecodeError,
    dumps,
    loads,
    schema_from_dict,
    schema_to_dict,
)
from mcpschema.schema import ABSENT, Schema, SchemaError
from mcpschema.values import equal


@pytest.mark.parametrize(
    "schema",
    [
        Schema(type="null"),
        Schema(types=["null", "number"]),
        Schema(type="string", min_length=20),
        Schema(minimum=20.0),
        Schema(items=Schema(type="integer")),
        Schema(const=0),
        Schema(const=None),
        Schema(const=[]),
        Schema(const={}),
        Schema(default=1),
        Schema(default=None),
        Schema(extra={"test": "value"}),
    ],
)
def test_round_trip(schema):
    got = loads(dumps(schema))
    assert equal(got, schema)


@pytest.mark.parametrize(
    "text, want",
    [
        ("true", "{}"),
        ("false", '{"not":{}}'),
        ('{"type":"", "enum":null}', "{}"),
        ('{"minimum":1}', '{"minimum":1}'),
        ('{"minimum":1.0}', '{"minimum":1}'),
        ('{"minLength":1.0}', '{"minLength":1}'),
        ('{"$vocabulary":{"b":true, "a":false}}', '{"$vocabulary":{"a":false,"b":true}}'),
        ('{"unk":0}', '{"unk":0}'),
        (
            '{"comment":"test","type":"example","unk":0}',
            '{"type":"example","comment":"test","unk":0}',
        ),
        ('{"extra":0}', '{"extra":0}'),
        ('{"Extra":0}', '{"Extra":0}'),
    ],
)
def test_json_round_trip(text, want):
    assert dumps(loads(text)) == want


@pytest.mark.parametrize(
    "text, pattern",
    [
        ("1", "cannot unmarshal number"),
        ('{"type":1}', 'invalid value for "type"'),
        ('{"minLength":1.5}', "not an integer value"),
        ('{"maxLength":1.5}', "not an integer value"),
        ('{"minItems":1.5}', "not an integer value"),
        ('{"maxItems":1.5}', "not an integer value"),
        ('{"minProperties":1.5}', "not an integer value"),
        ('{"maxProperties":1.5}', "not an integer value"),
        ('{"minContains":1.5}', "not an integer value"),
        ('{"maxContains":1.5}', "not an integer value"),
        ('{"maxContains":2147483648}', "out of range"),
        ('{"minLength":9e99}', "cannot be unmarshaled"),
        ('{"minLength":"1.5"}', "not a number"),
    ],
)
def test_unmarshal_errors(text, pattern):
    with pytest.raises(SchemaDecodeError, match=pattern):
        loads(text)


def test_integer_keyword_is_int():
    schema = loads('{"minLength":3.0,"maxItems":7}')
    assert schema.min_length == 3
    assert isinstance(schema.min_length, int)
    assert schema.max_items == 7


def test_false_nested():
    schema = loads('{"items":false}')
    assert schema.items is not None
    assert schema.items.not_ is not None
    assert schema_to_dict(schema) == {"items": {"not": {}}}


def test_nested_invalid_schema():
    with pytest.raises(SchemaDecodeError, match="cannot unmarshal number"):
        loads('{"items":1}')


def test_invalid_json_text():
    with pytest.raises(SchemaDecodeError):
        loads("{")


def test_types_list():
    schema = loads('{"type":["string","null"]}')
    assert schema.type == ""
    assert schema.types == ["string", "null"]
    assert dumps(schema) == '{"type":["string","null"]}'


def test_const_and_default_presence():
    assert loads("{}").const is ABSENT
    assert loads('{"const":null}').const is None
    assert loads('{"default":null}').default is None
    assert dumps(Schema(const=None)) == '{"const":null}'


def test_duplicate_extra_key():
    schema = Schema(title="t", extra={"title": "dup"})
    with pytest.raises(SchemaError, match="duplicates"):
        dumps(schema)


def test_type_and_types_conflict():
    with pytest.raises(SchemaError):
        dumps(Schema(type="string", types=["null"]))


def test_field_order_and_sorted_maps():
    schema = Schema(
        title="T",
        type="object",
        properties={"b": Schema(type="string"), "a": Schema()},
        required=["b"],
    )
    data = schema_to_dict(schema)
    assert list(data) == ["type", "title", "required", "properties"]
    assert list(data["properties"]) == ["a", "b"]


def test_empty_lists_are_omitted():
    assert dumps(Schema(enum=[], required=[])) == "{}"


def test_none_in_schema_list():
    schema = Schema(prefix_items=[None, Schema(type="integer")])
    assert schema_to_dict(schema) == {"prefixItems": [None, {"type": "integer"}]}
    back = schema_from_dict({"prefixItems": [None, {"type": "integer"}]})
    assert back.prefix_items[0] is None
    assert back.prefix_items[1].type == "integer"


def test_schema_from_dict_python_values():
    schema = schema_from_dict({"minItems": 2.0, "minimum": 3, "title": None})
    assert schema.min_items == 2
    assert schema.minimum == 3.0
    assert schema.title == ""


def test_wrong_field_type():
    with pytest.raises(SchemaDecodeError, match="title"):
        schema_from_dict({"title": 5})