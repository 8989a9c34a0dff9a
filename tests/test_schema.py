import copy

import pytest

from mcpschema.schema import ABSENT, AnchorInfo, Schema, SchemaError, false_schema
from mcpschema.values import equal, hash_value


def ids(schemas):
    return [id(s) for s in schemas]


def test_false_schema_is_not_of_empty():
    s = false_schema()
    assert isinstance(s.not_, Schema)
    assert list(s.children()) == [s.not_]
    assert list(s.not_.children()) == []


def test_false_schema_returns_new_trees():
    a, b = false_schema(), false_schema()
    assert a is not b
    assert a.not_ is not b.not_
    assert equal(a, b)


@pytest.mark.parametrize(
    "schema, message",
    [
        (Schema(type="string", types=["null", "string"]), "type and types"),
        (Schema(defs={}, definitions={}), "defs and definitions"),
    ],
)
def test_basic_checks_errors(schema, message):
    with pytest.raises(SchemaError, match=message):
        schema.basic_checks()


def test_all_is_preorder_with_sorted_keywords_and_keys():
    root = Schema(
        type="string",
        prefix_items=[Schema(type="int"), Schema(items=Schema(type="null"))],
        contains=Schema(properties={"~1": Schema(type="boolean"), "p": Schema()}),
    )
    want = [
        root,
        root.contains,
        root.contains.properties["p"],
        root.contains.properties["~1"],
        root.prefix_items[0],
        root.prefix_items[1],
        root.prefix_items[1].items,
    ]
    assert ids(root.all()) == ids(want)


def test_children_orders_defs_before_contains():
    d, c = Schema(), Schema()
    s = Schema(contains=c, defs={"x": d})
    assert ids(s.children()) == ids([d, c])


def test_children_sorts_map_keys():
    a, b = Schema(), Schema()
    s = Schema(properties={"b": b, "a": a})
    assert ids(s.children()) == ids([a, b])


def test_children_keeps_none_in_lists_and_skips_absent_schemas():
    a = Schema()
    s = Schema(prefix_items=[a, None], items=None)
    assert list(s.children()) == [a, None]


def test_field_type_prefers_type_then_types():
    assert Schema(type="string").field("type") == "string"
    assert Schema(types=["null", "number"]).field("type") == ["null", "number"]
    assert Schema().field("type") is None


def test_field_by_json_name():
    n = Schema()
    defs = {"A": Schema()}
    s = Schema(not_=n, defs=defs, min_items=3)
    assert s.field("not") is n
    assert s.field("$defs") is defs
    assert s.field("minItems") == 3
    assert s.field("properties") is None


def test_field_unknown_name():
    with pytest.raises(KeyError):
        Schema().field("nope")


def test_field_excludes_extra():
    with pytest.raises(KeyError):
        Schema(extra={"k": 1}).field("extra")


def test_str_of_unresolved_schema():
    assert str(Schema(type="string")) == "<anonymous schema>"


def test_keyword_only_construction():
    with pytest.raises(TypeError):
        Schema("string")


def test_const_and_default_absent_by_default():
    s = Schema()
    assert s.const is ABSENT
    assert s.default is ABSENT
    assert s.required is None


def test_absent_survives_copy():
    s = copy.deepcopy(Schema(type="integer"))
    assert s.const is ABSENT
    assert copy.copy(ABSENT) is ABSENT


def test_null_const_differs_from_absent_const():
    assert not equal(Schema(const=None), Schema())
    assert equal(Schema(const=None), Schema(const=None))


def test_schema_equality_uses_json_number_rules():
    assert equal(Schema(const=0), Schema(const=0.0))
    assert not equal(Schema(const=0), Schema(const=1))


def test_schema_hash_agrees_with_equality():
    a = Schema(type="integer", unique_items=True, const=1)
    b = Schema(type="integer", unique_items=True, const=1.0)
    assert hash_value(a) == hash_value(b)


def test_schemas_compare_by_identity():
    a, b = Schema(), Schema()
    assert a != b
    assert a == a
    assert len({a, b}) == 2


def test_anchor_info_equality():
    s = Schema()
    assert AnchorInfo(s, True) == AnchorInfo(s, True)
    assert AnchorInfo(s, True) != AnchorInfo(s, False)
    assert AnchorInfo(s, False) != AnchorInfo(Schema(), False)