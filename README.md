# mcpschema

A JSON Schema library for the draft 2020-12 specification. You can build
schemas in Python, read them from JSON and write them back, resolve their
references, and check values against them.

The package needs only the standard library.

## Building schemas

`mcpschema.schema.Schema` is a dataclass with one keyword-only field per
keyword, named in snake case (`min_length`, `additional_properties`,
`all_of`). Keywords that clash with Python words end in an underscore:
`not_`, `if_`, `else_`. Use `type` for a single type name or `types` for a
list of them, never both. `None` means a keyword is absent; an empty list or
dict is present and takes part in validation. `const` and `default` use
`mcpschema.schema.ABSENT` for "absent", because `None` (JSON null) is a valid
value for them. Keywords the class does not know go in `extra`.

`false_schema()` returns a schema that no value satisfies.
`Schema.all()` yields a schema and all its subschemas in preorder, and
`Schema.children()` its immediate subschemas. `Schema.field(name)` returns the
value of a keyword by its JSON name.

## Reading and writing schemas

```python
from mcpschema.codec import loads, dumps

schema = loads('{"type": "object", "properties": {"name": {"type": "string"}}}')
print(dumps(schema))
```

`schema_from_dict` and `schema_to_dict` do the same with decoded JSON data.
The boolean schemas `true` and `false` load as `{}` and `{"not": {}}`.
Unknown keywords are kept and written back after the known ones. Map keys are
written in sorted order. Integer-valued keywords such as `minLength` accept
`1.0` but reject `1.5` and values outside the 32-bit range. Data that does not
describe a schema raises `SchemaDecodeError`.

## Validation

A schema must be resolved before it can validate. Resolving checks that the
schemas form a tree, compiles patterns, and resolves `$id`, `$anchor`,
`$dynamicAnchor`, `$ref` and `$dynamicRef`:

```python
from mcpschema.codec import loads
from mcpschema.resolve import resolve
from mcpschema.validate import ValidationError

resolved = resolve(loads('{"type": "integer", "minimum": 0}'))
resolved.validate(5)          # passes
try:
    resolved.validate(-1)
except ValidationError as err:
    print(err)
```

A malformed schema, a schema resolved twice, or a reference that cannot be
resolved raises `mcpschema.schema.SchemaError`.

`ResolveOptions` holds three settings:

- `base_uri`: the absolute URI that the root's `$id` and relative references
  are resolved against.
- `loader`: a function that takes a URI string and returns the `Schema` found
  there, for references outside the root. Without one, such references are
  errors.
- `validate_defaults`: check every `default` value against the schema it is
  in.

Instances are plain JSON data (`None`, `bool`, numbers, `str`, lists or
tuples, dicts with string keys) or dataclass instances, whose public fields
are their properties. A field's metadata may set `"json"` to the property name
(`"-"` leaves it out) and `"omitempty"` or `"omitzero"` to treat a zero value
as missing.

Patterns use Python's `re` module. The `format` keyword is kept but not
checked. Schemas whose `$schema` names another draft cannot be validated.

## Applying defaults

`Resolved.apply_defaults` fills in properties that are not required, using the
`default` values of the root's property schemas. A dict gains missing
properties; a dataclass field holding a zero value is set to the default:

```python
from mcpschema.codec import loads
from mcpschema.resolve import resolve

resolved = resolve(loads('{"properties": {"a": {"default": 1}}}'))
data = {}
resolved.apply_defaults(data)   # data == {"a": 1}
```

## JSON Pointers

`mcpschema.pointer.dereference(schema, "/$defs/A")` returns the subschema a
JSON Pointer names, and raises `PointerError` if there is none.
`parse_pointer`, `escape_segment` and `unescape_segment` handle the pointer
syntax.

## Comparing JSON values

`mcpschema.values.equal` compares two JSON values and treats numbers by their
mathematical value, so `1` and `1.0` are equal. `hash_value` gives a hash that
agrees with `equal`, `json_number` the exact value of a number as a
`Fraction`, and `json_type` the JSON Schema type name of a value.

## What it does not do

The package does not build schemas from Python types; schemas are written by
hand or read from JSON. It does not fetch remote schemas itself: supply a
`loader` for that.