"""Access to the properties of JSON object instances.

An object instance is either a dict or a dataclass instance. For a dataclass,
every field whose name does not start with an underscore is a property. A
field's metadata may set ``"json"`` to its property name (``"-"`` leaves it
out) and ``"omitempty"`` or ``"omitzero"`` to mark it optional when zero.
"""

from __future__ import annotations

import dataclasses
import functools
from collections.abc import Collection, Iterator
from typing import Any


@dataclasses.dataclass(frozen=True)
class _StructField:
    attr: str
    omitempty: bool


@functools.lru_cache(maxsize=None)
def _struct_properties(cls: type) -> dict[str, _StructField]:
    """Map the property names of a dataclass type to its fields.

    The result is shared and must not be modified.
    """
    props: dict[str, _StructField] = {}
    for f in dataclasses.fields(cls):
        if f.name.startswith("_"):
            continue
        name = f.metadata.get("json") or f.name
        if name == "-":
            continue
        omit = bool(f.metadata.get("omitempty") or f.metadata.get("omitzero"))
        props[name] = _StructField(f.name, omit)
    return props


def _is_struct(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _is_zero(value: Any) -> bool:
    """Report whether value is the zero value of its kind."""
    if value is None or value is False:
        return True
    if isinstance(value, (int, float, complex)) and value == 0:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
        return len(value) == 0
    if _is_struct(value):
        return all(
            _is_zero(getattr(value, f.name)) for f in dataclasses.fields(value)
        )
    return False


def _check_object(instance: Any) -> None:
    if not (isinstance(instance, dict) or _is_struct(instance)):
        raise TypeError(
            f"value of type {type(instance).__name__} is not an object"
        )


def get_property(instance: Any, name: str) -> Any:
    """Return the value of property name of instance.

    Raises KeyError if instance has no such property and TypeError if it is
    not an object.
    """
    _check_object(instance)
    if isinstance(instance, dict):
        return instance[name]
    info = _struct_properties(type(instance)).get(name)
    if info is None:
        raise KeyError(name)
    return getattr(instance, info.attr)


def has_property(instance: Any, name: str) -> bool:
    """Report whether instance has property name."""
    _check_object(instance)
    if isinstance(instance, dict):
        return name in instance
    return name in _struct_properties(type(instance))


def iter_properties(instance: Any) -> Iterator[tuple[Any, Any]]:
    """Yield the name and value of each property of instance.

    Zero-valued dataclass fields marked omitempty or omitzero are skipped.
    """
    _check_object(instance)
    if isinstance(instance, dict):
        yield from list(instance.items())
        return
    for name, info in _struct_properties(type(instance)).items():
        value = getattr(instance, info.attr)
        if info.omitempty and _is_zero(value):
            continue
        yield name, value


def num_properties_bounds(
    instance: Any, required: Collection[str] | None
) -> tuple[int, int]:
    """Return the least and greatest number of properties instance may have.

    For a dict both are its size. For a dataclass a zero field may be a missing
    optional property, so the lower bound counts only non-zero or required
    fields, and the upper bound counts all of them.
    """
    _check_object(instance)
    if isinstance(instance, dict):
        return len(instance), len(instance)
    required = required or ()
    props = _struct_properties(type(instance))
    least = sum(
        1
        for name, info in props.items()
        if name in required or not _is_zero(getattr(instance, info.attr))
    )
    return least, len(props)