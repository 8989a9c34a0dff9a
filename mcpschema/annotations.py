"""Annotations gathered during validation.

The unevaluatedItems and unevaluatedProperties keywords need to know which
items and properties were already evaluated by other keywords.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class Annotations:
    """Items and properties evaluated so far."""

    all_items: bool = False
    end_index: int = 0
    evaluated_indexes: set[int] = field(default_factory=set)
    all_properties: bool = False
    evaluated_properties: set[str] = field(default_factory=set)

    def note_index(self, i: int) -> None:
        """Mark index i as evaluated."""
        self.evaluated_indexes.add(i)

    def note_end_index(self, end: int) -> None:
        """Mark every index below end as evaluated."""
        self.end_index = max(self.end_index, end)

    def note_property(self, prop: str) -> None:
        """Mark prop as evaluated."""
        self.evaluated_properties.add(prop)

    def note_properties(self, props: Iterable[str]) -> None:
        """Mark every property in props as evaluated."""
        self.evaluated_properties.update(props)

    def merge(self, other: Annotations | None) -> None:
        """Add the annotations of other to these."""
        if other is None:
            return
        self.all_items = self.all_items or other.all_items
        self.end_index = max(self.end_index, other.end_index)
        self.evaluated_indexes.update(other.evaluated_indexes)
        self.all_properties = self.all_properties or other.all_properties
        self.evaluated_properties.update(other.evaluated_properties)