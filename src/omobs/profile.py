#!/usr/bin/env python3
from __future__ import annotations

from typing import Any, Iterable, Iterator

from omobs.errors import DataNotFoundError
from omobs.geometry import Geometry
from omobs.values import QuantityValue, SweComponent, Value

__all__ = ["Field", "DataRecord", "ProfileLevel", "ProfileValue"]


class Field:
    def __init__(self, name: str, element: Any):
        self.name = name
        self.element = element

    def __eq__(self, other):
        if not isinstance(other, Field):
            return NotImplemented
        return self.name == other.name and self.element == other.element

    def __repr__(self):
        return f"Field({self.name!r}, {self.element!r})"


class DataRecord:
    """An ordered list of named fields."""

    def __init__(self, fields: Iterable[Field] = ()):
        self.fields: list[Field] = list(fields)

    def add_field(self, field: Field) -> DataRecord:
        self.fields.append(field)
        return self

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get(self, name: str) -> Field | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self):
        return f"DataRecord({self.fields!r})"


def _level_number(q: QuantityValue | None) -> float | None:
    if q is None:
        return None
    return q.value


class ProfileLevel:
    """
    The values of one depth or height interval of a vertical profile.

    Levels are ordered by their start: a level without start comes
    before any level with a start, and levels with equal (or both
    missing) starts compare equal regardless of their ends. This
    is weaker than equality (``==``), which compares all attributes.
    """

    def __init__(
        self,
        level_start: QuantityValue | None = None,
        level_end: QuantityValue | None = None,
        values: Iterable[Value] | None = None,
        location: Geometry | None = None,
    ):
        self.level_start = level_start
        self.level_end = level_end
        self.values: list[Value] = list(values or [])
        self.location = location

    # builder style setters

    def set_level_start(self, level_start: QuantityValue | None) -> ProfileLevel:
        self.level_start = level_start
        return self

    def set_level_end(self, level_end: QuantityValue | None) -> ProfileLevel:
        self.level_end = level_end
        return self

    def set_values(self, values: Iterable[Value]) -> ProfileLevel:
        self.values.clear()
        self.values.extend(values)
        return self

    def add_value(self, value: Value) -> ProfileLevel:
        self.values.append(value)
        return self

    def set_location(self, location: Geometry | None) -> ProfileLevel:
        self.location = location
        return self

    def is_set_level_start(self) -> bool:
        return self.level_start is not None

    def is_set_level_end(self) -> bool:
        return self.level_end is not None

    def is_set_value(self) -> bool:
        return len(self.values) > 0

    def is_set_location(self) -> bool:
        return self.location is not None

    @property
    def simple_value(self) -> Value:
        if not self.values:
            raise DataNotFoundError(f"{self!r} has no values")
        return self.values[0]

    # ordering

    def compare_to(self, other: ProfileLevel) -> int:
        if other is None:
            raise TypeError("cannot compare ProfileLevel with None")
        start = _level_number(self.level_start)
        other_start = _level_number(other.level_start)
        if start is None and other_start is None:
            return 0
        if start is None:
            return -1
        if other_start is None:
            return 1
        if start == other_start:
            return 0
        return -1 if start < other_start else 1

    def __lt__(self, other):
        if not isinstance(other, ProfileLevel):
            return NotImplemented
        return self.compare_to(other) < 0

    def __gt__(self, other):
        if not isinstance(other, ProfileLevel):
            return NotImplemented
        return self.compare_to(other) > 0

    def __le__(self, other):
        if not isinstance(other, ProfileLevel):
            return NotImplemented
        return self.compare_to(other) <= 0

    def __ge__(self, other):
        if not isinstance(other, ProfileLevel):
            return NotImplemented
        return self.compare_to(other) >= 0

    def __eq__(self, other):
        if not isinstance(other, ProfileLevel):
            return NotImplemented
        return (
            self.level_start == other.level_start
            and self.level_end == other.level_end
            and self.location == other.location
            and self.values == other.values
        )

    __hash__ = None

    def __repr__(self):
        return (
            f"ProfileLevel({_level_number(self.level_start)}, "
            f"{_level_number(self.level_end)}, {len(self.values)} values)"
        )

    # reshaping

    def as_data_record(self) -> DataRecord:
        """
        Return a record with the level start and end (if set),
        followed by the fields of `value_as_data_record`.
        """
        record = DataRecord()
        if self.is_set_level_start():
            name = self.level_start.name or "levelStart"
            record.add_field(Field(name, self.level_start))
        if self.is_set_level_end():
            name = self.level_end.name or "levelEnd"
            record.add_field(Field(name, self.level_end))
        return self.value_as_data_record(record)

    def value_as_data_record(self, record: DataRecord | None = None) -> DataRecord:
        """
        Add a field for every self describing value to `record`.

        A field is named after the value's name, else its definition,
        else `component_<n>`. Values that do not describe themselves
        (e.g. geometries) are skipped, so the record may hold fewer
        fields than the level has values.
        """
        if record is None:
            record = DataRecord()
        counter = 0
        for value in self.values:
            if not isinstance(value, SweComponent):
                continue
            if value.is_set_name():
                name = value.name
            elif value.is_set_definition():
                name = value.definition
            else:
                name = f"component_{counter}"
                counter += 1
            record.add_field(Field(name, value))
        return record


class ProfileValue:
    """The levels of a vertical profile, kept sorted by level start."""

    def __init__(self, levels: Iterable[ProfileLevel] = (), unit: str | None = None):
        # sorted() is stable, levels with equal starts keep their order
        self.value: list[ProfileLevel] = sorted(levels)
        self.unit = unit

    def add_level(self, level: ProfileLevel) -> ProfileValue:
        self.value.append(level)
        self.value.sort()
        return self

    def is_set_value(self) -> bool:
        return len(self.value) > 0

    def is_from_to(self) -> bool:
        """True if every level has a start and an end."""
        return self.is_set_value() and all(
            lvl.is_set_level_start() and lvl.is_set_level_end() for lvl in self.value
        )

    @property
    def min_level_start(self) -> QuantityValue | None:
        starts = [
            lvl.level_start
            for lvl in self.value
            if _level_number(lvl.level_start) is not None
        ]
        return min(starts, key=lambda q: q.value, default=None)

    @property
    def max_level_end(self) -> QuantityValue | None:
        ends = [
            lvl.level_end
            for lvl in self.value
            if _level_number(lvl.level_end) is not None
        ]
        return max(ends, key=lambda q: q.value, default=None)

    def __iter__(self) -> Iterator[ProfileLevel]:
        return iter(self.value)

    def __len__(self) -> int:
        return len(self.value)
