#!/usr/bin/env python3
from __future__ import annotations

import bisect
import functools
from typing import Callable, Iterable, Iterator

from omobs.common import (
    PARAM_NAME_SAMPLING_GEOMETRY,
    PARAMETER_NAME_DEPTH,
    PARAMETER_NAME_HEIGHT,
)
from omobs.values import GeometryValue, QuantityValue, Value, sort_key

__all__ = ["ReferenceType", "NamedValue", "ParameterSet"]


@functools.total_ordering
class ReferenceType:
    """A qualified identifier, e.g. the name of a parameter."""

    def __init__(self, href: str, title: str | None = None):
        self.href = href
        self.title = title

    def is_set_href(self) -> bool:
        return bool(self.href)

    def _key(self):
        return self.href or "", self.title or ""

    def __eq__(self, other):
        if not isinstance(other, ReferenceType):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other):
        if not isinstance(other, ReferenceType):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return f"ReferenceType({self.href!r})"


@functools.total_ordering
class NamedValue:
    """
    A typed, named side-channel attribute of an observation.

    NamedValues are ordered by name, then by value. The order
    is total over all value variants.
    """

    def __init__(self, name: ReferenceType | str | None, value: Value | None = None):
        if isinstance(name, str):
            name = ReferenceType(name)
        self.name = name
        self.value = value

    def is_set_name(self) -> bool:
        return self.name is not None and self.name.is_set_href()

    def is_set_value(self) -> bool:
        return self.value is not None

    def has_name(self, href: str) -> bool:
        return self.is_set_name() and self.name.href == href

    def set_name(self, name: ReferenceType | str) -> NamedValue:
        self.name = ReferenceType(name) if isinstance(name, str) else name
        return self

    def set_value(self, value: Value) -> NamedValue:
        self.value = value
        return self

    def sort_key(self):
        name = (0,) if self.name is None else (1, *self.name._key())
        return name, sort_key(self.value)

    def __eq__(self, other):
        if not isinstance(other, NamedValue):
            return NotImplemented
        return self.sort_key() == other.sort_key()

    def __lt__(self, other):
        if not isinstance(other, NamedValue):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __hash__(self):
        return hash(self.sort_key())

    def __repr__(self):
        return f"NamedValue({self.name!r}, {self.value!r})"


def is_sampling_geometry(nv: NamedValue) -> bool:
    return nv.has_name(PARAM_NAME_SAMPLING_GEOMETRY) and isinstance(
        nv.value, GeometryValue
    )


def is_height(nv: NamedValue) -> bool:
    return nv.has_name(PARAMETER_NAME_HEIGHT) and isinstance(nv.value, QuantityValue)


def is_depth(nv: NamedValue) -> bool:
    return nv.has_name(PARAMETER_NAME_DEPTH) and isinstance(nv.value, QuantityValue)


class ParameterSet:
    """
    The parameters of an observation.

    The parameters are kept sorted, so iteration is deterministic.
    Names are not unique, several parameters may share a name. In this
    case every lookup by name returns the first parameter in sort order,
    which callers must treat as an arbitrary one of the candidates.
    """

    def __init__(self, parameters: Iterable[NamedValue] = ()):
        self._items: list[NamedValue] = []
        for nv in parameters:
            self.add(nv)

    def add(self, nv: NamedValue) -> ParameterSet:
        # equal parameters are stored once, like in a set
        idx = bisect.bisect_left(self._items, nv)
        if idx < len(self._items) and self._items[idx] == nv:
            return self
        self._items.insert(idx, nv)
        return self

    def remove(self, nv: NamedValue) -> None:
        self._items.remove(nv)

    def __iter__(self) -> Iterator[NamedValue]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __contains__(self, nv) -> bool:
        return nv in self._items

    def __eq__(self, other):
        if not isinstance(other, ParameterSet):
            return NotImplemented
        return self._items == other._items

    def __repr__(self):
        return f"ParameterSet({self._items!r})"

    def copy(self) -> ParameterSet:
        new = ParameterSet()
        new._items = list(self._items)
        return new

    def _first(self, predicate: Callable[[NamedValue], bool]) -> NamedValue | None:
        for nv in self._items:
            if predicate(nv):
                return nv
        return None

    def get(self, name: str) -> Value | None:
        """Return the value of a parameter with the given name, or None."""
        nv = self._first(lambda nv: nv.has_name(name))
        return None if nv is None else nv.value

    def get_all(self, name: str) -> list[NamedValue]:
        return [nv for nv in self._items if nv.has_name(name)]

    @property
    def sampling_geometry(self) -> NamedValue | None:
        return self._first(is_sampling_geometry)

    @property
    def height(self) -> NamedValue | None:
        return self._first(is_height)

    @property
    def depth(self) -> NamedValue | None:
        return self._first(is_depth)

    @property
    def height_depth(self) -> NamedValue | None:
        """Return the depth parameter if present, else the height parameter."""
        depth = self.depth
        if depth is not None:
            return depth
        return self.height

    def is_set_sampling_geometry(self) -> bool:
        return self.sampling_geometry is not None

    def is_set_height(self) -> bool:
        return self.height is not None

    def is_set_depth(self) -> bool:
        return self.depth is not None

    def is_set_height_depth(self) -> bool:
        return self.height_depth is not None
