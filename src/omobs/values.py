#!/usr/bin/env python3
from __future__ import annotations

import math
import numbers
import typing
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Union

import numpy as np
import pandas as pd

from omobs.geometry import Geometry
from omobs.temporal import Time, TimeInstant, TimePeriod

__all__ = [
    "SweComponent",
    "QuantityValue",
    "CountValue",
    "BooleanValue",
    "TextValue",
    "CategoryValue",
    "GeometryValue",
    "NilTemplateValue",
    "Value",
    "TimeValuePair",
    "TVPValue",
    "is_self_describing",
    "value_from_python",
]


class SweComponent:
    """
    Mixin for values that describe themselves by a name
    and/or a definition (a SWE data component).
    """

    name: str | None
    definition: str | None

    def is_set_name(self) -> bool:
        return bool(self.name)

    def is_set_definition(self) -> bool:
        return bool(self.definition)


@dataclass
class QuantityValue(SweComponent):
    value: float | None
    unit: str | None = None
    name: str | None = None
    definition: str | None = None


@dataclass
class CountValue(SweComponent):
    value: int | None
    unit: str | None = None
    name: str | None = None
    definition: str | None = None


@dataclass
class BooleanValue(SweComponent):
    value: bool | None
    unit: str | None = None
    name: str | None = None
    definition: str | None = None


@dataclass
class TextValue(SweComponent):
    value: str | None
    unit: str | None = None
    name: str | None = None
    definition: str | None = None


@dataclass
class CategoryValue(SweComponent):
    # for categories the unit holds the code space
    value: str | None
    unit: str | None = None
    name: str | None = None
    definition: str | None = None


@dataclass
class GeometryValue:
    value: Geometry | None
    unit: str | None = None


@dataclass
class NilTemplateValue:
    """Placeholder of an observation template, it carries no sample."""

    value: None = None
    unit: str | None = None


Value = Union[
    QuantityValue,
    CountValue,
    BooleanValue,
    TextValue,
    CategoryValue,
    GeometryValue,
    NilTemplateValue,
]

_VALUE_TYPES = typing.get_args(Value)


def is_self_describing(value: Any) -> bool:
    return isinstance(value, SweComponent)


def _optional_key(obj: str | None) -> tuple:
    return (0,) if obj is None else (1, obj)


def _scalar_key(obj: Any) -> tuple:
    # numbers compare as numbers, 1 and 1.0 give equal keys
    if obj is None:
        return (0,)
    if isinstance(obj, numbers.Real):
        if isinstance(obj, float) and math.isnan(obj):
            return (4,)
        return 1, obj
    if isinstance(obj, str):
        return 2, obj
    if isinstance(obj, Geometry):
        return 3, obj.sort_key()
    return 5, type(obj).__qualname__, repr(obj)


def sort_key(value: Value | None) -> tuple:
    """
    A total ordering key over all value variants.

    It covers every field the equality of the variants compares,
    so equal values have equal keys and vice versa.
    """
    if value is None:
        return ("",)
    if not isinstance(value, _VALUE_TYPES):
        raise TypeError(f"Unsupported value type {type(value).__qualname__}")
    return (
        type(value).__name__,
        _scalar_key(value.value),
        _optional_key(value.unit),
        _optional_key(getattr(value, "name", None)),
        _optional_key(getattr(value, "definition", None)),
    )


def value_from_python(obj: Any, unit: str | None = None) -> Value:
    """
    Wrap a plain python object into the matching value variant.

    Mind that bool is checked before int, because bool
    is a subclass of int.
    """
    if isinstance(obj, _VALUE_TYPES):
        return obj
    if isinstance(obj, np.generic):
        obj = obj.item()
    if obj is None or (isinstance(obj, float) and math.isnan(obj)):
        return QuantityValue(None, unit)
    if isinstance(obj, bool):
        return BooleanValue(obj, unit)
    if isinstance(obj, int):
        return CountValue(obj, unit)
    if isinstance(obj, float):
        return QuantityValue(obj, unit)
    if isinstance(obj, str):
        return TextValue(obj, unit)
    if isinstance(obj, Geometry):
        return GeometryValue(obj, unit)
    raise TypeError(f"Data of type {type(obj).__qualname__} is not supported.")


@dataclass
class TimeValuePair:
    phenomenon_time: Time
    value: Value

    @property
    def timestamp(self) -> pd.Timestamp | None:
        """The instant, or the end of the period, the sample refers to."""
        if isinstance(self.phenomenon_time, TimeInstant):
            return self.phenomenon_time.value
        if isinstance(self.phenomenon_time, TimePeriod):
            return self.phenomenon_time.end
        raise TypeError(
            f"Unsupported time type {type(self.phenomenon_time).__qualname__}"
        )


@dataclass
class TVPValue:
    """
    A time series: a unit and time value pairs.

    The insertion order is the time order by convention,
    the pairs are never sorted.
    """

    unit: str | None = None
    value: list[TimeValuePair] = field(default_factory=list)

    def add_value(self, tvp: TimeValuePair) -> TVPValue:
        self.value.append(tvp)
        return self

    def add_values(self, tvps: Iterable[TimeValuePair]) -> TVPValue:
        self.value.extend(tvps)
        return self

    def is_set_value(self) -> bool:
        return len(self.value) > 0

    def is_set_unit(self) -> bool:
        return bool(self.unit)

    @property
    def phenomenon_time(self) -> TimePeriod | None:
        if not self.value:
            return None
        period = TimePeriod()
        for tvp in self.value:
            period.extend(tvp.phenomenon_time)
        return period

    def __len__(self) -> int:
        return len(self.value)

    def __iter__(self) -> Iterator[TimeValuePair]:
        return iter(self.value)

    def to_series(self) -> pd.Series:
        """
        Return the time series as object-typed pandas.Series
        with a DatetimeIndex. Periods are indexed by their end.
        """
        index = pd.DatetimeIndex([tvp.timestamp for tvp in self.value])
        data = [None if tvp.value is None else tvp.value.value for tvp in self.value]
        return pd.Series(data, index=index, dtype=object, name=self.unit)

    @classmethod
    def from_series(cls, series: pd.Series, unit: str | None = None) -> TVPValue:
        if not isinstance(series.index, pd.DatetimeIndex):
            raise TypeError("series must have a DatetimeIndex")
        if unit is None and isinstance(series.name, str):
            unit = series.name
        tvps = [
            TimeValuePair(TimeInstant(ts), value_from_python(val, unit))
            for ts, val in series.items()
        ]
        return cls(unit, tvps)
