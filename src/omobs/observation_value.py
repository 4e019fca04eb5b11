#!/usr/bin/env python3
from __future__ import annotations

from typing import Union

from omobs.temporal import Time
from omobs.values import TimeValuePair, TVPValue, Value

__all__ = [
    "SingleObservationValue",
    "MultiObservationValue",
    "ObservationValue",
    "to_multi_value",
]


class SingleObservationValue:
    """One sample: a phenomenon time and a value."""

    def __init__(self, phenomenon_time: Time | None = None, value: Value | None = None):
        self.phenomenon_time = phenomenon_time
        self.value = value

    @property
    def unit(self) -> str | None:
        if self.value is None:
            return None
        return self.value.unit

    def is_set_value(self) -> bool:
        return self.value is not None

    def is_set_phenomenon_time(self) -> bool:
        return self.phenomenon_time is not None and self.phenomenon_time.is_set()

    def as_time_value_pair(self) -> TimeValuePair:
        return TimeValuePair(self.phenomenon_time, self.value)

    def __eq__(self, other):
        if not isinstance(other, SingleObservationValue):
            return NotImplemented
        return (self.phenomenon_time, self.value) == (
            other.phenomenon_time,
            other.value,
        )

    def __repr__(self):
        return f"SingleObservationValue({self.phenomenon_time!r}, {self.value!r})"


class MultiObservationValue:
    """A time series of samples backed by a TVPValue."""

    def __init__(
        self, value: TVPValue | None = None, phenomenon_time: Time | None = None
    ):
        self.value = value
        self._phenomenon_time = phenomenon_time

    @property
    def phenomenon_time(self) -> Time | None:
        if self._phenomenon_time is not None:
            return self._phenomenon_time
        if self.value is None:
            return None
        return self.value.phenomenon_time

    @phenomenon_time.setter
    def phenomenon_time(self, time: Time | None):
        self._phenomenon_time = time

    @property
    def unit(self) -> str | None:
        if self.value is None:
            return None
        return self.value.unit

    def is_set_value(self) -> bool:
        return self.value is not None and self.value.is_set_value()

    def is_set_phenomenon_time(self) -> bool:
        time = self.phenomenon_time
        return time is not None and time.is_set()

    def __eq__(self, other):
        if not isinstance(other, MultiObservationValue):
            return NotImplemented
        return self.value == other.value

    def __repr__(self):
        return f"MultiObservationValue({self.value!r})"


ObservationValue = Union[SingleObservationValue, MultiObservationValue]


def to_multi_value(value: ObservationValue) -> MultiObservationValue:
    """
    Return the observation value in its multi value form.

    A single value is wrapped into a new one-sample TVPValue carrying
    the unit of the sample. A multi value gets a new TVPValue holding
    the same pairs, so the input is never modified.
    """
    if isinstance(value, SingleObservationValue):
        tvp_value = TVPValue(value.unit)
        tvp_value.add_value(value.as_time_value_pair())
        return MultiObservationValue(tvp_value)
    if isinstance(value, MultiObservationValue):
        source = value.value if value.value is not None else TVPValue()
        return MultiObservationValue(TVPValue(source.unit, list(source.value)))
    raise TypeError(f"Unsupported observation value {type(value).__qualname__}")
