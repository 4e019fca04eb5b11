#!/usr/bin/env python3
from __future__ import annotations

import enum
from typing import Union

import pandas as pd

from omobs.typehints import TimestampT

__all__ = [
    "IndeterminateValue",
    "NilReason",
    "TimeInstant",
    "TimePeriod",
    "Time",
    "to_timestamp",
]


class IndeterminateValue(enum.StrEnum):
    After = "after"
    Before = "before"
    Now = "now"
    Unknown = "unknown"
    Template = "template"


class NilReason(enum.StrEnum):
    Inapplicable = "inapplicable"
    Missing = "missing"
    Template = "template"
    Unknown = "unknown"
    Withheld = "withheld"


def to_timestamp(value: TimestampT | None) -> pd.Timestamp | None:
    if value is None:
        return None
    ts = pd.Timestamp(value)
    if ts is pd.NaT:
        return None
    return ts


class TimeInstant:
    """
    A single point in time.

    An instant might not carry a concrete timestamp but an
    indeterminate value or a nil reason instead, e.g. the
    result time of an observation template.
    """

    def __init__(
        self,
        value: TimestampT | None = None,
        indeterminate: IndeterminateValue | str | None = None,
        nil_reason: NilReason | str | None = None,
    ):
        self.value = to_timestamp(value)
        self.indeterminate = (
            None if indeterminate is None else IndeterminateValue(indeterminate)
        )
        self.nil_reason = None if nil_reason is None else NilReason(nil_reason)

    @classmethod
    def template(cls) -> TimeInstant:
        return cls(indeterminate=IndeterminateValue.Template)

    def is_set(self) -> bool:
        return (
            self.value is not None
            or self.indeterminate is not None
            or self.nil_reason is not None
        )

    def is_empty(self) -> bool:
        return not self.is_set()

    def is_template(self) -> bool:
        return (
            self.indeterminate == IndeterminateValue.Template
            or self.nil_reason == NilReason.Template
        )

    def is_before(self, other: TimeInstant) -> bool:
        """
        Return True if this instant lies before `other`.

        Instants without a concrete timestamp (indeterminate
        or nil) are considered to lie before every concrete one.
        """
        if other.value is None:
            return False
        if self.value is None:
            return True
        return self.value < other.value

    def __eq__(self, other):
        if not isinstance(other, TimeInstant):
            return NotImplemented
        return (
            self.value == other.value
            and self.indeterminate == other.indeterminate
            and self.nil_reason == other.nil_reason
        )

    def __hash__(self):
        return hash((self.value, self.indeterminate, self.nil_reason))

    def __repr__(self):
        if self.value is not None:
            return f"TimeInstant({self.value.isoformat()})"
        return (
            f"TimeInstant(indeterminate={self.indeterminate}, "
            f"nil_reason={self.nil_reason})"
        )


class TimePeriod:
    """A time interval, either end may be open (None)."""

    def __init__(self, start: TimestampT | None = None, end: TimestampT | None = None):
        self.start = to_timestamp(start)
        self.end = to_timestamp(end)
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError(f"period start {self.start} is after its end {self.end}")

    def is_empty(self) -> bool:
        return self.start is None and self.end is None

    def is_set(self) -> bool:
        return not self.is_empty()

    def extend(self, time: Time | None) -> TimePeriod:
        """Widen this period in place to also cover `time`."""
        if time is None:
            return self
        if isinstance(time, TimeInstant):
            starts = ends = [time.value]
        elif isinstance(time, TimePeriod):
            starts, ends = [time.start], [time.end]
        else:
            raise TypeError(f"Unsupported time type {type(time).__qualname__}")
        starts = [t for t in starts + [self.start] if t is not None]
        ends = [t for t in ends + [self.end] if t is not None]
        self.start = min(starts) if starts else None
        self.end = max(ends) if ends else None
        return self

    def __eq__(self, other):
        if not isinstance(other, TimePeriod):
            return NotImplemented
        return self.start == other.start and self.end == other.end

    def __hash__(self):
        return hash((self.start, self.end))

    def __repr__(self):
        return f"TimePeriod({self.start}, {self.end})"


Time = Union[TimeInstant, TimePeriod]
