#!/usr/bin/env python3
from __future__ import annotations

import logging
from typing import Iterable

from omobs.errors import MergeError
from omobs.observation import Observation
from omobs.observation_value import (
    MultiObservationValue,
    ObservationValue,
    SingleObservationValue,
    to_multi_value,
)
from omobs.temporal import TimeInstant
from omobs.values import NilTemplateValue, TVPValue

__all__ = [
    "check_for_merge",
    "merge",
    "merge_all",
    "merge_value",
    "merge_values",
    "merge_result_times",
]

"""
Merging of observations into time series.

All functions are pure, the input observations and their values 
are never modified. Merging is not commutative in sample order 
(the samples of the left observation always come first), but it 
is associative when merges are chained left to right.
"""

logger = logging.getLogger("merge")


def _refusal_reason(a: Observation, b: Observation) -> str | None:
    if a.constellation is None or b.constellation is None:
        return "observation constellation is not set"
    if a.constellation != b.constellation:
        return "observation constellations differ"
    if not a.constellation.check_observation_type_for_merging():
        return f"observation type {a.constellation.observation_type!r} is not mergeable"

    a_set = a.is_set_additional_merge_indicator()
    b_set = b.is_set_additional_merge_indicator()
    if a_set and b_set:
        if a.additional_merge_indicator != b.additional_merge_indicator:
            return "additional merge indicators differ"
    elif a_set or b_set:
        return "additional merge indicator is set on one side only"
    return None


def check_for_merge(a: Observation, b: Observation) -> bool:
    """
    Return True if `b` can be merged into `a`.

    This is the case iff both share the same constellation, the
    observation type of the constellation allows merging, and the
    additional merge indicators are either both unset or equal.
    """
    reason = _refusal_reason(a, b)
    if reason is not None:
        logger.debug("refusing to merge %s and %s: %s", a, b, reason)
        return False
    return True


def merge_values(
    a: ObservationValue | None, b: ObservationValue | None
) -> MultiObservationValue:
    """
    Return a new multi value holding all samples of `a`, followed
    by all samples of `b`. Nil template samples are skipped.
    """
    if a is None:
        result = MultiObservationValue(TVPValue())
    elif isinstance(a, SingleObservationValue) and isinstance(
        a.value, NilTemplateValue
    ):
        result = MultiObservationValue(TVPValue(a.unit))
    else:
        result = to_multi_value(a)

    _append_samples(result.value, b)
    return result


def _append_samples(tvp_value: TVPValue, b: ObservationValue | None) -> None:
    if b is None:
        return
    if isinstance(b, SingleObservationValue):
        if not isinstance(b.value, NilTemplateValue):
            tvp_value.add_value(b.as_time_value_pair())
    elif isinstance(b, MultiObservationValue):
        if b.value is not None:
            tvp_value.add_values(b.value.value)
    else:
        raise TypeError(f"Unsupported observation value {type(b).__qualname__}")

    if not tvp_value.is_set_unit() and b.unit:
        tvp_value.unit = b.unit


def merge_result_times(
    a: TimeInstant | None, b: TimeInstant | None
) -> TimeInstant | None:
    """Return the later of both result times, or the one that is set."""
    a_set = a is not None and a.is_set()
    b_set = b is not None and b.is_set()
    if a_set and b_set:
        return b if a.is_before(b) else a
    if not a_set and b_set:
        return b
    return a


def merge(a: Observation, b: Observation) -> Observation:
    """
    Merge `b` into a copy of `a` and return the copy.

    The result holds a time series with the samples of `a` followed
    by the samples of `b` and the later of both result times. All
    other attributes are taken from `a`.

    Raises MergeError if the observations are not eligible for
    merging, see `check_for_merge`.
    """
    reason = _refusal_reason(a, b)
    if reason is not None:
        raise MergeError(reason)

    result = a.copy()
    result.value = merge_values(a.value, b.value)
    result.result_time = merge_result_times(a.result_time, b.result_time)
    logger.debug(
        "merged %s into %s, now %d samples",
        b.identifier,
        a.identifier,
        len(result.value.value),
    )
    return result


def merge_value(observation: Observation, value: ObservationValue) -> Observation:
    """
    Fold a bare observation value into a copy of `observation`.

    There is no eligibility check and the result time stays untouched.
    """
    result = observation.copy()
    result.value = merge_values(observation.value, value)
    return result


def merge_all(observations: Iterable[Observation]) -> list[Observation]:
    """
    Merge every observation into the first preceding observation it
    is eligible to be merged with. Observations that cannot be merged
    with any predecessor start a new group.

    The groups are returned in order of their first appearance.
    """
    merged: list[Observation] = []
    # indices of results created here, these are extended in place
    owned: set[int] = set()
    for obs in observations:
        for i, target in enumerate(merged):
            if not check_for_merge(target, obs):
                continue
            if i in owned:
                _append_samples(target.value.value, obs.value)
                target.result_time = merge_result_times(
                    target.result_time, obs.result_time
                )
            else:
                merged[i] = merge(target, obs)
                owned.add(i)
            break
        else:
            merged.append(obs)
    return merged
