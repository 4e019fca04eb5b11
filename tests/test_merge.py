#!/usr/bin/env python3
from __future__ import annotations

import pandas as pd
import pytest

from omobs.common import OBS_TYPE_MEASUREMENT, OBS_TYPE_SWE_ARRAY_OBSERVATION
from omobs.constellation import ObservationConstellation
from omobs.errors import MergeError
from omobs.merge import (
    check_for_merge,
    merge,
    merge_all,
    merge_result_times,
    merge_value,
    merge_values,
)
from omobs.observation import Observation
from omobs.observation_value import (
    MultiObservationValue,
    SingleObservationValue,
    to_multi_value,
)
from omobs.temporal import TimeInstant
from omobs.values import NilTemplateValue, QuantityValue


def timestamps(obs: Observation) -> list[pd.Timestamp]:
    return [tvp.phenomenon_time.value for tvp in obs.value.value]


@pytest.mark.parametrize(
    "ind_a, ind_b, expected",
    [
        (None, None, True),
        ("A", "A", True),
        ("A", "B", False),
        ("A", None, False),
        (None, "B", False),
        ("", None, True),
    ],
)
def test__check_for_merge_indicator(make_single, ind_a, ind_b, expected):
    a = make_single("2024-01-01T00:00", 1.0, additional_merge_indicator=ind_a)
    b = make_single("2024-01-01T01:00", 2.0, additional_merge_indicator=ind_b)
    assert check_for_merge(a, b) is expected


def test__check_for_merge_different_constellation(make_single):
    a = make_single("2024-01-01T00:00", 1.0)
    b = make_single("2024-01-01T01:00", 2.0)
    b.constellation = ObservationConstellation(
        "procedure-2", "air_temperature", "offering-1", OBS_TYPE_MEASUREMENT
    )
    assert check_for_merge(a, b) is False


@pytest.mark.parametrize("obs_type", [None, OBS_TYPE_SWE_ARRAY_OBSERVATION])
def test__check_for_merge_observation_type_not_mergeable(obs_type):
    constellation = ObservationConstellation("p", "op", "off", obs_type)
    a = Observation(constellation=constellation)
    b = Observation(constellation=constellation)
    assert check_for_merge(a, b) is False


def test__merge_raises_if_not_eligible(make_single):
    a = make_single("2024-01-01T00:00", 1.0, additional_merge_indicator="A")
    b = make_single("2024-01-01T01:00", 2.0, additional_merge_indicator="B")
    with pytest.raises(MergeError, match="merge indicators differ"):
        merge(a, b)


def test__merge_preserves_sample_order(make_single, make_multi):
    a = make_multi([("2024-01-01T00:00", 1.0), ("2024-01-01T01:00", 2.0)])
    b = make_single("2024-01-01T02:00", 3.0)
    result = merge(a, b)
    assert isinstance(result.value, MultiObservationValue)
    assert timestamps(result) == [
        pd.Timestamp("2024-01-01T00:00"),
        pd.Timestamp("2024-01-01T01:00"),
        pd.Timestamp("2024-01-01T02:00"),
    ]
    assert [tvp.value.value for tvp in result.value.value] == [1.0, 2.0, 3.0]


def test__merge_is_not_commutative_in_order(make_single):
    a = make_single("2024-01-01T05:00", 1.0)
    b = make_single("2024-01-01T01:00", 2.0)
    assert [tvp.value.value for tvp in merge(a, b).value.value] == [1.0, 2.0]
    assert [tvp.value.value for tvp in merge(b, a).value.value] == [2.0, 1.0]


def test__merge_does_not_modify_inputs(make_single, make_multi):
    a = make_multi([("2024-01-01T00:00", 1.0)])
    b = make_single("2024-01-01T01:00", 2.0)
    single_value = b.value
    merge(a, b)
    assert len(a.value.value) == 1
    assert b.value is single_value


def test__merge_sample_count(make_single, make_multi):
    a = make_multi([("2024-01-01T00:00", 1.0), ("2024-01-01T01:00", 2.0)])
    b = make_multi([("2024-01-01T02:00", 3.0), ("2024-01-01T03:00", 4.0)])
    c = make_single("2024-01-01T04:00", 5.0)
    assert len(merge(a, b).value.value) == 4
    assert len(merge(merge(a, b), c).value.value) == 5


def test__merge_skips_nil_template(constellation, make_single):
    a = make_single("2024-01-01T00:00", 1.0)
    template = Observation(
        constellation=constellation,
        value=SingleObservationValue(TimeInstant.template(), NilTemplateValue()),
    )
    result = merge(a, template)
    assert len(result.value.value) == 1

    result = merge(template, a)
    assert len(result.value.value) == 1
    assert result.value.unit == "degC"


def test__merge_is_associative(make_single):
    a = make_single("2024-01-01T00:00", 1.0, result_time="2024-01-02")
    b = make_single("2024-01-01T01:00", 2.0, result_time="2024-01-04")
    c = make_single("2024-01-01T02:00", 3.0, result_time="2024-01-03")
    left = merge(merge(a, b), c)
    right = merge(a, merge(b, c))
    assert left.value == right.value
    assert left.result_time == right.result_time


@pytest.mark.parametrize(
    "rt_a, rt_b, expected",
    [
        ("2024-01-02", "2024-01-03", "2024-01-03"),
        ("2024-01-03", "2024-01-02", "2024-01-03"),
        (None, "2024-01-02", "2024-01-02"),
        ("2024-01-02", None, "2024-01-02"),
        (None, None, None),
    ],
)
def test__merge_result_time(make_single, rt_a, rt_b, expected):
    a = make_single("2024-01-01T00:00", 1.0, result_time=rt_a)
    b = make_single("2024-01-01T01:00", 2.0, result_time=rt_b)
    result = merge(a, b)
    if expected is None:
        assert result.result_time is None
    else:
        assert result.result_time == TimeInstant(expected)


def test__merge_result_time_idempotent(make_single):
    a = make_single("2024-01-01T00:00", 1.0, result_time="2024-01-05")
    b = make_single("2024-01-01T01:00", 2.0, result_time="2024-01-02")
    ab = merge(a, b)
    assert merge(a, ab).result_time == ab.result_time
    assert merge(ab, ab).result_time == ab.result_time


def test__merge_result_times_template_is_earlier():
    template = TimeInstant.template()
    concrete = TimeInstant("2024-01-01")
    assert merge_result_times(template, concrete) is concrete
    assert merge_result_times(concrete, template) is concrete


def test__to_multi_value_round_trip():
    single = SingleObservationValue(
        TimeInstant("2024-01-01T00:00"), QuantityValue(1.5, "m")
    )
    multi = to_multi_value(single)
    assert multi.unit == "m"
    assert len(multi.value) == 1
    tvp = multi.value.value[0]
    assert tvp.phenomenon_time == single.phenomenon_time
    assert tvp.value == single.value


def test__merge_values_unit_taken_from_right():
    a = MultiObservationValue(None)
    b = SingleObservationValue(TimeInstant("2024-01-01"), QuantityValue(1.0, "m"))
    result = merge_values(a, b)
    assert result.unit == "m"
    assert len(result.value) == 1


def test__merge_values_unsupported():
    with pytest.raises(TypeError, match="Unsupported observation value"):
        merge_values(None, 42)


def test__merge_value_keeps_result_time(make_single):
    a = make_single("2024-01-01T00:00", 1.0, result_time="2024-01-01")
    value = SingleObservationValue(TimeInstant("2024-01-01T01:00"), QuantityValue(2.0))
    result = merge_value(a, value)
    assert len(result.value.value) == 2
    assert result.result_time == TimeInstant("2024-01-01")


def test__merge_all_groups_by_eligibility(constellation, make_single):
    other = ObservationConstellation("p2", "op", "off", OBS_TYPE_MEASUREMENT)
    obs = [
        make_single("2024-01-01T00:00", 1.0),
        make_single("2024-01-01T00:00", 10.0, additional_merge_indicator="x"),
        make_single("2024-01-01T01:00", 2.0),
        make_single("2024-01-01T01:00", 20.0, additional_merge_indicator="x"),
        make_single("2024-01-01T02:00", 3.0, result_time="2024-01-03"),
        Observation(
            constellation=other,
            value=SingleObservationValue(TimeInstant("2024-01-01"), QuantityValue(9.0)),
        ),
    ]
    result = merge_all(obs)
    assert len(result) == 3
    assert [tvp.value.value for tvp in result[0].value.value] == [1.0, 2.0, 3.0]
    assert result[0].result_time == TimeInstant("2024-01-03")
    assert [tvp.value.value for tvp in result[1].value.value] == [10.0, 20.0]
    assert isinstance(result[2].value, SingleObservationValue)
    # inputs stay untouched
    assert isinstance(obs[0].value, SingleObservationValue)
