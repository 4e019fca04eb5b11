#!/usr/bin/env python3
from __future__ import annotations

from unittest import mock

import pandas as pd
import pytest

from omobs.common import PARAM_NAME_SAMPLING_GEOMETRY, PARAMETER_NAME_HEIGHT
from omobs.errors import ParameterFormatError, QueryError
from omobs.geometry import Geometry
from omobs.merge import merge
from omobs.observation import Observation
from omobs.parameter import NamedValue
from omobs.streaming import ListStreamingValue, Memoized, StreamingTimes, parse_crs
from omobs.temporal import TimeInstant, TimePeriod
from omobs.values import GeometryValue, QuantityValue, TimeValuePair


def tvps(*samples, unit="degC"):
    return [TimeValuePair(TimeInstant(ts), QuantityValue(v, unit)) for ts, v in samples]


class CountingStream(ListStreamingValue):
    """Counts the deferred queries."""

    def __init__(self, *args, unit=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.unit_queries = 0
        self.times_queries = 0
        self._fixed_unit = unit

    def query_unit(self):
        self.unit_queries += 1
        return self._fixed_unit

    def query_times(self):
        self.times_queries += 1
        return super().query_times()


class FailingStream(ListStreamingValue):
    def fetch_next(self):
        raise ConnectionError("connection lost")

    def query_unit(self):
        raise ConnectionError("connection lost")


class ShiftTransformer:
    def __init__(self):
        self.calls = []

    def transform(self, geometry: Geometry, target_srid: int) -> Geometry:
        self.calls.append(target_srid)
        x, y = geometry.coordinates
        return Geometry(geometry.type, (x + 1, y + 1), target_srid)


@pytest.fixture
def template(constellation) -> Observation:
    return Observation(
        identifier="obs-1",
        constellation=constellation,
        parameters=[
            NamedValue(
                PARAM_NAME_SAMPLING_GEOMETRY,
                GeometryValue(Geometry.point(7.0, 51.0, srid=4326)),
            ),
            NamedValue(PARAMETER_NAME_HEIGHT, QuantityValue(2.0, "m")),
        ],
    )


def test__Memoized_computes_once():
    compute = mock.Mock(return_value=None)
    memo = Memoized(compute)
    assert not memo.is_resolved()
    assert memo.get() is None
    assert memo.get() is None
    assert memo.is_resolved()
    compute.assert_called_once_with()


def test__Memoized_does_not_cache_errors():
    compute = mock.Mock(side_effect=[RuntimeError("boom"), 42])
    memo = Memoized(compute)
    with pytest.raises(RuntimeError):
        memo.get()
    assert memo.get() == 42
    assert memo.get() == 42
    assert compute.call_count == 2


def test__Memoized_set():
    compute = mock.Mock()
    memo = Memoized(compute)
    memo.set("m")
    assert memo.get() == "m"
    compute.assert_not_called()


def test__StreamingValue_is_set_unit_queries_once(template):
    stream = CountingStream(template, tvps())
    assert stream.is_set_unit() is False
    assert stream.is_set_unit() is False
    assert stream.unit is None
    assert stream.unit_queries == 1


def test__StreamingValue_unit_setter_prevents_query(template):
    stream = CountingStream(template, tvps())
    stream.unit = "m"
    assert stream.is_set_unit()
    assert stream.unit_queries == 0


def test__StreamingValue_times_queried_once(template):
    stream = CountingStream(
        template, tvps(("2024-01-01T00:00", 1.0), ("2024-01-01T02:00", 2.0))
    )
    assert stream.is_set_phenomenon_time()
    assert stream.is_set_result_time()
    assert not stream.is_set_valid_time()
    assert stream.phenomenon_time == TimePeriod("2024-01-01T00:00", "2024-01-01T02:00")
    assert stream.times_queries == 1


def test__StreamingValue_no_times(template):
    stream = CountingStream(template, [])
    assert not stream.is_set_phenomenon_time()
    assert not stream.is_set_phenomenon_time()
    assert stream.times == StreamingTimes()
    assert stream.times_queries == 1


def test__StreamingValue_iteration_until_exhausted(template):
    values = tvps(("2024-01-01T00:00", 1.0), ("2024-01-01T01:00", 2.0))
    stream = ListStreamingValue(template, values)
    assert stream.next_value() is values[0]
    assert stream.next_entity() is values[1]
    assert stream.next_value() is None
    assert stream.exhausted
    assert stream.next_value() is None


def test__StreamingValue_context_manager_closes(template):
    stream = ListStreamingValue(template, tvps(("2024-01-01", 1.0)))
    with mock.patch.object(stream, "release", wraps=stream.release) as release:
        with stream:
            next(iter(stream))
        assert stream.closed
        stream.close()
        release.assert_called_once_with()
    assert stream.next_value() is None


def test__StreamingValue_closes_on_error(template):
    stream = FailingStream(template, tvps(("2024-01-01", 1.0)))
    with pytest.raises(QueryError, match="failed to fetch") as exc_info:
        with stream:
            stream.next_value()
    assert isinstance(exc_info.value.__cause__, ConnectionError)
    assert exc_info.value.source is stream
    assert stream.closed


def test__StreamingValue_unit_query_error(template):
    stream = FailingStream(template, [])
    with pytest.raises(QueryError, match="failed to query the unit"):
        stream.is_set_unit()


@pytest.mark.parametrize(
    "value, expected",
    [(4326, 4326), ("25832", 25832), (" 3857 ", 3857)],
)
def test__parse_crs(value, expected):
    assert parse_crs(value) == expected


@pytest.mark.parametrize("value", ["EPSG:4326", "", None, 4326.0, True])
def test__parse_crs_malformed(value):
    with pytest.raises(ParameterFormatError, match="Malformed request parameter 'crs'"):
        parse_crs(value)


def test__check_for_modifications_reprojects_sampling_geometry(template):
    transformer = ShiftTransformer()
    stream = ListStreamingValue(
        template, [], {"crs": "25832"}, geometry_transformer=transformer
    )
    stream.check_for_modifications(template)
    geom = template.spatial_filtering_profile_parameter.value.value
    assert geom == Geometry("Point", (8.0, 52.0), 25832)
    assert transformer.calls == [25832]
    assert template.height_parameter.value == QuantityValue(2.0, "m")


def test__check_for_modifications_without_crs(template):
    transformer = ShiftTransformer()
    stream = ListStreamingValue(template, [], geometry_transformer=transformer)
    stream.check_for_modifications(template)
    assert transformer.calls == []


def test__check_for_modifications_malformed_crs(template):
    stream = ListStreamingValue(
        template, [], {"crs": "abc"}, geometry_transformer=ShiftTransformer()
    )
    with pytest.raises(ParameterFormatError):
        stream.check_for_modifications(template)


def test__merge_observation(template):
    transformer = ShiftTransformer()
    values = tvps(("2024-01-01T00:00", 1.0), ("2024-01-01T01:00", 2.0))
    with ListStreamingValue(
        template, values, {"crs": 25832}, geometry_transformer=transformer
    ) as stream:
        obs = stream.merge_observation()

    assert obs.identifier == "obs-1"
    assert obs.constellation is template.constellation
    assert obs.value.unit == "degC"
    assert [tvp.value.value for tvp in obs.value.value] == [1.0, 2.0]
    assert obs.result_time == TimeInstant("2024-01-01T01:00")
    assert obs.spatial_filtering_profile_parameter.value.value.srid == 25832
    # the template keeps its geometry
    template_geom = template.spatial_filtering_profile_parameter.value.value
    assert template_geom.srid == 4326


def test__ListStreamingValue_from_series(template):
    series = pd.Series(
        [1.5, 2.5], index=pd.to_datetime(["2024-01-01", "2024-01-02"]), name="mm"
    )
    stream = ListStreamingValue.from_series(template, series)
    assert stream.unit == "mm"
    assert [tvp.value for tvp in stream] == [QuantityValue(1.5, "mm"), QuantityValue(2.5, "mm")]


def test__check_for_modifications_replaces_shared_parameters(template, make_single):
    a = make_single("2024-01-01T00:00", 1.0, parameters=list(template.parameters))
    b = make_single("2024-01-01T01:00", 2.0)
    merged = merge(a, b)
    stream = ListStreamingValue(
        template, [], {"crs": 25832}, geometry_transformer=ShiftTransformer()
    )
    stream.check_for_modifications(merged)

    geom = merged.spatial_filtering_profile_parameter.value.value
    assert geom == Geometry("Point", (8.0, 52.0), 25832)
    assert len(merged.parameters) == 2
    # the merge input keeps its geometry
    input_geom = a.spatial_filtering_profile_parameter.value.value
    assert input_geom == Geometry("Point", (7.0, 51.0), 4326)
    assert template.spatial_filtering_profile_parameter.value.value.srid == 4326


def test__next_value_conversion_error(template):
    stream = ListStreamingValue(template, ["not a time value pair"])
    stream.to_time_value_pair = mock.Mock(side_effect=ValueError("start after end"))
    with pytest.raises(QueryError, match="failed to convert"):
        stream.next_value()
