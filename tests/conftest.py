from __future__ import annotations

import pytest

from omobs.common import OBS_TYPE_MEASUREMENT
from omobs.constellation import ObservationConstellation
from omobs.observation import Observation
from omobs.observation_value import MultiObservationValue, SingleObservationValue
from omobs.temporal import TimeInstant
from omobs.values import QuantityValue, TimeValuePair, TVPValue


@pytest.fixture
def constellation() -> ObservationConstellation:
    return ObservationConstellation(
        "procedure-1", "air_temperature", "offering-1", OBS_TYPE_MEASUREMENT
    )


def single(
    constellation, ts, value, unit="degC", result_time=None, identifier=None, **kwargs
) -> Observation:
    return Observation(
        identifier=identifier,
        constellation=constellation,
        value=SingleObservationValue(TimeInstant(ts), QuantityValue(value, unit)),
        result_time=None if result_time is None else TimeInstant(result_time),
        **kwargs,
    )


def multi(constellation, samples, unit="degC", result_time=None, **kwargs) -> Observation:
    tvps = [TimeValuePair(TimeInstant(ts), QuantityValue(v, unit)) for ts, v in samples]
    return Observation(
        constellation=constellation,
        value=MultiObservationValue(TVPValue(unit, tvps)),
        result_time=None if result_time is None else TimeInstant(result_time),
        **kwargs,
    )


@pytest.fixture
def make_single(constellation):
    def factory(ts, value, **kwargs):
        return single(constellation, ts, value, **kwargs)

    return factory


@pytest.fixture
def make_multi(constellation):
    def factory(samples, **kwargs):
        return multi(constellation, samples, **kwargs)

    return factory
