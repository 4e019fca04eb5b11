#!/usr/bin/env python3
from __future__ import annotations

from typing import Iterable

import pandas as pd

from omobs.geometry import CrsTransformer
from omobs.observation import Observation
from omobs.streaming.base import StreamingTimes, StreamingValue
from omobs.temporal import TimeInstant, TimePeriod
from omobs.typehints import AdditionalRequestParamsT
from omobs.values import TimeValuePair, TVPValue

__all__ = ["ListStreamingValue"]


class ListStreamingValue(StreamingValue[TimeValuePair]):
    """
    A streaming value over time value pairs that are already in memory,
    e.g. the result of an earlier query or a parsed file.
    """

    def __init__(
        self,
        observation_template: Observation,
        values: Iterable[TimeValuePair],
        additional_request_params: AdditionalRequestParamsT | None = None,
        geometry_transformer: CrsTransformer | None = None,
    ):
        super().__init__(
            observation_template, additional_request_params, geometry_transformer
        )
        self._values = list(values)
        self._pos = 0

    @classmethod
    def from_series(
        cls, observation_template: Observation, series: pd.Series, **kwargs
    ) -> ListStreamingValue:
        return cls(observation_template, TVPValue.from_series(series), **kwargs)

    def fetch_next(self) -> TimeValuePair | None:
        if self._pos >= len(self._values):
            return None
        tvp = self._values[self._pos]
        self._pos += 1
        return tvp

    def to_time_value_pair(self, entity: TimeValuePair) -> TimeValuePair:
        return entity

    def query_times(self) -> StreamingTimes | None:
        if not self._values:
            return None
        period = TimePeriod()
        for tvp in self._values:
            period.extend(tvp.phenomenon_time)
        return StreamingTimes(period, TimeInstant(period.end), None)

    def query_unit(self) -> str | None:
        for tvp in self._values:
            if tvp.value.unit:
                return tvp.value.unit
        return None

    def release(self) -> None:
        self._values = []
        self._pos = 0
