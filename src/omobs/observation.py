#!/usr/bin/env python3
from __future__ import annotations

import copy
from typing import Hashable, Iterable

from omobs.constellation import ObservationConstellation
from omobs.observation_value import ObservationValue
from omobs.parameter import NamedValue, ParameterSet
from omobs.temporal import Time, TimeInstant, TimePeriod
from omobs.values import Value

__all__ = ["Observation"]


class Observation:
    """
    An O&M observation.

    The value is either a single sample or a time series. Observations
    that share a constellation can be merged into one time series,
    see ``omobs.merge``.

    The text encoding hints (token, tuple and decimal separator and the
    no data value) are carried for later rendering only.
    """

    def __init__(
        self,
        identifier: str | None = None,
        constellation: ObservationConstellation | None = None,
        value: ObservationValue | None = None,
        result_time: TimeInstant | None = None,
        valid_time: TimePeriod | None = None,
        parameters: Iterable[NamedValue] | None = None,
        quality: Iterable[Hashable] | None = None,
        additional_merge_indicator: str | None = None,
        result_type: str | None = None,
        token_separator: str | None = None,
        tuple_separator: str | None = None,
        decimal_separator: str | None = None,
        no_data_value: str | None = None,
        gml_id: str | None = None,
    ):
        self.identifier = identifier
        self.constellation = constellation
        self.value = value
        self.result_time = result_time
        self.valid_time = valid_time
        if isinstance(parameters, ParameterSet):
            self.parameters = parameters
        else:
            self.parameters = ParameterSet(parameters or ())
        self.quality: set[Hashable] = set(quality or ())
        self.additional_merge_indicator = additional_merge_indicator
        self.result_type = result_type
        self.token_separator = token_separator
        self.tuple_separator = tuple_separator
        self.decimal_separator = decimal_separator
        self.no_data_value = no_data_value
        self._gml_id = gml_id

    def __repr__(self):
        return (
            f"{self.__class__.__name__}({self.identifier!r}, "
            f"{self.constellation!r}, {self.value!r})"
        )

    @property
    def gml_id(self) -> str | None:
        if not self._gml_id and self.is_set_identifier():
            self._gml_id = f"o_{self.identifier}"
        return self._gml_id

    @gml_id.setter
    def gml_id(self, gml_id: str | None):
        self._gml_id = gml_id

    @property
    def phenomenon_time(self) -> Time | None:
        if self.value is None:
            return None
        return self.value.phenomenon_time

    # ------------------------------------------------------------------
    # is_set predicates

    def is_set_identifier(self) -> bool:
        return bool(self.identifier)

    def is_set_value(self) -> bool:
        return self.value is not None and self.value.is_set_value()

    def is_set_phenomenon_time(self) -> bool:
        time = self.phenomenon_time
        return time is not None and time.is_set()

    def is_set_result_time(self) -> bool:
        return self.result_time is not None and self.result_time.is_set()

    def is_template_result_time(self) -> bool:
        return self.is_set_result_time() and self.result_time.is_template()

    def is_set_valid_time(self) -> bool:
        return self.valid_time is not None and not self.valid_time.is_empty()

    def is_set_result_type(self) -> bool:
        return bool(self.result_type)

    def is_set_token_separator(self) -> bool:
        return bool(self.token_separator)

    def is_set_tuple_separator(self) -> bool:
        return bool(self.tuple_separator)

    def is_set_decimal_separator(self) -> bool:
        return bool(self.decimal_separator)

    def is_set_no_data_value(self) -> bool:
        return bool(self.no_data_value)

    def is_set_result_quality(self) -> bool:
        return len(self.quality) > 0

    def is_set_additional_merge_indicator(self) -> bool:
        return bool(self.additional_merge_indicator)

    # ------------------------------------------------------------------
    # parameters

    def add_parameter(self, nv: NamedValue) -> Observation:
        self.parameters.add(nv)
        return self

    def is_set_parameter(self) -> bool:
        return len(self.parameters) > 0

    def get_parameter(self, name: str) -> Value | None:
        return self.parameters.get(name)

    @property
    def spatial_filtering_profile_parameter(self) -> NamedValue | None:
        return self.parameters.sampling_geometry

    @property
    def height_parameter(self) -> NamedValue | None:
        return self.parameters.height

    @property
    def depth_parameter(self) -> NamedValue | None:
        return self.parameters.depth

    @property
    def height_depth_parameter(self) -> NamedValue | None:
        return self.parameters.height_depth

    def is_set_spatial_filtering_profile_parameter(self) -> bool:
        return self.parameters.is_set_sampling_geometry()

    def is_set_height_parameter(self) -> bool:
        return self.parameters.is_set_height()

    def is_set_depth_parameter(self) -> bool:
        return self.parameters.is_set_depth()

    def is_set_height_depth_parameter(self) -> bool:
        return self.parameters.is_set_height_depth()

    # ------------------------------------------------------------------
    # quality

    def add_result_quality(self, quality: Hashable | Iterable[Hashable]) -> Observation:
        if isinstance(quality, (set, frozenset, list, tuple)):
            self.quality.update(quality)
        else:
            self.quality.add(quality)
        return self

    # ------------------------------------------------------------------
    # copies

    def clone_template(self) -> Observation:
        """
        Return a new observation sharing the constellation and the
        parameters of this one, without value, times and quality.
        """
        return Observation(
            constellation=self.constellation,
            parameters=self.parameters,
            result_type=self.result_type,
            token_separator=self.token_separator,
            tuple_separator=self.tuple_separator,
            decimal_separator=self.decimal_separator,
        )

    def copy(self) -> Observation:
        """
        Return a shallow copy with its own parameter set and quality
        set. Constellation, times and value are shared.
        """
        new = copy.copy(self)
        new.parameters = self.parameters.copy()
        new.quality = set(self.quality)
        return new
