#!/usr/bin/env python3
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Iterator, NamedTuple, TypeVar

from omobs.common import ADDITIONAL_PARAM_CRS
from omobs.errors import ParameterFormatError, QueryError
from omobs.geometry import CrsTransformer
from omobs.observation import Observation
from omobs.observation_value import MultiObservationValue
from omobs.parameter import NamedValue, is_sampling_geometry
from omobs.streaming.memo import Memoized
from omobs.temporal import Time, TimeInstant
from omobs.typehints import AdditionalRequestParamsT
from omobs.values import GeometryValue, TimeValuePair, TVPValue

__all__ = ["StreamingTimes", "StreamingValue", "parse_crs"]

logger = logging.getLogger("streaming")

EntityT = TypeVar("EntityT")


class StreamingTimes(NamedTuple):
    phenomenon_time: Time | None = None
    result_time: TimeInstant | None = None
    valid_time: Time | None = None


def parse_crs(value: Any) -> int:
    """
    Return the spatial reference system id of a 'crs' request
    parameter, which is either an integer or a numeric string.
    """
    # bool is a subclass of int, but never a valid srid
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ParameterFormatError(
                ADDITIONAL_PARAM_CRS, value, "not a numeric string"
            ) from None
    raise ParameterFormatError(
        ADDITIONAL_PARAM_CRS, value, f"unsupported type {type(value).__qualname__}"
    )


class StreamingValue(ABC, Generic[EntityT]):
    """
    Sequential, on-demand access to the values of a (potentially
    large) result set, backed by a cursor over some entity kind.

    The observation template provides identity, constellation and
    parameters. Phenomenon time, result time, valid time and unit are
    queried from the backing store on first use and cached afterwards,
    each of the two queries is issued at most once per instance.

    The instance owns the cursor. Use it as a context manager to
    release the cursor on all exit paths:

        with SomeStreamingValue(...) as stream:
            for tvp in stream:
                ...

    Instances are not thread-safe, concurrent consumers each need
    their own instance.
    """

    def __init__(
        self,
        observation_template: Observation,
        additional_request_params: AdditionalRequestParamsT | None = None,
        geometry_transformer: CrsTransformer | None = None,
    ):
        self.observation_template = observation_template
        self.additional_request_params = dict(additional_request_params or {})
        self.geometry_transformer = geometry_transformer
        self._times: Memoized[StreamingTimes | None] = Memoized(self._resolve_times)
        self._unit: Memoized[str | None] = Memoized(self._resolve_unit)
        self._exhausted = False
        self._closed = False

    # ------------------------------------------------------------------
    # to be implemented per backing entity kind

    @abstractmethod
    def fetch_next(self) -> EntityT | None:
        """Advance the cursor and return the next entity, or None at the end."""
        raise NotImplementedError

    @abstractmethod
    def query_times(self) -> StreamingTimes | None:
        raise NotImplementedError

    @abstractmethod
    def query_unit(self) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def to_time_value_pair(self, entity: EntityT) -> TimeValuePair:
        raise NotImplementedError

    def release(self) -> None:
        """Release the backing cursor. Called once by close()."""
        pass

    # ------------------------------------------------------------------
    # lifecycle

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._exhausted = True
        self.release()
        logger.debug("closed %s", self)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ------------------------------------------------------------------
    # iteration

    def next_entity(self) -> EntityT | None:
        """
        Return the next entity of the backing cursor, or None
        if the cursor is exhausted.

        Raises QueryError if fetching fails.
        """
        if self._exhausted:
            return None
        try:
            entity = self.fetch_next()
        except QueryError:
            raise
        except Exception as e:
            raise QueryError(f"{self} failed to fetch the next entity", self) from e
        if entity is None:
            self._exhausted = True
            logger.debug("%s is exhausted", self)
        return entity

    def next_value(self) -> TimeValuePair | None:
        """
        Return the next value, or None if the cursor is exhausted.

        Raises QueryError if fetching or converting the entity fails.
        """
        entity = self.next_entity()
        if entity is None:
            return None
        try:
            return self.to_time_value_pair(entity)
        except QueryError:
            raise
        except Exception as e:
            raise QueryError(f"{self} failed to convert {entity!r}", self) from e

    def __iter__(self) -> Iterator[TimeValuePair]:
        while (tvp := self.next_value()) is not None:
            yield tvp

    # ------------------------------------------------------------------
    # lazily resolved metadata

    def _resolve_times(self) -> StreamingTimes | None:
        logger.debug("%s querying times", self)
        try:
            return self.query_times()
        except QueryError:
            raise
        except Exception as e:
            raise QueryError(f"{self} failed to query times", self) from e

    def _resolve_unit(self) -> str | None:
        logger.debug("%s querying unit", self)
        try:
            return self.query_unit()
        except QueryError:
            raise
        except Exception as e:
            raise QueryError(f"{self} failed to query the unit", self) from e

    @property
    def times(self) -> StreamingTimes:
        return self._times.get() or StreamingTimes()

    @property
    def phenomenon_time(self) -> Time | None:
        return self.times.phenomenon_time

    @property
    def result_time(self) -> TimeInstant | None:
        return self.times.result_time

    @property
    def valid_time(self) -> Time | None:
        return self.times.valid_time

    def is_set_phenomenon_time(self) -> bool:
        time = self.phenomenon_time
        return time is not None and time.is_set()

    def is_set_result_time(self) -> bool:
        time = self.result_time
        return time is not None and time.is_set()

    def is_set_valid_time(self) -> bool:
        time = self.valid_time
        return time is not None and time.is_set()

    @property
    def unit(self) -> str | None:
        return self._unit.get()

    @unit.setter
    def unit(self, unit: str | None):
        self._unit.set(unit)

    def is_set_unit(self) -> bool:
        return self.unit is not None

    # ------------------------------------------------------------------
    # observations

    def check_for_modifications(self, observation: Observation) -> None:
        """
        Apply the modifications requested by the additional request
        parameters to `observation` in place.

        Currently, this is the reprojection of the sampling geometry
        parameter, if a 'crs' parameter was given.
        """
        if ADDITIONAL_PARAM_CRS not in self.additional_request_params:
            return
        target = parse_crs(self.additional_request_params[ADDITIONAL_PARAM_CRS])
        parameters = observation.parameters
        # parameters may be shared with other observations, replace them
        for nv in list(parameters):
            if not is_sampling_geometry(nv):
                continue
            if self.geometry_transformer is None:
                logger.warning(
                    "reprojection to %s requested, but no geometry transformer set",
                    target,
                )
                return
            logger.debug("reprojecting %s to srid %s", nv.name, target)
            geometry = self.geometry_transformer.transform(nv.value.value, target)
            parameters.remove(nv)
            parameters.add(NamedValue(nv.name, GeometryValue(geometry, nv.value.unit)))

    def merge_observation(self) -> Observation:
        """
        Consume all remaining values and return them as one
        time series observation built from the template.
        """
        template = self.observation_template
        observation = template.clone_template()
        observation.identifier = template.identifier
        observation.additional_merge_indicator = template.additional_merge_indicator
        # own set, the reprojection must not touch the template
        observation.parameters = template.parameters.copy()

        tvp_value = TVPValue(self.unit)
        for tvp in self:
            tvp_value.add_value(tvp)
        observation.value = MultiObservationValue(tvp_value, self.phenomenon_time)
        observation.result_time = self.result_time or template.result_time
        observation.valid_time = self.valid_time or template.valid_time
        self.check_for_modifications(observation)
        return observation

    def __repr__(self):
        return f"{self.__class__.__name__}({self.observation_template.identifier!r})"
