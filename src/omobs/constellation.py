#!/usr/bin/env python3
from __future__ import annotations

from omobs.common import OBS_TYPE_COMPLEX_OBSERVATION, OBS_TYPE_SWE_ARRAY_OBSERVATION

__all__ = ["ObservationConstellation"]

# Observation types whose results are structured records
# rather than samples and can therefore not be concatenated.
NON_MERGEABLE_OBSERVATION_TYPES = frozenset(
    [OBS_TYPE_SWE_ARRAY_OBSERVATION, OBS_TYPE_COMPLEX_OBSERVATION]
)


class ObservationConstellation:
    """
    The identity of a group of observations: procedure, observed
    property, offering and observation type.

    Instances are immutable, they are shared between all observations
    of a merge set.
    """

    __slots__ = ("_procedure", "_observable_property", "_offering", "_observation_type")

    def __init__(
        self,
        procedure: str,
        observable_property: str,
        offering: str | None = None,
        observation_type: str | None = None,
    ):
        object.__setattr__(self, "_procedure", procedure)
        object.__setattr__(self, "_observable_property", observable_property)
        object.__setattr__(self, "_offering", offering)
        object.__setattr__(self, "_observation_type", observation_type)

    def __setattr__(self, key, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    @property
    def procedure(self) -> str:
        return self._procedure

    @property
    def observable_property(self) -> str:
        return self._observable_property

    @property
    def offering(self) -> str | None:
        return self._offering

    @property
    def observation_type(self) -> str | None:
        return self._observation_type

    @classmethod
    def get_instance(cls, message: dict) -> ObservationConstellation:
        try:
            return cls(
                message["procedure"],
                message["observable_property"],
                message.get("offering", None),
                message.get("observation_type", None),
            )
        except KeyError as e:
            raise ValueError(
                f"Unable to get ObservationConstellation instance "
                f"from message \"{message}\""
            ) from e

    def is_set_observation_type(self) -> bool:
        return bool(self._observation_type)

    def check_observation_type_for_merging(self) -> bool:
        return (
            self.is_set_observation_type()
            and self._observation_type not in NON_MERGEABLE_OBSERVATION_TYPES
        )

    def _key(self):
        return (
            self._procedure,
            self._observable_property,
            self._offering,
            self._observation_type,
        )

    def __eq__(self, other):
        if not isinstance(other, ObservationConstellation):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return f"{self.__class__.__name__}{self._key()!r}"
