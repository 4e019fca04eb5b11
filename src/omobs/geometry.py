#!/usr/bin/env python3
from __future__ import annotations

import typing

from omobs.typehints import GeoJsonT

__all__ = ["Geometry", "CrsTransformer"]


class Geometry:
    """
    A minimal GeoJSON-like geometry.

    The coordinates are kept as given, they are only ever
    replaced as a whole, e.g. by a CrsTransformer.
    """

    def __init__(self, type: str, coordinates: typing.Any, srid: int | None = None):
        self.type = type
        self.coordinates = coordinates
        self.srid = srid

    @classmethod
    def point(cls, x: float, y: float, z: float | None = None, srid: int | None = None):
        coords = (x, y) if z is None else (x, y, z)
        return cls("Point", coords, srid)

    @classmethod
    def from_geojson(cls, obj: GeoJsonT, srid: int | None = None) -> Geometry:
        try:
            return cls(obj["type"], obj["coordinates"], srid)
        except (KeyError, TypeError) as e:
            raise ValueError(f'Unable to get Geometry instance from "{obj}"') from e

    @property
    def __geo_interface__(self) -> GeoJsonT:
        return {"type": self.type, "coordinates": self.coordinates}

    def sort_key(self):
        # lists and tuples of coordinates are the same geometry
        srid = (0,) if self.srid is None else (1, self.srid)
        return self.type or "", _coordinates_key(self.coordinates), srid

    def __eq__(self, other):
        if not isinstance(other, Geometry):
            return NotImplemented
        return self.sort_key() == other.sort_key()

    def __hash__(self):
        return hash(self.sort_key())

    def __repr__(self):
        return f"Geometry({self.type!r}, {self.coordinates!r}, srid={self.srid})"


def _coordinates_key(coordinates: typing.Any):
    if isinstance(coordinates, (list, tuple)):
        return tuple(_coordinates_key(c) for c in coordinates)
    return coordinates


class CrsTransformer(typing.Protocol):
    """Reprojects a geometry into the spatial reference system `target_srid`."""

    def transform(self, geometry: Geometry, target_srid: int) -> Geometry: ...
