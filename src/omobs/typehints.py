#!/usr/bin/env python3

from __future__ import annotations

import datetime
import typing as _t

import pandas as pd

JsonScalarT = _t.Union[str, int, float, bool, None]
JsonArrayT = list["JsonT"]
JsonObjectT = dict[str, "JsonT"]
JsonT = _t.Union[JsonScalarT, JsonArrayT, JsonObjectT]

DbScalarT = _t.Union[str, bool, int, float, JsonT, datetime.datetime]
DbRowT = tuple[DbScalarT, ...]

TimestampT = _t.Union[datetime.datetime, pd.Timestamp, str]

# read-only key/value options passed alongside a streaming query
AdditionalRequestParamsT = _t.Mapping[str, _t.Any]


class GeoJsonT(_t.TypedDict):
    type: str
    coordinates: _t.Any
