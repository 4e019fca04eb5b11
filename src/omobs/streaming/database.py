#!/usr/bin/env python3
from __future__ import annotations

import collections
import itertools
import json
import logging
from datetime import datetime
from typing import Any

import psycopg
from psycopg import sql

from omobs.common import ObservationResultType, get_envvar, log_query
from omobs.errors import QueryError
from omobs.geometry import CrsTransformer
from omobs.observation import Observation
from omobs.streaming.base import StreamingTimes, StreamingValue
from omobs.temporal import TimeInstant, TimePeriod
from omobs.typehints import AdditionalRequestParamsT, DbRowT, TimestampT
from omobs.values import BooleanValue, QuantityValue, TextValue, TimeValuePair, Value

__all__ = ["DatabaseStreamingValue", "row_to_time_value_pair"]

"""
Streaming of the observations of one datastream from a 
SensorThings (FROST) observation database.
"""

logger = logging.getLogger("streaming.database")

_cursor_ids = itertools.count()

# position of the result column for each result type in a row of QUERY
_RESULT_COLUMNS = {
    ObservationResultType.Number: 4,
    ObservationResultType.String: 5,
    ObservationResultType.Json: 6,
    ObservationResultType.Bool: 7,
}


def _to_value(result_type: int, data: Any, unit: str | None) -> Value:
    try:
        rt = ObservationResultType(result_type)
    except ValueError:
        raise QueryError(f"Unknown observation result type {result_type}") from None
    if rt == ObservationResultType.Number:
        return QuantityValue(None if data is None else float(data), unit)
    if rt == ObservationResultType.String:
        return TextValue(data, unit)
    if rt == ObservationResultType.Json:
        return TextValue(None if data is None else json.dumps(data), unit)
    if rt == ObservationResultType.Bool:
        return BooleanValue(data, unit)
    raise QueryError(f"Unsupported observation result type {rt!r}")


def _to_time(start: datetime | None, end: datetime | None):
    if start is None or end is None or start == end:
        return TimeInstant(start if start is not None else end)
    return TimePeriod(start, end)


def row_to_time_value_pair(row: DbRowT, unit: str | None = None) -> TimeValuePair:
    """
    Convert a row of DatabaseStreamingValue.QUERY. The result type
    column tells which of the result columns holds the data.
    """
    start, end, _result_time, result_type = row[:4]
    column = _RESULT_COLUMNS.get(result_type)
    data = None if column is None else row[column]
    return TimeValuePair(_to_time(start, end), _to_value(result_type, data, unit))


class DatabaseStreamingValue(StreamingValue[DbRowT]):
    """
    Streams the observations of a datastream in the order of their
    phenomenon time, using a server-side cursor. Rows are fetched in
    batches of `fetch_size`.
    """

    QUERY = """
    select o."PHENOMENON_TIME_START", o."PHENOMENON_TIME_END", o."RESULT_TIME",
        o."RESULT_TYPE", o."RESULT_NUMBER", o."RESULT_STRING", o."RESULT_JSON",
        o."RESULT_BOOLEAN", o."RESULT_QUALITY"
    from {schema}."OBSERVATIONS" o
    where o."DATASTREAM_ID" = %s
      and o."PHENOMENON_TIME_START" >= %s
      and o."PHENOMENON_TIME_START" <= %s
    order by o."PHENOMENON_TIME_START" asc
    """

    TIMES_QUERY = """
    select min(o."PHENOMENON_TIME_START"),
        max(coalesce(o."PHENOMENON_TIME_END", o."PHENOMENON_TIME_START")),
        max(o."RESULT_TIME"), min(o."VALID_TIME_START"), max(o."VALID_TIME_END")
    from {schema}."OBSERVATIONS" o
    where o."DATASTREAM_ID" = %s
      and o."PHENOMENON_TIME_START" >= %s
      and o."PHENOMENON_TIME_START" <= %s
    """

    UNIT_QUERY = """
    select d."UNIT_SYMBOL" from {schema}."DATASTREAMS" d where d."ID" = %s
    """

    def __init__(
        self,
        conn: psycopg.Connection,
        schema: str,
        datastream_id: int,
        observation_template: Observation,
        start_date: TimestampT | None = None,
        end_date: TimestampT | None = None,
        fetch_size: int | None = None,
        additional_request_params: AdditionalRequestParamsT | None = None,
        geometry_transformer: CrsTransformer | None = None,
    ):
        super().__init__(
            observation_template, additional_request_params, geometry_transformer
        )
        if start_date is None:
            start_date = "-Infinity"
        if end_date is None:
            end_date = "Infinity"
        if fetch_size is None:
            fetch_size = get_envvar("STREAMING_FETCH_SIZE", 1000, cast_to=int)
        if fetch_size < 1:
            raise ValueError(f"fetch_size must be positive, not {fetch_size}")
        self.datastream_id = datastream_id
        self.schema = schema
        self.start_date = start_date
        self.end_date = end_date
        self.fetch_size = fetch_size
        self._conn = conn
        self._cursor: psycopg.ServerCursor | None = None
        self._buffer: collections.deque[DbRowT] = collections.deque()

    def _format(self, query: str) -> sql.Composed:
        return sql.SQL(query).format(schema=sql.Identifier(self.schema))

    def _params(self) -> list:
        return [self.datastream_id, self.start_date, self.end_date]

    def _open_cursor(self) -> psycopg.ServerCursor:
        params = self._params()
        log_query(logger, self.QUERY, params)
        cur = self._conn.cursor(name=f"omobs_stream_{next(_cursor_ids)}")
        try:
            cur.execute(self._format(self.QUERY), params)
        except Exception:
            cur.close()
            raise
        return cur

    def fetch_next(self) -> DbRowT | None:
        if not self._buffer:
            if self._cursor is None:
                self._cursor = self._open_cursor()
            rows = self._cursor.fetchmany(self.fetch_size)
            if not rows:
                return None
            logger.debug("%s fetched %s rows", self, len(rows))
            self._buffer.extend(rows)
        return self._buffer.popleft()

    def to_time_value_pair(self, entity: DbRowT) -> TimeValuePair:
        return row_to_time_value_pair(entity, self.unit)

    def _fetchone(self, query: str, params: list) -> DbRowT | None:
        log_query(logger, query, params)
        with self._conn.cursor() as cur:
            return cur.execute(self._format(query), params).fetchone()

    def query_times(self) -> StreamingTimes | None:
        row = self._fetchone(self.TIMES_QUERY, self._params())
        if row is None or row[0] is None:
            return None
        start, end, result_time, valid_start, valid_end = row
        valid_time = None
        if valid_start is not None or valid_end is not None:
            valid_time = TimePeriod(valid_start, valid_end)
        result = None if result_time is None else TimeInstant(result_time)
        return StreamingTimes(TimePeriod(start, end), result, valid_time)

    def query_unit(self) -> str | None:
        row = self._fetchone(self.UNIT_QUERY, [self.datastream_id])
        if row is None:
            return None
        return row[0]

    def release(self) -> None:
        self._buffer.clear()
        if self._cursor is not None:
            try:
                self._cursor.close()
            except psycopg.Error:
                logger.exception("failed to close cursor of %s", self)
            self._cursor = None

    def __repr__(self):
        return f"{self.__class__.__name__}({self.schema}, {self.datastream_id})"
