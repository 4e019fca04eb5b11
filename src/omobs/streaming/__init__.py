#!/usr/bin/env python3
from __future__ import annotations

from omobs.streaming.base import StreamingTimes, StreamingValue, parse_crs
from omobs.streaming.database import DatabaseStreamingValue
from omobs.streaming.memo import Memoized
from omobs.streaming.memory import ListStreamingValue

__all__ = [
    "StreamingTimes",
    "StreamingValue",
    "DatabaseStreamingValue",
    "ListStreamingValue",
    "Memoized",
    "parse_crs",
]
