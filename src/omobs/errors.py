#!/usr/bin/env python3
from __future__ import annotations

from typing import Any


class ParsingError(RuntimeError):
    """Parsing failed."""

    pass


class UserInputError(ParsingError):
    """
    Error that originated by malformed data or input provided by a user.
    """

    pass


class ParameterFormatError(UserInputError):
    """
    An additional request parameter could not be interpreted,
    e.g. a CRS option that is neither an integer nor a numeric string.
    """

    def __init__(self, name: str, value: Any, reason: str | None = None):
        self.name = name
        self.value = value
        self.reason = reason
        msg = f"Malformed request parameter {name!r}: {value!r}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class QueryError(RuntimeError):
    """
    Fetching from a backing cursor or querying metadata failed.

    The failure is not retried, the original exception is
    available as ``__cause__``.
    """

    def __init__(self, msg: str, source: Any = None):
        self.source = source
        super().__init__(msg)


class MergeError(ValueError):
    """
    Two observations were merged although they are not
    eligible for merging (see ``omobs.merge.check_for_merge``).
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Observations cannot be merged: {reason}")


class DataNotFoundError(RuntimeError):
    """
    Data is missing, e.g. a simple value was requested
    from an empty value list.
    """

    pass
