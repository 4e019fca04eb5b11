#!/usr/bin/env python3
from __future__ import annotations

from typing import Callable, Generic, TypeVar

__all__ = ["Memoized"]

T = TypeVar("T")

_unresolved = type("unresolved", (), {})


class Memoized(Generic[T]):
    """
    A value that is computed on first access and cached afterwards.

    Any result is cached, including None, which means "looked up
    but not found". If the computation raises, nothing is cached.
    """

    def __init__(self, compute: Callable[[], T]):
        self._compute = compute
        self._result: T | type[_unresolved] = _unresolved

    def get(self) -> T:
        if self._result is _unresolved:
            self._result = self._compute()
        return self._result

    def set(self, value: T) -> None:
        self._result = value

    def is_resolved(self) -> bool:
        return self._result is not _unresolved

    def __repr__(self):
        if self.is_resolved():
            return f"Memoized({self._result!r})"
        return "Memoized(<unresolved>)"
