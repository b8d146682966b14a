# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from .._concepts import Iteration

T = TypeVar("T")
R = TypeVar("R")

__all__ = ("Enumerable",)


class Enumerable(ABC):
    """Iteration helpers derived from a single ``iterate()`` capability.

    Subclasses implement ``iterate`` and get ``each``, ``map``, ``index_of``
    and friends. Every helper walks the live view by index, so callbacks
    that mutate the sequence see the change on the next step.
    """

    @abstractmethod
    def iterate(self) -> Iteration[T]: ...

    def _walk(self) -> Iterator[tuple[int, T]]:
        it = self.iterate()
        i = 0
        while i < it.length():
            yield i, it.get(i)
            i += 1

    def each(self, fn: Callable[[T, int], Any]) -> None:
        """Call ``fn(item, index)`` for every item; stops if it returns False."""
        for i, item in self._walk():
            if fn(item, i) is False:
                break

    def map(self, fn: Callable[[T, int], R]) -> list[R]:
        return [fn(item, i) for i, item in self._walk()]

    def filter(self, fn: Callable[[T, int], bool]) -> list[T]:
        return [item for i, item in self._walk() if fn(item, i)]

    def reject(self, fn: Callable[[T, int], bool]) -> list[T]:
        return [item for i, item in self._walk() if not fn(item, i)]

    def find(self, fn: Callable[[T, int], bool], default: Any = None) -> T | Any:
        for i, item in self._walk():
            if fn(item, i):
                return item
        return default

    def find_index(self, fn: Callable[[T, int], bool]) -> int:
        for i, item in self._walk():
            if fn(item, i):
                return i
        return -1

    def index_of(self, obj: Any) -> int:
        """Position of ``obj`` by identity, ``-1`` if absent."""
        for i, item in self._walk():
            if item is obj:
                return i
        return -1

    def has(self, obj: Any) -> bool:
        return self.index_of(obj) != -1

    def at(self, index: int) -> T:
        """Item at ``index``; negative indices count from the end."""
        it = self.iterate()
        if index < 0:
            index += it.length()
        if not 0 <= index < it.length():
            raise IndexError(f"index {index} out of range")
        return it.get(index)

    def first(self, default: Any = None) -> T | Any:
        it = self.iterate()
        return it.get(0) if it.length() else default

    def last(self, default: Any = None) -> T | Any:
        it = self.iterate()
        n = it.length()
        return it.get(n - 1) if n else default

    def count(self, fn: Callable[[T, int], bool] | None = None) -> int:
        if fn is None:
            return self.iterate().length()
        return sum(1 for i, item in self._walk() if fn(item, i))

    def any(self, fn: Callable[[T, int], bool]) -> bool:
        return any(fn(item, i) for i, item in self._walk())

    def all(self, fn: Callable[[T, int], bool]) -> bool:
        return all(fn(item, i) for i, item in self._walk())

    def to_list(self) -> list[T]:
        return [item for _, item in self._walk()]
