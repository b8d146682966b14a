# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Literal

__all__ = (
    "Action",
    "ActionLog",
    "DirtyTracker",
)

logger = logging.getLogger(__name__)

ActionMethod = Literal["insert", "remove", "move"]


class DirtyTracker:
    """Signed counter of unsettled changes with edge-triggered notification.

    The counter composes structural changes and child dirtiness, so it can
    move between non-zero values without the visible state changing. The
    callback receives ``(new, old)`` only when ``dirty`` flips.
    """

    __slots__ = ("_count", "_held", "_on_transition")

    def __init__(self, on_transition: Callable[[bool, bool], Any]) -> None:
        self._count = 0
        self._held = 0
        self._on_transition = on_transition

    @property
    def count(self) -> int:
        return self._count

    @property
    def dirty(self) -> bool:
        return self._count != 0

    def update(self, delta: int) -> None:
        """Apply ``delta`` and notify if the clean/dirty state flipped."""
        if delta == 0:
            return
        was = self.dirty
        self._count += delta
        if not self._held and self.dirty != was:
            self._on_transition(self.dirty, was)

    def zero(self) -> None:
        """Drop every pending change; notifies like ``update``."""
        self.update(-self._count)

    @contextmanager
    def hold(self) -> Iterator[DirtyTracker]:
        """Defer notification until the outermost block exits.

        At most one transition is reported, comparing the state on entry
        with the state on exit.
        """
        was = self.dirty
        self._held += 1
        try:
            yield self
        finally:
            self._held -= 1
            if not self._held and self.dirty != was:
                self._on_transition(self.dirty, was)


@dataclass(slots=True, frozen=True)
class Action:
    """Inverse of a structural change, replayable against a collection."""

    method: ActionMethod
    args: tuple[Any, ...]

    def __str__(self) -> str:
        args = ", ".join(
            repr(a) if isinstance(a, int) else type(a).__name__
            for a in self.args
        )
        return f"{self.method}({args})"


class ActionLog:
    """Stack of inverse actions recorded since the last pin."""

    __slots__ = ("_actions", "_suppressed")

    def __init__(self) -> None:
        self._actions: list[Action] = []
        self._suppressed = 0

    def __len__(self) -> int:
        return len(self._actions)

    def __bool__(self) -> bool:
        return bool(self._actions)

    def __iter__(self) -> Iterator[Action]:
        return iter(list(self._actions))

    @property
    def suppressed(self) -> bool:
        return self._suppressed > 0

    def record(self, method: ActionMethod, *args: Any) -> None:
        if self._suppressed:
            return
        self._actions.append(Action(method, args))

    def pop(self) -> Action:
        return self._actions.pop()

    def clear(self) -> None:
        self._actions.clear()

    @contextmanager
    def suppress(self) -> Iterator[ActionLog]:
        """Ignore ``record`` calls inside the block.

        The flag is released on exit even if the block raises.
        """
        self._suppressed += 1
        try:
            yield self
        finally:
            self._suppressed -= 1
