# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from abc import ABC
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

__all__ = (
    "Observable",
    "Iteration",
    "SupportsIterate",
    "ModelLike",
    "is_model_like",
)


class Observable(ABC):
    """A marker interface for entities that emit events."""


@dataclass(slots=True, frozen=True)
class Iteration(Generic[T]):
    """Index based view over a live sequence.

    ``length`` and ``get`` are read at call time, so the view follows the
    sequence it was created from.
    """

    length: Callable[[], int]
    get: Callable[[int], T]


@runtime_checkable
class SupportsIterate(Protocol[T]):
    def iterate(self) -> Iteration[T]: ...


@runtime_checkable
class ModelLike(Protocol):
    """Capabilities a collection member needs to be observed."""

    @property
    def dirty(self) -> bool: ...

    def on(self, event: str, handler: Callable[..., Any]) -> Any: ...

    def off(self, event: str, handler: Callable[..., Any]) -> Any: ...

    def reset_dirty(self) -> None: ...

    def to_json(self) -> Any: ...


def is_model_like(value: Any) -> bool:
    """True if ``value`` can be bound to a collection's event handlers."""
    return callable(getattr(value, "on", None)) and callable(
        getattr(value, "off", None)
    )
