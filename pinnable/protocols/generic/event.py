# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...config import settings

__all__ = ("ItemChange",)


@dataclass(slots=True, frozen=True)
class ItemChange:
    """A member's field change, located at the member's current index.

    Attributes:
        index (int): Position of the member when the change was observed.
        name (str): Field (or nested path) that changed on the member.
        value (Any): New value.
        old (Any): Previous value.
        extra (tuple): Any further arguments the member emitted.
    """

    index: int
    name: str
    value: Any = None
    old: Any = None
    extra: tuple[Any, ...] = ()

    @property
    def path(self) -> str:
        """String form of the change, e.g. ``items.0.name``."""
        return settings.change_path(self.index, self.name)

    def as_args(self) -> tuple[Any, ...]:
        """Arguments of the bubbled ``change`` event."""
        return (self.path, self.value, self.old, *self.extra)
