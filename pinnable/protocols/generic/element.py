# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import copy
from collections import defaultdict
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, PrivateAttr

from .emitter import Emitter

__all__ = ("Model",)


class Model(Emitter, BaseModel):
    """Observable pydantic model that tracks its own dirtiness.

    Assigning a field emits ``change(name, value, old)``. The model is dirty
    while any field differs from its baseline, and every clean/dirty
    transition is announced as ``change("dirty", new, old)`` followed by
    ``"change dirty"(new, old)``. The baseline is taken at construction and
    moved by ``reset_dirty()``; ``reset()`` restores it.

    Example::

        class User(Model):
            name: str = ""

        user = User({"name": "Hans"})
        user.name = "Jens"
        assert user.dirty
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
        extra="forbid",
        use_attribute_docstrings=True,
        validate_assignment=True,
    )

    _listeners: defaultdict = PrivateAttr(
        default_factory=lambda: defaultdict(list)
    )
    _baseline: dict[str, Any] = PrivateAttr(default_factory=dict)
    _changed: set[str] = PrivateAttr(default_factory=set)

    def __init__(self, data: Mapping[str, Any] | None = None, /, **kwargs):
        if data is not None:
            if not isinstance(data, Mapping):
                raise TypeError(
                    f"{type(self).__name__} expects a mapping, "
                    f"got {type(data).__name__}"
                )
            kwargs = {**data, **kwargs}
        super().__init__(**kwargs)

    def model_post_init(self, __context: Any) -> None:
        self._baseline = self._snapshot()

    def _snapshot(self) -> dict[str, Any]:
        return {
            name: copy.deepcopy(getattr(self, name))
            for name in type(self).model_fields
        }

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in type(self).model_fields:
            super().__setattr__(name, value)
            return

        old = getattr(self, name)
        super().__setattr__(name, value)
        new = getattr(self, name)
        if new == old:
            return

        was_dirty = self.dirty
        if new == self._baseline.get(name):
            self._changed.discard(name)
        else:
            self._changed.add(name)

        self.emit("change", name, new, old)
        if self.dirty != was_dirty:
            self._emit_dirty(self.dirty, was_dirty)

    def _emit_dirty(self, value: bool, old: bool) -> None:
        self.emit("change", "dirty", value, old)
        self.emit("change dirty", value, old)

    @property
    def dirty(self) -> bool:
        """True while any field differs from the baseline."""
        return bool(self._changed)

    def changes(self) -> dict[str, tuple[Any, Any]]:
        """Map of changed field to ``(baseline, current)``."""
        return {
            name: (self._baseline.get(name), getattr(self, name))
            for name in sorted(self._changed)
        }

    def reset(self) -> None:
        """Restore every changed field to its baseline value."""
        for name in sorted(self._changed):
            setattr(self, name, copy.deepcopy(self._baseline[name]))

    def reset_dirty(self) -> None:
        """Make the current field values the new baseline."""
        was_dirty = self.dirty
        self._baseline = self._snapshot()
        self._changed.clear()
        if was_dirty:
            self._emit_dirty(False, True)

    def destroy(self) -> None:
        """Announce that this model is gone; owning collections drop it."""
        self.emit("destroy")

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
