# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import operator
from collections import Counter, defaultdict
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

import anyio
import orjson
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from typing_extensions import Self

from ..._errors import IndexOutOfRangeError, ReplayError, TypeCoercionError
from .._concepts import Iteration, SupportsIterate, is_model_like
from .emitter import Emitter
from .enumerable import Enumerable
from .event import ItemChange
from .tracking import Action, ActionLog, DirtyTracker

__all__ = ("Collection",)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Binding:
    model: Any
    on_destroy: Callable[..., None]
    on_change: Callable[..., None]
    refs: int = 1


def _snapshot(values: Any) -> list[Any]:
    """Materialize an iteration capability or plain iterable into a list."""
    if values is None:
        return []
    if isinstance(values, SupportsIterate):
        it = values.iterate()
        return [it.get(i) for i in range(it.length())]
    if isinstance(values, (str, bytes, Mapping)):
        raise TypeError(
            f"expected a sequence of models, got {type(values).__name__}"
        )
    return list(values)


def _take(members: list[Any], model: Any) -> bool:
    """Remove the first identity match of ``model``; True if found."""
    for i, m in enumerate(members):
        if m is model:
            del members[i]
            return True
    return False


class Collection(Emitter, Enumerable, BaseModel):
    """Observable, ordered, typed list of models with undo to a pinned state.

    Every structural change (``insert``, ``remove``, ``move``) records its
    inverse, so ``reset()`` can roll the collection back to the state of the
    last ``pin()``. The collection is dirty while structural changes or dirty
    members are outstanding; only clean/dirty transitions are announced.

    Events:
        ``insert(model, index)``, ``remove(index, model)``,
        ``move(from_index, to_index)``, ``change("dirty", new, old)`` and
        ``"change dirty"(new, old)`` on transitions, ``"item change"(ItemChange)``
        and ``change("items.<index>.<name>", value, old, ...)`` for member
        field changes.

    Members are compared by identity throughout. A member that supports
    ``on``/``off`` is bound once, however many positions it occupies; raw
    values are stored as is.

    Example::

        users = Collection([{"name": "Hans"}], User)
        users.push({"name": "Jens"})
        users.reset()
        assert users.to_json() == [{"name": "Hans"}]
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="forbid",
    )

    default_item_type: ClassVar[type | None] = None

    item_type: type[Any] | None = Field(
        None,
        frozen=True,
        description="Class raw values are coerced into on insertion.",
    )

    _listeners: defaultdict = PrivateAttr(
        default_factory=lambda: defaultdict(list)
    )
    _items: list[Any] = PrivateAttr(default_factory=list)
    _bindings: dict[int, _Binding] = PrivateAttr(default_factory=dict)
    _added: list[Any] = PrivateAttr(default_factory=list)
    _removed: list[Any] = PrivateAttr(default_factory=list)
    _dirty_members: dict[int, Any] = PrivateAttr(default_factory=dict)
    _log: ActionLog = PrivateAttr(default_factory=ActionLog)
    _tracker: DirtyTracker | None = PrivateAttr(None)
    _replaying: bool = PrivateAttr(False)

    def __init__(
        self,
        models: Any = None,
        item_type: type | None = None,
        /,
        **data: Any,
    ) -> None:
        if isinstance(models, type) and item_type is None:
            models, item_type = None, models
        if item_type is not None:
            data["item_type"] = item_type
        data.setdefault("item_type", type(self).default_item_type)
        super().__init__(**data)

        # coerce everything first so a rejected value leaves nothing bound
        initial = [self._ensure_type(m) for m in _snapshot(models)]
        for model in initial:
            self._items.append(model)
            self._tracker.update(self._bind(model))

    def model_post_init(self, __context: Any) -> None:
        self._tracker = DirtyTracker(self._emit_dirty)

    @classmethod
    def of(cls, item_type: type) -> type[Self]:
        """Return a subclass whose instances coerce into ``item_type``."""
        return type(
            f"{item_type.__name__}Collection",
            (cls,),
            {"default_item_type": item_type, "__module__": cls.__module__},
        )

    @classmethod
    def use(cls, plugin: Callable[[type[Self]], Any]) -> type[Self]:
        """Apply ``plugin`` to this class; returns the class for chaining."""
        plugin(cls)
        return cls

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def items(self) -> list[Any]:
        """Snapshot of the members in order."""
        return list(self._items)

    @property
    def length(self) -> int:
        return len(self._items)

    @property
    def dirty(self) -> bool:
        return self._tracker.dirty

    @property
    def added(self) -> list[Any]:
        """Members counted as new since the last pin."""
        return list(self._added)

    @property
    def removed(self) -> list[Any]:
        """Baseline members currently removed."""
        return list(self._removed)

    @property
    def actions(self) -> tuple[Action, ...]:
        """Recorded inverse actions, oldest first."""
        return tuple(self._log)

    def iterate(self) -> Iteration[Any]:
        items = self._items
        return Iteration(length=items.__len__, get=items.__getitem__)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items))

    def __getitem__(self, key: int | slice) -> Any:
        return self._items[key]

    def __contains__(self, model: Any) -> bool:
        return self.index_of(model) != -1

    def __repr__(self) -> str:
        type_name = self.item_type.__name__ if self.item_type else None
        return (
            f"{type(self).__name__}(length={len(self._items)}, "
            f"item_type={type_name}, dirty={self.dirty})"
        )

    # ------------------------------------------------------------------
    # Structural operations
    # ------------------------------------------------------------------

    def insert(self, model: Any, index: int = 0) -> Any:
        """Insert ``model`` at ``index``, coercing it to ``item_type``.

        Args:
            model: A member or a raw value accepted by ``item_type``.
            index: Target position, ``0 <= index <= len(self)``.

        Returns:
            The stored (possibly coerced) model.

        Raises:
            IndexOutOfRangeError: If ``index`` is out of bounds.
            TypeCoercionError: If ``item_type`` rejects ``model``.
        """
        index = self._check_index(index, upper=len(self._items))
        model = self._ensure_type(model)
        self._log.record("remove", index)
        return self._insert_at(model, index)

    def remove(self, index: int) -> Any:
        """Remove and return the member at ``index``.

        Raises:
            IndexOutOfRangeError: If ``index`` is out of bounds.
        """
        index = self._check_index(index)
        self._log.record("insert", self._items[index], index)
        return self._remove_at(index)

    def move(self, from_index: int, to_index: int) -> Any:
        """Move the member at ``from_index`` to ``to_index``.

        Moving onto the same index does nothing: no event, no log entry.

        Raises:
            IndexOutOfRangeError: If either index is out of bounds.
        """
        from_index = self._check_index(from_index)
        to_index = self._check_index(to_index)
        if from_index == to_index:
            return self._items[from_index]
        self._log.record("move", to_index, from_index)
        return self._move_between(from_index, to_index)

    def push(self, model: Any) -> Any:
        """Append ``model``; members of a collection-like value are appended
        one by one. Returns the last inserted model."""
        if isinstance(model, SupportsIterate):
            last = None
            for item in _snapshot(model):
                last = self.insert(item, len(self._items))
            return last
        return self.insert(model, len(self._items))

    def pop(self) -> Any:
        """Remove and return the last member.

        Raises:
            IndexOutOfRangeError: If the collection is empty.
        """
        if not self._items:
            raise IndexOutOfRangeError(
                "pop from empty collection", details={"length": 0}
            )
        return self.remove(len(self._items) - 1)

    def clear(self) -> Self:
        """Remove every member through ``remove``, last to first.

        Each removal emits ``remove`` and is recorded, so ``reset()`` brings
        the members back.
        """
        for model in reversed(list(self._items)):
            index = self._rindex_of(model)
            if index != -1:
                self.remove(index)
        return self

    async def aclear(self) -> Self:
        """Remove every member, yielding to the event loop before each one.

        Members are located by identity at removal time; members that left in
        the meantime are skipped.
        """
        for model in list(self._items):
            await anyio.sleep(0)
            index = self.index_of(model)
            if index != -1:
                self.remove(index)
        return self

    def update(self, other: Any) -> None:
        """Reconcile this collection with ``other``'s members and order.

        Runs three phases: remove members absent from ``other`` (back to
        front), append members of ``other`` not present, then move each
        member to its target index in ascending order. Membership is by
        identity and respects multiplicity.
        """
        target = _snapshot(other)

        wanted = Counter(id(m) for m in target)
        keep = Counter()
        stale = []
        for index, model in enumerate(self._items):
            key = id(model)
            if keep[key] < wanted[key]:
                keep[key] += 1
            else:
                stale.append(index)
        for index in reversed(stale):
            self.remove(index)

        present = Counter(id(m) for m in self._items)
        resolved: dict[int, Any] = {}
        for item in target:
            key = id(item)
            if present[key] > 0:
                present[key] -= 1
                continue
            resolved[key] = self.insert(item, len(self._items))

        for index, item in enumerate(target):
            model = resolved.get(id(item), item)
            current = self._index_from(model, index)
            if current == -1:
                continue
            self.move(current, index)

    # ------------------------------------------------------------------
    # Baseline
    # ------------------------------------------------------------------

    def pin(self) -> None:
        """Make the current state the clean baseline and drop the log."""
        with self._tracker.hold():
            for binding in list(self._bindings.values()):
                reset_dirty = getattr(binding.model, "reset_dirty", None)
                if callable(reset_dirty):
                    reset_dirty()
            self._added.clear()
            self._removed.clear()
            self._dirty_members.clear()
            self._log.clear()
            self._tracker.zero()
        logger.debug(f"Pinned {type(self).__name__} at {len(self._items)} item(s)")

    def reset_dirty(self) -> None:
        """Alias of ``pin`` so collections can be nested as members."""
        self.pin()

    def reset(self) -> None:
        """Roll back to the last pinned baseline.

        Replays the recorded inverse actions, newest first, without
        recording them, then resets every member that supports it. Each
        replayed step reports its own clean/dirty transition.

        Raises:
            ReplayError: If called during a replay, or if an action or a
                listener fails. The collection keeps whatever was replayed
                up to the failure.
        """
        if self._replaying:
            raise ReplayError("reset() called while replaying")

        logger.debug(f"Replaying {len(self._log)} action(s)")
        self._replaying = True
        try:
            with self._log.suppress():
                while self._log:
                    self._replay(self._log.pop())
                for binding in list(self._bindings.values()):
                    reset = getattr(binding.model, "reset", None)
                    if callable(reset):
                        reset()
        except Exception as e:
            logger.error(
                f"Replay failed with {len(self._log)} action(s) pending",
                exc_info=True,
            )
            raise ReplayError(
                f"reset() failed: {e}",
                details={"pending": len(self._log)},
                cause=e,
            ) from e
        finally:
            self._replaying = False

    def _replay(self, action: Action) -> None:
        match action.method:
            case "insert":
                model, index = action.args
                self._insert_at(
                    model, self._check_index(index, upper=len(self._items))
                )
            case "remove":
                (index,) = action.args
                self._remove_at(self._check_index(index))
            case "move":
                from_index, to_index = action.args
                self._move_between(
                    self._check_index(from_index), self._check_index(to_index)
                )
            case _:
                raise ValueError(f"Unknown action: {action.method}")

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_json(self) -> list[Any]:
        """Plain values of the members, in order."""
        return [
            m.to_json() if callable(getattr(m, "to_json", None)) else m
            for m in self._items
        ]

    def dumps(self) -> str:
        """``to_json()`` encoded as a JSON string."""
        return orjson.dumps(self.to_json()).decode("utf-8")

    # ------------------------------------------------------------------
    # Primitives, shared by the public operations and by replay
    # ------------------------------------------------------------------

    def _insert_at(self, model: Any, index: int) -> Any:
        self._items.insert(index, model)
        delta = self._bind(model)
        if _take(self._removed, model):
            delta -= 1
        else:
            self._added.append(model)
            delta += 1
        self._tracker.update(delta)
        logger.debug(f"insert {type(model).__name__} at {index}")
        self.emit("insert", model, index)
        return model

    def _remove_at(self, index: int) -> Any:
        model = self._items.pop(index)
        delta = self._unbind(model)
        if _take(self._added, model):
            delta -= 1
        else:
            self._removed.append(model)
            delta += 1
        self._tracker.update(delta)
        logger.debug(f"remove {type(model).__name__} at {index}")
        self.emit("remove", index, model)
        return model

    def _move_between(self, from_index: int, to_index: int) -> Any:
        model = self._items.pop(from_index)
        self._items.insert(to_index, model)
        logger.debug(f"move {from_index} -> {to_index}")
        self.emit("move", from_index, to_index)
        return model

    def _check_index(self, index: int, upper: int | None = None) -> int:
        index = operator.index(index)
        upper = len(self._items) - 1 if upper is None else upper
        if not 0 <= index <= upper:
            raise IndexOutOfRangeError.from_index(
                index, len(self._items), upper=upper
            )
        return index

    def _ensure_type(self, value: Any) -> Any:
        item_type = self.item_type
        if item_type is None or isinstance(value, item_type):
            return value
        try:
            if isinstance(value, Mapping) and issubclass(item_type, BaseModel):
                return item_type.model_validate(value)
            return item_type(value)
        except (TypeError, ValueError) as e:
            raise TypeCoercionError.from_value(
                value, expected=item_type, cause=e
            ) from e

    def _rindex_of(self, model: Any) -> int:
        for i in range(len(self._items) - 1, -1, -1):
            if self._items[i] is model:
                return i
        return -1

    def _index_from(self, model: Any, start: int) -> int:
        for i in range(start, len(self._items)):
            if self._items[i] is model:
                return i
        return -1

    # ------------------------------------------------------------------
    # Member events
    # ------------------------------------------------------------------

    def _bind(self, model: Any) -> int:
        """Subscribe to ``model`` on its first occurrence.

        Returns the dirty delta the member contributes.
        """
        if not is_model_like(model):
            return 0
        key = id(model)
        if (binding := self._bindings.get(key)) is not None:
            binding.refs += 1
            return 0

        def on_destroy(*_: Any) -> None:
            self._handle_destroy(model)

        def on_change(name: str, *args: Any) -> None:
            self._handle_change(model, name, *args)

        model.on("destroy", on_destroy)
        model.on("change", on_change)
        self._bindings[key] = _Binding(model, on_destroy, on_change)

        if getattr(model, "dirty", False):
            self._dirty_members[key] = model
            return 1
        return 0

    def _unbind(self, model: Any) -> int:
        """Unsubscribe from ``model`` once its last occurrence is gone.

        Returns the dirty delta of withdrawing the member.
        """
        key = id(model)
        binding = self._bindings.get(key)
        if binding is None:
            return 0
        binding.refs -= 1
        if binding.refs > 0:
            return 0
        del self._bindings[key]
        model.off("destroy", binding.on_destroy)
        model.off("change", binding.on_change)
        if self._dirty_members.pop(key, None) is not None:
            return -1
        return 0

    def _handle_destroy(self, model: Any) -> None:
        for index in range(len(self._items) - 1, -1, -1):
            if self._items[index] is model:
                self.remove(index)

    def _handle_change(
        self, model: Any, name: str, value: Any = None, old: Any = None, *rest: Any
    ) -> None:
        if name == "dirty":
            key = id(model)
            if value and key not in self._dirty_members:
                self._dirty_members[key] = model
                self._tracker.update(1)
            elif not value and key in self._dirty_members:
                del self._dirty_members[key]
                self._tracker.update(-1)
            return

        index = self.index_of(model)
        if index == -1:
            return
        change = ItemChange(index, name, value, old, rest)
        self.emit("item change", change)
        self.emit("change", *change.as_args())

    def _emit_dirty(self, value: bool, old: bool) -> None:
        logger.debug(f"{type(self).__name__} dirty: {old} -> {value}")
        self.emit("change", "dirty", value, old)
        self.emit("change dirty", value, old)
