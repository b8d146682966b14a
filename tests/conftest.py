# tests/conftest.py
from collections.abc import Callable

import pytest


class EventRecorder:
    """Collects ``(event, args)`` tuples emitted by an emitter."""

    def __init__(self):
        self.calls: list[tuple[str, tuple]] = []

    def listen(self, emitter, *events: str) -> "EventRecorder":
        for event in events:
            emitter.on(event, self._handler(event))
        return self

    def _handler(self, event: str) -> Callable[..., None]:
        def handler(*args):
            self.calls.append((event, args))

        return handler

    def named(self, event: str) -> list[tuple]:
        return [args for name, args in self.calls if name == event]

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def clear(self) -> None:
        self.calls.clear()


@pytest.fixture
def recorder():
    """Fresh event recorder; attach with ``recorder.listen(emitter, ...)``."""
    return EventRecorder()


@pytest.fixture
def anyio_backend():
    return "asyncio"
