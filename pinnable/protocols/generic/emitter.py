# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from ...config import settings
from .._concepts import Observable

__all__ = ("Emitter", "Handler")

Handler = Callable[..., Any]
logger = logging.getLogger(__name__)


class Emitter(Observable):
    """Synchronous in-proc pub/sub mixin keyed by event name.

    Handlers run in subscription order on the caller's stack. Handler
    failures are not isolated: the exception propagates out of ``emit`` to
    whoever triggered the event.

    The handler table lives in the ``_listeners`` attribute and is created
    on first use, so the mixin needs no ``__init__`` cooperation. Pydantic
    subclasses declare it as a private attribute.

    Example::

        class Counter(Emitter):
            def bump(self):
                self.emit("bump", 1)

        counter = Counter()
        counter.on("bump", print)
    """

    def _listener_map(self) -> dict[str, list[Handler]]:
        listeners = getattr(self, "_listeners", None)
        if listeners is None:
            listeners = defaultdict(list)
            self._listeners = listeners
        return listeners

    def on(self, event: str, handler: Handler) -> Handler:
        """Register ``handler`` for ``event``; returns the handler."""
        self._listener_map()[event].append(handler)
        return handler

    def once(self, event: str, handler: Handler) -> Handler:
        """Register ``handler`` to run on the next ``event`` only.

        Returns the wrapper, which is what ``off`` expects.
        """

        def _once(*args: Any) -> Any:
            self.off(event, _once)
            return handler(*args)

        _once.__wrapped__ = handler
        return self.on(event, _once)

    def off(
        self, event: str | None = None, handler: Handler | None = None
    ) -> None:
        """Remove a handler (idempotent).

        ``off(event)`` removes every handler of ``event``; ``off()`` removes
        all handlers.
        """
        listeners = self._listener_map()
        if event is None:
            listeners.clear()
            return
        if handler is None:
            listeners.pop(event, None)
            return
        handlers = listeners.get(event)
        if not handlers:
            return
        for i, h in enumerate(handlers):
            if h is handler or getattr(h, "__wrapped__", None) is handler:
                del handlers[i]
                break
        if not handlers:
            del listeners[event]

    def emit(self, event: str, *args: Any) -> None:
        """Call every handler of ``event`` with ``args``."""
        # Copy handler list so handlers can subscribe/unsubscribe while emitting
        handlers = list(self._listener_map().get(event, ()))
        if settings.PINNABLE_LOG_EVENTS:
            logger.debug(
                f"{type(self).__name__} emits '{event}' to "
                f"{len(handlers)} handler(s)"
            )
        for handler in handlers:
            try:
                handler(*args)
            except Exception:
                logger.debug(
                    f"Handler {getattr(handler, '__name__', handler)!r} "
                    f"failed for event '{event}'"
                )
                raise

    def listeners(self, event: str) -> list[Handler]:
        """Snapshot of the handlers registered for ``event``."""
        return list(self._listener_map().get(event, ()))

    def has_listeners(self, event: str) -> bool:
        return bool(self._listener_map().get(event))
