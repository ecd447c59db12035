from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class ModuleEvent(str, enum.Enum):
    INIT_DONE = "init-done"
    MODULES_LOADED = "modules-loaded"
    MODULES_FAILED = "modules-failed"


Handler = Callable[[Any], None]


class EventDispatcher:
    """Delivers module events on one asyncio loop.

    `emit` never runs handlers inline: they are scheduled with call_soon, so
    the emitter always returns before any handler sees the event.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop
        self._handlers: Dict[ModuleEvent, List[Handler]] = {}

    def connect(self, event: ModuleEvent, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def emit(self, event: ModuleEvent, payload: Any = None) -> None:
        logger.debug("Event %s queued", event.value)
        self.loop.call_soon(self._deliver, event, payload)

    def schedule(self, fn: Callable[[], None]) -> None:
        self.loop.call_soon(fn)

    def _deliver(self, event: ModuleEvent, payload: Any) -> None:
        for handler in list(self._handlers.get(event, [])):
            handler(payload)
