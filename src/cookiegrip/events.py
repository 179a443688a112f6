"""
Minimal synchronous event channel used for cookie notifications.
"""

import logging
from collections import defaultdict
from collections.abc import Callable, Mapping
from typing import Any

from cookiegrip.types import EventHandler

logger = logging.getLogger("cookiegrip.events")

# Emitted when an outgoing cookie value exceeds the per-cookie size limit
COOKIE_LIMIT_EXCEED: str = "cookie_limit_exceed"


class EventEmitter:
    """
    Registry of event handlers.

    Usage:
        events = EventEmitter()

        @events.on(COOKIE_LIMIT_EXCEED)
        def too_big(payload):
            ...
    """

    def __init__(self) -> None:
        self._handlers: defaultdict[str, list[EventHandler]] = defaultdict(list)

    def on(
        self,
        event: str,
        handler: EventHandler | None = None,
    ) -> Any:
        """Register ``handler`` for ``event``; usable as a decorator."""
        if handler is not None:
            self._handlers[event].append(handler)
            return handler

        def decorator(func: EventHandler) -> EventHandler:
            self._handlers[event].append(func)
            return func

        return decorator

    def off(self, event: str, handler: EventHandler) -> None:
        """Remove a previously registered handler."""
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def listeners(self, event: str) -> list[Callable[..., Any]]:
        return list(self._handlers.get(event, []))

    def emit(self, event: str, payload: Mapping[str, Any]) -> bool:
        """Call every handler for ``event``. Returns True if any handler ran."""
        handlers = self.listeners(event)
        if not handlers:
            logger.debug("no listeners for %s", event)
            return False
        for handler in handlers:
            handler(payload)
        return True
