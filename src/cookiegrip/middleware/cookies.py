"""
Cookie manager middleware.
"""

import logging
from collections.abc import Sequence
from typing import Any

from cookiegrip.config import CookieSettings
from cookiegrip.context import ScopeContext
from cookiegrip.cookie import CookieOptions
from cookiegrip.cookies import Cookies
from cookiegrip.events import EventEmitter
from cookiegrip.middleware.base import Middleware
from cookiegrip.types import ASGIApp, Key, Receive, Scope, Send

logger = logging.getLogger("cookiegrip.middleware")

DEFAULT_SCOPE_KEY: str = "cookies"


class CookiesMiddleware(Middleware):
    """
    Attaches a :class:`~cookiegrip.cookies.Cookies` manager to every request.

    Handlers read it from ``scope["cookies"]``; cookies queued during the
    request are appended to the response headers when it starts.

    Usage:
        app = CookiesMiddleware(
            app,
            keys=["current-secret", "previous-secret"],
            defaults=CookieOptions(same_site="lax"),
        )
    """

    def __init__(
        self,
        app: ASGIApp,
        keys: Sequence[Key] | None = None,
        defaults: CookieOptions | None = None,
        events: EventEmitter | None = None,
        scope_key: str = DEFAULT_SCOPE_KEY,
    ) -> None:
        super().__init__(app)
        self.keys = tuple(keys) if keys is not None else None
        self.defaults = defaults or CookieOptions()
        self.events = events or EventEmitter()
        self.scope_key = scope_key

    @classmethod
    def from_settings(
        cls,
        app: ASGIApp,
        settings: CookieSettings,
        **kwargs: Any,
    ) -> "CookiesMiddleware":
        return cls(app, keys=settings.keys, defaults=settings.defaults, **kwargs)

    async def process(self, scope: Scope, receive: Receive, send: Send) -> None:
        ctx = ScopeContext(scope, self.events)
        scope[self.scope_key] = Cookies(ctx, self.keys, self.defaults)

        # Wrap send to flush queued cookies
        async def send_with_cookies(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                queued = ctx.raw_set_cookie_headers()
                if queued:
                    headers: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                    headers.extend(queued)
                    message["headers"] = headers
                    logger.debug("flushed %d set-cookie headers", len(queued))
            await send(message)

        # pyrefly: ignore [bad-argument-type]
        await self.app(scope, receive, send_with_cookies)
