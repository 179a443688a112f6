"""
Helpers for building ASGI scope / receive / send and cookie managers in tests.
"""

from collections.abc import Callable, Awaitable, Iterator, Sequence
from typing import Any

import pytest

from cookiegrip.context import ScopeContext
from cookiegrip.cookie import CookieOptions
from cookiegrip.cookies import Cookies
from cookiegrip.events import EventEmitter
from cookiegrip.keygrip import clear_cache

DEFAULT_KEYS: tuple[str, ...] = ("key", "keys")


def make_scope(
    method: str = "GET",
    path: str = "/",
    headers: dict[str, str] | None = None,
    query_string: str = "",
    scope_type: str = "http",
    scheme: str = "http",
    extras: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a minimal ASGI scope dict."""
    raw_headers: list[tuple[bytes, bytes]] = []
    for name, value in (headers or {}).items():
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    scope: dict[str, Any] = {
        "type": scope_type,
        "method": method,
        "path": path,
        "query_string": query_string.encode("utf-8"),
        "headers": raw_headers,
        "client": ("127.0.0.1", 12345),
        "scheme": scheme,
    }
    if extras:
        scope.update(extras)
    return scope


def make_receive(body: bytes = b"") -> Callable[[], Awaitable[dict[str, Any]]]:
    """Create a simple ASGI receive callable that yields one body chunk."""
    called = False

    async def receive() -> dict[str, Any]:
        nonlocal called
        if not called:
            called = True
            return {"type": "http.request", "body": body, "more_body": False}
        return {"type": "http.disconnect"}

    return receive


class ResponseCapture:
    """Captures ASGI send() messages for assertions."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []
        self.status: int = 0
        self.headers: dict[str, str] = {}
        self.set_cookies: list[str] = []
        self.body: bytes = b""

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)
        if message["type"] == "http.response.start":
            self.status = message.get("status", 0)
            for name, value in message.get("headers", []):
                header_name = name.decode("latin-1").lower()
                self.headers[header_name] = value.decode("latin-1")
                if header_name == "set-cookie":
                    self.set_cookies.append(value.decode("latin-1"))
        elif message["type"] == "http.response.body":
            self.body += message.get("body", b"")


def make_cookies(
    cookie: str | None = None,
    user_agent: str | None = None,
    secure: bool = False,
    keys: Sequence[str] | None = DEFAULT_KEYS,
    defaults: CookieOptions | None = None,
    events: EventEmitter | None = None,
) -> Cookies:
    """Build a cookie manager over a fresh ASGI scope."""
    headers: dict[str, str] = {}
    if cookie is not None:
        headers["cookie"] = cookie
    if user_agent is not None:
        headers["user-agent"] = user_agent
    scope = make_scope(headers=headers, scheme="https" if secure else "http")
    ctx = ScopeContext(scope, events)
    return Cookies(ctx, list(keys) if keys is not None else None, defaults)


def set_cookie_headers(cookies: Cookies) -> list[str]:
    """Queued Set-Cookie values of a manager."""
    return cookies.ctx.get_set_cookie()


def request_cookie_header(cookies: Cookies) -> str:
    """Turn queued Set-Cookie values into a Cookie request header."""
    return "; ".join(header.split(";", 1)[0] for header in set_cookie_headers(cookies))


@pytest.fixture(autouse=True)
def _fresh_keygrip_cache() -> Iterator[None]:
    clear_cache()
    yield
    clear_cache()
