"""
ASGI adapter for the cookie manager's request/response collaborator.
"""

from collections.abc import Mapping
from functools import cached_property
from typing import Any

from cookiegrip.events import EventEmitter
from cookiegrip.types import Scope

SECURE_SCHEMES: frozenset[str] = frozenset({"https", "wss"})


class ScopeContext:
    """
    Exposes an ASGI scope as a :class:`~cookiegrip.types.CookieContext`.

    Request headers are read once from the scope; outgoing ``Set-Cookie``
    values are collected here until the response starts.
    """

    def __init__(
        self,
        scope: Scope,
        events: EventEmitter | None = None,
    ) -> None:
        self._scope = scope
        self._set_cookie: list[str] = []
        self.events = events or EventEmitter()

    @cached_property
    def headers(self) -> Mapping[str, str]:
        """Request headers; repeated ``cookie`` headers are joined with ``; ``."""
        headers: dict[str, str] = {}
        raw_headers = self._scope.get("headers", [])

        for name, value in raw_headers:
            header_name = name.decode("latin-1").lower()
            header_value = value.decode("latin-1")
            if header_name in headers:
                separator = "; " if header_name == "cookie" else ", "
                headers[header_name] = f"{headers[header_name]}{separator}{header_value}"
            else:
                headers[header_name] = header_value

        return headers

    @property
    def scheme(self) -> str:
        return self._scope.get("scheme", "http")

    @property
    def secure(self) -> bool:
        return self.scheme in SECURE_SCHEMES

    def get_header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def get_set_cookie(self) -> list[str]:
        return list(self._set_cookie)

    def set_set_cookie(self, headers: list[str]) -> None:
        self._set_cookie = list(headers)

    def emit(self, event: str, payload: Mapping[str, Any]) -> None:
        self.events.emit(event, payload)

    def raw_set_cookie_headers(self) -> list[tuple[bytes, bytes]]:
        """Queued cookies as ASGI header pairs."""
        return [(b"set-cookie", cookie.encode("latin-1")) for cookie in self._set_cookie]
