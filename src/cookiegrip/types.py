"""
Type definitions for cookiegrip.
"""

from collections.abc import Awaitable, Callable, Mapping, MutableMapping
from typing import Any, NamedTuple, Protocol, TypeAlias

# ASGI Types
Scope: TypeAlias = MutableMapping[str, Any]
Message: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]
ASGIApp: TypeAlias = Callable[[Scope, Receive, Send], Awaitable[None]]

# Key material
Key: TypeAlias = str | bytes
EventHandler: TypeAlias = Callable[[Mapping[str, Any]], None]


class DecryptResult(NamedTuple):
    """Successful multi-key decryption: plaintext and the index of the key used."""

    value: str
    index: int


class CookieContext(Protocol):
    """
    Request/response collaborator consumed by the cookie manager.

    Supplies the raw request headers and the connection security state,
    and owns the list of outgoing ``Set-Cookie`` values for one response.
    """

    @property
    def secure(self) -> bool: ...

    def get_header(self, name: str) -> str | None: ...

    def get_set_cookie(self) -> list[str]: ...

    def set_set_cookie(self, headers: list[str]) -> None: ...

    def emit(self, event: str, payload: Mapping[str, Any]) -> None: ...
