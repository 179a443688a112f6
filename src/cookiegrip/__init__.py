"""
cookiegrip - signed, encrypted and key-rotated HTTP cookies.

A key-rotation capable signing/encryption engine, a cookie manager that
verifies and transparently re-signs cookies, and ASGI middleware to wire
it into an application.
"""

from cookiegrip.config import CookieSettings
from cookiegrip.context import ScopeContext
from cookiegrip.cookie import Cookie, CookieOptions
from cookiegrip.cookies import Cookies
from cookiegrip.events import COOKIE_LIMIT_EXCEED, EventEmitter
from cookiegrip.exceptions import (
    ConfigurationError,
    CookieError,
    CookieGripException,
    InsecureCookieError,
    InvalidKeys,
)
from cookiegrip.keygrip import Keygrip, get_keygrip
from cookiegrip.middleware import CookiesMiddleware
from cookiegrip.types import CookieContext, DecryptResult

__version__ = "0.1.0"
__all__ = [
    "Keygrip",
    "get_keygrip",
    "DecryptResult",
    "Cookie",
    "CookieOptions",
    "Cookies",
    "CookieContext",
    "ScopeContext",
    "CookieSettings",
    "CookiesMiddleware",
    "EventEmitter",
    "COOKIE_LIMIT_EXCEED",
    "CookieGripException",
    "ConfigurationError",
    "InvalidKeys",
    "CookieError",
    "InsecureCookieError",
]
