"""
ASGI middleware for cookiegrip.
"""

from cookiegrip.middleware.base import Middleware
from cookiegrip.middleware.cookies import CookiesMiddleware

__all__ = [
    "Middleware",
    "CookiesMiddleware",
]
