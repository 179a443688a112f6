"""
cookiegrip - sample ASGI application

Demonstrates signed, encrypted and rotated cookies behind CookiesMiddleware.
Run with: uv run uvicorn sample:app --reload
"""


import json
import logging
from typing import Any

from cookiegrip import COOKIE_LIMIT_EXCEED, CookieOptions, Cookies, CookiesMiddleware, EventEmitter
from cookiegrip.types import Receive, Scope, Send

# =============================================================================
# Application Setup
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
)
logger = logging.getLogger("cookiegrip.sample")

events = EventEmitter()


@events.on(COOKIE_LIMIT_EXCEED)
def cookie_too_large(payload: dict[str, Any]) -> None:
    logger.warning("cookie %s is too large for some browsers", payload["name"])


# =============================================================================
# Routes
# =============================================================================


async def send_json(send: Send, content: Any, status_code: int = 200) -> None:
    body = json.dumps(content).encode("utf-8")
    await send({
        "type": "http.response.start",
        "status": status_code,
        "headers": [(b"content-type", b"application/json")],
    })
    await send({"type": "http.response.body", "body": body})


async def endpoint(scope: Scope, receive: Receive, send: Send) -> None:
    if scope["type"] != "http":
        return
    cookies: Cookies = scope["cookies"]
    path = scope.get("path", "/")

    if path == "/login":
        # Signed by default, tampering is detected on the next read
        cookies.set("user", "admin", max_age=3600 * 1000)
        # Encrypted, the client never sees the plaintext
        cookies.set("prefs", json.dumps({"theme": "dark"}), encrypt=True)
        await send_json(send, {"message": "logged in"})
    elif path == "/logout":
        cookies.set("user", None)
        cookies.set("prefs", None, encrypt=True)
        await send_json(send, {"message": "logged out"})
    else:
        prefs = cookies.get("prefs", encrypt=True)
        await send_json(send, {
            "user": cookies.get("user"),
            "prefs": json.loads(prefs) if prefs else None,
        })


# Prepend a new key to rotate; cookies signed with the old one are re-signed on read
app = CookiesMiddleware(
    endpoint,
    keys=["{YOUR_CURRENT_SECRET_HERE}", "{YOUR_PREVIOUS_SECRET_HERE}"],
    defaults=CookieOptions(same_site="lax"),
    events=events,
)
