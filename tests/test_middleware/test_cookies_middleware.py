"""Tests for cookiegrip.middleware — CookiesMiddleware over ASGI."""

from typing import Any

from cookiegrip.config import CookieSettings
from cookiegrip.cookie import CookieOptions
from cookiegrip.cookies import Cookies
from cookiegrip.events import COOKIE_LIMIT_EXCEED, EventEmitter
from cookiegrip.middleware import CookiesMiddleware

from tests.conftest import ResponseCapture, make_receive, make_scope


async def respond(send, status: int = 200, headers: list[tuple[bytes, bytes]] | None = None) -> None:
    await send({"type": "http.response.start", "status": status, "headers": headers or []})
    await send({"type": "http.response.body", "body": b"ok"})


class TestCookiesMiddleware:
    async def test_exposes_manager_and_flushes_cookies(self) -> None:
        seen: dict[str, Any] = {}

        async def inner(scope, receive, send):
            cookies: Cookies = scope["cookies"]
            seen["cookies"] = cookies
            cookies.set("foo", "bar")
            await respond(send, headers=[(b"content-type", b"text/plain")])

        mw = CookiesMiddleware(inner, keys=["secret"])
        cap = ResponseCapture()
        await mw(make_scope(), make_receive(), cap)

        assert isinstance(seen["cookies"], Cookies)
        assert cap.status == 200
        assert cap.headers["content-type"] == "text/plain"
        assert cap.set_cookies[0] == "foo=bar; path=/; httponly"
        assert cap.set_cookies[1].startswith("foo.sig=")

    async def test_round_trip_across_requests(self) -> None:
        async def login(scope, receive, send):
            scope["cookies"].set("user", "alice")
            await respond(send)

        cap = ResponseCapture()
        await CookiesMiddleware(login, keys=["old"])(make_scope(), make_receive(), cap)
        cookie_header = "; ".join(c.split(";", 1)[0] for c in cap.set_cookies)

        result: dict[str, Any] = {}

        async def profile(scope, receive, send):
            result["user"] = scope["cookies"].get("user")
            await respond(send)

        # rotate: new current key, old key kept for verification
        cap2 = ResponseCapture()
        mw = CookiesMiddleware(profile, keys=["new", "old"])
        await mw(make_scope(headers={"cookie": cookie_header}), make_receive(), cap2)

        assert result["user"] == "alice"
        assert len(cap2.set_cookies) == 1
        assert cap2.set_cookies[0].startswith("user.sig=")

    async def test_secure_scheme(self) -> None:
        async def inner(scope, receive, send):
            scope["cookies"].set("foo", "bar", signed=False)
            await respond(send)

        cap = ResponseCapture()
        await CookiesMiddleware(inner)(make_scope(scheme="https"), make_receive(), cap)
        assert cap.set_cookies == ["foo=bar; path=/; secure; httponly"]

    async def test_no_cookies_leaves_headers_alone(self) -> None:
        async def inner(scope, receive, send):
            await respond(send, headers=[(b"x-test", b"1")])

        cap = ResponseCapture()
        await CookiesMiddleware(inner)(make_scope(), make_receive(), cap)
        assert cap.messages[0]["headers"] == [(b"x-test", b"1")]

    async def test_defaults_and_custom_scope_key(self) -> None:
        async def inner(scope, receive, send):
            scope["jar"].set("foo", "bar", signed=False)
            await respond(send)

        mw = CookiesMiddleware(
            inner,
            defaults=CookieOptions(same_site="strict", http_only=False),
            scope_key="jar",
        )
        cap = ResponseCapture()
        await mw(make_scope(), make_receive(), cap)
        assert cap.set_cookies == ["foo=bar; path=/; samesite=strict"]

    async def test_events_are_forwarded(self) -> None:
        events = EventEmitter()
        received: list[str] = []
        events.on(COOKIE_LIMIT_EXCEED, lambda payload: received.append(payload["name"]))

        async def inner(scope, receive, send):
            scope["cookies"].set("big", "x" * 5000, signed=False)
            await respond(send)

        cap = ResponseCapture()
        await CookiesMiddleware(inner, events=events)(make_scope(), make_receive(), cap)
        assert received == ["big"]
        assert len(cap.set_cookies) == 1

    async def test_non_http_passthrough(self) -> None:
        called: dict[str, Any] = {}

        async def inner(scope, receive, send):
            called["scope"] = scope

        mw = CookiesMiddleware(inner, keys=["secret"])
        scope = make_scope(scope_type="lifespan")
        await mw(scope, make_receive(), ResponseCapture())
        assert "cookies" not in called["scope"]

    async def test_from_settings(self) -> None:
        settings = CookieSettings.from_env(
            {"COOKIEGRIP_KEYS": "a-long-enough-secret-key", "COOKIEGRIP_SAME_SITE": "lax"}
        )

        async def inner(scope, receive, send):
            scope["cookies"].set("foo", "bar")
            await respond(send)

        mw = CookiesMiddleware.from_settings(inner, settings)
        cap = ResponseCapture()
        await mw(make_scope(), make_receive(), cap)
        assert mw.keys == ("a-long-enough-secret-key",)
        assert cap.set_cookies[0] == "foo=bar; path=/; samesite=lax; httponly"
