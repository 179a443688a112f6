"""
Cookie attribute codec.
Serializes a name/value/options triple into a ``Set-Cookie`` value and
extracts single values from a ``Cookie`` request header.
"""

import re
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from functools import lru_cache
from typing import Any

from cookiegrip.exceptions import CookieError

# RFC 6265 field-content
FIELD_CONTENT_RE = re.compile(r"[\u0009\u0020-\u007e\u0080-\u00ff]+")
SAME_SITE_RE = re.compile(r"none|lax|strict", re.IGNORECASE)
PRIORITY_RE = re.compile(r"low|medium|high", re.IGNORECASE)

EPOCH: datetime = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class CookieOptions:
    """Cookie options (Immutable Value Object).

    ``max_age`` is in milliseconds; zero or None leaves a session cookie.
    ``secure=None`` follows the connection.
    ``signed=None`` means signed unless ``encrypt`` is set. ``overwrite``,
    ``signed``, ``encrypt`` and ``remove_unpartitioned`` are instructions for
    the cookie manager and never reach the wire.
    """

    path: str | None = "/"
    domain: str | None = None
    expires: datetime | None = None
    max_age: int | None = None
    http_only: bool = True
    secure: bool | None = None
    same_site: str | bool = False  # "strict", "lax", "none" or True ("strict")
    priority: str | None = None  # "low", "medium" or "high"
    partitioned: bool = False
    remove_unpartitioned: bool = False
    overwrite: bool = False
    signed: bool | None = None
    encrypt: bool = False

    def merge(self, **overrides: Any) -> "CookieOptions":
        """Return a copy with ``overrides`` applied."""
        return replace(self, **overrides)

    @property
    def is_signed(self) -> bool:
        """Encryption disables signing; otherwise signed by default."""
        if self.encrypt:
            return False
        return self.signed is not False


class Cookie:
    """A single outgoing cookie."""

    def __init__(
        self,
        name: str,
        value: str | None = None,
        options: CookieOptions | None = None,
    ) -> None:
        if not FIELD_CONTENT_RE.fullmatch(name):
            raise CookieError("argument name is invalid")
        if value and not FIELD_CONTENT_RE.fullmatch(value):
            raise CookieError("argument value is invalid")

        options = options or CookieOptions()
        if options.path and not FIELD_CONTENT_RE.fullmatch(options.path):
            raise CookieError("argument option path is invalid")
        if options.domain and not FIELD_CONTENT_RE.fullmatch(options.domain):
            raise CookieError("argument option domain is invalid")
        same_site = options.same_site
        if (
            same_site
            and same_site is not True
            and not (isinstance(same_site, str) and SAME_SITE_RE.fullmatch(same_site))
        ):
            raise CookieError("argument option sameSite is invalid")
        if options.priority and not PRIORITY_RE.fullmatch(options.priority):
            raise CookieError("argument option priority is invalid")

        self.name = name
        self.value = value or ""
        if not self.value:
            options = replace(options, expires=EPOCH, max_age=None)
        self.options = options

    def __str__(self) -> str:
        return f"{self.name}={self.value}"

    def __repr__(self) -> str:
        return f"Cookie({self.name!r}, {self.value!r})"

    def to_header(self, now: datetime | None = None) -> str:
        """Format the ``Set-Cookie`` header value."""
        options = self.options
        parts: list[str] = [str(self)]

        if options.path:
            parts.append(f"path={options.path}")
        if options.domain:
            parts.append(f"domain={options.domain}")

        expires = options.expires
        if expires is None and options.max_age:
            now = now or datetime.now(timezone.utc)
            expires = now + timedelta(milliseconds=options.max_age)
        if expires is not None:
            parts.append(f"expires={format_http_date(expires)}")

        if options.same_site:
            same_site = "strict" if options.same_site is True else options.same_site.lower()
            parts.append(f"samesite={same_site}")
        if options.priority:
            parts.append(f"priority={options.priority.lower()}")
        if options.partitioned:
            parts.append("partitioned")
        if options.secure:
            parts.append("secure")
        if options.http_only:
            parts.append("httponly")

        return "; ".join(parts)


def format_http_date(value: datetime) -> str:
    """RFC 1123 date in GMT; naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


@lru_cache(maxsize=512)
def get_pattern(name: str) -> re.Pattern[str]:
    """Pattern capturing the value of ``name`` in a ``Cookie`` header."""
    return re.compile(r"(?:^|;) *" + re.escape(name) + r"=([^;]*)")


def get_cookie_value(header: str, name: str) -> str | None:
    """Extract the first value for ``name`` from a ``Cookie`` header string."""
    if not header:
        return None
    match = get_pattern(name).search(header)
    if match is None:
        return None
    return match.group(1)


def push_cookie(headers: list[str], cookie: Cookie) -> list[str]:
    """Append ``cookie`` to ``headers``, dropping same-name entries on overwrite."""
    if cookie.options.overwrite:
        headers = ignore_cookies_by_name(headers, cookie.name)
    else:
        headers = list(headers)
    headers.append(cookie.to_header())
    return headers


def ignore_cookies_by_name(headers: list[str], name: str) -> list[str]:
    prefix = f"{name}="
    return [header for header in headers if not header.startswith(prefix)]


def url_safe_encode(value: str) -> str:
    return value.replace("+", "-").replace("/", "_")


def url_safe_decode(value: str) -> str:
    return value.replace("-", "+").replace("_", "/")
