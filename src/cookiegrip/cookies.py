"""
Cookie manager: signed and encrypted cookie get/set for one request.
"""

import logging
from collections.abc import Sequence
from dataclasses import replace
from functools import cached_property
from typing import Any

from cookiegrip import useragent
from cookiegrip.cookie import (
    Cookie,
    CookieOptions,
    get_cookie_value,
    ignore_cookies_by_name,
    push_cookie,
    url_safe_decode,
    url_safe_encode,
)
from cookiegrip.events import COOKIE_LIMIT_EXCEED
from cookiegrip.exceptions import CookieError, InsecureCookieError, InvalidKeys
from cookiegrip.keygrip import Keygrip, get_keygrip
from cookiegrip.types import CookieContext, Key

logger = logging.getLogger("cookiegrip.cookies")

# Practical per-cookie limit across browsers
COOKIE_SIZE_LIMIT: int = 4093

SIGNATURE_SUFFIX: str = ".sig"


class Cookies:
    """
    Reads and writes cookies for a single request/response pair.

    Signed cookies travel with a ``<name>.sig`` companion holding an HMAC of
    ``name=value``. When the companion was produced by an older key it is
    transparently re-signed with the current key on read, which is how key
    rotation propagates to clients without a bulk migration.

    Usage:
        cookies = Cookies(ctx, keys=["new-secret", "old-secret"])
        cookies.set("uid", "42", same_site="lax")
        uid = cookies.get("uid")
    """

    def __init__(
        self,
        ctx: CookieContext,
        keys: Sequence[Key] | None = None,
        defaults: CookieOptions | None = None,
    ) -> None:
        self.ctx = ctx
        self.secure = ctx.secure
        self._keys = keys
        self._defaults = defaults or CookieOptions()
        self._keygrip: Keygrip | None = None

    @property
    def keys(self) -> Keygrip:
        """Signing engine, resolved on first use."""
        if self._keygrip is None:
            if not isinstance(self._keys, (list, tuple)):
                raise InvalidKeys(".keys required for encrypt/sign cookies")
            self._keygrip = get_keygrip(self._keys)
        return self._keygrip

    @property
    def defaults(self) -> CookieOptions:
        return self._defaults

    def get(
        self,
        name: str,
        *,
        signed: bool | None = None,
        encrypt: bool = False,
    ) -> str | None:
        """
        Return the value of cookie ``name`` or None.

        Signed by default. A signature that matches no key queues deletion of
        the ``.sig`` cookie; one that matches a rotated-out key is refreshed.
        """
        is_signed = CookieOptions(signed=signed, encrypt=encrypt).is_signed

        header = self.ctx.get_header("cookie")
        if not header:
            return None

        value = get_cookie_value(header, name)
        if value is None:
            return None
        if not encrypt and not is_signed:
            return value

        if is_signed:
            sig_name = name + SIGNATURE_SUFFIX
            sig_value = self.get(sig_name, signed=False)
            if not sig_value:
                return None

            raw = f"{name}={value}"
            index = self.keys.verify(raw, sig_value)
            if index < 0:
                logger.debug("invalid signature for cookie %s", name)
                self.set(sig_name, None, path="/", signed=False)
                return None
            if index > 0:
                logger.info("re-signing cookie %s with the current key", name)
                self.set(sig_name, self.keys.sign(raw), signed=False)
            return value

        result = self.keys.decrypt(url_safe_decode(value))
        if result is None:
            return None
        return result.value

    def set(self, name: str, value: str | None = None, **options: Any) -> "Cookies":
        """
        Queue a ``Set-Cookie`` header. Returns self for chaining.

        An empty or missing value expires the cookie. Keyword options are
        :class:`~cookiegrip.cookie.CookieOptions` fields and are merged over
        the manager defaults.

        Raises:
            InsecureCookieError: ``secure=True`` over an insecure connection.
            InvalidKeys: signing or encryption without a key list.
        """
        opts = self._defaults.merge(**options)
        signed = opts.is_signed
        value = value or ""

        if opts.secure and not self.secure:
            raise InsecureCookieError()

        headers = self.ctx.get_set_cookie()

        if opts.encrypt and value:
            encrypted = self.keys.encrypt(value)
            if encrypted is None:
                raise CookieError(f"Failed to encrypt cookie {name}")
            value = url_safe_encode(encrypted)

        if len(value) > COOKIE_SIZE_LIMIT:
            logger.warning(
                "cookie %s value length %d exceeds %d",
                name,
                len(value),
                COOKIE_SIZE_LIMIT,
            )
            self.ctx.emit(COOKIE_LIMIT_EXCEED, {"name": name, "value": value})

        opts = self._apply_compatibility(opts)

        # if the caller did not choose, follow the connection
        if opts.secure is None:
            opts = replace(opts, secure=self.secure)

        if opts.partitioned and opts.remove_unpartitioned:
            if opts.overwrite:
                headers = ignore_cookies_by_name(headers, name)
                opts = replace(opts, overwrite=False)
            removal = Cookie(name, "", replace(opts, partitioned=False))
            headers = push_cookie(headers, removal)
            if signed:
                removal_sig = Cookie(name + SIGNATURE_SUFFIX, "", removal.options)
                headers = push_cookie(
                    ignore_cookies_by_name(headers, removal_sig.name),
                    removal_sig,
                )

        cookie = Cookie(name, value, opts)
        headers = push_cookie(headers, cookie)

        if signed:
            sig_value = self.keys.sign(str(cookie)) if value else ""
            sig_cookie = Cookie(name + SIGNATURE_SUFFIX, sig_value, cookie.options)
            headers = push_cookie(headers, sig_cookie)

        self.ctx.set_set_cookie(headers)
        return self

    def _apply_compatibility(self, opts: CookieOptions) -> CookieOptions:
        """Drop attributes the requesting client is known to mishandle."""
        user_agent = self._user_agent

        same_site = opts.same_site
        if isinstance(same_site, str) and same_site.lower() == "none":
            if not self.secure or (
                user_agent and not self.is_same_site_none_compatible()
            ):
                opts = replace(opts, same_site=False)

        if opts.partitioned and not (
            self.secure
            and user_agent
            and self.is_partitioned_compatible()
        ):
            opts = replace(opts, partitioned=False)

        if opts.priority and not (
            user_agent and self.is_priority_compatible()
        ):
            opts = replace(opts, priority=None)

        return opts

    @cached_property
    def _user_agent(self) -> str:
        return self.ctx.get_header("user-agent") or ""

    @cached_property
    def _chromium_version(self) -> int | None:
        # the user agent cannot change mid-request, parse it once
        return useragent.parse_chromium_major_version(self._user_agent)

    def is_same_site_none_compatible(self) -> bool:
        if self._chromium_version is not None:
            return self._chromium_version >= useragent.SAME_SITE_NONE_MIN_CHROMIUM
        return useragent.is_same_site_none_compatible(self._user_agent)

    def is_partitioned_compatible(self) -> bool:
        if self._chromium_version is not None:
            return self._chromium_version >= useragent.PARTITIONED_MIN_CHROMIUM
        return False

    def is_priority_compatible(self) -> bool:
        if self._chromium_version is not None:
            return self._chromium_version >= useragent.PRIORITY_MIN_CHROMIUM
        return False
