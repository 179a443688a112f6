"""
Configuration for cookiegrip.

Key material and cookie defaults can be passed explicitly or read from
environment variables:

    COOKIEGRIP_KEYS       comma-separated secrets, current key first
    COOKIEGRIP_PATH       default cookie path
    COOKIEGRIP_DOMAIN     default cookie domain
    COOKIEGRIP_SAME_SITE  strict | lax | none
    COOKIEGRIP_HTTP_ONLY  true | false
    COOKIEGRIP_SECURE     true | false (unset follows the connection)
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from cookiegrip.cookie import CookieOptions
from cookiegrip.exceptions import ConfigurationError
from cookiegrip.types import Key

logger = logging.getLogger("cookiegrip.config")

DEFAULT_ENV_PREFIX: str = "COOKIEGRIP_"

# Minimum recommended key length (in characters)
MIN_KEY_LENGTH: int = 16

_TRUE_VALUES: frozenset[str] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: frozenset[str] = frozenset({"0", "false", "no", "off"})


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class CookieSettings:
    """Key list and default cookie options for a cookie manager."""

    keys: tuple[Key, ...] | None = None
    defaults: CookieOptions = field(default_factory=CookieOptions)

    def __post_init__(self) -> None:
        if self.keys is None:
            return
        if not self.keys:
            raise ConfigurationError("keys must not be empty when provided")
        for key in self.keys:
            if len(key) < MIN_KEY_LENGTH:
                logger.warning(
                    "cookie key shorter than %d characters; "
                    "use a cryptographically random value in production",
                    MIN_KEY_LENGTH,
                )

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        prefix: str = DEFAULT_ENV_PREFIX,
    ) -> "CookieSettings":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ

        raw_keys = env.get(f"{prefix}KEYS", "")
        keys = tuple(key.strip() for key in raw_keys.split(",") if key.strip())

        overrides: dict[str, object] = {}
        if f"{prefix}PATH" in env:
            overrides["path"] = env[f"{prefix}PATH"] or None
        if env.get(f"{prefix}DOMAIN"):
            overrides["domain"] = env[f"{prefix}DOMAIN"]
        if env.get(f"{prefix}SAME_SITE"):
            overrides["same_site"] = env[f"{prefix}SAME_SITE"].lower()
        if env.get(f"{prefix}HTTP_ONLY"):
            overrides["http_only"] = _parse_bool(f"{prefix}HTTP_ONLY", env[f"{prefix}HTTP_ONLY"])
        if env.get(f"{prefix}SECURE"):
            overrides["secure"] = _parse_bool(f"{prefix}SECURE", env[f"{prefix}SECURE"])

        return cls(
            keys=keys or None,
            defaults=CookieOptions().merge(**overrides),
        )
