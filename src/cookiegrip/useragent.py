"""
User-Agent sniffing for cookie attributes with uneven browser support.

The SameSite=None table follows the known incompatible clients list
published by the Chromium project: WebKit builds that treat ``None`` as
``Strict``, and Chromium/UC Browser builds that reject unknown SameSite
values outright.
"""

import re

CHROMIUM_VERSION_RE = re.compile(r"Chrom[^ /]+/(\d+)[.\d]* ")
CHROMIUM_BASED_RE = re.compile(r"Chrom(?:e|ium)")
IOS_VERSION_RE = re.compile(r"\(iP.+; CPU .*OS (\d+)[_\d]*.*\) AppleWebKit/")
MACOSX_VERSION_RE = re.compile(r"\(Macintosh;.*Mac OS X (\d+)_(\d+)[_\d]*.*\) AppleWebKit/")
SAFARI_RE = re.compile(r"Version/.* Safari/")
MAC_EMBEDDED_BROWSER_RE = re.compile(
    r"^Mozilla/[.\d]+ \(Macintosh;.*Mac OS X [_\d]+\) AppleWebKit/[.\d]+ \(KHTML, like Gecko\)$"
)
UC_BROWSER_RE = re.compile(r"UCBrowser/")
UC_BROWSER_VERSION_RE = re.compile(r"UCBrowser/(\d+)\.(\d+)\.(\d+)[.\d]* ")

# Minimum Chromium major versions per attribute
SAME_SITE_NONE_MIN_CHROMIUM: int = 80
PRIORITY_MIN_CHROMIUM: int = 81
PARTITIONED_MIN_CHROMIUM: int = 114


def parse_chromium_major_version(user_agent: str) -> int | None:
    """Chromium major version, or None for non-Chromium user agents."""
    match = CHROMIUM_VERSION_RE.search(user_agent)
    if match is None:
        return None
    return int(match.group(1))


def is_chromium_based(user_agent: str) -> bool:
    return CHROMIUM_BASED_RE.search(user_agent) is not None


def is_ios_version(major: int, user_agent: str) -> bool:
    match = IOS_VERSION_RE.search(user_agent)
    return match is not None and int(match.group(1)) == major


def is_macosx_version(major: int, minor: int, user_agent: str) -> bool:
    match = MACOSX_VERSION_RE.search(user_agent)
    return (
        match is not None
        and int(match.group(1)) == major
        and int(match.group(2)) == minor
    )


def is_safari(user_agent: str) -> bool:
    return SAFARI_RE.search(user_agent) is not None and not is_chromium_based(user_agent)


def is_mac_embedded_browser(user_agent: str) -> bool:
    return MAC_EMBEDDED_BROWSER_RE.search(user_agent) is not None


def is_uc_browser(user_agent: str) -> bool:
    return UC_BROWSER_RE.search(user_agent) is not None


def is_uc_browser_version_at_least(
    major: int, minor: int, build: int, user_agent: str
) -> bool:
    match = UC_BROWSER_VERSION_RE.search(user_agent)
    if match is None:
        return False
    version = tuple(int(part) for part in match.groups())
    return version >= (major, minor, build)


def is_chromium_version_at_least(major: int, user_agent: str) -> bool:
    version = parse_chromium_major_version(user_agent)
    return version is not None and version >= major


def has_webkit_same_site_bug(user_agent: str) -> bool:
    """iOS 12 and macOS 10.14 WebKit treat SameSite=None as Strict."""
    return is_ios_version(12, user_agent) or (
        is_macosx_version(10, 14, user_agent)
        and (is_safari(user_agent) or is_mac_embedded_browser(user_agent))
    )


def drops_unrecognized_same_site_cookies(user_agent: str) -> bool:
    """Chromium 51-66 and old UC Browser reject cookies with unknown SameSite values."""
    if is_uc_browser(user_agent):
        return not is_uc_browser_version_at_least(12, 13, 2, user_agent)
    return (
        is_chromium_based(user_agent)
        and is_chromium_version_at_least(51, user_agent)
        and not is_chromium_version_at_least(67, user_agent)
    )


def is_same_site_none_compatible(user_agent: str) -> bool:
    """Whether a client is known to handle ``SameSite=None`` correctly."""
    return not (
        has_webkit_same_site_bug(user_agent)
        or drops_unrecognized_same_site_cookies(user_agent)
    )
