"""
Key-rotation capable signing and encryption engine.

Keeps an ordered list of secrets: the first one signs and encrypts new
values, every one of them is accepted when verifying or decrypting. Rotating
a key is a matter of prepending the new secret and keeping the old ones
around until outstanding cookies have been upgraded.
"""

import base64
import hashlib
import hmac
import logging
import math
import secrets
import threading
from collections.abc import Sequence

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from cookiegrip.exceptions import InvalidKeys
from cookiegrip.types import DecryptResult, Key

logger = logging.getLogger("cookiegrip.keygrip")

ENCRYPTED_PREFIX: str = "enc::"

SALT_SIZE: int = 64
IV_SIZE: int = 16
TAG_SIZE: int = 16
ITERATIONS_SIZE: int = 5
KEY_SIZE: int = 32

# Stored iteration counter range, always five ASCII digits
MIN_ITERATIONS: int = 10_000
MAX_ITERATIONS: int = 99_999


def derive_rounds(iterations: int) -> int:
    """PBKDF2 round count actually used for a stored iteration counter."""
    return math.floor(iterations * 0.47 + 1337)


def _to_bytes(key: Key) -> bytes:
    if isinstance(key, bytes):
        return key
    if isinstance(key, str):
        return key.encode("utf-8")
    raise TypeError(f"key must be str or bytes, not {type(key).__name__}")


def _validate_keys(keys: Sequence[Key] | None) -> tuple[Key, ...]:
    if (
        not isinstance(keys, (list, tuple))
        or not keys
        or not all(isinstance(key, (str, bytes)) for key in keys)
    ):
        raise InvalidKeys()
    return tuple(keys)


def _derive_key(password: Key, salt: bytes, iterations: int) -> bytes:
    """Derive a 256 bit AES key from a secret with PBKDF2-HMAC-SHA512."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA512(),
        length=KEY_SIZE,
        salt=salt,
        iterations=derive_rounds(iterations),
    )
    return kdf.derive(_to_bytes(password))


class Keygrip:
    """
    Signs, verifies, encrypts and decrypts with an ordered list of keys.

    Signatures are HMAC-SHA256 rendered as unpadded URL-safe base64.
    Encryption is AES-256-GCM; every call draws a fresh salt, IV and
    iteration counter from :mod:`secrets`.

    Instances are immutable and safe to share between requests; use
    :func:`get_keygrip` to reuse one instance per key list.
    """

    def __init__(self, keys: Sequence[Key] | None = None) -> None:
        self._keys: tuple[Key, ...] = _validate_keys(keys)
        self._hash_algorithm = hashlib.sha256

    @property
    def keys(self) -> tuple[Key, ...]:
        return self._keys

    def sign(self, message: str, key: Key | None = None) -> str:
        """Sign ``message`` with ``key`` (the current key by default)."""
        if key is None:
            key = self._keys[0]
        signature = hmac.new(
            _to_bytes(key),
            message.encode("utf-8"),
            self._hash_algorithm,
        ).digest()
        return base64.urlsafe_b64encode(signature).decode("ascii").rstrip("=")

    def verify(self, message: str, signature: str) -> int:
        """
        Return the index of the first key whose signature matches, or -1.

        Each comparison is constant-time, but keys are tried in order and
        the loop stops at the first match, so the position of the matching
        key in the rotation is observable through timing. This is accepted.
        """
        digest = signature.encode("utf-8")
        for index, key in enumerate(self._keys):
            if hmac.compare_digest(digest, self.sign(message, key).encode("ascii")):
                logger.debug("signature matched key index %d", index)
                return index
        return -1

    def encrypt(self, plaintext: str, key: Key | None = None) -> str | None:
        """
        Encrypt ``plaintext`` into an ``enc::``-prefixed hex payload.

        Layout: salt(64) | iv(16) | tag(16) | iterations(5 ASCII digits) |
        ciphertext. Returns None if encryption fails, callers must check.
        """
        if key is None:
            key = self._keys[0]
        try:
            salt = secrets.token_bytes(SALT_SIZE)
            iv = secrets.token_bytes(IV_SIZE)
            iterations = MIN_ITERATIONS + secrets.randbelow(MAX_ITERATIONS - MIN_ITERATIONS)

            aesgcm = AESGCM(_derive_key(key, salt, iterations))
            sealed = aesgcm.encrypt(iv, str(plaintext).encode("utf-8"), None)
            # AESGCM appends the tag to the ciphertext
            encrypted, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]

            payload = salt + iv + tag + str(iterations).encode("ascii") + encrypted
            return ENCRYPTED_PREFIX + payload.hex()
        except (TypeError, ValueError, OverflowError) as exc:
            logger.debug("encryption failed: %s", type(exc).__name__)
            return None

    def decrypt_with_key(self, ciphertext: str, key: Key) -> str | None:
        """Decrypt with a single key. Returns None on any failure."""
        try:
            parts = ciphertext.split(ENCRYPTED_PREFIX)
            if len(parts) != 2:
                return None

            data = bytes.fromhex(parts[1])
            offset = SALT_SIZE
            salt = data[:offset]
            iv = data[offset:offset + IV_SIZE]
            offset += IV_SIZE
            tag = data[offset:offset + TAG_SIZE]
            offset += TAG_SIZE
            iterations_field = data[offset:offset + ITERATIONS_SIZE]
            encrypted = data[offset + ITERATIONS_SIZE:]

            if len(tag) != TAG_SIZE or not iterations_field.isdigit():
                return None

            aesgcm = AESGCM(_derive_key(key, salt, int(iterations_field)))
            return aesgcm.decrypt(iv, encrypted + tag, None).decode("utf-8")
        except (InvalidTag, TypeError, ValueError, AttributeError) as exc:
            logger.debug("decryption failed: %s", type(exc).__name__)
            return None

    def decrypt(self, ciphertext: str) -> DecryptResult | None:
        """
        Try every key in order.

        Returns the plaintext together with the index of the key that
        opened it, or None when no key does.
        """
        for index, key in enumerate(self._keys):
            value = self.decrypt_with_key(ciphertext, key)
            if value is not None:
                return DecryptResult(value, index)
        return None


_cache: dict[tuple[Key, ...], Keygrip] = {}
_cache_lock = threading.Lock()


def get_keygrip(keys: Sequence[Key] | None) -> Keygrip:
    """
    Return the shared engine for ``keys``.

    The cache is keyed by the content of the key list, so equal lists map to
    one canonical instance regardless of the list object passed in.
    """
    cache_key = _validate_keys(keys)
    engine = _cache.get(cache_key)
    if engine is not None:
        return engine
    with _cache_lock:
        engine = _cache.get(cache_key)
        if engine is None:
            engine = Keygrip(cache_key)
            _cache[cache_key] = engine
    return engine


def clear_cache() -> None:
    """Drop every cached engine."""
    with _cache_lock:
        _cache.clear()
