"""
cookiegrip exceptions.
Only configuration and transport-policy problems are raised; cryptographic
and verification failures degrade to "value not present" instead.
"""


class CookieGripException(Exception):
    """Base exception for all cookiegrip errors."""

    def __init__(self, message: str = "An error occurred") -> None:
        self.message = message
        super().__init__(self.message)


class ConfigurationError(CookieGripException):
    """Missing or unusable configuration."""
    pass


class InvalidKeys(ConfigurationError):
    """Raised when no usable key list is available for signing or encryption."""

    def __init__(
        self,
        message: str = "keys must be provided and should be a non-empty list of strings",
    ) -> None:
        super().__init__(message)


class CookieError(CookieGripException):
    """Cookie-related errors (invalid name, value or attribute)."""
    pass


class InsecureCookieError(CookieError):
    """A secure cookie was requested over an unencrypted connection."""

    def __init__(
        self,
        message: str = "Cannot send secure cookie over unencrypted connection",
    ) -> None:
        super().__init__(message)
