class MobileDetectException(Exception):
    """Base exception for all mobile_detect errors."""


class CacheInvalidArgumentError(MobileDetectException, ValueError):
    """Raised when a cache key is empty or violates the key rules."""


class ConfigurationError(MobileDetectException):
    """Raised when a detector's cache configuration cannot be used."""


class UnknownRuleError(MobileDetectException, KeyError):
    """Raised when a check names a rule missing from the signature table."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
