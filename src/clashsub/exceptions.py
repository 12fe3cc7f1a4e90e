"""Custom exception types for the clashsub application."""


class ClashSubError(Exception):
    """Base exception class for all application-specific errors."""

    pass


class NetworkError(ClashSubError):
    """Raised for network-related errors, such as connection or timeout issues."""

    pass


class ConfigError(ClashSubError):
    """Raised for configuration-related errors."""

    pass


class SubscriptionError(ClashSubError):
    """Raised when a raw subscription yields no supported entries."""

    pass
