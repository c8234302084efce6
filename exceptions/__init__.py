"""
Exceptions Package for Username Watch Bot

Provides a comprehensive exception hierarchy for error handling
throughout the application.
"""

from exceptions.base import (
    WatchBotException,
    ConfigurationError,
    InitializationError
)

from exceptions.validation import (
    ValidationException,
    InvalidUsernameError,
    InvalidDurationError,
    InvalidMentionError
)

from exceptions.access import (
    AuthorizationError,
    SubscriptionRequiredError,
    SubscriptionExpiredError,
    AdminOnlyError,
    CapacityError,
    SlotLimitExceededError
)

from exceptions.monitoring import (
    MonitoringException,
    ProbeError,
    ProbeRateLimitedError,
    DeliveryError
)

__all__ = [
    # Base exceptions
    "WatchBotException",
    "ConfigurationError",
    "InitializationError",

    # Validation exceptions
    "ValidationException",
    "InvalidUsernameError",
    "InvalidDurationError",
    "InvalidMentionError",

    # Access exceptions
    "AuthorizationError",
    "SubscriptionRequiredError",
    "SubscriptionExpiredError",
    "AdminOnlyError",
    "CapacityError",
    "SlotLimitExceededError",

    # Monitoring exceptions
    "MonitoringException",
    "ProbeError",
    "ProbeRateLimitedError",
    "DeliveryError"
]
