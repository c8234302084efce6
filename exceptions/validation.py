"""
Validation Exception Classes for Username Watch Bot

Provides specialized exceptions for malformed command input. All of them
result in a usage message for the user and no state change.
"""

from __future__ import annotations

from typing import Any, Optional

from exceptions.base import WatchBotException


class ValidationException(WatchBotException):
    """
    Base Validation Exception

    Parent class for all validation-related exceptions.
    """

    default_error_code = 3000
    default_recoverable = True

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        usage: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        """
        Initialize validation exception.

        Args:
            message: Error message
            field: The field that failed validation
            value: The invalid value (sanitized)
            usage: Usage text shown to the user instead of the message
            **kwargs: Additional arguments
        """
        super().__init__(message, **kwargs)

        self.usage = usage

        if field:
            self.details["field"] = field

        if value is not None:
            self.details["value"] = self._sanitize_value(value)

    @staticmethod
    def _sanitize_value(value: Any) -> str:
        """Truncate long values for logging."""
        str_value = str(value)

        if len(str_value) > 100:
            str_value = str_value[:100] + "..."

        return str_value

    def user_message(self) -> str:
        return self.usage or self.message


class InvalidUsernameError(ValidationException):
    """Raised when a watch/unwatch argument is not a valid username."""

    default_error_code = 3001

    def __init__(
        self,
        message: str = "Invalid username",
        username: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, field="username", value=username, **kwargs)


class InvalidDurationError(ValidationException):
    """Raised when a subscription duration token is not recognised."""

    default_error_code = 3002

    def __init__(
        self,
        message: str = "Invalid duration",
        duration: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, field="duration", value=duration, **kwargs)


class InvalidMentionError(ValidationException):
    """Raised when admin command arguments do not match the mention pattern."""

    default_error_code = 3003

    def __init__(
        self,
        message: str = "Invalid command arguments",
        arguments: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, field="arguments", value=arguments, **kwargs)
