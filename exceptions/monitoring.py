"""
Monitoring Exception Classes for Username Watch Bot

Errors raised while probing a profile page or delivering a message.
Neither kind is ever allowed to escape the poll loop or the command
handler; they are logged and the prior state is kept.
"""

from __future__ import annotations

from typing import Any, Optional

from exceptions.base import WatchBotException


class MonitoringException(WatchBotException):
    """Base class for monitoring errors."""

    default_error_code = 4000
    default_recoverable = True


class ProbeError(MonitoringException):
    """
    Probe Error

    Network failure, timeout or unexpected response during an
    availability check. Callers treat it exactly like TAKEN.
    """

    default_error_code = 4001

    def __init__(
        self,
        message: str = "Availability check failed",
        username: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        self.status_code = status_code

        if username:
            self.details["username"] = username

        if status_code is not None:
            self.details["status_code"] = status_code


class ProbeRateLimitedError(ProbeError):
    """The profile site answered with a rate-limit status."""

    default_error_code = 4002


class DeliveryError(MonitoringException):
    """
    Delivery Error

    A direct message or admin-log message could not be sent
    (user blocked the bot, chat not found, network error, ...).
    """

    default_error_code = 4100

    def __init__(
        self,
        message: str = "Message delivery failed",
        chat_id: Optional[int] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        self.chat_id = chat_id

        if chat_id is not None:
            self.details["chat_id"] = chat_id
