"""
Access Exception Classes for Username Watch Bot

Authorization (subscription gating, admin-only commands) and capacity
(per-user watch slots) errors. The user is notified and no state changes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from exceptions.base import WatchBotException


class AuthorizationError(WatchBotException):
    """
    Authorization Error

    Raised when a user attempts an action they are not entitled to.
    """

    default_error_code = 1400
    default_recoverable = True

    def __init__(
        self,
        message: str = "Permission denied",
        user_id: Optional[int] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if user_id is not None:
            self.details["user_id"] = user_id


class SubscriptionRequiredError(AuthorizationError):
    """The user has no subscription at all."""

    default_error_code = 1401


class SubscriptionExpiredError(AuthorizationError):
    """The user's subscription exists but has run out."""

    default_error_code = 1402

    def __init__(
        self,
        message: str = "Subscription expired",
        expired_at: Optional[datetime] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if expired_at:
            self.details["expired_at"] = expired_at.isoformat()


class AdminOnlyError(AuthorizationError):
    """A non-admin issued an admin command."""

    default_error_code = 1403


class CapacityError(WatchBotException):
    """
    Capacity Error

    Raised when a user has no free monitoring slot left.
    """

    default_error_code = 1500
    default_recoverable = True


class SlotLimitExceededError(CapacityError):
    """The per-user watch limit is reached."""

    default_error_code = 1501

    def __init__(
        self,
        message: str = "Watch slot limit reached",
        limit: Optional[int] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        self.limit = limit
        if limit is not None:
            self.details["limit"] = limit
