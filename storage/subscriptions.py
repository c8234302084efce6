"""
============================================================================
USERNAME WATCH BOT - SUBSCRIPTION STORE
============================================================================
In-memory mapping from subscriber id to Subscription. Expired
subscriptions are never swept; expiry is checked lazily whenever
access is evaluated.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from config.constants import SubscriptionDurations
from exceptions import InvalidDurationError
from storage.models import Subscription
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("SubscriptionStore")


class SubscriptionStore:
    """
    Owner of every Subscription.

    Parameters
    ----------
    admin_id : int | None
        The admin identity. It is always considered active and never
        needs a subscription.
    """

    def __init__(self, admin_id: Optional[int] = None):
        self.admin_id = admin_id
        self._subscriptions: Dict[int, Subscription] = {}

    def is_admin(self, subscriber_id: int) -> bool:
        return self.admin_id is not None and subscriber_id == self.admin_id

    def grant(
        self,
        subscriber_id: int,
        duration_token: str,
        granted_by: int,
        now: Optional[datetime] = None,
    ) -> datetime:
        """
        Create or overwrite the subscription of *subscriber_id*.

        Raises
        ------
        InvalidDurationError
            If *duration_token* is not one of the known tokens.

        Returns
        -------
        datetime
            The new expiry time.
        """
        try:
            offset = SubscriptionDurations.resolve(duration_token)
        except KeyError:
            raise InvalidDurationError(
                f"Unknown duration, expected one of: {', '.join(SubscriptionDurations.tokens())}",
                duration=duration_token,
            ) from None

        now = now or TimeHelper.get_utc_now()
        expiry = now + offset
        self._subscriptions[subscriber_id] = Subscription(
            subscriber_id=subscriber_id,
            expiry_time=expiry,
            granted_by=granted_by,
            granted_at=now,
        )
        logger.info(
            f"Subscription for {subscriber_id} granted by {granted_by} "
            f"until {expiry.isoformat()}"
        )
        return expiry

    def revoke(self, subscriber_id: int) -> bool:
        """Delete the subscription; False if there was none."""
        if self._subscriptions.pop(subscriber_id, None) is None:
            return False
        logger.info(f"Subscription for {subscriber_id} revoked")
        return True

    def get(self, subscriber_id: int) -> Optional[Subscription]:
        return self._subscriptions.get(subscriber_id)

    def is_active(self, subscriber_id: int, now: Optional[datetime] = None) -> bool:
        """True for the admin, else iff a subscription exists and expiry > now."""
        if self.is_admin(subscriber_id):
            return True
        subscription = self._subscriptions.get(subscriber_id)
        return subscription is not None and subscription.is_active(now)

    def list(self) -> List[Tuple[int, datetime]]:
        """(subscriber_id, expiry_time) for every stored subscription."""
        return [
            (subscriber_id, subscription.expiry_time)
            for subscriber_id, subscription in self._subscriptions.items()
        ]

    def __len__(self) -> int:
        return len(self._subscriptions)
