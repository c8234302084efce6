from datetime import timedelta

import pytest

from exceptions import InvalidDurationError
from storage.subscriptions import SubscriptionStore
from tests.conftest import ADMIN_ID


@pytest.mark.parametrize(
    "token, days",
    [("1week", 7), ("1month", 30), ("1year", 365), ("1WEEK", 7)],
)
def test_grant_durations(subscriptions, clock, token, days):
    expiry = subscriptions.grant(5, token, granted_by=ADMIN_ID, now=clock())
    assert expiry == clock() + timedelta(days=days)
    assert subscriptions.get(5).granted_by == ADMIN_ID


def test_grant_rejects_unknown_duration(subscriptions, clock):
    with pytest.raises(InvalidDurationError):
        subscriptions.grant(5, "2weeks", granted_by=ADMIN_ID, now=clock())
    assert subscriptions.get(5) is None


def test_grant_overwrites(subscriptions, clock):
    subscriptions.grant(5, "1year", granted_by=ADMIN_ID, now=clock())
    expiry = subscriptions.grant(5, "1week", granted_by=ADMIN_ID, now=clock())
    assert subscriptions.get(5).expiry_time == expiry
    assert len(subscriptions) == 1


def test_is_active_is_strict(subscriptions, clock):
    expiry = subscriptions.grant(5, "1week", granted_by=ADMIN_ID, now=clock())

    assert subscriptions.is_active(5, clock())
    assert subscriptions.is_active(5, expiry - timedelta(seconds=1))
    assert not subscriptions.is_active(5, expiry)
    assert not subscriptions.is_active(6, clock())


def test_admin_is_always_active(clock):
    store = SubscriptionStore(admin_id=ADMIN_ID)
    assert store.is_admin(ADMIN_ID)
    assert store.is_active(ADMIN_ID, clock())


def test_without_admin_nobody_bypasses(clock):
    store = SubscriptionStore()
    assert not store.is_admin(0)
    assert not store.is_active(0, clock())


def test_revoke(subscriptions, clock):
    subscriptions.grant(5, "1week", granted_by=ADMIN_ID, now=clock())
    assert subscriptions.revoke(5) is True
    assert subscriptions.revoke(5) is False
    assert not subscriptions.is_active(5, clock())


def test_list_includes_expired(subscriptions, clock):
    subscriptions.grant(5, "1week", granted_by=ADMIN_ID, now=clock())
    subscriptions.grant(6, "1month", granted_by=ADMIN_ID, now=clock())
    clock.advance(days=8)

    listed = dict(subscriptions.list())
    assert set(listed) == {5, 6}
    assert listed[5] < clock() < listed[6]
