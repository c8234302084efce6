from datetime import datetime, timezone

import pytest

from config.settings import get_settings
from exceptions import (
    AuthorizationError,
    ConfigurationError,
    InitializationError,
    InvalidDurationError,
    InvalidUsernameError,
    ProbeError,
    ProbeRateLimitedError,
    SlotLimitExceededError,
    SubscriptionExpiredError,
    ValidationException,
    WatchBotException,
)


def test_hierarchy():
    assert issubclass(InvalidUsernameError, ValidationException)
    assert issubclass(SubscriptionExpiredError, AuthorizationError)
    assert issubclass(ProbeRateLimitedError, ProbeError)
    for cls in (ValidationException, AuthorizationError, ProbeError, ConfigurationError):
        assert issubclass(cls, WatchBotException)


def test_validation_user_message_prefers_usage():
    error = InvalidDurationError(duration="2weeks", usage="Use 1week")
    assert error.user_message() == "Use 1week"
    assert error.details == {"field": "duration", "value": "2weeks"}

    assert InvalidUsernameError("bad").user_message() == "bad"


def test_details_are_serialisable():
    expired = datetime(2024, 1, 1, tzinfo=timezone.utc)
    error = SubscriptionExpiredError("renew", user_id=5, expired_at=expired)
    data = error.to_dict()
    assert data["message"] == "renew"
    assert data["details"] == {"user_id": 5, "expired_at": expired.isoformat()}


def test_slot_limit_carries_limit():
    error = SlotLimitExceededError("full", limit=3)
    assert error.limit == 3
    assert "full" in error.log_format()


def test_initialization_error_is_not_recoverable():
    error = InitializationError("no bot", component="bot")
    assert not error.recoverable
    assert error.details["component"] == "bot"


def test_load_settings_raises_configuration_error(monkeypatch, tmp_path):
    from main import load_settings

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("BOT_TOKEN", raising=False)
    get_settings.cache_clear()
    try:
        with pytest.raises(ConfigurationError) as info:
            load_settings()
        assert "BOT_TOKEN" in info.value.details["config_key"]
    finally:
        get_settings.cache_clear()
