"""
Configuration Package for Username Watch Bot

This package contains all configuration-related modules including:
- Settings management with environment variable support
- Constants, enums and message templates used throughout the application
"""

from config.settings import (
    Settings,
    LogLevel,
    get_settings,
)

from config.constants import (
    BotCommands,
    SubscriptionDurations,
    ProbeConstants,
    MessageTemplates,
    Limits,
)

__all__ = [
    # Settings
    "Settings",
    "LogLevel",
    "get_settings",

    # Constants
    "BotCommands",
    "SubscriptionDurations",
    "ProbeConstants",
    "MessageTemplates",
    "Limits",
]
