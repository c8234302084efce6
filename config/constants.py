"""
Constants Module for Username Watch Bot

Contains all constant values, enumerations, templates, and
static configuration used throughout the application.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum
from typing import Dict, List, Tuple, Final


class BotCommands(str, Enum):
    """
    Bot Commands Enumeration

    Defines all available bot commands with their descriptions.
    Commands are matched case-sensitively after the command prefix.
    """

    # User commands
    WATCH = "watch"
    UNWATCH = "unwatch"
    LIST = "list"
    HELP = "help"

    # Admin commands
    ADDUSER = "adduser"
    REMOVEUSER = "removeuser"
    LISTSUBS = "listsubs"

    @classmethod
    def admin_commands(cls) -> List["BotCommands"]:
        """Get list of admin-only commands."""
        return [cls.ADDUSER, cls.REMOVEUSER, cls.LISTSUBS]


class SubscriptionDurations:
    """
    Subscription duration tokens accepted by the adduser command.

    Tokens are matched case-insensitively.
    """

    DURATIONS: Final[Dict[str, timedelta]] = {
        "1week": timedelta(days=7),
        "1month": timedelta(days=30),
        "1year": timedelta(days=365),
    }

    @classmethod
    def resolve(cls, token: str) -> timedelta:
        """Return the offset for *token*; raises KeyError if unknown."""
        return cls.DURATIONS[token.lower()]

    @classmethod
    def tokens(cls) -> Tuple[str, ...]:
        return tuple(cls.DURATIONS)


class ProbeConstants:
    """
    Static request profile and classification signals for the
    availability probe.
    """

    USER_AGENTS: Final[Tuple[str, ...]] = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:109.0) "
        "Gecko/20100101 Firefox/122.0",
    )

    ACCEPT: Final[str] = (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/webp,*/*;q=0.8"
    )
    ACCEPT_LANGUAGE: Final[str] = "en-US,en;q=0.9"

    # Page content that means the profile does not exist
    AVAILABILITY_MARKERS: Final[Tuple[str, ...]] = (
        '"user":null',
        "Sorry, this page isn't available",
        "The link you followed may be broken",
        "Page Not Found",
    )

    NOT_FOUND_STATUS: Final[int] = 404
    RATE_LIMIT_STATUS: Final[int] = 429

    @staticmethod
    def is_well_formed(status_code: int) -> bool:
        """2xx and 404 are both usable answers."""
        return 200 <= status_code < 300 or status_code == ProbeConstants.NOT_FOUND_STATUS


class Limits:
    """Hard limits that are not worth exposing as settings."""

    USERNAME_MAX_LENGTH: Final[int] = 30
    LIST_MAX_ENTRIES: Final[int] = 50


class MessageTemplates:
    """
    Message Templates for Bot Responses

    Contains all message templates used by the bot.
    Messages are sent as plain text.
    """

    HELP: Final[str] = """
Username Monitor Bot Commands:
{prefix}watch <username> - Start monitoring a username
{prefix}unwatch <username> - Stop monitoring a username
{prefix}list - Show all your monitored usernames
{prefix}help - Show this help message
{admin_section}
The bot checks usernames every {interval} and notifies you via DM when they become available.
Note: the profile site may block frequent requests, so monitoring might not be 100% reliable.
"""

    HELP_ADMIN_SECTION: Final[str] = """
Admin Commands:
{prefix}adduser <@user> <duration> - Add user subscription (1week, 1month, 1year)
{prefix}removeuser <@user> - Remove user subscription
{prefix}listsubs - List all active subscriptions
"""

    # Gating
    NO_SUBSCRIPTION: Final[str] = "You don't have an active subscription. Please contact an admin."
    SUBSCRIPTION_EXPIRED: Final[str] = "Your subscription has expired. Please contact an admin to renew."
    ADMIN_ONLY: Final[str] = "This command is only available to the admin."

    # Watch management
    INVALID_USERNAME: Final[str] = "Please provide a valid username (letters, digits, '.' and '_', up to 30 characters)."
    WATCH_ADDED: Final[str] = (
        'Now monitoring username "{username}". I\'ll check every {interval} '
        "and notify you via DM when it becomes available."
    )
    ALREADY_WATCHING: Final[str] = 'You\'re already monitoring the username "{username}"'
    SLOT_LIMIT: Final[str] = "You can only monitor up to {limit} usernames at a time."
    WATCH_REMOVED: Final[str] = 'Stopped monitoring username "{username}"'
    NOT_WATCHING: Final[str] = 'You weren\'t monitoring the username "{username}"'
    INITIAL_CHECK_TAKEN: Final[str] = (
        'Initial check: The username "{username}" is currently taken. '
        "I'll keep monitoring."
    )
    NO_WATCHES: Final[str] = "You're not monitoring any usernames."
    WATCH_LIST_HEADER: Final[str] = "Your monitored usernames:"
    WATCH_LIST_ITEM: Final[str] = '- "{username}" (monitoring for {elapsed})'

    # Notifications
    USERNAME_AVAILABLE: Final[str] = (
        '✅ The username "{username}" is now available! It took {elapsed}.'
    )

    # Admin
    ADDUSER_USAGE: Final[str] = "Usage: {prefix}adduser <@user> <duration> (1week, 1month, 1year)"
    REMOVEUSER_USAGE: Final[str] = "Usage: {prefix}removeuser <@user>"
    INVALID_DURATION: Final[str] = "Invalid duration. Use: 1week, 1month, or 1year"
    SUBSCRIPTION_ADDED: Final[str] = "Added subscription for <@{user_id}> until {expiry}"
    SUBSCRIPTION_REMOVED: Final[str] = "Removed subscription for <@{user_id}>"
    SUBSCRIPTION_NOT_FOUND: Final[str] = "User doesn't have an active subscription."
    NO_SUBSCRIPTIONS: Final[str] = "No active subscriptions."
    SUBSCRIPTION_LIST_HEADER: Final[str] = "Active Subscriptions:"
    SUBSCRIPTION_LIST_ITEM: Final[str] = "- <@{user_id}> (expires in {remaining})"
    SUBSCRIPTION_LIST_ITEM_EXPIRED: Final[str] = "- <@{user_id}> (expired)"

    ERROR_GENERIC: Final[str] = "Something went wrong. Please try again later."

    # Admin log channel
    LOG_SUBSCRIPTION_ADDED: Final[str] = "Admin {admin} added subscription for <@{user_id}> until {expiry}"
    LOG_SUBSCRIPTION_REMOVED: Final[str] = "Admin {admin} removed subscription for <@{user_id}>"
    LOG_WATCH_STARTED: Final[str] = 'User {user} started monitoring username: "{username}"'
    LOG_WATCH_STOPPED: Final[str] = 'User {user} stopped monitoring username: "{username}"'
    LOG_USERNAME_AVAILABLE: Final[str] = (
        '✅ Username "{username}" became available for user {user_id} after {elapsed}'
    )
    LOG_CHECK_FAILED: Final[str] = 'Check failed for username "{username}": {error}'
    LOG_RATE_LIMITED: Final[str] = (
        "⚠️ Rate limit hit. Pausing monitoring for {cooldown}."
    )
