"""
============================================================================
USERNAME WATCH BOT - VALIDATORS UTILITY
============================================================================
Validation and parsing of command arguments: profile usernames and
admin mention arguments.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import re
from typing import Optional, Tuple

from config.constants import Limits


# ============================================================================
# USERNAME VALIDATOR
# ============================================================================

class UsernameValidator:
    """
    Profile username validation.

    Usernames are 1-30 characters of letters, digits, periods and
    underscores. They are case-insensitive on the profile site, so the
    normalized form is lowercase without a leading ``@``.
    """

    USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9._]+$")

    @staticmethod
    def normalize(raw: str) -> str:
        """Strip whitespace and a leading '@', lowercase the rest."""
        username = raw.strip()
        if username.startswith("@"):
            username = username[1:]
        return username.lower()

    @staticmethod
    def is_valid_username(username: str) -> bool:
        """
        Check if a (normalized) username is acceptable.

        Args:
            username: Username to validate

        Returns:
            True if valid, False otherwise
        """
        if not username or len(username) > Limits.USERNAME_MAX_LENGTH:
            return False
        return bool(UsernameValidator.USERNAME_PATTERN.match(username))


# ============================================================================
# MENTION PARSER
# ============================================================================

class MentionParser:
    """
    Parses admin command arguments of the form ``<@id>`` / ``<@!id>``,
    optionally followed by a duration token.
    """

    GRANT_PATTERN = re.compile(r"^<@!?(\d+)>\s+(\w+)$")
    MENTION_PATTERN = re.compile(r"^<@!?(\d+)>$")

    @classmethod
    def parse_grant(cls, arguments: str) -> Optional[Tuple[int, str]]:
        """
        Parse ``<@id> <duration>``.

        Returns:
            (user_id, duration_token) or None if the text does not match
        """
        match = cls.GRANT_PATTERN.match(arguments.strip())
        if not match:
            return None
        return int(match.group(1)), match.group(2)

    @classmethod
    def parse_mention(cls, arguments: str) -> Optional[int]:
        """
        Parse a lone ``<@id>``.

        Returns:
            user_id or None if the text does not match
        """
        match = cls.MENTION_PATTERN.match(arguments.strip())
        if not match:
            return None
        return int(match.group(1))


# ============================================================================
# END OF VALIDATORS MODULE
# ============================================================================
