"""
============================================================================
USERNAME WATCH BOT - UTILITIES PACKAGE
============================================================================
Logging, helpers and validators shared by every layer.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from utils.logger import get_logger, setup_logging, log_execution_time
from utils.helpers import TimeHelper, RecentIdCache
from utils.validators import UsernameValidator, MentionParser

__all__ = [
    "get_logger",
    "setup_logging",
    "log_execution_time",
    "TimeHelper",
    "RecentIdCache",
    "UsernameValidator",
    "MentionParser",
]
