"""
============================================================================
USERNAME WATCH BOT - BOT PACKAGE
============================================================================
Command dispatching and the aiogram adapter.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from bot.dispatcher import CommandDispatcher, InboundMessage
from bot.manager import BotManager, to_inbound

__all__ = ["BotManager", "CommandDispatcher", "InboundMessage", "to_inbound"]
