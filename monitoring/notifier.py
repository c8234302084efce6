"""
============================================================================
USERNAME WATCH BOT - NOTIFIER
============================================================================
Delivers direct messages to users, replies in chats, and mirrors
admin-relevant events to the admin log channel.

Delivery contract
-----------------
Every send returns a ``DeliveryResult``. A failed send (user blocked the
bot, chat not found, network error, admin channel not configured) is
logged and reported in the result but never raised, so callers in the
poll loop and the command handler can ignore it safely. There is no
retry.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from aiogram.exceptions import TelegramAPIError, TelegramForbiddenError

from exceptions import DeliveryError
from utils.logger import get_logger


logger = get_logger("Notifier")


@dataclass
class DeliveryResult:
    """Outcome of one send attempt."""
    ok: bool
    error: Optional[DeliveryError] = None

    @classmethod
    def success(cls) -> "DeliveryResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: DeliveryError) -> "DeliveryResult":
        return cls(ok=False, error=error)


class Notifier:
    """
    Thin delivery layer over the aiogram Bot.

    Parameters
    ----------
    bot : aiogram.Bot | None
        Used to send messages. If None every send fails with a
        DeliveryError (useful before the bot has connected).
    admin_log_channel_id : int | None
        Chat that receives admin log events. If None, log events are
        dropped with a debug message.
    """

    def __init__(self, bot: Any = None, admin_log_channel_id: Optional[int] = None):
        self.bot = bot
        self.admin_log_channel_id = admin_log_channel_id

        self._sent = 0
        self._failed = 0

        if admin_log_channel_id is None:
            logger.warning(
                "Admin log channel is not configured; admin events will only "
                "be written to the local log"
            )

    # ------------------------------------------------------------------
    # PUBLIC API
    # ------------------------------------------------------------------

    async def send_direct(self, user_id: int, text: str) -> DeliveryResult:
        """Send a direct message to *user_id*."""
        return await self._send(user_id, text, purpose="direct message")

    async def reply(self, chat_id: int, text: str) -> DeliveryResult:
        """Send *text* to the chat a command came from."""
        return await self._send(chat_id, text, purpose="reply")

    async def log_admin(self, text: str) -> DeliveryResult:
        """Mirror an event to the admin log channel."""
        logger.info(f"[AdminLog] {text}")
        if self.admin_log_channel_id is None:
            return DeliveryResult.failure(
                DeliveryError("Admin log channel is not configured")
            )
        return await self._send(self.admin_log_channel_id, text, purpose="admin log")

    # ------------------------------------------------------------------
    # SEND
    # ------------------------------------------------------------------

    async def _send(self, chat_id: int, text: str, purpose: str) -> DeliveryResult:
        if self.bot is None:
            error = DeliveryError("Bot is not connected", chat_id=chat_id)
            self._failed += 1
            logger.warning(f"Could not send {purpose} to {chat_id}: {error.message}")
            return DeliveryResult.failure(error)

        try:
            await self.bot.send_message(chat_id=chat_id, text=text)
        except TelegramForbiddenError as e:
            error = DeliveryError(
                "User has blocked the bot or disabled direct messages",
                chat_id=chat_id,
                cause=e,
            )
        except TelegramAPIError as e:
            error = DeliveryError(
                f"Telegram API error: {str(e)[:200]}",
                chat_id=chat_id,
                cause=e,
            )
        except Exception as e:
            error = DeliveryError(
                f"Unexpected delivery error: {str(e)[:200]}",
                chat_id=chat_id,
                cause=e,
            )
        else:
            self._sent += 1
            logger.debug(f"✓ Sent {purpose} to {chat_id}")
            return DeliveryResult.success()

        self._failed += 1
        logger.warning(f"Could not send {purpose} to {chat_id}: {error.message}")
        return DeliveryResult.failure(error)

    # ------------------------------------------------------------------
    # DIAGNOSTIC
    # ------------------------------------------------------------------

    def get_stats(self) -> Dict[str, Any]:
        return {
            "sent": self._sent,
            "failed": self._failed,
            "admin_log_configured": self.admin_log_channel_id is not None,
        }
