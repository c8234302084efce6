"""
============================================================================
USERNAME WATCH BOT - BOT MANAGER
============================================================================
Owns the aiogram Bot + Dispatcher. A single catch-all text handler turns
every ``aiogram.types.Message`` into an ``InboundMessage`` and hands it to
the command dispatcher; the dispatcher decides what is a command.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from typing import Optional

from aiogram import Bot, Dispatcher, F, Router
from aiogram.exceptions import TelegramAPIError
from aiogram.types import Message

from bot.dispatcher import CommandDispatcher, InboundMessage
from config.settings import Settings
from utils.logger import get_logger


logger = get_logger("BotManager")


def to_inbound(message: Message) -> InboundMessage:
    """Convert an aiogram message into the dispatcher's inbound message."""
    author = message.from_user
    if author is not None:
        author_id = author.id
        author_name = f"@{author.username}" if author.username else author.full_name
        is_bot = author.is_bot
    else:
        # Anonymous channel posts have no author
        author_id = message.chat.id
        author_name = message.chat.title or str(message.chat.id)
        is_bot = False

    return InboundMessage(
        message_id=f"{message.chat.id}:{message.message_id}",
        author_id=author_id,
        author_name=author_name,
        channel_id=message.chat.id,
        content=message.text or "",
        is_bot=is_bot,
    )


class BotManager:
    """
    aiogram lifecycle wrapper.

    Usage
    -----
        manager = BotManager(settings, dispatcher)
        await manager.initialize()
        await manager.start_polling()   # blocks
        await manager.stop_polling()
    """

    def __init__(self, settings: Settings, command_dispatcher: Optional[CommandDispatcher] = None):
        self.settings = settings
        self.command_dispatcher = command_dispatcher

        self.bot = Bot(token=settings.BOT_TOKEN.get_secret_value())
        self.dp = Dispatcher()
        self.router = Router(name="commands")

        self._connected = False
        self._polling = False

        self.router.message.register(self._on_text, F.text)
        self.dp.include_router(self.router)

    def set_dispatcher(self, command_dispatcher: CommandDispatcher) -> None:
        self.command_dispatcher = command_dispatcher

    # ------------------------------------------------------------------
    # HANDLER
    # ------------------------------------------------------------------

    async def _on_text(self, message: Message) -> None:
        if self.command_dispatcher is None:
            logger.warning("Message received before the command dispatcher was attached")
            return
        await self.command_dispatcher.handle(to_inbound(message))

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    async def initialize(self) -> bool:
        """Verify the token by fetching the bot's own profile."""
        try:
            me = await self.bot.get_me()
        except TelegramAPIError as e:
            logger.error(f"✗ Telegram rejected the bot token: {e}")
            return False
        except Exception as e:
            logger.opt(exception=True).error(f"✗ Could not reach Telegram: {e}")
            return False

        self._connected = True
        logger.info(f"✓ Logged in as @{me.username} ({me.id})")
        return True

    async def start_polling(self) -> None:
        """Run long polling until stopped."""
        self._polling = True
        try:
            await self.dp.start_polling(self.bot, handle_signals=False)
        finally:
            self._polling = False
            self._connected = False

    async def stop_polling(self) -> None:
        if self._polling:
            await self.dp.stop_polling()
        await self.bot.session.close()
        self._connected = False
        logger.info("✓ Bot session closed")

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def is_polling(self) -> bool:
        return self._polling
