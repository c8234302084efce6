from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from aiogram.types import Chat, Message, User

from bot.manager import BotManager, to_inbound


def telegram_message(text, user=None, chat_id=555, message_id=9):
    return Message(
        message_id=message_id,
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        chat=Chat(id=chat_id, type="group", title="Watchers"),
        from_user=user,
        text=text,
    )


def test_to_inbound_uses_chat_scoped_message_id():
    user = User(id=2, is_bot=False, first_name="Ann", username="ann")
    inbound = to_inbound(telegram_message("!list", user=user))

    assert inbound.message_id == "555:9"
    assert inbound.author_id == 2
    assert inbound.author_name == "@ann"
    assert inbound.channel_id == 555
    assert inbound.content == "!list"
    assert not inbound.is_bot


def test_to_inbound_flags_bots_and_falls_back_to_full_name():
    user = User(id=3, is_bot=True, first_name="Robo", last_name="Tron")
    inbound = to_inbound(telegram_message("!list", user=user))
    assert inbound.is_bot
    assert inbound.author_name == "Robo Tron"


def test_to_inbound_without_author():
    inbound = to_inbound(telegram_message("hello"))
    assert inbound.author_id == 555
    assert inbound.author_name == "Watchers"


@pytest.mark.asyncio
async def test_text_handler_forwards_to_dispatcher(settings):
    dispatcher = AsyncMock()
    manager = BotManager(settings, dispatcher)
    user = User(id=2, is_bot=False, first_name="Ann")

    await manager._on_text(telegram_message("!help", user=user))

    [call] = dispatcher.handle.await_args_list
    assert call.args[0].content == "!help"
    await manager.bot.session.close()
