"""
============================================================================
USERNAME WATCH BOT - COMMAND DISPATCHER
============================================================================
Parses inbound chat messages into commands and applies them to the watch
registry and the subscription store.

Pipeline
--------
1.  Ignore bot authors and text that is not a known prefixed command
2.  Drop messages already seen (bounded id cache)
3.  Admin-only commands are refused to everyone but the admin
4.  Every other command requires an active subscription (admin bypasses)
5.  Route to the command handler

User commands answer by direct message; admin commands answer in the chat
they came from. Validation, authorization and capacity errors are turned
into a message for the author and never mutate state.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Hashable, Optional, Tuple

from config.constants import BotCommands, Limits, MessageTemplates
from config.settings import Settings
from exceptions import (
    AdminOnlyError,
    InvalidDurationError,
    InvalidMentionError,
    InvalidUsernameError,
    SlotLimitExceededError,
    SubscriptionExpiredError,
    SubscriptionRequiredError,
    WatchBotException,
)
from monitoring.notifier import Notifier
from monitoring.poller import PollScheduler
from storage.models import WatchResult
from storage.registry import WatchRegistry
from storage.subscriptions import SubscriptionStore
from utils.helpers import RecentIdCache, TimeHelper
from utils.logger import get_logger
from utils.validators import MentionParser, UsernameValidator


logger = get_logger("Dispatcher")


@dataclass
class InboundMessage:
    """Platform-neutral view of one chat message."""
    message_id: Hashable
    author_id: int
    author_name: str
    channel_id: int
    content: str
    is_bot: bool = False


class CommandDispatcher:
    """
    Routes prefixed text commands.

    Parameters
    ----------
    registry : WatchRegistry
    subscriptions : SubscriptionStore
    notifier : Notifier
    poller : PollScheduler
        Used for the first check right after a watch is added.
    settings : Settings
    dedup : RecentIdCache | None
        Seen-message cache; built from settings when omitted.
    clock : Callable
        Returns the current UTC datetime.
    """

    def __init__(
        self,
        registry: WatchRegistry,
        subscriptions: SubscriptionStore,
        notifier: Notifier,
        poller: PollScheduler,
        settings: Settings,
        dedup: Optional[RecentIdCache] = None,
        clock: Callable[[], datetime] = TimeHelper.get_utc_now,
    ):
        self.registry = registry
        self.subscriptions = subscriptions
        self.notifier = notifier
        self.poller = poller
        self.settings = settings

        self.prefix = settings.COMMAND_PREFIX
        self.initial_check = settings.INITIAL_CHECK_ENABLED
        self._interval_text = TimeHelper.format_duration(settings.POLL_INTERVAL)
        self._dedup = dedup or RecentIdCache(
            max_size=settings.DEDUP_CACHE_SIZE,
            prune_count=settings.DEDUP_PRUNE_COUNT,
        )
        self._clock = clock

        self._handlers = {
            BotCommands.WATCH: self._cmd_watch,
            BotCommands.UNWATCH: self._cmd_unwatch,
            BotCommands.LIST: self._cmd_list,
            BotCommands.HELP: self._cmd_help,
            BotCommands.ADDUSER: self._cmd_adduser,
            BotCommands.REMOVEUSER: self._cmd_removeuser,
            BotCommands.LISTSUBS: self._cmd_listsubs,
        }

    # ------------------------------------------------------------------
    # PARSING
    # ------------------------------------------------------------------

    def parse(self, content: str) -> Optional[Tuple[BotCommands, str]]:
        """
        Split ``<prefix><command> <arguments>``.

        Returns None for text that is not a known command. Command names
        are case-sensitive.
        """
        if not content or not content.startswith(self.prefix):
            return None

        parts = content[len(self.prefix):].strip().split(maxsplit=1)
        if not parts:
            return None

        try:
            command = BotCommands(parts[0])
        except ValueError:
            return None

        arguments = parts[1].strip() if len(parts) > 1 else ""
        return command, arguments

    # ------------------------------------------------------------------
    # ENTRY POINT
    # ------------------------------------------------------------------

    async def handle(self, message: InboundMessage) -> bool:
        """
        Process one inbound message.

        Returns True if the message was a command that got processed
        (including commands that were refused), False if it was ignored.
        """
        if message.is_bot:
            return False

        parsed = self.parse(message.content)
        if parsed is None:
            return False

        if self._dedup.seen(message.message_id):
            logger.debug(f"Duplicate message {message.message_id} ignored")
            return False

        command, arguments = parsed
        logger.info(
            f"Command '{command.value}' from {message.author_name} "
            f"({message.author_id})"
        )

        try:
            self._authorize(message, command)
            await self._handlers[command](message, arguments)

        except WatchBotException as e:
            logger.info(f"Command '{command.value}' refused: {e.log_format()}")
            await self._respond(message, command, e.user_message())

        except Exception as e:
            logger.opt(exception=True).error(
                f"Unhandled error in command '{command.value}': {e}"
            )
            await self._respond(message, command, MessageTemplates.ERROR_GENERIC)

        return True

    def _authorize(self, message: InboundMessage, command: BotCommands) -> None:
        author_id = message.author_id
        if self.subscriptions.is_admin(author_id):
            return

        if command in BotCommands.admin_commands():
            raise AdminOnlyError(MessageTemplates.ADMIN_ONLY, user_id=author_id)

        subscription = self.subscriptions.get(author_id)
        if subscription is None:
            raise SubscriptionRequiredError(
                MessageTemplates.NO_SUBSCRIPTION, user_id=author_id
            )
        if not subscription.is_active(self._clock()):
            raise SubscriptionExpiredError(
                MessageTemplates.SUBSCRIPTION_EXPIRED,
                user_id=author_id,
                expired_at=subscription.expiry_time,
            )

    async def _respond(self, message: InboundMessage, command: BotCommands, text: str) -> None:
        if command in BotCommands.admin_commands():
            await self.notifier.reply(message.channel_id, text)
        else:
            await self.notifier.send_direct(message.author_id, text)

    # ------------------------------------------------------------------
    # USER COMMANDS
    # ------------------------------------------------------------------

    def _username_argument(self, arguments: str) -> str:
        username = UsernameValidator.normalize(arguments)
        if not UsernameValidator.is_valid_username(username):
            raise InvalidUsernameError(
                username=arguments,
                usage=MessageTemplates.INVALID_USERNAME,
            )
        return username

    async def _cmd_watch(self, message: InboundMessage, arguments: str) -> None:
        username = self._username_argument(arguments)
        result = self.registry.add_watch(username, message.author_id, self._clock())

        if result == WatchResult.ALREADY_WATCHING:
            await self.notifier.send_direct(
                message.author_id,
                MessageTemplates.ALREADY_WATCHING.format(username=username),
            )
            return

        if result == WatchResult.SLOT_LIMIT_EXCEEDED:
            limit = self.registry.max_per_subscriber
            raise SlotLimitExceededError(
                MessageTemplates.SLOT_LIMIT.format(limit=limit),
                limit=limit,
            )

        await self.notifier.send_direct(
            message.author_id,
            MessageTemplates.WATCH_ADDED.format(
                username=username,
                interval=self._interval_text,
            ),
        )
        await self.notifier.log_admin(
            MessageTemplates.LOG_WATCH_STARTED.format(
                user=message.author_name,
                username=username,
            )
        )

        if self.initial_check:
            await self._initial_check(message, username)

    async def _initial_check(self, message: InboundMessage, username: str) -> None:
        # An available username is announced and removed by the poller
        result = await self.poller.check_username(username)
        if result is not None and not result.is_available:
            await self.notifier.send_direct(
                message.author_id,
                MessageTemplates.INITIAL_CHECK_TAKEN.format(username=username),
            )

    async def _cmd_unwatch(self, message: InboundMessage, arguments: str) -> None:
        username = self._username_argument(arguments)
        result = self.registry.remove_watch(username, message.author_id)

        if result == WatchResult.NOT_WATCHING:
            await self.notifier.send_direct(
                message.author_id,
                MessageTemplates.NOT_WATCHING.format(username=username),
            )
            return

        await self.notifier.send_direct(
            message.author_id,
            MessageTemplates.WATCH_REMOVED.format(username=username),
        )
        await self.notifier.log_admin(
            MessageTemplates.LOG_WATCH_STOPPED.format(
                user=message.author_name,
                username=username,
            )
        )

    async def _cmd_list(self, message: InboundMessage, arguments: str) -> None:
        watches = self.registry.list_for(message.author_id)
        if not watches:
            await self.notifier.send_direct(message.author_id, MessageTemplates.NO_WATCHES)
            return

        now = self._clock()
        lines = [MessageTemplates.WATCH_LIST_HEADER]
        for username, entry in watches[:Limits.LIST_MAX_ENTRIES]:
            lines.append(
                MessageTemplates.WATCH_LIST_ITEM.format(
                    username=username,
                    elapsed=TimeHelper.format_duration(entry.elapsed(now)),
                )
            )
        await self.notifier.send_direct(message.author_id, "\n".join(lines))

    async def _cmd_help(self, message: InboundMessage, arguments: str) -> None:
        admin_section = ""
        if self.subscriptions.is_admin(message.author_id):
            admin_section = MessageTemplates.HELP_ADMIN_SECTION.format(prefix=self.prefix)

        text = MessageTemplates.HELP.format(
            prefix=self.prefix,
            admin_section=admin_section,
            interval=self._interval_text,
        )
        await self.notifier.send_direct(message.author_id, text.strip())

    # ------------------------------------------------------------------
    # ADMIN COMMANDS
    # ------------------------------------------------------------------

    async def _cmd_adduser(self, message: InboundMessage, arguments: str) -> None:
        parsed = MentionParser.parse_grant(arguments)
        if parsed is None:
            raise InvalidMentionError(
                arguments=arguments,
                usage=MessageTemplates.ADDUSER_USAGE.format(prefix=self.prefix),
            )

        user_id, duration = parsed
        try:
            expiry = self.subscriptions.grant(
                user_id, duration, granted_by=message.author_id, now=self._clock()
            )
        except InvalidDurationError as e:
            e.usage = MessageTemplates.INVALID_DURATION
            raise

        expiry_text = TimeHelper.format_date(expiry)
        await self.notifier.reply(
            message.channel_id,
            MessageTemplates.SUBSCRIPTION_ADDED.format(user_id=user_id, expiry=expiry_text),
        )
        await self.notifier.log_admin(
            MessageTemplates.LOG_SUBSCRIPTION_ADDED.format(
                admin=message.author_name,
                user_id=user_id,
                expiry=expiry_text,
            )
        )

    async def _cmd_removeuser(self, message: InboundMessage, arguments: str) -> None:
        user_id = MentionParser.parse_mention(arguments)
        if user_id is None:
            raise InvalidMentionError(
                arguments=arguments,
                usage=MessageTemplates.REMOVEUSER_USAGE.format(prefix=self.prefix),
            )

        if not self.subscriptions.revoke(user_id):
            await self.notifier.reply(message.channel_id, MessageTemplates.SUBSCRIPTION_NOT_FOUND)
            return

        await self.notifier.reply(
            message.channel_id,
            MessageTemplates.SUBSCRIPTION_REMOVED.format(user_id=user_id),
        )
        await self.notifier.log_admin(
            MessageTemplates.LOG_SUBSCRIPTION_REMOVED.format(
                admin=message.author_name,
                user_id=user_id,
            )
        )

    async def _cmd_listsubs(self, message: InboundMessage, arguments: str) -> None:
        subscriptions = self.subscriptions.list()
        if not subscriptions:
            await self.notifier.reply(message.channel_id, MessageTemplates.NO_SUBSCRIPTIONS)
            return

        now = self._clock()
        lines = [MessageTemplates.SUBSCRIPTION_LIST_HEADER]
        for user_id, expiry in subscriptions:
            if expiry > now:
                lines.append(
                    MessageTemplates.SUBSCRIPTION_LIST_ITEM.format(
                        user_id=user_id,
                        remaining=TimeHelper.format_duration(expiry - now),
                    )
                )
            else:
                lines.append(MessageTemplates.SUBSCRIPTION_LIST_ITEM_EXPIRED.format(user_id=user_id))
        await self.notifier.reply(message.channel_id, "\n".join(lines))
