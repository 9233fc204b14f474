"""Outbound messaging operations against Telegram."""

from typing import Optional, Protocol

from aiogram import Bot
from aiogram.enums import ChatMemberStatus
from aiogram.exceptions import TelegramAPIError
from loguru import logger

from groupguard.events import BotEvent


class MessagingGateway(Protocol):
    """Operations the moderation logic needs from the messaging platform.

    Implementations report failures through their return value and never
    raise platform errors to the caller.
    """

    async def reply(self, event: BotEvent, text: str) -> bool: ...

    async def push(self, user_id: int, text: str) -> bool: ...

    async def kick(self, group_id: int, user_id: int) -> bool: ...

    async def get_group_member_name(self, group_id: int, user_id: int) -> Optional[str]: ...

    async def get_user_name(self, user_id: int) -> Optional[str]: ...


def _chat_display_name(chat) -> Optional[str]:
    parts = [p for p in (getattr(chat, "first_name", None), getattr(chat, "last_name", None)) if p]
    if parts:
        return " ".join(parts)
    return getattr(chat, "title", None) or getattr(chat, "username", None)


class TelegramGateway:
    """MessagingGateway backed by an aiogram Bot."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def reply(self, event: BotEvent, text: str) -> bool:
        """Answer in the chat of the event, quoting the triggering message."""
        chat_id = event.source.chat_id
        message_id = event.message.message_id if event.message else None
        try:
            await self.bot.send_message(chat_id, text, reply_to_message_id=message_id)
            return True
        except TelegramAPIError as e:
            logger.error(f"❌ Failed to reply in chat {chat_id}: {e}")
            return False

    async def push(self, user_id: int, text: str) -> bool:
        try:
            await self.bot.send_message(user_id, text)
            return True
        except TelegramAPIError as e:
            logger.warning(f"⚠️ Failed to send a private message to {user_id}: {e}")
            return False

    async def kick(self, group_id: int, user_id: int) -> bool:
        """
        Remove the user from the group. The unban lets them join again later.

        Returns False when the user is not in the group, since banning someone
        who already left still succeeds on Telegram.
        """
        try:
            member = await self.bot.get_chat_member(chat_id=group_id, user_id=user_id)
            if member.status in (ChatMemberStatus.LEFT, ChatMemberStatus.KICKED):
                logger.info(f"User {user_id} is not in group {group_id}, nothing to kick")
                return False
        except TelegramAPIError as e:
            logger.debug(f"Could not check membership of {user_id} in group {group_id}: {e}")

        try:
            await self.bot.ban_chat_member(chat_id=group_id, user_id=user_id)
            await self.bot.unban_chat_member(chat_id=group_id, user_id=user_id, only_if_banned=True)
            return True
        except TelegramAPIError as e:
            logger.error(f"❌ Failed to kick user {user_id} from group {group_id}: {e}")
            return False

    async def get_group_member_name(self, group_id: int, user_id: int) -> Optional[str]:
        try:
            member = await self.bot.get_chat_member(chat_id=group_id, user_id=user_id)
            return member.user.full_name
        except TelegramAPIError as e:
            logger.debug(f"Could not get member {user_id} of group {group_id}: {e}")
            return None

    async def get_user_name(self, user_id: int) -> Optional[str]:
        try:
            chat = await self.bot.get_chat(chat_id=user_id)
            return _chat_display_name(chat)
        except TelegramAPIError as e:
            logger.debug(f"Could not get profile of user {user_id}: {e}")
            return None
