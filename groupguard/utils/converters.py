"""Conversion of aiogram updates into BotEvent models."""
from typing import List

from aiogram.enums import MessageEntityType
from aiogram.types import Message
from loguru import logger

from groupguard.database.repositories.user_repository import UserRepository
from groupguard.events import BotEvent


async def extract_mentions(message: Message, users: UserRepository) -> List[int]:
    """
    Ids of the users a message points at, in order of appearance.

    text_mention entities carry the user directly, @username mentions are
    resolved through the users the bot has seen. A reply to someone counts
    as a mention when the text mentions nobody.
    """
    mentioned: List[int] = []
    text = message.text or ""

    for entity in message.entities or []:
        if entity.type == MessageEntityType.TEXT_MENTION and entity.user:
            mentioned.append(entity.user.id)
        elif entity.type == MessageEntityType.MENTION:
            username = entity.extract_from(text)
            user = await users.get_by_username(username)
            if user:
                mentioned.append(user.telegram_id)
            else:
                logger.debug(f"Unknown username {username} in group {message.chat.id}")

    if not mentioned and message.reply_to_message:
        author = message.reply_to_message.from_user
        if author and not author.is_bot:
            mentioned.append(author.id)

    return list(dict.fromkeys(mentioned))


async def message_to_event(message: Message, users: UserRepository) -> BotEvent:
    message_type = "text" if message.text is not None else "other"

    if message.chat.type == "private":
        return BotEvent.direct_message(
            user_id=message.from_user.id,
            text=message.text,
            message_id=message.message_id,
            message_type=message_type,
        )

    mentions = await extract_mentions(message, users) if message.text else []
    return BotEvent.group_message(
        group_id=message.chat.id,
        user_id=message.from_user.id,
        text=message.text,
        message_id=message.message_id,
        mentions=mentions,
        message_type=message_type,
    )
