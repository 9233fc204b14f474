"""Group messages and member joins/leaves."""

from aiogram import F, Router
from aiogram.filters import ChatMemberUpdatedFilter, IS_MEMBER, IS_NOT_MEMBER
from aiogram.types import ChatMemberUpdated, Message
from loguru import logger

from groupguard.database.manager import DatabaseManager
from groupguard.database.models.user import User
from groupguard.events import BotEvent
from groupguard.services.event_router import EventRouter
from groupguard.utils.converters import message_to_event

group_events_router = Router(name="group_events_router")
group_events_router.message.filter(F.chat.type.in_({"group", "supergroup"}))
group_events_router.chat_member.filter(F.chat.type.in_({"group", "supergroup"}))


@group_events_router.message()
async def on_group_message(message: Message, event_router: EventRouter, db_manager: DatabaseManager):
    """
    Passes group messages to the event router: commands and blacklist checks.
    """
    if not message.from_user or message.from_user.is_bot:
        return

    event = await message_to_event(message, db_manager.users)
    await event_router.dispatch(event)


@group_events_router.chat_member(ChatMemberUpdatedFilter(IS_NOT_MEMBER >> IS_MEMBER))
async def on_user_joined(event: ChatMemberUpdated, event_router: EventRouter, db_manager: DatabaseManager):
    """
    Handles a user joining the group through a link, search or being added.
    """
    user = event.new_chat_member.user
    if user.is_bot:
        logger.debug(f"🤖 Skipping bot {user.username}")
        return

    logger.info(f"🆕 New member in group {event.chat.id}: {user.full_name} (@{user.username}), ID: {user.id}")
    try:
        await db_manager.users.upsert(User.from_aiogram(user))
    except Exception as e:
        logger.warning(f"⚠️ Could not store user {user.id}: {e}")

    await event_router.dispatch(BotEvent.member_joined(event.chat.id, [user.id]))


@group_events_router.chat_member(ChatMemberUpdatedFilter(IS_MEMBER >> IS_NOT_MEMBER))
async def on_user_left(event: ChatMemberUpdated, event_router: EventRouter):
    user = event.old_chat_member.user
    if user.is_bot:
        return

    await event_router.dispatch(BotEvent.member_left(event.chat.id, [user.id]))
