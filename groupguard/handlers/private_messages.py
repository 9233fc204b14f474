"""Direct messages to the bot: password attempts and blocks."""

from aiogram import F, Router
from aiogram.filters import ChatMemberUpdatedFilter, KICKED
from aiogram.types import ChatMemberUpdated, Message

from groupguard.database.manager import DatabaseManager
from groupguard.events import BotEvent
from groupguard.services.event_router import EventRouter
from groupguard.utils.converters import message_to_event

private_messages_router = Router(name="private_messages_router")
private_messages_router.message.filter(F.chat.type == "private")
private_messages_router.my_chat_member.filter(F.chat.type == "private")


@private_messages_router.message()
async def on_private_message(message: Message, event_router: EventRouter, db_manager: DatabaseManager):
    if not message.from_user:
        return

    event = await message_to_event(message, db_manager.users)
    await event_router.dispatch(event)


@private_messages_router.my_chat_member(ChatMemberUpdatedFilter(member_status_changed=KICKED))
async def on_bot_blocked(event: ChatMemberUpdated, event_router: EventRouter):
    """The user blocked the bot, so a password prompt can no longer be answered."""
    await event_router.dispatch(BotEvent.unfollow(event.from_user.id))
