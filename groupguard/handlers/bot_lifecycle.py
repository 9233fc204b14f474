"""
Handler for the bot's own membership changes in groups.
(added to a group, promoted, removed)
"""
from aiogram import F, Router
from aiogram.types import ChatMemberUpdated
from loguru import logger

from groupguard.database.manager import DatabaseManager


bot_lifecycle_router = Router(name="bot_lifecycle_router")
bot_lifecycle_router.my_chat_member.filter(F.chat.type.in_({"group", "supergroup"}))


@bot_lifecycle_router.my_chat_member()
async def handle_my_chat_member(event: ChatMemberUpdated, db_manager: DatabaseManager):
    """
    Logs every bot status change in a group and prepares the group's settings.
    """
    old_status = event.old_chat_member.status if event.old_chat_member else "None"
    new_status = event.new_chat_member.status
    group_id = event.chat.id
    group_name = event.chat.title

    logger.info(f"🔄 Bot status changed: {old_status} -> {new_status} in '{group_name}' ({group_id})")

    if new_status == "administrator":
        logger.success(f"🔥 Bot is an administrator in '{group_name}' ({group_id})")
        await db_manager.group_settings.get_or_create(group_id)
    elif new_status == "member":
        logger.warning(f"⚠️ Bot in '{group_name}' ({group_id}) has no admin rights and cannot remove members")
        await db_manager.group_settings.get_or_create(group_id)
    elif new_status in ["kicked", "left"]:
        logger.warning(f"🚫 Bot was removed from '{group_name}' ({group_id}). Settings are kept.")
